"""Normalizes analysis responses into spreadsheet row data."""

import json
import re

from docsheet.analysis.exceptions import ResponseParseError
from docsheet.analysis.models import FreeText, ParsedResponse, RowData, StructuredList

# file_search citations, e.g. "【4:0†source】"
_CITATION = re.compile(r"【[^【】]*】")


def _clean(raw: str) -> str:
    cleaned = _CITATION.sub("", raw).strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)
    return cleaned


def parse_structured(raw: str) -> StructuredList:
    """Strictly parse a JSON array or object.

    Raises:
        ResponseParseError: if the text is not JSON or is a bare scalar.
    """
    try:
        parsed = json.loads(_clean(raw))
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"Invalid JSON response: {exc}") from exc

    if isinstance(parsed, dict):
        return StructuredList(rows=[parsed])
    if isinstance(parsed, list):
        rows: list[RowData] = [
            item if isinstance(item, dict) else {"value": item} for item in parsed
        ]
        return StructuredList(rows=rows)
    raise ResponseParseError("JSON response must be an object or an array")


def parse_response(raw: str) -> ParsedResponse:
    """Parse a response, degrading to ``FreeText`` instead of failing."""
    try:
        return parse_structured(raw)
    except ResponseParseError as exc:
        return FreeText(text=raw, reason=str(exc))
