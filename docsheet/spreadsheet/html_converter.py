import html
import uuid
from collections.abc import Iterable
from pathlib import Path

from openpyxl import load_workbook

from docsheet.spreadsheet.exceptions import ConversionError

_MAX_ROWS = 101
_TABLE_OPEN = '<table border="1" style="border-collapse: collapse; width: 100%;">'
_CELL_OPEN = '<td style="padding: 8px; border: 1px solid #ddd;">'


def _render_rows(rows: Iterable[tuple[object, ...]]) -> str:
    parts = [_TABLE_OPEN]
    for row in rows:
        cells = "".join(
            f"{_CELL_OPEN}{html.escape('' if value is None else str(value))}</td>"
            for value in row
        )
        parts.append(f"<tr>{cells}</tr>")
    parts.append("</table>")
    return "".join(parts)


class SpreadsheetHtmlConverter:
    """Renders the first sheet of a workbook as an HTML table.

    The analysis service reads HTML, not XLSX, so spreadsheet uploads go
    through here first. Only the first 101 rows are rendered; empty rows are
    dropped.
    """

    def convert(self, path: Path, temp_dir: Path) -> Path:
        """Write ``excel_<hex>.html`` into ``temp_dir`` and return its path.

        Raises:
            ConversionError: if the workbook cannot be read or the file written.
        """
        try:
            workbook = load_workbook(path, read_only=True, data_only=True)
        except Exception as exc:
            raise ConversionError(f"Cannot open spreadsheet {Path(path).name}: {exc}") from exc
        try:
            worksheet = workbook.worksheets[0]
            rows = [
                row
                for row in worksheet.iter_rows(max_row=_MAX_ROWS, values_only=True)
                if any(value not in (None, "") for value in row)
            ]
        finally:
            workbook.close()

        temp_dir.mkdir(parents=True, exist_ok=True)
        target = temp_dir / f"excel_{uuid.uuid4().hex}.html"
        try:
            target.write_text(_render_rows(rows), encoding="utf-8")
        except OSError as exc:
            raise ConversionError(f"Cannot write HTML for {Path(path).name}: {exc}") from exc
        return target
