from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from docsheet.extraction.exceptions import UnsupportedFormatError


class DocumentFormat(str, Enum):
    """Format tag used to dispatch image extraction and upload conversion."""

    DOCX = "container-docx"
    XLSX = "container-xlsx"
    PDF = "pdf"

    @classmethod
    def resolve(cls, filename: str, mime_type: str | None = None) -> "DocumentFormat":
        """Resolve the format from the declared MIME type, then the extension.

        Raises:
            UnsupportedFormatError: if neither identifies a supported format.
        """
        if mime_type and mime_type in _MIME_TYPES:
            return cls(_MIME_TYPES[mime_type])
        extension = Path(filename).suffix.lower()
        if extension in _EXTENSIONS:
            return cls(_EXTENSIONS[extension])
        raise UnsupportedFormatError(
            f"Unsupported document '{filename}' ({mime_type or 'unknown type'}). "
            "Only PDF, DOCX and XLSX files are accepted."
        )

    @property
    def is_container(self) -> bool:
        return self is not DocumentFormat.PDF


_MIME_TYPES = {
    "application/pdf": DocumentFormat.PDF.value,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (
        DocumentFormat.DOCX.value
    ),
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": (
        DocumentFormat.XLSX.value
    ),
}

_EXTENSIONS = {
    ".pdf": DocumentFormat.PDF.value,
    ".docx": DocumentFormat.DOCX.value,
    ".xlsx": DocumentFormat.XLSX.value,
}


@dataclass(frozen=True)
class SourceDocument:
    """An uploaded document materialized on disk inside a session."""

    path: Path
    original_filename: str
    format: DocumentFormat
    mime_type: str = ""

    @classmethod
    def from_upload(
        cls,
        path: Path,
        original_filename: str,
        mime_type: str | None = None,
    ) -> "SourceDocument":
        """Build a document from an upload already written to disk.

        Raises:
            FileNotFoundError: if ``path`` does not exist.
            UnsupportedFormatError: if the format is not PDF, DOCX or XLSX.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        document_format = DocumentFormat.resolve(original_filename, mime_type)
        return cls(
            path=path,
            original_filename=original_filename,
            format=document_format,
            mime_type=mime_type or "",
        )

    @property
    def base_name(self) -> str:
        """Original filename without its extension."""
        return Path(self.original_filename).stem


@dataclass(frozen=True)
class ExtractedImage:
    """An image written to the session image store."""

    filename: str
    path: Path
    source_document: str
    locator: str | None = None

    def to_dict(self) -> dict[str, str]:
        return {"filename": self.filename, "path": str(self.path)}
