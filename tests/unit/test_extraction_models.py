from pathlib import Path

import pytest

from docsheet.extraction.exceptions import ExtractionError, UnsupportedFormatError
from docsheet.extraction.models import DocumentFormat, ExtractedImage, SourceDocument

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class TestDocumentFormatResolve:
    def test_mime_type_wins_over_extension(self) -> None:
        assert DocumentFormat.resolve("upload.bin", "application/pdf") is DocumentFormat.PDF

    def test_falls_back_to_extension(self) -> None:
        assert DocumentFormat.resolve("Offer.XLSX", "application/octet-stream") is (
            DocumentFormat.XLSX
        )

    def test_docx_mime(self) -> None:
        assert DocumentFormat.resolve("offer", DOCX_MIME) is DocumentFormat.DOCX

    @pytest.mark.parametrize("filename", ["legacy.doc", "legacy.xls", "photo.png", "noext"])
    def test_unsupported_raises(self, filename: str) -> None:
        with pytest.raises(UnsupportedFormatError, match="Unsupported document"):
            DocumentFormat.resolve(filename)

    def test_unsupported_is_an_extraction_error(self) -> None:
        assert issubclass(UnsupportedFormatError, ExtractionError)

    def test_is_container(self) -> None:
        assert DocumentFormat.DOCX.is_container
        assert DocumentFormat.XLSX.is_container
        assert not DocumentFormat.PDF.is_container


class TestSourceDocument:
    def test_from_upload(self, tmp_path: Path) -> None:
        path = tmp_path / "123-offer.pdf"
        path.write_bytes(b"%PDF")

        document = SourceDocument.from_upload(path, "offer.pdf", "application/pdf")

        assert document.format is DocumentFormat.PDF
        assert document.base_name == "offer"
        assert document.mime_type == "application/pdf"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            SourceDocument.from_upload(tmp_path / "gone.pdf", "gone.pdf")

    def test_unsupported_upload_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        with pytest.raises(UnsupportedFormatError):
            SourceDocument.from_upload(path, "notes.txt", "text/plain")


class TestExtractedImage:
    def test_to_dict(self, tmp_path: Path) -> None:
        image = ExtractedImage(
            filename="a.png", path=tmp_path / "a.png", source_document="offer", locator="page1"
        )

        assert image.to_dict() == {"filename": "a.png", "path": str(tmp_path / "a.png")}
