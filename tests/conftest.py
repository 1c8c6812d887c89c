import io
from collections.abc import Callable
from pathlib import Path

import pytest
from openpyxl import Workbook
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from docsheet.session.context import SessionContext
from tests.documents import make_pdf_with_images, make_png, write_office_archive


@pytest.fixture()
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture()
def session(tmp_path: Path) -> SessionContext:
    return SessionContext.open(tmp_path / "sessions", "test-session")


@pytest.fixture()
def office_file(tmp_path: Path) -> Callable[[str, dict[str, bytes]], Path]:
    def _build(filename: str, media: dict[str, bytes]) -> Path:
        return write_office_archive(tmp_path / filename, media)

    return _build


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Two pages: two images on the first, one on the second."""
    return make_pdf_with_images([2, 1])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no images (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "No pictures here")
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def template_path(tmp_path: Path) -> Path:
    """Template with a title row and a header row; data starts at row 3."""
    workbook = Workbook()
    worksheet = workbook.active
    worksheet["A1"] = "Inquiry"
    for column, label in ((3, "Item"), (4, "Description"), (5, "Unit"), (6, "Qty")):
        worksheet.cell(row=2, column=column, value=label)
    path = tmp_path / "template.xlsx"
    workbook.save(path)
    return path
