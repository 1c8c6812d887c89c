import io
from pathlib import Path

from openpyxl import load_workbook
from openpyxl.cell.cell import Cell
from openpyxl.drawing.image import Image
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from docsheet.logging.logger import Log
from docsheet.spreadsheet.exceptions import ImageEmbedError

RASTER_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tif", ".tiff")


def is_image_reference(value: object) -> bool:
    return isinstance(value, str) and value.lower().endswith(RASTER_EXTENSIONS)


class ImageReembedder:
    """Replaces image filenames in the assembled sheet with embedded pictures.

    A matched cell is cleared, the picture is anchored at the cell, and the
    row and column are enlarged to fit it. Filenames with no file in the
    image store stay as text.
    """

    def __init__(
        self,
        image_size: int = 100,
        row_height: float = 100,
        column_width: float = 30,
    ) -> None:
        self._image_size = image_size
        self._row_height = row_height
        self._column_width = column_width

    def embed(self, output_path: Path, image_store_dir: Path) -> int:
        """Embed every resolvable image reference and save the workbook in place.

        Returns:
            Number of images embedded.

        Raises:
            ImageEmbedError: if the workbook cannot be opened or saved.
        """
        try:
            workbook = load_workbook(output_path)
        except Exception as exc:
            raise ImageEmbedError(f"Cannot open workbook {output_path}: {exc}") from exc
        worksheet = workbook.worksheets[0]

        candidates = [
            cell
            for row in worksheet.iter_rows()
            for cell in row
            if is_image_reference(cell.value)
        ]
        embedded = 0
        for cell in candidates:
            image_path = Path(image_store_dir) / Path(str(cell.value)).name
            if not image_path.is_file():
                Log.debug(f"Image not found for {cell.coordinate}: {image_path.name}")
                continue
            if self._embed_cell(worksheet, cell, image_path):
                embedded += 1

        try:
            workbook.save(output_path)
        except OSError as exc:
            raise ImageEmbedError(f"Cannot save workbook {output_path}: {exc}") from exc
        Log.info(f"Embedded {embedded} of {len(candidates)} image references in {output_path}")
        return embedded

    def _embed_cell(self, worksheet: Worksheet, cell: Cell, image_path: Path) -> bool:
        try:
            picture = Image(io.BytesIO(image_path.read_bytes()))
        except (OSError, ValueError) as exc:
            Log.warning(f"Cannot embed {image_path.name} at {cell.coordinate}: {exc}")
            return False
        picture.width = self._image_size
        picture.height = self._image_size
        worksheet.add_image(picture, cell.coordinate)
        cell.value = None
        worksheet.row_dimensions[cell.row].height = self._row_height
        worksheet.column_dimensions[get_column_letter(cell.column)].width = self._column_width
        return True
