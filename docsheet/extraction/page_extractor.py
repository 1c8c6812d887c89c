import tempfile
from pathlib import Path

from docsheet.extraction.exceptions import ExtractionError
from docsheet.extraction.image_store import discard_images, write_image
from docsheet.extraction.models import ExtractedImage
from docsheet.logging.logger import Log
from docsheet.pdf.base import BasePdfImageDecoder
from docsheet.pdf.exceptions import PdfImageDecodeError
from docsheet.session.context import SessionContext


class PageImageExtractor:
    """Extracts raster images from PDF pages into the session image store.

    Decoding happens in a scratch directory under the session temp dir, which
    is removed on every exit path.
    """

    def __init__(self, decoder: BasePdfImageDecoder) -> None:
        self._decoder = decoder

    def extract(
        self,
        session: SessionContext,
        pdf_path: Path,
        base_name: str,
    ) -> list[ExtractedImage]:
        """Decode the PDF's images and persist them in page/stream order.

        Raises:
            ExtractionError: if the PDF cannot be decoded or an image cannot be stored.
        """
        pdf_path = Path(pdf_path)
        session.temp_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        images: list[ExtractedImage] = []
        with tempfile.TemporaryDirectory(
            prefix="pdf_extract_", dir=session.temp_dir
        ) as scratch:
            try:
                decoded = self._decoder.decode(pdf_path, Path(scratch))
                for index, item in enumerate(decoded, start=1):
                    locator = f"page{item.page_number}"
                    filename = session.image_namer.name(base_name, locator, index, item.ext)
                    image_path = write_image(
                        session.images_dir, filename, item.path.read_bytes()
                    )
                    written.append(image_path)
                    images.append(
                        ExtractedImage(
                            filename=filename,
                            path=image_path,
                            source_document=base_name,
                            locator=locator,
                        )
                    )
            except (PdfImageDecodeError, OSError) as exc:
                discard_images(written)
                raise ExtractionError(
                    f"Cannot extract images from {pdf_path.name}: {exc}"
                ) from exc

        Log.info(
            f"Extracted {len(images)} images from {pdf_path.name}",
            session=session.name,
        )
        return images
