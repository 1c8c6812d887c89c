import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import ClassVar

from docsheet.extraction.exceptions import ExtractionError, UnsupportedFormatError
from docsheet.extraction.image_store import discard_images, write_image
from docsheet.extraction.models import DocumentFormat, ExtractedImage
from docsheet.logging.logger import Log
from docsheet.session.context import SessionContext


class ArchiveImageExtractor:
    """Copies embedded media out of ZIP-based office documents."""

    MEDIA_DIRECTORIES: ClassVar[dict[DocumentFormat, str]] = {
        DocumentFormat.DOCX: "word/media/",
        DocumentFormat.XLSX: "xl/media/",
    }

    def extract(
        self,
        session: SessionContext,
        path: Path,
        declared_format: DocumentFormat,
        base_name: str | None = None,
    ) -> list[ExtractedImage]:
        """Extract every file under the format's media directory.

        Returns an empty list when the archive has no media directory.

        Raises:
            UnsupportedFormatError: if ``declared_format`` is not a container format.
            ExtractionError: if the archive cannot be opened or read.
        """
        media_dir = self.MEDIA_DIRECTORIES.get(declared_format)
        if media_dir is None:
            raise UnsupportedFormatError(
                f"'{declared_format.value}' is not a container format"
            )
        path = Path(path)
        base = base_name or path.stem
        written: list[Path] = []
        images: list[ExtractedImage] = []
        try:
            with zipfile.ZipFile(path) as archive:
                entries = [
                    info
                    for info in archive.infolist()
                    if info.filename.startswith(media_dir) and not info.is_dir()
                ]
                Log.debug(f"Found {len(entries)} media entries in {path.name}")
                for index, info in enumerate(entries):
                    ext = PurePosixPath(info.filename).suffix.lstrip(".") or "png"
                    filename = session.image_namer.name(base, None, index, ext)
                    image_path = write_image(
                        session.images_dir, filename, archive.read(info)
                    )
                    written.append(image_path)
                    images.append(
                        ExtractedImage(
                            filename=filename,
                            path=image_path,
                            source_document=base,
                        )
                    )
        except (zipfile.BadZipFile, zlib.error, NotImplementedError, OSError) as exc:
            discard_images(written)
            raise ExtractionError(f"Cannot read archive {path.name}: {exc}") from exc

        Log.info(
            f"Extracted {len(images)} images from {path.name}",
            session=session.name,
        )
        return images
