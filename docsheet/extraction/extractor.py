from dataclasses import dataclass, field

from docsheet.extraction.archive_extractor import ArchiveImageExtractor
from docsheet.extraction.exceptions import ExtractionError
from docsheet.extraction.models import DocumentFormat, ExtractedImage, SourceDocument
from docsheet.extraction.page_extractor import PageImageExtractor
from docsheet.logging.logger import Log
from docsheet.session.context import SessionContext


@dataclass
class ExtractionOutcome:
    """Images extracted from one document, or the reason there are none."""

    images: list[ExtractedImage] = field(default_factory=list)
    error: str | None = None


class DocumentImageExtractor:
    """Dispatches a document to the extractor for its format.

    Extraction failures are recovered here: the document continues to analysis
    with no images and the error message recorded.
    """

    def __init__(
        self,
        archive_extractor: ArchiveImageExtractor,
        page_extractor: PageImageExtractor,
    ) -> None:
        self._archive_extractor = archive_extractor
        self._page_extractor = page_extractor

    def extract(self, session: SessionContext, document: SourceDocument) -> ExtractionOutcome:
        try:
            if document.format is DocumentFormat.PDF:
                images = self._page_extractor.extract(
                    session, document.path, document.base_name
                )
            else:
                images = self._archive_extractor.extract(
                    session, document.path, document.format, document.base_name
                )
        except ExtractionError as exc:
            Log.warning(
                f"Image extraction failed for {document.original_filename}: {exc}",
                session=session.name,
            )
            return ExtractionOutcome(error=str(exc))
        return ExtractionOutcome(images=images)
