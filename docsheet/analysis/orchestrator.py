from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor

from docsheet.analysis.job import AnalysisJob
from docsheet.analysis.models import AnalysisResult
from docsheet.extraction.extractor import DocumentImageExtractor
from docsheet.extraction.models import SourceDocument
from docsheet.logging.logger import Log
from docsheet.session.context import SessionContext


class AnalysisOrchestrator:
    """Runs extraction and analysis for every document of a batch concurrently.

    Results come back in the order of the input documents regardless of
    completion order. A failure inside one task only affects that document.
    """

    def __init__(
        self,
        extractor: DocumentImageExtractor,
        job_factory: Callable[[], AnalysisJob],
        max_workers: int = 10,
    ) -> None:
        self._extractor = extractor
        self._job_factory = job_factory
        self._max_workers = max(1, max_workers)

    def run(
        self, session: SessionContext, documents: Sequence[SourceDocument]
    ) -> list[AnalysisResult]:
        if not documents:
            return []
        Log.info(
            f"Analysing {len(documents)} documents with {self._max_workers} workers",
            session=session.name,
        )
        with ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(documents)),
            thread_name_prefix="analysis",
        ) as executor:
            futures = [
                executor.submit(self._process, session, document) for document in documents
            ]
            results = [future.result() for future in futures]

        completed = sum(1 for result in results if result.succeeded)
        Log.info(
            f"Analysis finished: {completed} of {len(results)} documents succeeded",
            session=session.name,
        )
        return results

    def _process(self, session: SessionContext, document: SourceDocument) -> AnalysisResult:
        try:
            outcome = self._extractor.extract(session, document)
            Log.info(
                f"Extracted {len(outcome.images)} images from {document.original_filename}",
                session=session.name,
            )
            job = self._job_factory()
            return job.run(session, document, outcome.images, outcome.error)
        except Exception as exc:
            Log.exception(
                f"Unexpected failure while processing {document.original_filename}",
                session=session.name,
            )
            return AnalysisResult.failure(document.original_filename, exc)
        finally:
            document.path.unlink(missing_ok=True)
