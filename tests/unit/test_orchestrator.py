import random
import threading
import time
from pathlib import Path
from unittest.mock import MagicMock

from docsheet.analysis.job import AnalysisJob
from docsheet.analysis.models import AnalysisResult, JobState
from docsheet.analysis.orchestrator import AnalysisOrchestrator
from docsheet.extraction.extractor import DocumentImageExtractor, ExtractionOutcome
from docsheet.extraction.models import SourceDocument
from docsheet.session.context import SessionContext


def _documents(session: SessionContext, count: int) -> list[SourceDocument]:
    documents = []
    for n in range(count):
        path = session.uploads_dir / f"1700000000000-doc{n}.pdf"
        path.write_bytes(b"%PDF")
        documents.append(SourceDocument.from_upload(path, f"doc{n}.pdf"))
    return documents


class _SlowJob:
    """Finishes after a random delay and echoes the document name."""

    def __init__(self, in_flight: list[int], peak: list[int], lock: threading.Lock) -> None:
        self._in_flight = in_flight
        self._peak = peak
        self._lock = lock

    def run(self, session, document, images, image_error):  # type: ignore[no-untyped-def]
        with self._lock:
            self._in_flight[0] += 1
            self._peak[0] = max(self._peak[0], self._in_flight[0])
        time.sleep(random.uniform(0.0, 0.05))
        with self._lock:
            self._in_flight[0] -= 1
        return AnalysisResult(
            source_filename=document.original_filename,
            status=JobState.COMPLETED,
            rows=[{"item": document.original_filename}],
        )


def _make_extractor() -> MagicMock:
    extractor = MagicMock(spec=DocumentImageExtractor)
    extractor.extract.return_value = ExtractionOutcome()
    return extractor


class TestAnalysisOrchestrator:
    def test_results_follow_input_order(self, session: SessionContext) -> None:
        lock = threading.Lock()
        in_flight, peak = [0], [0]
        orchestrator = AnalysisOrchestrator(
            _make_extractor(), lambda: _SlowJob(in_flight, peak, lock), max_workers=4
        )
        documents = _documents(session, 12)

        results = orchestrator.run(session, documents)

        assert [r.source_filename for r in results] == [d.original_filename for d in documents]
        assert 1 <= peak[0] <= 4

    def test_passes_extraction_outcome_to_job(self, session: SessionContext) -> None:
        extractor = _make_extractor()
        extractor.extract.return_value = ExtractionOutcome(error="Cannot read archive")
        job = MagicMock(spec=AnalysisJob)
        job.run.return_value = AnalysisResult(source_filename="doc0.pdf", status=JobState.COMPLETED)
        orchestrator = AnalysisOrchestrator(extractor, lambda: job)
        documents = _documents(session, 1)

        orchestrator.run(session, documents)

        job.run.assert_called_once_with(session, documents[0], [], "Cannot read archive")

    def test_unexpected_error_fails_only_that_document(self, session: SessionContext) -> None:
        extractor = _make_extractor()
        extractor.extract.side_effect = [
            ExtractionOutcome(),
            RuntimeError("disk full"),
            ExtractionOutcome(),
        ]
        job = MagicMock(spec=AnalysisJob)
        job.run.side_effect = lambda session, document, images, error: AnalysisResult(
            source_filename=document.original_filename, status=JobState.COMPLETED
        )
        orchestrator = AnalysisOrchestrator(extractor, lambda: job, max_workers=1)

        results = orchestrator.run(session, _documents(session, 3))

        assert [r.succeeded for r in results] == [True, False, True]
        assert results[1].error_type == "RuntimeError"
        assert results[1].error == "disk full"

    def test_uploads_are_deleted_on_success_and_failure(self, session: SessionContext) -> None:
        extractor = _make_extractor()
        extractor.extract.side_effect = [ExtractionOutcome(), RuntimeError("boom")]
        job = MagicMock(spec=AnalysisJob)
        job.run.return_value = AnalysisResult(source_filename="doc0.pdf", status=JobState.COMPLETED)
        orchestrator = AnalysisOrchestrator(extractor, lambda: job, max_workers=1)
        documents = _documents(session, 2)

        orchestrator.run(session, documents)

        assert not any(Path(d.path).exists() for d in documents)

    def test_each_document_gets_a_fresh_job(self, session: SessionContext) -> None:
        factory = MagicMock(
            side_effect=lambda: MagicMock(
                spec=AnalysisJob,
                run=MagicMock(
                    return_value=AnalysisResult(source_filename="d", status=JobState.COMPLETED)
                ),
            )
        )
        orchestrator = AnalysisOrchestrator(_make_extractor(), factory)

        orchestrator.run(session, _documents(session, 3))

        assert factory.call_count == 3

    def test_empty_batch(self, session: SessionContext) -> None:
        orchestrator = AnalysisOrchestrator(_make_extractor(), MagicMock())

        assert orchestrator.run(session, []) == []
