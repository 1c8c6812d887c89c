"""Per-document analysis job.

States: uploading -> submitted -> polling -> completed | failed. The job
never raises for provider failures; a failed job returns a failed
``AnalysisResult`` whose ``error_type`` names the cause.
"""

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from docsheet.analysis.client_base import BaseAnalysisClient
from docsheet.analysis.exceptions import (
    AnalysisError,
    AnalysisJobError,
    AnalysisServiceError,
    AnalysisTimeoutError,
    SubmissionError,
    UploadError,
)
from docsheet.analysis.image_slots import assign_image_slots
from docsheet.analysis.models import (
    AnalysisResult,
    FreeText,
    JobState,
    RunStatus,
    TokenUsage,
)
from docsheet.analysis.release import ResourceReleaser
from docsheet.analysis.response_parser import parse_response
from docsheet.extraction.models import DocumentFormat, ExtractedImage, SourceDocument
from docsheet.logging.logger import Log
from docsheet.session.context import SessionContext
from docsheet.spreadsheet.exceptions import ConversionError
from docsheet.spreadsheet.html_converter import SpreadsheetHtmlConverter


@dataclass(frozen=True)
class JobConfig:
    assistant_id: str
    prompt: str
    poll_interval_seconds: float = 1.0
    timeout_seconds: float = 300.0
    max_images_per_item: int = 10
    prompt_cost_per_million: float = 2.5
    completion_cost_per_million: float = 10.0


class AnalysisJob:
    """Uploads one document, runs the assistant on it and parses the answer.

    A job instance handles a single document; create a new one per document.
    """

    PENDING_STATUSES: ClassVar[frozenset[str]] = frozenset({"queued", "in_progress"})

    def __init__(
        self,
        *,
        client: BaseAnalysisClient,
        config: JobConfig,
        releaser: ResourceReleaser,
        converter: SpreadsheetHtmlConverter,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._config = config
        self._releaser = releaser
        self._converter = converter
        self._sleep = sleep
        self._clock = clock

        self.state = JobState.UPLOADING
        self._file_id: str | None = None
        self._thread_id: str | None = None
        self._last_status: RunStatus | None = None
        self._html_path: Path | None = None

    def run(
        self,
        session: SessionContext,
        document: SourceDocument,
        images: Sequence[ExtractedImage] = (),
        image_error: str | None = None,
    ) -> AnalysisResult:
        """Drive the job to a terminal state and return its result."""
        deadline = self._clock() + self._config.timeout_seconds
        Log.info(
            f"Analysing {document.original_filename} ({document.format.value})",
            session=session.name,
        )
        try:
            file_id = self._upload(session, document)
            thread_id, run_id = self._submit(file_id)
            self._poll(thread_id, run_id, deadline)
            result = self._complete(thread_id, document, list(images), image_error)
        except AnalysisJobError as exc:
            self._transition(JobState.FAILED)
            Log.error(
                f"Analysis of {document.original_filename} failed "
                f"({type(exc).__name__}): {exc}",
                session=session.name,
            )
            return AnalysisResult.failure(
                document.original_filename,
                exc,
                images=list(images),
                image_error=image_error,
                usage=self._usage(),
            )
        finally:
            self._release()

        Log.info(
            f"Analysis of {document.original_filename} produced {len(result.rows)} rows, "
            f"{result.usage.total_tokens} tokens",
            session=session.name,
        )
        return result

    def _transition(self, state: JobState) -> None:
        Log.debug(f"Job state {self.state.value} -> {state.value}")
        self.state = state

    def _upload(self, session: SessionContext, document: SourceDocument) -> str:
        try:
            upload_path = document.path
            upload_name = document.original_filename
            if document.format is DocumentFormat.XLSX:
                self._html_path = self._converter.convert(document.path, session.temp_dir)
                upload_path = self._html_path
                upload_name = f"{document.base_name}.html"
            content = upload_path.read_bytes()
            file_id = self._client.create_file(upload_name, content)
            self._file_id = file_id
        except (ConversionError, AnalysisServiceError, OSError) as exc:
            raise UploadError(f"Upload of {document.original_filename} failed: {exc}") from exc
        Log.debug(f"Uploaded {upload_name} ({len(content)} bytes) as {file_id}")
        self._transition(JobState.SUBMITTED)
        return file_id

    def _submit(self, file_id: str) -> tuple[str, str]:
        try:
            thread_id = self._client.create_thread()
            self._thread_id = thread_id
            self._client.attach_and_prompt(thread_id, file_id, self._config.prompt)
            run_id = self._client.start_run(thread_id, self._config.assistant_id)
        except AnalysisServiceError as exc:
            raise SubmissionError(f"Submitting analysis failed: {exc}") from exc
        Log.debug(f"Run {run_id} started on thread {thread_id}")
        self._transition(JobState.POLLING)
        return thread_id, run_id

    def _poll(self, thread_id: str, run_id: str, deadline: float) -> None:
        while True:
            try:
                status = self._client.get_run_status(thread_id, run_id)
            except AnalysisServiceError as exc:
                raise AnalysisError(f"Polling run {run_id} failed: {exc}") from exc
            self._last_status = status
            if status.status not in self.PENDING_STATUSES:
                break
            if self._clock() >= deadline:
                raise AnalysisTimeoutError(
                    f"Run {run_id} still {status.status} after "
                    f"{self._config.timeout_seconds:g}s"
                )
            Log.debug(f"Run {run_id} status: {status.status}")
            self._sleep(self._config.poll_interval_seconds)

        if status.status != "completed":
            detail = f": {status.last_error}" if status.last_error else ""
            raise AnalysisError(f"Run {run_id} ended with status '{status.status}'{detail}")

    def _complete(
        self,
        thread_id: str,
        document: SourceDocument,
        images: list[ExtractedImage],
        image_error: str | None,
    ) -> AnalysisResult:
        try:
            messages = self._client.list_messages(thread_id)
        except AnalysisServiceError as exc:
            raise AnalysisError(f"Retrieving the response failed: {exc}") from exc
        text = next(
            (m.text for m in messages if m.role == "assistant" and m.text.strip()),
            None,
        )
        if text is None:
            raise AnalysisError("The assistant returned no response")

        parsed = parse_response(text)
        parse_error = None
        if isinstance(parsed, FreeText):
            parse_error = parsed.reason
            Log.warning(
                f"Response for {document.original_filename} is not JSON; kept as text"
            )
        rows = assign_image_slots(parsed.as_rows(), images, self._config.max_images_per_item)
        self._transition(JobState.COMPLETED)
        return AnalysisResult(
            source_filename=document.original_filename,
            status=JobState.COMPLETED,
            rows=rows,
            images=images,
            image_error=image_error,
            usage=self._usage(),
            parse_error=parse_error,
        )

    def _usage(self) -> TokenUsage:
        status = self._last_status
        return TokenUsage(
            prompt_tokens=status.prompt_tokens if status else 0,
            completion_tokens=status.completion_tokens if status else 0,
            prompt_cost_per_million=self._config.prompt_cost_per_million,
            completion_cost_per_million=self._config.completion_cost_per_million,
        )

    def _release(self) -> None:
        self._releaser.release(self._file_id, self._thread_id)
        if self._html_path is not None:
            self._html_path.unlink(missing_ok=True)
