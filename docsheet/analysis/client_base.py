from abc import ABC, abstractmethod

from docsheet.analysis.models import RunStatus, ThreadMessage


class BaseAnalysisClient(ABC):
    """Contract for provider-specific document analysis clients.

    Every method raises ``AnalysisServiceError`` on provider failure.
    ``delete_file`` and ``delete_thread`` are cleanup calls: callers treat
    their failures as non-fatal and only log them.
    """

    @abstractmethod
    def create_file(self, filename: str, content: bytes) -> str:
        """Upload a document and return the provider's file id."""

    @abstractmethod
    def create_thread(self) -> str:
        """Open a conversation thread and return its id."""

    @abstractmethod
    def attach_and_prompt(self, thread_id: str, file_id: str, prompt: str) -> None:
        """Post the analysis instruction with the uploaded file attached."""

    @abstractmethod
    def start_run(self, thread_id: str, assistant_id: str) -> str:
        """Start the assistant on the thread and return the run id."""

    @abstractmethod
    def get_run_status(self, thread_id: str, run_id: str) -> RunStatus:
        """Return the current status and token usage of a run."""

    @abstractmethod
    def list_messages(self, thread_id: str) -> list[ThreadMessage]:
        """Return the thread's messages, newest first."""

    @abstractmethod
    def delete_file(self, file_id: str) -> None:
        """Delete an uploaded file."""

    @abstractmethod
    def delete_thread(self, thread_id: str) -> None:
        """Delete a thread."""
