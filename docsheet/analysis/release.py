from concurrent.futures import ThreadPoolExecutor

from docsheet.analysis.client_base import BaseAnalysisClient
from docsheet.analysis.exceptions import AnalysisServiceError
from docsheet.logging.logger import Log


class ResourceReleaser:
    """Deletes uploaded files and threads on the provider in the background.

    ``release`` returns immediately. Deletion failures are logged and never
    raised, so a slow or failing cleanup cannot hold up or fail a batch.
    """

    def __init__(self, client: BaseAnalysisClient, max_workers: int = 2) -> None:
        self._client = client
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="release"
        )

    def release(self, file_id: str | None, thread_id: str | None) -> None:
        if file_id:
            self._executor.submit(self._delete_file, file_id)
        if thread_id:
            self._executor.submit(self._delete_thread, thread_id)

    def close(self, wait: bool = True) -> None:
        """Stop accepting releases; by default wait for pending ones to finish."""
        self._executor.shutdown(wait=wait)

    def _delete_file(self, file_id: str) -> None:
        try:
            self._client.delete_file(file_id)
            Log.debug(f"Deleted provider file {file_id}")
        except AnalysisServiceError as exc:
            Log.warning(f"Failed to delete provider file {file_id}: {exc}")

    def _delete_thread(self, thread_id: str) -> None:
        try:
            self._client.delete_thread(thread_id)
            Log.debug(f"Deleted provider thread {thread_id}")
        except AnalysisServiceError as exc:
            Log.warning(f"Failed to delete provider thread {thread_id}: {exc}")
