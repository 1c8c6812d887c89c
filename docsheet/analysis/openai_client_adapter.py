from collections.abc import Callable
from typing import Any, TypeVar

import httpx
import openai

from docsheet.analysis.client_base import BaseAnalysisClient
from docsheet.analysis.exceptions import AnalysisNetworkError, AnalysisServiceError
from docsheet.analysis.models import RunStatus, ThreadMessage

T = TypeVar("T")


def _message_text(message: Any) -> str:
    parts = [
        block.text.value
        for block in message.content or []
        if getattr(block, "type", None) == "text"
    ]
    return "\n".join(parts)


class OpenAIAssistantsClientAdapter(BaseAnalysisClient):
    """Analysis client built on the OpenAI Assistants (threads and runs) API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    def create_file(self, filename: str, content: bytes) -> str:
        uploaded = self._call(
            lambda: self._client.files.create(file=(filename, content), purpose="assistants")
        )
        return uploaded.id

    def create_thread(self) -> str:
        thread = self._call(lambda: self._client.beta.threads.create())
        return thread.id

    def attach_and_prompt(self, thread_id: str, file_id: str, prompt: str) -> None:
        self._call(
            lambda: self._client.beta.threads.messages.create(
                thread_id=thread_id,
                role="user",
                content=prompt,
                attachments=[{"file_id": file_id, "tools": [{"type": "file_search"}]}],
            )
        )

    def start_run(self, thread_id: str, assistant_id: str) -> str:
        run = self._call(
            lambda: self._client.beta.threads.runs.create(
                thread_id=thread_id, assistant_id=assistant_id
            )
        )
        return run.id

    def get_run_status(self, thread_id: str, run_id: str) -> RunStatus:
        run = self._call(
            lambda: self._client.beta.threads.runs.retrieve(run_id=run_id, thread_id=thread_id)
        )
        usage = run.usage
        last_error = run.last_error.message if run.last_error else None
        return RunStatus(
            status=run.status,
            prompt_tokens=(usage.prompt_tokens or 0) if usage else 0,
            completion_tokens=(usage.completion_tokens or 0) if usage else 0,
            last_error=last_error,
        )

    def list_messages(self, thread_id: str) -> list[ThreadMessage]:
        page = self._call(
            lambda: self._client.beta.threads.messages.list(thread_id=thread_id, order="desc")
        )
        return [ThreadMessage(role=m.role, text=_message_text(m)) for m in page.data]

    def delete_file(self, file_id: str) -> None:
        self._call(lambda: self._client.files.delete(file_id))

    def delete_thread(self, thread_id: str) -> None:
        self._call(lambda: self._client.beta.threads.delete(thread_id))

    @staticmethod
    def _call(request: Callable[[], T]) -> T:
        try:
            return request()
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise AnalysisNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise AnalysisServiceError(f"AI provider API error: {exc}") from exc
