"""Example analysis client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseAnalysisClient and register the provider in AnalysisClientFactory.
"""

import itertools
import json
from typing import ClassVar

from docsheet.analysis.client_base import BaseAnalysisClient
from docsheet.analysis.models import RunStatus, ThreadMessage


class ExampleAnalysisClientAdapter(BaseAnalysisClient):
    """Example adapter whose runs complete at once with a fixed JSON row.

    No network calls. Useful for local development, tests, and as a template
    for building real provider adapters.
    """

    DEFAULT_RESPONSE: ClassVar[list[dict[str, object]]] = [
        {"item": "1", "description": "Example item", "unit": "pcs", "quantity": 1},
    ]

    def __init__(self) -> None:
        self._ids = itertools.count(1)

    def create_file(self, filename: str, content: bytes) -> str:
        _ = filename, content
        return f"file-{next(self._ids)}"

    def create_thread(self) -> str:
        return f"thread-{next(self._ids)}"

    def attach_and_prompt(self, thread_id: str, file_id: str, prompt: str) -> None:
        _ = thread_id, file_id, prompt

    def start_run(self, thread_id: str, assistant_id: str) -> str:
        _ = thread_id, assistant_id
        return f"run-{next(self._ids)}"

    def get_run_status(self, thread_id: str, run_id: str) -> RunStatus:
        _ = thread_id, run_id
        return RunStatus(status="completed")

    def list_messages(self, thread_id: str) -> list[ThreadMessage]:
        _ = thread_id
        return [ThreadMessage(role="assistant", text=json.dumps(self.DEFAULT_RESPONSE))]

    def delete_file(self, file_id: str) -> None:
        _ = file_id

    def delete_thread(self, thread_id: str) -> None:
        _ = thread_id
