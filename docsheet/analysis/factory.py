from typing import ClassVar

from docsheet.analysis.client_base import BaseAnalysisClient
from docsheet.analysis.example_client_adapter import ExampleAnalysisClientAdapter
from docsheet.analysis.openai_client_adapter import OpenAIAssistantsClientAdapter
from docsheet.config.settings import Settings


class AnalysisClientFactory:
    """Creates the configured analysis client adapter."""

    PROVIDERS: ClassVar[tuple[str, ...]] = ("example", "openai")

    @classmethod
    def create(cls, settings: Settings) -> BaseAnalysisClient:
        provider = settings.analysis_provider.lower()
        if provider == "example":
            return ExampleAnalysisClientAdapter()
        if provider == "openai":
            if not settings.openai_assistant_id:
                raise ValueError("openai_assistant_id is required for analysis_provider=openai")
            return OpenAIAssistantsClientAdapter(
                api_key=settings.openai_api_key,
                timeout_seconds=settings.openai_timeout_seconds,
                base_url=settings.openai_base_url,
            )
        raise ValueError(
            f"Unknown analysis provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )
