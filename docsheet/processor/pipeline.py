from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from docsheet.analysis.models import AnalysisResult
from docsheet.extraction.models import SourceDocument
from docsheet.session.context import SessionContext


@dataclass(slots=True)
class BatchContext:
    session: SessionContext
    project_name: str
    documents: list[SourceDocument] = field(default_factory=list)
    template_path: Path | None = None
    results: list[AnalysisResult] = field(default_factory=list)
    output_path: Path | None = None
    embedded_images: int = 0
    error_message: str = ""


@dataclass
class BatchResult:
    """Per-document results of a batch and its deliverable, if any."""

    session_name: str
    project_name: str
    results: list[AnalysisResult]
    output_path: Path | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.output_path is not None

    @classmethod
    def from_context(cls, context: BatchContext) -> "BatchResult":
        return cls(
            session_name=context.session.name,
            project_name=context.project_name,
            results=list(context.results),
            output_path=context.output_path,
            error=context.error_message or None,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "session": self.session_name,
            "project": self.project_name,
            "output_path": str(self.output_path) if self.output_path else None,
            "error": self.error,
            "results": [result.to_dict() for result in self.results],
        }


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: BatchContext) -> BatchContext:
        raise NotImplementedError
