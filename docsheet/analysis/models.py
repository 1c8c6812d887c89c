from dataclasses import dataclass, field
from enum import Enum

from docsheet.extraction.models import ExtractedImage

RowData = dict[str, object]


class JobState(str, Enum):
    UPLOADING = "uploading"
    SUBMITTED = "submitted"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class RunStatus:
    """Snapshot of a provider run as returned by ``get_run_status``."""

    status: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    last_error: str | None = None


@dataclass(frozen=True)
class ThreadMessage:
    role: str
    text: str


@dataclass(frozen=True)
class StructuredList:
    """Response that parsed as JSON: one row-data object per spreadsheet row."""

    rows: list[RowData]

    def as_rows(self) -> list[RowData]:
        return [dict(row) for row in self.rows]


@dataclass(frozen=True)
class FreeText:
    """Response that did not parse as JSON, kept verbatim."""

    text: str
    reason: str = ""

    def as_rows(self) -> list[RowData]:
        return [{"content": self.text}]


ParsedResponse = StructuredList | FreeText


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    prompt_cost_per_million: float = 2.5
    completion_cost_per_million: float = 10.0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    @property
    def prompt_cost(self) -> float:
        return self.prompt_tokens / 1_000_000 * self.prompt_cost_per_million

    @property
    def completion_cost(self) -> float:
        return self.completion_tokens / 1_000_000 * self.completion_cost_per_million

    @property
    def total_cost(self) -> float:
        return self.prompt_cost + self.completion_cost

    def to_dict(self) -> dict[str, object]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
            "prompt_cost": f"{self.prompt_cost:.6f}",
            "completion_cost": f"{self.completion_cost:.6f}",
            "total_cost": f"{self.total_cost:.6f}",
        }


@dataclass
class AnalysisResult:
    """Outcome of analysing one source document."""

    source_filename: str
    status: JobState
    rows: list[RowData] = field(default_factory=list)
    images: list[ExtractedImage] = field(default_factory=list)
    image_error: str | None = None
    usage: TokenUsage = field(default_factory=TokenUsage)
    error: str | None = None
    error_type: str | None = None
    parse_error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is JobState.COMPLETED

    @classmethod
    def failure(
        cls,
        source_filename: str,
        exc: Exception,
        *,
        images: list[ExtractedImage] | None = None,
        image_error: str | None = None,
        usage: TokenUsage | None = None,
    ) -> "AnalysisResult":
        return cls(
            source_filename=source_filename,
            status=JobState.FAILED,
            images=list(images or []),
            image_error=image_error,
            usage=usage or TokenUsage(),
            error=str(exc),
            error_type=type(exc).__name__,
        )

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "filename": self.source_filename,
            "status": self.status.value,
            "extracted_images": [image.to_dict() for image in self.images],
            "image_error": self.image_error,
        }
        if self.succeeded:
            payload["analysis"] = self.rows
            payload["cost"] = self.usage.to_dict()
            payload["parse_error"] = self.parse_error
        else:
            payload["error"] = self.error
            payload["error_type"] = self.error_type
        return payload
