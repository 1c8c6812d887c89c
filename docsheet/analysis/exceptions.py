class AnalysisServiceError(Exception):
    """Raised by client adapters when the analysis provider call fails."""


class AnalysisNetworkError(AnalysisServiceError):
    """Raised when the provider call fails due to network/infrastructure issues."""


class AnalysisJobError(Exception):
    """Base exception for terminal failures of an analysis job."""


class UploadError(AnalysisJobError):
    """Raised when the document cannot be prepared or uploaded."""


class SubmissionError(AnalysisJobError):
    """Raised when the thread, message or run cannot be created."""


class AnalysisError(AnalysisJobError):
    """Raised when the run ends in a non-success state or yields no answer."""


class AnalysisTimeoutError(AnalysisJobError):
    """Raised when the run does not finish before the job deadline."""


class ResponseParseError(Exception):
    """Raised when the analysis response is not a JSON object or array."""
