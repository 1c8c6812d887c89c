class ExtractionError(Exception):
    """Raised when images cannot be extracted from a source document."""


class UnsupportedFormatError(ExtractionError):
    """Raised when a document's format is not one of the supported containers."""
