class PdfImageDecodeError(Exception):
    """Raised when a PDF cannot be opened or its images cannot be decoded."""
