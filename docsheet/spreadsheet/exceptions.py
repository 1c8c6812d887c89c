class SpreadsheetError(Exception):
    """Base exception for all spreadsheet-related errors."""


class TemplateLoadError(SpreadsheetError):
    """Raised when the template workbook cannot be opened."""


class AssemblyError(SpreadsheetError):
    """Raised when rows cannot be mapped onto the template layout."""


class ImageEmbedError(SpreadsheetError):
    """Raised when the assembled workbook cannot be opened or saved for embedding."""


class ConversionError(SpreadsheetError):
    """Raised when a spreadsheet cannot be rendered to HTML for upload."""
