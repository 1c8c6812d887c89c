from docsheet.config.settings import Settings
from docsheet.pdf.base import BasePdfImageDecoder
from docsheet.pdf.pdfplumber_adapter import PdfPlumberImageDecoder
from docsheet.pdf.pymupdf_adapter import PyMuPdfImageDecoder


class PdfImageDecoderFactory:
    """Creates the configured PDF image decoder."""

    ADAPTERS: dict[str, type[BasePdfImageDecoder]] = {
        "pymupdf": PyMuPdfImageDecoder,
        "pdfplumber": PdfPlumberImageDecoder,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfImageDecoder:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
