from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class DecodedImage:
    """One raster image written by a decoder into its scratch directory."""

    path: Path
    page_number: int
    ext: str


class BasePdfImageDecoder(ABC):
    """Contract for all PDF raster image decoding adapters."""

    @abstractmethod
    def decode(self, pdf_path: Path, scratch_dir: Path) -> list[DecodedImage]:
        """Decode every embedded raster image of a PDF.

        Args:
            pdf_path: PDF file on disk.
            scratch_dir: Empty directory owned by the caller; decoded files go here.

        Returns:
            Decoded images in page order, then stream order within a page.

        Raises:
            PdfImageDecodeError: if decoding fails for any reason.
        """
