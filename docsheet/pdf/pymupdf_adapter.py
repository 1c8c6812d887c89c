from pathlib import Path

import pymupdf

from docsheet.pdf.base import BasePdfImageDecoder, DecodedImage
from docsheet.pdf.exceptions import PdfImageDecodeError

_RGB_CHANNELS = 3


def _pixmap_to_png(pix: pymupdf.Pixmap) -> bytes:
    if pix.n - pix.alpha > _RGB_CHANNELS:
        pix = pymupdf.Pixmap(pymupdf.csRGB, pix)
    return pix.tobytes("png")


class PyMuPdfImageDecoder(BasePdfImageDecoder):
    """Decodes embedded images with PyMuPDF, keeping native bytes when possible."""

    def decode(self, pdf_path: Path, scratch_dir: Path) -> list[DecodedImage]:
        try:
            with pymupdf.open(str(pdf_path)) as doc:  # type: ignore[no-untyped-call]
                return self._decode_document(doc, scratch_dir)
        except PdfImageDecodeError:
            raise
        except Exception as exc:
            raise PdfImageDecodeError(f"pymupdf image decoding failed: {exc}") from exc

    def _decode_document(
        self, doc: pymupdf.Document, scratch_dir: Path
    ) -> list[DecodedImage]:
        decoded: list[DecodedImage] = []
        seen_xrefs: set[int] = set()
        for page_number, page in enumerate(doc, start=1):
            for info in page.get_images(full=True):
                xref, smask = info[0], info[1]
                if xref in seen_xrefs:
                    continue
                seen_xrefs.add(xref)
                extracted = self._extract(doc, xref, smask)
                if extracted is None:
                    continue
                data, ext = extracted
                target = scratch_dir / f"page{page_number}_xref{xref}.{ext}"
                target.write_bytes(data)
                decoded.append(DecodedImage(path=target, page_number=page_number, ext=ext))
        return decoded

    @staticmethod
    def _extract(doc: pymupdf.Document, xref: int, smask: int) -> tuple[bytes, str] | None:
        if smask:
            combined = pymupdf.Pixmap(pymupdf.Pixmap(doc, xref), pymupdf.Pixmap(doc, smask))
            return _pixmap_to_png(combined), "png"
        img_data = doc.extract_image(xref)
        if not img_data:
            return None
        return img_data["image"], img_data["ext"]
