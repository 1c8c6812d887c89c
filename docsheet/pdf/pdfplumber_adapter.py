from pathlib import Path
from typing import Any

import pdfplumber

from docsheet.pdf.base import BasePdfImageDecoder, DecodedImage
from docsheet.pdf.exceptions import PdfImageDecodeError

_RENDER_RESOLUTION = 150


def _filter_names(stream: Any) -> list[str]:
    return [getattr(name, "name", str(name)) for name, _params in stream.get_filters()]


class PdfPlumberImageDecoder(BasePdfImageDecoder):
    """Decodes embedded images with pdfplumber.

    JPEG streams are copied verbatim; any other image is rendered from its
    region of the page to PNG.
    """

    def decode(self, pdf_path: Path, scratch_dir: Path) -> list[DecodedImage]:
        decoded: list[DecodedImage] = []
        try:
            with pdfplumber.open(pdf_path) as pdf:
                for page_number, page in enumerate(pdf.pages, start=1):
                    for index, image in enumerate(page.images, start=1):
                        stem = scratch_dir / f"page{page_number}_{index}"
                        decoded.append(self._decode_image(page, image, stem, page_number))
        except PdfImageDecodeError:
            raise
        except Exception as exc:
            raise PdfImageDecodeError(f"pdfplumber image decoding failed: {exc}") from exc
        return decoded

    @staticmethod
    def _decode_image(
        page: Any, image: dict[str, Any], stem: Path, page_number: int
    ) -> DecodedImage:
        stream = image["stream"]
        if "DCTDecode" in _filter_names(stream):
            target = stem.with_suffix(".jpg")
            target.write_bytes(stream.get_rawdata())
            return DecodedImage(path=target, page_number=page_number, ext="jpg")

        x0, top, x1, bottom = page.bbox
        bbox = (
            max(image["x0"], x0),
            max(image["top"], top),
            min(image["x1"], x1),
            min(image["bottom"], bottom),
        )
        target = stem.with_suffix(".png")
        page.crop(bbox).to_image(resolution=_RENDER_RESOLUTION).save(target, format="PNG")
        return DecodedImage(path=target, page_number=page_number, ext="png")
