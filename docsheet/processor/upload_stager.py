import secrets
import shutil
import time
from collections.abc import Callable
from pathlib import Path

from docsheet.extraction.models import DocumentFormat, SourceDocument
from docsheet.logging.logger import Log
from docsheet.session.context import SessionContext


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class UploadStager:
    """Copies incoming files into the session uploads directory."""

    def __init__(self, clock: Callable[[], int] = _epoch_millis) -> None:
        self._clock = clock

    def stage(
        self,
        session: SessionContext,
        source: Path,
        mime_type: str | None = None,
    ) -> SourceDocument:
        """Copy ``source`` to ``uploads/<epochMillis>-<hex8>-<name>`` and describe it.

        The format is checked before anything is copied. The target is created
        exclusively, so files sharing a basename never overwrite each other.

        Raises:
            FileNotFoundError: if ``source`` does not exist.
            UnsupportedFormatError: if the file is not PDF, DOCX or XLSX.
        """
        source = Path(source)
        if not source.is_file():
            raise FileNotFoundError(f"File not found: {source}")
        DocumentFormat.resolve(source.name, mime_type)

        while True:
            target = session.uploads_dir / (
                f"{self._clock()}-{secrets.token_hex(4)}-{source.name}"
            )
            try:
                with source.open("rb") as src, target.open("xb") as dst:
                    shutil.copyfileobj(src, dst)
            except FileExistsError:
                continue
            break
        Log.debug(f"Staged {source.name} as {target.name}", session=session.name)
        return SourceDocument.from_upload(target, source.name, mime_type)
