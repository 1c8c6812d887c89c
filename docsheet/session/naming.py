import re
import secrets
import threading
import time

UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def sanitize_name(name: str) -> str:
    """Replace every character outside ``[a-zA-Z0-9_-]`` with ``_``."""
    return UNSAFE_CHARS.sub("_", name)


class ImageNamer:
    """Issues image filenames that are unique within one session.

    Names follow ``<base>[_<scope>]_<index>_<epochMillis>_<hex8>.<ext>``. Every
    issued name is remembered so a random-suffix clash is redrawn instead of
    silently reused. Safe to share between extraction threads.
    """

    def __init__(self) -> None:
        self._issued: set[str] = set()
        self._lock = threading.Lock()

    def name(self, base: str, scope: str | None, index: int | str, ext: str) -> str:
        safe_base = sanitize_name(base) or "image"
        scope_part = f"_{sanitize_name(scope)}" if scope else ""
        extension = ext.lower().lstrip(".") or "png"
        with self._lock:
            while True:
                candidate = (
                    f"{safe_base}{scope_part}_{index}_"
                    f"{time.time_ns() // 1_000_000}_{secrets.token_hex(4)}.{extension}"
                )
                if candidate not in self._issued:
                    self._issued.add(candidate)
                    return candidate

    def __len__(self) -> int:
        with self._lock:
            return len(self._issued)
