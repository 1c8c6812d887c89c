"""Per-batch session workspace."""

import random
from dataclasses import dataclass, field
from pathlib import Path

from docsheet.session.naming import UNSAFE_CHARS, ImageNamer, sanitize_name

SUBDIRECTORIES = ("uploads", "images", "temp", "output", "excelBase")


def generate_session_name(project_name: str | None = None) -> str:
    """Build a fresh session name from the project name.

    A non-blank project name keeps its safe characters and gets a random
    4-digit suffix; otherwise the name is ``Session`` plus 8 random digits.
    """
    if project_name and project_name.strip():
        safe = UNSAFE_CHARS.sub("", project_name.strip())
        return f"{safe}{random.randint(1000, 9999)}"
    return f"Session{random.randint(10_000_000, 99_999_999)}"


@dataclass(frozen=True)
class SessionContext:
    """Isolated workspace for one batch: uploads, images, temp, output."""

    name: str
    root: Path
    image_namer: ImageNamer = field(default_factory=ImageNamer, compare=False)

    @classmethod
    def open(cls, sessions_root: Path, raw_name: str) -> "SessionContext":
        """Sanitize ``raw_name`` and create the session directory tree.

        Raises:
            ValueError: if the name is empty.
        """
        if not raw_name or not raw_name.strip():
            raise ValueError("Session name is required")
        name = sanitize_name(raw_name.strip())
        session = cls(name=name, root=Path(sessions_root) / name)
        for subdirectory in SUBDIRECTORIES:
            (session.root / subdirectory).mkdir(parents=True, exist_ok=True)
        return session

    @property
    def uploads_dir(self) -> Path:
        return self.root / "uploads"

    @property
    def images_dir(self) -> Path:
        return self.root / "images"

    @property
    def temp_dir(self) -> Path:
        return self.root / "temp"

    @property
    def output_dir(self) -> Path:
        return self.root / "output"

    @property
    def template_dir(self) -> Path:
        return self.root / "excelBase"

    def template_override(self) -> Path | None:
        """Return the session-provided template workbook, if one was uploaded."""
        if not self.template_dir.is_dir():
            return None
        candidates = sorted(self.template_dir.glob("*.xlsx"))
        return candidates[0] if candidates else None
