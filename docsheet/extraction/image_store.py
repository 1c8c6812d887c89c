import os
import secrets
from pathlib import Path


def write_image(images_dir: Path, filename: str, data: bytes) -> Path:
    """Write image bytes atomically: temp file in the same directory, then rename."""
    images_dir.mkdir(parents=True, exist_ok=True)
    target = images_dir / filename
    temp_path = images_dir / f"{filename}.{secrets.token_hex(4)}.tmp"
    try:
        temp_path.write_bytes(data)
        os.replace(temp_path, target)
    finally:
        temp_path.unlink(missing_ok=True)
    return target


def discard_images(paths: list[Path]) -> None:
    """Remove partially written images; missing files are ignored."""
    for path in paths:
        path.unlink(missing_ok=True)
