from docsheet.analysis.models import RowData
from docsheet.extraction.models import ExtractedImage
from docsheet.logging.logger import Log


def image_slot_key(slot: int) -> str:
    return f"IMAGE {slot}"


def assign_image_slots(
    rows: list[RowData],
    images: list[ExtractedImage],
    max_per_item: int = 10,
) -> list[RowData]:
    """Spread images over rows in order, at most ``max_per_item`` per row.

    Each row receives ``IMAGE 1..IMAGE k`` holding image paths. Images left
    after the last row is full are dropped.
    """
    assigned: list[RowData] = []
    remaining = list(images)
    for row in rows:
        row = dict(row)
        batch, remaining = remaining[:max_per_item], remaining[max_per_item:]
        for slot, image in enumerate(batch, start=1):
            row[image_slot_key(slot)] = str(image.path)
        assigned.append(row)

    if remaining:
        Log.warning(
            f"{len(remaining)} images exceed {max_per_item} per row "
            f"across {len(rows)} rows and were not assigned"
        )
    return assigned
