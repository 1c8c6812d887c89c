"""Static field-to-column layout of the inquiry template."""

import json
import re
from collections.abc import Collection
from dataclasses import dataclass
from pathlib import Path

from openpyxl.utils import column_index_from_string, get_column_letter

from docsheet.spreadsheet.exceptions import AssemblyError

IMAGE_KEY = re.compile(r"^IMAGE (\d+)$")

DEFAULT_FIELDS: tuple[tuple[str, int], ...] = (
    ("item", 3),
    ("description", 4),
    ("unit", 5),
    ("quantity", 6),
    ("unitPrice", 9),
    ("totalPrice", 10),
    ("currency", 11),
    ("deliveryTime", 12),
    ("paymentTerms", 13),
    ("warranty", 14),
    ("manufacturer", 15),
    ("countryOfOrigin", 16),
    ("modelNumber", 17),
    ("serialNumber", 18),
    ("specifications", 19),
    ("dimensions", 20),
    ("weight", 21),
    ("material", 22),
    ("color", 23),
    ("brand", 24),
    ("category", 25),
    ("subcategory", 26),
    ("condition", 27),
    ("notes", 41),
    ("supplier", 46),
    ("supplierContact", 47),
    ("supplierEmail", 48),
    ("supplierPhone", 49),
    ("supplierAddress", 50),
    ("supplierWebsite", 51),
    ("supplierFax", 52),
    ("supplierTaxId", 53),
    ("supplierBankDetails", 54),
    ("supplierPaymentTerms", 55),
)

DEFAULT_HIDDEN_COLUMNS: tuple[str, ...] = (
    "AC", "AD", "AE", "AF", "AG", "AJ", "AK", "AL", "AM", "AN",
    "AP", "AQ", "AR", "AS",
)

DEFAULT_IMAGE_BASE_COLUMN = 55


def image_slot_number(key: str) -> int | None:
    """Return ``n`` for an ``IMAGE n`` key, else ``None``."""
    match = IMAGE_KEY.match(key)
    return int(match.group(1)) if match else None


@dataclass(frozen=True)
class ColumnMap:
    """Field name to 1-based column index, plus hidden columns and image slots.

    A field is placed by name when the map knows it. Otherwise it takes the
    column at its position among the row's non-image fields, in map order,
    moving on to the next column no other field of the row uses.
    ``IMAGE n`` goes to ``image_base_column + n``.
    """

    fields: tuple[tuple[str, int], ...] = DEFAULT_FIELDS
    hidden_columns: tuple[str, ...] = DEFAULT_HIDDEN_COLUMNS
    image_base_column: int = DEFAULT_IMAGE_BASE_COLUMN
    image_slots: int = 10

    def __post_init__(self) -> None:
        columns = [column for _name, column in self.fields]
        if any(column < 1 for column in columns):
            raise AssemblyError("Column indexes must be 1-based")
        if len(set(columns)) != len(columns):
            raise AssemblyError("Column map assigns two fields to the same column")
        if len({name for name, _column in self.fields}) != len(self.fields):
            raise AssemblyError("Column map lists a field twice")
        overlap = set(columns) & set(self.image_columns())
        if overlap:
            letters = ", ".join(get_column_letter(c) for c in sorted(overlap))
            raise AssemblyError(f"Image slot columns overlap data columns: {letters}")
        for letter in self.hidden_columns:
            try:
                column_index_from_string(letter)
            except ValueError as exc:
                raise AssemblyError(f"Invalid hidden column '{letter}'") from exc

    @classmethod
    def from_json(cls, path: Path, image_slots: int = 10) -> "ColumnMap":
        """Load a layout from JSON.

        Expected shape: ``{"fields": {"item": 3, ...}, "hidden_columns": [...],
        "image_base_column": 55}``; only ``fields`` is required.

        Raises:
            AssemblyError: if the file cannot be read or describes an invalid layout.
        """
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
            fields = tuple((str(name), int(column)) for name, column in raw["fields"].items())
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            raise AssemblyError(f"Invalid column map {path}: {exc}") from exc
        return cls(
            fields=fields,
            hidden_columns=tuple(raw.get("hidden_columns", DEFAULT_HIDDEN_COLUMNS)),
            image_base_column=int(raw.get("image_base_column", DEFAULT_IMAGE_BASE_COLUMN)),
            image_slots=image_slots,
        )

    def named_column(self, key: str) -> int | None:
        for name, column in self.fields:
            if name == key:
                return column
        return None

    def column_for(
        self, key: str, position: int, taken: Collection[int] = ()
    ) -> int | None:
        """Named column for ``key``, else the first free column from ``position`` on."""
        named = self.named_column(key)
        if named is not None:
            return named
        for _name, column in self.fields[max(position, 0):]:
            if column not in taken:
                return column
        return None

    def image_column(self, slot: int) -> int:
        return self.image_base_column + slot

    def image_columns(self) -> list[int]:
        return [self.image_column(slot) for slot in range(1, self.image_slots + 1)]
