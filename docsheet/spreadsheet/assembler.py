import json
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import Cell
from openpyxl.worksheet.worksheet import Worksheet

from docsheet.analysis.models import AnalysisResult, RowData
from docsheet.logging.logger import Log
from docsheet.session.context import SessionContext
from docsheet.session.naming import sanitize_name
from docsheet.spreadsheet.column_map import ColumnMap, image_slot_number
from docsheet.spreadsheet.exceptions import AssemblyError, TemplateLoadError

MAX_WORKSHEET_ROWS = 1_048_576


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def is_formula(cell: Cell) -> bool:
    return cell.data_type == "f"


def find_start_row(worksheet: Worksheet) -> int:
    """First row whose cells are all empty or formulas; after the data otherwise."""
    for row in worksheet.iter_rows(min_row=1, max_row=worksheet.max_row):
        if all(cell.value is None or is_formula(cell) for cell in row):
            return row[0].row
    return worksheet.max_row + 1


def _literal(value: object) -> object:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return json.dumps(value, ensure_ascii=False)


class SpreadsheetAssembler:
    """Writes analysis rows into a copy of the template workbook.

    Rows land from the first empty row down, one per row-data object, in
    result order. Columns that carry a formula keep the formula from the row
    above instead of taking the literal value.
    """

    def __init__(
        self,
        column_map: ColumnMap,
        default_template_path: Path,
        header_cell: str = "H1",
        clock: Callable[[], int] = _epoch_millis,
    ) -> None:
        self._column_map = column_map
        self._default_template_path = Path(default_template_path)
        self._header_cell = header_cell
        self._clock = clock

    def assemble(
        self,
        session: SessionContext,
        results: Sequence[AnalysisResult],
        project_name: str,
        template_path: Path | None = None,
    ) -> Path:
        """Build ``<project>-<epochMillis>.xlsx`` in the session output directory.

        Raises:
            TemplateLoadError: if the template workbook cannot be opened.
            AssemblyError: if there are no rows or they do not fit the sheet.
        """
        template = self._resolve_template(session, template_path)
        workbook = self._load_template(template)
        worksheet = workbook.worksheets[0]

        try:
            worksheet[self._header_cell] = project_name
        except (ValueError, KeyError) as exc:
            raise AssemblyError(f"Invalid header cell '{self._header_cell}'") from exc

        rows = [row for result in results if result.succeeded for row in result.rows]
        if not rows:
            raise AssemblyError("No analysed rows to write")

        start_row = find_start_row(worksheet)
        last_row = start_row + len(rows) - 1
        if last_row > MAX_WORKSHEET_ROWS:
            raise AssemblyError(
                f"Template has no room for {len(rows)} rows from row {start_row}"
            )
        Log.info(
            f"Writing {len(rows)} rows from row {start_row} using {template.name}",
            session=session.name,
        )

        formula_columns = {
            column
            for _name, column in self._column_map.fields
            if is_formula(worksheet.cell(row=start_row, column=column))
        }
        for offset, row_data in enumerate(rows):
            self._write_row(worksheet, start_row + offset, row_data, formula_columns)

        for letter in self._column_map.hidden_columns:
            worksheet.column_dimensions[letter].hidden = True

        output_path = self._save(workbook, session, project_name)
        Log.info(f"Spreadsheet written to {output_path}", session=session.name)
        return output_path

    def _resolve_template(self, session: SessionContext, template_path: Path | None) -> Path:
        if template_path is not None:
            return Path(template_path)
        override = session.template_override()
        if override is not None:
            Log.info(f"Using session template {override.name}", session=session.name)
            return override
        return self._default_template_path

    @staticmethod
    def _load_template(template: Path) -> Workbook:
        if not template.is_file():
            raise TemplateLoadError(f"Template workbook not found: {template}")
        try:
            return load_workbook(template)
        except Exception as exc:
            raise TemplateLoadError(f"Cannot open template {template}: {exc}") from exc

    def _write_row(
        self,
        worksheet: Worksheet,
        row_index: int,
        row_data: RowData,
        formula_columns: set[int],
    ) -> None:
        # Named fields claim their columns before any positional placement.
        taken: set[int] = set()
        for key in row_data:
            if image_slot_number(key) is None:
                named = self._column_map.named_column(key)
                if named is not None:
                    taken.add(named)

        position = 0
        for key, value in row_data.items():
            slot = image_slot_number(key)
            if slot is not None:
                self._write_image_slot(worksheet, row_index, slot, value)
                continue

            column = self._column_map.column_for(key, position, taken)
            position += 1
            if column is None:
                Log.warning(f"No free column for field '{key}' in row {row_index}; skipped")
                continue
            taken.add(column)

            cell = worksheet.cell(row=row_index, column=column)
            if is_formula(cell) or column in formula_columns:
                if row_index > 1:
                    above = worksheet.cell(row=row_index - 1, column=column)
                    if is_formula(above):
                        cell.value = above.value
                continue

            cell.value = _literal(value)
            if is_formula(cell):
                cell.data_type = "s"

    def _write_image_slot(
        self, worksheet: Worksheet, row_index: int, slot: int, value: object
    ) -> None:
        if not isinstance(value, str) or not value:
            return
        if slot > self._column_map.image_slots:
            Log.warning(f"Image slot {slot} exceeds the template's slots; skipped")
            return
        column = self._column_map.image_column(slot)
        worksheet.cell(row=row_index, column=column).value = Path(value).name

    def _save(self, workbook: Workbook, session: SessionContext, project_name: str) -> Path:
        session.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = session.output_dir / f"{sanitize_name(project_name)}-{self._clock()}.xlsx"
        try:
            workbook.save(output_path)
        except OSError as exc:
            raise AssemblyError(f"Cannot save workbook {output_path}: {exc}") from exc
        return output_path
