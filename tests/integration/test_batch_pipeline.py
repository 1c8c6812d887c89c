from collections.abc import Callable
from pathlib import Path

import pytest
from openpyxl import Workbook, load_workbook

from docsheet.extraction.models import SourceDocument
from docsheet.processor.pipeline import BatchContext
from docsheet.processor.processor import Processor
from docsheet.processor.upload_stager import UploadStager
from docsheet.session.context import SessionContext
from tests.documents import PALETTE, make_pdf_with_images, make_png, write_office_archive
from tests.fakes import ScriptedAnalysisClient

pytestmark = pytest.mark.integration

ProcessorFactory = Callable[..., Processor]


def _stage(session: SessionContext, files: list[Path]) -> list[SourceDocument]:
    stager = UploadStager()
    return [stager.stage(session, path) for path in files]


class TestTwoDocumentBatch:
    def test_rows_images_and_embedding(
        self,
        session: SessionContext,
        tmp_path: Path,
        processor_factory: ProcessorFactory,
    ) -> None:
        doc_a = write_office_archive(
            tmp_path / "A.docx",
            {f"image{n}.png": make_png(PALETTE[n]) for n in range(3)},
        )
        doc_b = write_office_archive(tmp_path / "B.docx", {})
        client = ScriptedAnalysisClient(
            {
                "A.docx": [{"item": "A1", "quantity": 2}, {"item": "A2", "quantity": 5}],
                "B.docx": [{"item": "B1", "quantity": 1}],
            }
        )
        processor = processor_factory(client)
        documents = _stage(session, [doc_a, doc_b])

        try:
            result = processor.process(
                BatchContext(session=session, project_name="Acme Bid", documents=documents)
            )
        finally:
            processor.close()

        assert result.succeeded
        assert [r.source_filename for r in result.results] == ["A.docx", "B.docx"]
        assert len(result.results[0].images) == 3
        assert result.results[1].images == []

        workbook = load_workbook(result.output_path)
        worksheet = workbook.worksheets[0]
        assert worksheet["H1"].value == "Acme Bid"
        assert [worksheet.cell(row=r, column=3).value for r in (3, 4, 5)] == ["A1", "A2", "B1"]
        assert worksheet.cell(row=6, column=3).value is None
        assert len(worksheet._images) == 3
        for column in (56, 57, 58):
            assert worksheet.cell(row=3, column=column).value is None
        assert worksheet.row_dimensions[3].height == 100
        for letter in ("BD", "BE", "BF"):
            assert worksheet.column_dimensions[letter].width == 30
        assert worksheet.cell(row=4, column=56).value is None

    def test_resources_released_and_uploads_removed(
        self,
        session: SessionContext,
        tmp_path: Path,
        processor_factory: ProcessorFactory,
    ) -> None:
        doc = write_office_archive(tmp_path / "A.docx", {"image1.png": make_png()})
        client = ScriptedAnalysisClient({"A.docx": [{"item": "A1"}]})
        processor = processor_factory(client)
        documents = _stage(session, [doc])

        processor.process(BatchContext(session=session, project_name="P", documents=documents))
        processor.close()

        assert len(client.deleted_files) == 1
        assert len(client.deleted_threads) == 1
        assert list(session.uploads_dir.iterdir()) == []
        assert list(session.temp_dir.iterdir()) == []

    def test_pdf_and_spreadsheet_sources(
        self,
        session: SessionContext,
        tmp_path: Path,
        processor_factory: ProcessorFactory,
    ) -> None:
        pdf = tmp_path / "catalog.pdf"
        pdf.write_bytes(make_pdf_with_images([1, 1]))
        prices = tmp_path / "prices.xlsx"
        workbook = Workbook()
        workbook.active.append(["Pump", 12.5])
        workbook.save(prices)
        client = ScriptedAnalysisClient(
            {
                "catalog.pdf": [{"item": "P1"}],
                "prices.html": {"item": "X1", "unitPrice": 12.5},
            }
        )
        processor = processor_factory(client)
        documents = _stage(session, [pdf, prices])

        try:
            result = processor.process(
                BatchContext(session=session, project_name="P", documents=documents)
            )
        finally:
            processor.close()

        assert [r.succeeded for r in result.results] == [True, True]
        assert [image.locator for image in result.results[0].images] == ["page1", "page2"]
        worksheet = load_workbook(result.output_path).worksheets[0]
        assert worksheet["C3"].value == "P1"
        assert worksheet["C4"].value == "X1"
        assert worksheet["I4"].value == 12.5
        assert len(worksheet._images) == 2


class TestTimeoutScenario:
    def test_stuck_run_fails_alone(
        self,
        session: SessionContext,
        tmp_path: Path,
        processor_factory: ProcessorFactory,
    ) -> None:
        stuck = write_office_archive(tmp_path / "slow.docx", {"image1.png": make_png()})
        fine = write_office_archive(tmp_path / "fine.docx", {})
        client = ScriptedAnalysisClient(
            {"slow.docx": [{"item": "S1"}], "fine.docx": [{"item": "F1"}]},
            stuck=frozenset({"slow.docx"}),
        )
        processor = processor_factory(client, timeout_seconds=5.0)
        documents = _stage(session, [stuck, fine])

        try:
            result = processor.process(
                BatchContext(session=session, project_name="P", documents=documents)
            )
        finally:
            processor.close()

        slow, ok = result.results
        assert slow.error_type == "AnalysisTimeoutError"
        assert len(slow.images) == 1
        assert ok.succeeded
        worksheet = load_workbook(result.output_path).worksheets[0]
        assert worksheet["C3"].value == "F1"
        assert worksheet["C4"].value is None
        assert len(client.deleted_threads) == 2

    def test_all_runs_time_out_means_no_deliverable(
        self,
        session: SessionContext,
        tmp_path: Path,
        processor_factory: ProcessorFactory,
    ) -> None:
        stuck = write_office_archive(tmp_path / "slow.docx", {})
        client = ScriptedAnalysisClient(
            {"slow.docx": [{"item": "S1"}]}, stuck=frozenset({"slow.docx"})
        )
        processor = processor_factory(client, timeout_seconds=3.0)
        documents = _stage(session, [stuck])

        try:
            result = processor.process(
                BatchContext(session=session, project_name="P", documents=documents)
            )
        finally:
            processor.close()

        assert not result.succeeded
        assert result.error == "No analysed rows to write"
        assert result.results[0].error_type == "AnalysisTimeoutError"
        assert list(session.output_dir.iterdir()) == []
