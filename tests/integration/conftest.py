from collections.abc import Callable
from functools import partial
from pathlib import Path

import pytest

from docsheet.analysis.client_base import BaseAnalysisClient
from docsheet.analysis.job import AnalysisJob, JobConfig
from docsheet.analysis.orchestrator import AnalysisOrchestrator
from docsheet.analysis.release import ResourceReleaser
from docsheet.extraction.archive_extractor import ArchiveImageExtractor
from docsheet.extraction.extractor import DocumentImageExtractor
from docsheet.extraction.page_extractor import PageImageExtractor
from docsheet.pdf.pymupdf_adapter import PyMuPdfImageDecoder
from docsheet.processor.processor import Processor
from docsheet.processor.steps import (
    AnalyzeDocumentsStep,
    AssembleSpreadsheetStep,
    EmbedImagesStep,
    ReportBatchFailureStep,
)
from docsheet.spreadsheet.assembler import SpreadsheetAssembler
from docsheet.spreadsheet.column_map import ColumnMap
from docsheet.spreadsheet.html_converter import SpreadsheetHtmlConverter
from docsheet.spreadsheet.reembedder import ImageReembedder
from tests.fakes import SteppingClock


def build_test_processor(
    client: BaseAnalysisClient,
    template_path: Path,
    timeout_seconds: float = 300.0,
) -> Processor:
    """Wire the real pipeline around ``client``; every job gets its own fake clock."""
    releaser = ResourceReleaser(client)
    config = JobConfig(
        assistant_id="asst-test",
        prompt="Please analyze this document.",
        poll_interval_seconds=1.0,
        timeout_seconds=timeout_seconds,
    )

    def job_factory() -> AnalysisJob:
        clock = SteppingClock()
        return AnalysisJob(
            client=client,
            config=config,
            releaser=releaser,
            converter=SpreadsheetHtmlConverter(),
            sleep=clock.sleep,
            clock=clock,
        )

    orchestrator = AnalysisOrchestrator(
        extractor=DocumentImageExtractor(
            ArchiveImageExtractor(), PageImageExtractor(PyMuPdfImageDecoder())
        ),
        job_factory=job_factory,
        max_workers=4,
    )
    assembler = SpreadsheetAssembler(
        column_map=ColumnMap(),
        default_template_path=template_path,
        clock=lambda: 1700000000000,
    )
    steps = [
        AnalyzeDocumentsStep(orchestrator),
        AssembleSpreadsheetStep(assembler),
        EmbedImagesStep(ImageReembedder()),
    ]
    return Processor(steps=steps, failed_step=ReportBatchFailureStep(), releaser=releaser)


@pytest.fixture()
def processor_factory(template_path: Path) -> Callable[..., Processor]:
    return partial(build_test_processor, template_path=template_path)
