from functools import partial

from docsheet.analysis.factory import AnalysisClientFactory
from docsheet.analysis.job import AnalysisJob, JobConfig
from docsheet.analysis.orchestrator import AnalysisOrchestrator
from docsheet.analysis.prompt_loader import load_prompt
from docsheet.analysis.release import ResourceReleaser
from docsheet.config.settings import Settings
from docsheet.extraction.archive_extractor import ArchiveImageExtractor
from docsheet.extraction.extractor import DocumentImageExtractor
from docsheet.extraction.page_extractor import PageImageExtractor
from docsheet.logging.logger import Log
from docsheet.pdf.factory import PdfImageDecoderFactory
from docsheet.processor.pipeline import BatchContext, BatchResult, PipelineStep
from docsheet.processor.steps import (
    AnalyzeDocumentsStep,
    AssembleSpreadsheetStep,
    EmbedImagesStep,
    ReportBatchFailureStep,
)
from docsheet.spreadsheet.assembler import SpreadsheetAssembler
from docsheet.spreadsheet.column_map import ColumnMap
from docsheet.spreadsheet.exceptions import AssemblyError, TemplateLoadError
from docsheet.spreadsheet.html_converter import SpreadsheetHtmlConverter
from docsheet.spreadsheet.reembedder import ImageReembedder


class Processor:
    """Runs a batch through its pipeline steps.

    Pipeline: analyse documents -> assemble spreadsheet -> embed images.
    A template or assembly failure ends the batch without a deliverable; the
    per-document results are still returned.
    """

    def __init__(
        self,
        steps: list[PipelineStep],
        failed_step: PipelineStep,
        releaser: ResourceReleaser | None = None,
    ) -> None:
        self._steps = steps
        self._failed_step = failed_step
        self._releaser = releaser

    def process(self, context: BatchContext) -> BatchResult:
        Log.info(
            f"Processing {len(context.documents)} documents for project "
            f"'{context.project_name}'",
            session=context.session.name,
        )
        try:
            for step in self._steps:
                context = step.run(context)
        except (TemplateLoadError, AssemblyError) as exc:
            context.error_message = str(exc)
            context.output_path = None
            self._failed_step.run(context)
            return BatchResult.from_context(context)

        Log.info(
            f"Batch complete: {context.output_path} ({context.embedded_images} images embedded)",
            session=context.session.name,
        )
        return BatchResult.from_context(context)

    def close(self) -> None:
        """Wait for pending provider clean-up to finish."""
        if self._releaser is not None:
            self._releaser.close()


def build_column_map(settings: Settings) -> ColumnMap:
    if settings.column_map_path is not None:
        return ColumnMap.from_json(settings.column_map_path, settings.max_images_per_item)
    return ColumnMap(image_slots=settings.max_images_per_item)


def build_processor(settings: Settings) -> Processor:
    """Build a Processor with all required adapters."""
    client = AnalysisClientFactory.create(settings)
    releaser = ResourceReleaser(client)
    job_config = JobConfig(
        assistant_id=settings.openai_assistant_id,
        prompt=load_prompt(settings.analysis_prompt_path),
        poll_interval_seconds=settings.analysis_poll_interval_seconds,
        timeout_seconds=settings.analysis_timeout_seconds,
        max_images_per_item=settings.max_images_per_item,
        prompt_cost_per_million=settings.prompt_cost_per_million,
        completion_cost_per_million=settings.completion_cost_per_million,
    )
    job_factory = partial(
        AnalysisJob,
        client=client,
        config=job_config,
        releaser=releaser,
        converter=SpreadsheetHtmlConverter(),
    )
    extractor = DocumentImageExtractor(
        archive_extractor=ArchiveImageExtractor(),
        page_extractor=PageImageExtractor(PdfImageDecoderFactory.create(settings)),
    )
    orchestrator = AnalysisOrchestrator(
        extractor=extractor,
        job_factory=job_factory,
        max_workers=settings.max_concurrent_documents,
    )
    assembler = SpreadsheetAssembler(
        column_map=build_column_map(settings),
        default_template_path=settings.default_template_path,
        header_cell=settings.project_header_cell,
    )
    reembedder = ImageReembedder(
        image_size=settings.embedded_image_size,
        row_height=settings.embedded_row_height,
        column_width=settings.embedded_column_width,
    )
    steps: list[PipelineStep] = [
        AnalyzeDocumentsStep(orchestrator),
        AssembleSpreadsheetStep(assembler),
        EmbedImagesStep(reembedder),
    ]
    return Processor(steps=steps, failed_step=ReportBatchFailureStep(), releaser=releaser)
