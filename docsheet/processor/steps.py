from docsheet.analysis.orchestrator import AnalysisOrchestrator
from docsheet.logging.logger import Log
from docsheet.processor.pipeline import BatchContext, PipelineStep
from docsheet.spreadsheet.assembler import SpreadsheetAssembler
from docsheet.spreadsheet.exceptions import ImageEmbedError
from docsheet.spreadsheet.reembedder import ImageReembedder


class AnalyzeDocumentsStep(PipelineStep):
    def __init__(self, orchestrator: AnalysisOrchestrator) -> None:
        self._orchestrator = orchestrator

    def run(self, context: BatchContext) -> BatchContext:
        context.results = self._orchestrator.run(context.session, context.documents)
        return context


class AssembleSpreadsheetStep(PipelineStep):
    def __init__(self, assembler: SpreadsheetAssembler) -> None:
        self._assembler = assembler

    def run(self, context: BatchContext) -> BatchContext:
        context.output_path = self._assembler.assemble(
            context.session,
            context.results,
            context.project_name,
            template_path=context.template_path,
        )
        return context


class EmbedImagesStep(PipelineStep):
    """Embeds extracted images into the deliverable; failures keep it as is."""

    def __init__(self, reembedder: ImageReembedder) -> None:
        self._reembedder = reembedder

    def run(self, context: BatchContext) -> BatchContext:
        if context.output_path is None:
            raise ValueError("BatchContext.output_path must be set before embedding images")
        try:
            context.embedded_images = self._reembedder.embed(
                context.output_path, context.session.images_dir
            )
        except ImageEmbedError as exc:
            Log.error(
                f"Image embedding failed, keeping text references: {exc}",
                session=context.session.name,
            )
        return context


class ReportBatchFailureStep(PipelineStep):
    def run(self, context: BatchContext) -> BatchContext:
        Log.error(
            f"Batch for project '{context.project_name}' produced no spreadsheet: "
            f"{context.error_message}",
            session=context.session.name,
        )
        return context
