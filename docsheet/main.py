import argparse
import json
import sys
from pathlib import Path

from docsheet.config.settings import Settings
from docsheet.extraction.exceptions import UnsupportedFormatError
from docsheet.extraction.models import SourceDocument
from docsheet.logging.logger import Log
from docsheet.processor.pipeline import BatchContext
from docsheet.processor.processor import build_processor
from docsheet.processor.upload_stager import UploadStager
from docsheet.session.context import SessionContext, generate_session_name


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="docsheet",
        description="Extract images and data from documents into a project spreadsheet.",
    )
    parser.add_argument("files", nargs="+", type=Path, help="PDF, DOCX or XLSX files")
    parser.add_argument("--project", required=True, help="Project name written to the sheet")
    parser.add_argument("--session", help="Session name; generated from the project if omitted")
    parser.add_argument("--template", type=Path, help="Template workbook for this batch")
    return parser.parse_args(argv)


def stage_documents(
    session: SessionContext, files: list[Path], stager: UploadStager
) -> list[SourceDocument]:
    documents: list[SourceDocument] = []
    for path in files:
        try:
            documents.append(stager.stage(session, path))
        except (FileNotFoundError, UnsupportedFormatError) as exc:
            Log.error(f"Skipping {path}: {exc}", session=session.name)
    return documents


def main(argv: list[str] | None = None) -> int:
    """Entry point: stage uploads -> run the batch -> print the report as JSON."""
    args = parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    session = SessionContext.open(
        settings.sessions_root, args.session or generate_session_name(args.project)
    )
    documents = stage_documents(session, args.files, UploadStager())
    if not documents:
        Log.error("No supported documents to process", session=session.name)
        return 1

    processor = build_processor(settings)
    try:
        result = processor.process(
            BatchContext(
                session=session,
                project_name=args.project,
                documents=documents,
                template_path=args.template,
            )
        )
    finally:
        processor.close()

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0 if result.succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
