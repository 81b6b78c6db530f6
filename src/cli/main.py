"""
catalog-import - command line front end for spreadsheet catalog imports.

Usage:
    catalog-import sheets catalog.xlsx
    catalog-import preview catalog.xlsx --sheet Products --limit 20
    catalog-import import catalog.xlsx --sheet Products
    catalog-import history
    catalog-import history --clear --yes

Configuration:
    Read from environment variables (a .env file in the working directory is
    loaded first): IMPORT_API_URL, PROCESSING_CHANNEL_URL, HISTORY_BACKEND,
    HISTORY_FILE, MAX_FILE_SIZE_MB, LOG_LEVEL, ...

Exit codes:
    0 - success
    1 - validation, selection, transport or import error
    2 - cancelled by the operator
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from src.application.models import UploadState
from src.application.services import UploadOrchestrator
from src.cli.dependencies import build_orchestrator
from src.cli.display import ProgressPrinter, format_history, format_preview
from src.domain.catalog_import.value_objects import FileCandidate
from src.infrastructure.persistence.redis import close_connections

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 2


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="catalog-import",
        description="Import a product catalog from an Excel workbook",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List the sheets of a workbook
  catalog-import sheets catalog.xlsx

  # Show the first rows of a sheet
  catalog-import preview catalog.xlsx --sheet Products --limit 20

  # Import a sheet, confirming a re-import without asking
  catalog-import import catalog.xlsx --sheet Products --yes

  # Show or clear the local import history
  catalog-import history
  catalog-import history --clear
        """,
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sheets = subparsers.add_parser("sheets", help="List the sheets of a workbook")
    sheets.add_argument("file", type=Path, help="Path to the .xlsx/.xls file")

    preview = subparsers.add_parser("preview", help="Preview the rows of a sheet")
    preview.add_argument("file", type=Path, help="Path to the .xlsx/.xls file")
    preview.add_argument("--sheet", required=True, help="Sheet name")
    preview.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Show at most N rows (default: all rows returned by the backend)",
    )

    upload = subparsers.add_parser("import", help="Import a sheet into the catalog")
    upload.add_argument("file", type=Path, help="Path to the .xlsx/.xls file")
    upload.add_argument("--sheet", required=True, help="Sheet name")
    upload.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Re-import without asking when the file/sheet was already imported",
    )

    history = subparsers.add_parser("history", help="Show the local import history")
    history.add_argument(
        "--clear", action="store_true", help="Clear the import history"
    )
    history.add_argument(
        "--yes", "-y", action="store_true", help="Clear without asking"
    )

    return parser.parse_args(argv)


def _read_candidate(path: Path) -> Optional[FileCandidate]:
    try:
        return FileCandidate.from_path(path)
    except OSError as e:
        print(f"Cannot read {path}: {e}", file=sys.stderr)
        return None


def _report_error(orchestrator: UploadOrchestrator) -> int:
    message = orchestrator.session.error_message or "Unexpected error."
    print(message, file=sys.stderr)
    return EXIT_ERROR


async def _select(orchestrator: UploadOrchestrator, path: Path) -> bool:
    candidate = _read_candidate(path)
    if candidate is None:
        return False
    await orchestrator.select_file(candidate)
    return orchestrator.state == UploadState.SHEETS_LISTED


async def run_sheets(orchestrator: UploadOrchestrator, args: argparse.Namespace) -> int:
    if not await _select(orchestrator, args.file):
        return _report_error(orchestrator)
    for name in orchestrator.session.sheets:
        print(name)
    return EXIT_OK


async def run_preview(
    orchestrator: UploadOrchestrator, args: argparse.Namespace
) -> int:
    if not await _select(orchestrator, args.file):
        return _report_error(orchestrator)
    if not orchestrator.choose_sheet(args.sheet):
        return _report_error(orchestrator)

    dataset = await orchestrator.preview()
    if dataset is None:
        return _report_error(orchestrator)

    if orchestrator.session.duplicate_warning:
        print(f"Warning: {orchestrator.session.duplicate_warning}")
    print(format_preview(dataset, limit=args.limit))
    return EXIT_OK


async def run_import(orchestrator: UploadOrchestrator, args: argparse.Namespace) -> int:
    if not await _select(orchestrator, args.file):
        return _report_error(orchestrator)
    if not orchestrator.choose_sheet(args.sheet):
        return _report_error(orchestrator)

    warning = orchestrator.refresh_duplicate_warning()
    if warning:
        print(f"Warning: {warning}")

    orchestrator.add_display_listener(ProgressPrinter())
    orchestrator.add_catalog_listener(
        lambda entry: logger.info(f"Catalog changed: {entry.records_imported} records")
    )

    entry = await orchestrator.start_upload()
    if entry is None:
        print(orchestrator.session.error_message, file=sys.stderr)
        return EXIT_CANCELLED
    if not entry.is_success:
        return _report_error(orchestrator)

    print(f"{entry.records_imported} records imported.")
    return EXIT_OK


async def run_history(
    orchestrator: UploadOrchestrator, args: argparse.Namespace
) -> int:
    if not args.clear:
        print(format_history(orchestrator.history))
        return EXIT_OK

    if not await orchestrator.clear_history():
        if orchestrator.session.error_message:
            print(f"Error: {orchestrator.session.error_message}", file=sys.stderr)
            return EXIT_ERROR
        print("History not cleared.")
        return EXIT_CANCELLED
    print("History cleared.")
    return EXIT_OK


COMMANDS = {
    "sheets": run_sheets,
    "preview": run_preview,
    "import": run_import,
    "history": run_history,
}


async def run(
    args: argparse.Namespace, orchestrator: Optional[UploadOrchestrator] = None
) -> int:
    if orchestrator is None:
        # Restoring history may block on Redis retries
        orchestrator = await asyncio.to_thread(
            build_orchestrator, assume_yes=getattr(args, "yes", False)
        )
    return await COMMANDS[args.command](orchestrator, args)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)

    level = "DEBUG" if args.verbose else os.getenv("LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return EXIT_CANCELLED
    finally:
        close_connections()


if __name__ == "__main__":
    sys.exit(main())
