"""
Terminal rendering of the upload session, preview and history.
"""

from typing import Callable, Iterable, Optional

from src.application.services.upload_session import UploadSession
from src.domain.catalog_import.entities import HistoryEntry
from src.domain.catalog_import.value_objects import PreviewDataset

MAX_CELL_WIDTH = 24


class ProgressPrinter:
    """
    Display listener printing the two progress signals side by side.

    A line is written only when the transfer percentage or the processing
    step/percentage changed since the last line.
    """

    def __init__(self, output: Callable[[str], None] = print) -> None:
        self._output = output
        self._last: Optional[tuple[int, str, float]] = None

    def __call__(self, session: UploadSession) -> None:
        transfer = session.transfer_progress.percent
        processing = session.processing_progress
        current = (transfer, processing.step_label, processing.percent_complete)
        if current == self._last or current == (0, "", 0.0):
            return
        self._last = current

        line = f"Upload {transfer:3d}%"
        if processing.step_label:
            line += (
                f" | Processing: {processing.step_label} "
                f"({processing.percent_complete:g}%)"
            )
        self._output(line)


def _cell(value: object) -> str:
    text = "" if value is None else str(value)
    if len(text) > MAX_CELL_WIDTH:
        return text[: MAX_CELL_WIDTH - 1] + "~"
    return text


def format_preview(dataset: PreviewDataset, limit: Optional[int] = None) -> str:
    """Render preview rows as a plain text table (header from the first row)."""
    if dataset.is_empty:
        return "(no rows)"

    rows = dataset.rows if limit is None else dataset.rows[:limit]
    table = [[_cell(column) for column in dataset.columns]]
    table += [[_cell(row.get(column)) for column in dataset.columns] for row in rows]
    widths = [max(len(line[i]) for line in table) for i in range(len(dataset.columns))]

    lines = [
        "  ".join(cell.ljust(width) for cell, width in zip(line, widths)).rstrip()
        for line in table
    ]
    lines.insert(1, "  ".join("-" * width for width in widths))
    if len(rows) < len(dataset):
        lines.append(f"... {len(dataset) - len(rows)} more row(s)")
    return "\n".join(lines)


def format_history(entries: Iterable[HistoryEntry]) -> str:
    """One line per entry, most recent first."""
    lines = [
        f"{entry.timestamp:%Y-%m-%d %H:%M:%S}  {entry.outcome.value:<7}  "
        f"{entry.records_imported:>6}  {entry.file_name} / {entry.sheet_name}"
        for entry in entries
    ]
    return "\n".join(lines) if lines else "(history is empty)"
