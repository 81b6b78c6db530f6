"""
Pytest Configuration and Shared Fixtures

This module contains pytest configuration and shared fixtures used across
all test suites (unit, integration).

Fixtures:
    - history_slot: In-memory HistorySlotProtocol implementation
    - history_store: HistoryStore over the in-memory slot
    - import_client: Scriptable fake of the import backend client
    - channel_factory: Factory of fake processing channels (records every one)
    - confirmation_prompt: Scripted yes/no answers
    - orchestrator: UploadOrchestrator wired with all of the above
    - sample_workbook: Path to a generated .xlsx with two sheets
    - catalog_file: FileCandidate for a small .xlsx

Architecture Notes:
    - Fakes live here so unit tests of every layer share the same doubles
    - No network, Redis or file system access outside tmp_path

Usage:
    Tests automatically have access to these fixtures by name:

    @pytest.mark.asyncio
    async def test_something(orchestrator, catalog_file):
        assert await orchestrator.select_file(catalog_file)
"""

import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

import pytest
from openpyxl import Workbook

from src.application.ports import (
    ImportResponse,
    ImportResult,
    PreviewResult,
    SheetListResult,
    TransferProgressCallback,
)
from src.application.ports.processing_channel import ProcessingMessageCallback
from src.application.services import (
    FileGate,
    HistoryStore,
    PreviewService,
    SheetCatalog,
    UploadOrchestrator,
)
from src.domain.catalog_import.value_objects import (
    FileCandidate,
    ProcessingMessage,
    SelectedFile,
)
from src.domain.shared.exceptions import HistoryPersistenceError

# Configure logger for tests
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ============================================================================
# TEST DOUBLES
# ============================================================================


class InMemoryHistorySlot:
    """HistorySlotProtocol backed by a string attribute."""

    def __init__(self, document: Optional[str] = None) -> None:
        self.document = document
        self.writes = 0
        self.fail_writes = False
        self.fail_removes = False

    def read(self) -> Optional[str]:
        return self.document

    def write(self, document: str) -> None:
        if self.fail_writes:
            raise HistoryPersistenceError("disk full")
        self.writes += 1
        self.document = document

    def remove(self) -> None:
        if self.fail_removes:
            raise HistoryPersistenceError("read-only file system")
        self.document = None


class FakeImportClient:
    """
    Scriptable import backend.

    Attributes:
        sheets: Returned by list_sheets (or raised if an exception)
        preview_rows: Returned by preview (or raised if an exception)
        response: Returned by upload
        progress_steps: (sent, total) pairs reported during upload
        during_upload: Awaited while the upload is "in flight" (after the
            progress steps, before the response), e.g. to emit channel messages
    """

    def __init__(self) -> None:
        self.sheets: object = ["Products", "Prices"]
        self.preview_rows: object = [
            {"SKU": "A-100", "Name": "Valve", "Price": 12.5},
            {"SKU": "A-101", "Name": "Pipe", "Price": 3.2},
        ]
        self.response: ImportResponse = ImportResult(count=42)
        self.progress_steps: list[tuple[int, int]] = [(512, 1024), (1024, 1024)]
        self.during_upload: Optional[Callable[[], Awaitable[None]]] = None
        self.calls: list[tuple[str, str, Optional[str]]] = []

    async def list_sheets(self, file: SelectedFile) -> SheetListResult:
        self.calls.append(("list_sheets", file.name, None))
        if isinstance(self.sheets, Exception):
            raise self.sheets
        return SheetListResult(sheets=list(self.sheets))

    async def preview(self, file: SelectedFile, sheet_name: str) -> PreviewResult:
        self.calls.append(("preview", file.name, sheet_name))
        if isinstance(self.preview_rows, Exception):
            raise self.preview_rows
        return PreviewResult(preview=list(self.preview_rows))

    async def upload(
        self,
        file: SelectedFile,
        sheet_name: str,
        on_progress: Optional[TransferProgressCallback] = None,
    ) -> ImportResponse:
        self.calls.append(("upload", file.name, sheet_name))
        for sent, total in self.progress_steps:
            if on_progress is not None:
                on_progress(sent, total)
        if self.during_upload is not None:
            await self.during_upload()
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)


class FakeProcessingChannel:
    """Processing channel whose messages are pushed by the test."""

    def __init__(self) -> None:
        self.on_message: Optional[ProcessingMessageCallback] = None
        self.opened = False
        self.closed = False

    async def open(self, on_message: ProcessingMessageCallback) -> None:
        self.opened = True
        self.on_message = on_message

    async def close(self) -> None:
        self.closed = True

    def emit(self, step: str, progress: float) -> None:
        assert self.on_message is not None, "channel not opened"
        self.on_message(ProcessingMessage(step=step, progress=progress))


class RecordingChannelFactory:
    """Creates a new FakeProcessingChannel per call and keeps them all."""

    def __init__(self) -> None:
        self.channels: list[FakeProcessingChannel] = []

    def __call__(self) -> FakeProcessingChannel:
        channel = FakeProcessingChannel()
        self.channels.append(channel)
        return channel

    @property
    def last(self) -> FakeProcessingChannel:
        return self.channels[-1]


class ScriptedConfirmation:
    """Answers confirmations from a list, recording every question."""

    def __init__(self, *answers: bool) -> None:
        self.answers = list(answers)
        self.messages: list[str] = []

    async def confirm(self, message: str) -> bool:
        self.messages.append(message)
        return self.answers.pop(0) if self.answers else False


# ============================================================================
# APPLICATION FIXTURES
# ============================================================================


@pytest.fixture
def history_slot() -> InMemoryHistorySlot:
    return InMemoryHistorySlot()


@pytest.fixture
def history_store(history_slot) -> HistoryStore:
    store = HistoryStore(history_slot)
    store.load()
    return store


@pytest.fixture
def import_client() -> FakeImportClient:
    return FakeImportClient()


@pytest.fixture
def channel_factory() -> RecordingChannelFactory:
    return RecordingChannelFactory()


@pytest.fixture
def confirmation_prompt() -> ScriptedConfirmation:
    return ScriptedConfirmation()


@pytest.fixture
def orchestrator(
    history_store, import_client, channel_factory, confirmation_prompt
) -> UploadOrchestrator:
    """UploadOrchestrator wired with fakes (default FileGate limits)."""
    return UploadOrchestrator(
        file_gate=FileGate(allowed_extensions=[".xlsx", ".xls"], max_size_mb=10),
        sheet_catalog=SheetCatalog(import_client),
        preview_service=PreviewService(import_client),
        history_store=history_store,
        import_client=import_client,
        channel_factory=channel_factory,
        confirmation_prompt=confirmation_prompt,
    )


# ============================================================================
# FILE FIXTURES
# ============================================================================


@pytest.fixture
def catalog_file() -> FileCandidate:
    """Small candidate named catalog.xlsx (content is not parsed by fakes)."""
    return FileCandidate(name="catalog.xlsx", content=b"PK\x03\x04 fake workbook")


@pytest.fixture
def sample_workbook(tmp_path: Path) -> Path:
    """
    Generate a real .xlsx workbook with two sheets.

    Sheets:
        Products: header (SKU, Name, Price) + 3 rows
        Prices: header (SKU, Net, Gross) + 2 rows
    """
    workbook = Workbook()
    products = workbook.active
    products.title = "Products"
    products.append(["SKU", "Name", "Price"])
    products.append(["A-100", "Ball valve DN50", 12.5])
    products.append(["A-101", "Steel pipe DN100", 3.2])
    products.append(["A-102", "Elbow 90", 1.75])

    prices = workbook.create_sheet("Prices")
    prices.append(["SKU", "Net", "Gross"])
    prices.append(["A-100", 10.0, 12.3])
    prices.append(["A-101", 2.6, 3.2])

    path = tmp_path / "catalog.xlsx"
    workbook.save(path)
    logger.info(f"Sample workbook generated: {path}")
    return path


# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================


def pytest_configure(config):
    """
    Configure pytest with custom markers.

    Markers:
        - unit: Unit tests (fast, isolated)
        - integration: Integration tests (in-process fake backend)
        - slow: Slow tests (> 1s)
    """
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line(
        "markers", "integration: Integration tests (in-process fake backend)"
    )
    config.addinivalue_line("markers", "slow: Slow tests (> 1s)")

