"""
Upload Orchestrator

State machine owning the whole import workflow of one operator session.

Responsibility:
    - Drive FileGate -> SheetCatalog -> PreviewService for the selected file
    - Gate uploads on the duplicate-detection policy (interactive confirmation)
    - Run the upload request and the processing channel side by side
    - Commit exactly one HistoryEntry per terminal upload response
    - Notify display listeners and catalog listeners

Architecture Notes:
    - Part of Application Layer (Services)
    - Single-threaded asyncio; no locks needed
    - Two event sources feed the session:
        * byte progress of the upload request (transfer_progress)
        * processing channel messages (processing_progress)
      Only the upload request's terminal response changes UploadState;
      channel messages only update display fields
    - A fresh processing channel is opened for every attempt and always
      closed when the attempt ends (success, error or exception)
    - History storage calls run in a worker thread (asyncio.to_thread); the
      loop only awaits them, so the store is never touched concurrently

Process Flow (start_upload):
    1. Reject if busy (UploadInProgressError) or selection incomplete
    2. Duplicate? -> CONFIRMING, await prompt; cancel restores previous state
    3. Reset both progress signals and the previous outcome -> UPLOADING
    4. Open processing channel, issue upload request with byte progress
    5. ImportResult -> COMPLETED_SUCCESS, HistoryEntry{SUCCESS, count}, 100%
       ImportFailure -> COMPLETED_ERROR, HistoryEntry{ERROR, 0}, message
    6. Close processing channel
"""

import asyncio
import logging
from typing import Callable, Optional

from src.application.models import UploadState
from src.application.ports.catalog_import_client import (
    CatalogImportClientProtocol,
    ImportResponse,
    ImportResult,
)
from src.application.ports.confirmation import ConfirmationPromptProtocol
from src.application.ports.processing_channel import (
    ProcessingChannelFactory,
    ProcessingChannelProtocol,
)
from src.application.services.file_gate import FileGate
from src.application.services.history_store import HistoryStore
from src.application.services.preview_service import PreviewService
from src.application.services.sheet_catalog import SheetCatalog
from src.application.services.upload_session import UploadSession
from src.domain.catalog_import.constants import (
    MSG_CLEAR_HISTORY_CONFIRM,
    MSG_CLEAR_HISTORY_FAILED,
    MSG_DUPLICATE_CANCELLED,
    MSG_DUPLICATE_CONFIRM,
    MSG_DUPLICATE_WARNING,
    MSG_NO_FILE_SELECTED,
    MSG_PREVIEW_FAILED,
    MSG_SHEET_REQUIRED,
    MSG_SHEETS_FAILED,
    MSG_UNKNOWN_SHEET,
    MSG_UPLOAD_FAILED,
)
from src.domain.catalog_import.entities import HistoryEntry
from src.domain.catalog_import.value_objects import (
    FileCandidate,
    PreviewDataset,
    ProcessingMessage,
    SelectedFile,
    TransferProgress,
)
from src.domain.shared.exceptions import (
    HistoryPersistenceError,
    SelectionError,
    TransportError,
    UploadInProgressError,
    ValidationError,
)

logger = logging.getLogger(__name__)

DisplayListener = Callable[[UploadSession], None]
CatalogListener = Callable[[HistoryEntry], None]


class UploadOrchestrator:
    """
    Upload lifecycle state machine.

    User-recoverable failures (ValidationError, SelectionError,
    TransportError) never escape: they end up in ``session.error_message``.
    UploadInProgressError does escape, it signals a caller bug (changing the
    session while an upload is running).

    Examples:
        >>> orchestrator = UploadOrchestrator(
        ...     file_gate=FileGate(),
        ...     sheet_catalog=SheetCatalog(client),
        ...     preview_service=PreviewService(client),
        ...     history_store=store,
        ...     import_client=client,
        ...     channel_factory=WebSocketProcessingChannel,
        ...     confirmation_prompt=prompt,
        ... )
        >>> await orchestrator.select_file(FileCandidate.from_path(path))
        True
        >>> orchestrator.choose_sheet("Sheet1")
        True
        >>> await orchestrator.preview()
        >>> entry = await orchestrator.start_upload()
        >>> entry.records_imported
        42
    """

    def __init__(
        self,
        file_gate: FileGate,
        sheet_catalog: SheetCatalog,
        preview_service: PreviewService,
        history_store: HistoryStore,
        import_client: CatalogImportClientProtocol,
        channel_factory: ProcessingChannelFactory,
        confirmation_prompt: ConfirmationPromptProtocol,
    ) -> None:
        self.file_gate = file_gate
        self.sheet_catalog = sheet_catalog
        self.preview_service = preview_service
        self.history_store = history_store
        self.import_client = import_client
        self.channel_factory = channel_factory
        self.confirmation_prompt = confirmation_prompt

        self.state: UploadState = UploadState.IDLE
        self.session: UploadSession = UploadSession()

        self._attempt: int = 0
        self._display_listeners: list[DisplayListener] = []
        self._catalog_listeners: list[CatalogListener] = []

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_display_listener(self, listener: DisplayListener) -> None:
        """Called with the session after every display-relevant change."""
        self._display_listeners.append(listener)

    def add_catalog_listener(self, listener: CatalogListener) -> None:
        """Called with the entry after every successful import."""
        self._catalog_listeners.append(listener)

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        return self.history_store.entries

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    async def select_file(self, candidate: Optional[FileCandidate]) -> bool:
        """
        Select a new file and list its sheets.

        The session is replaced wholesale: sheets, preview, progress, warning
        and outcome of the previous file are dropped even when the new file
        is rejected.

        Returns:
            True if the file was accepted (sheet listing may still fail)

        Raises:
            UploadInProgressError: An upload is running or awaiting confirmation
        """
        self._ensure_not_busy("select a file")

        try:
            selected = self.file_gate.select(candidate)
        except ValidationError as e:
            self.session = UploadSession(error_message=e.message)
            self._transition(UploadState.IDLE)
            self._notify_display()
            return False

        self.session = UploadSession(selected_file=selected)
        self._transition(UploadState.FILE_CHOSEN)
        self._notify_display()

        await self.load_sheets()
        return True

    async def load_sheets(self) -> list[str]:
        """(Re)load the sheet names of the selected file. No automatic retry."""
        self._ensure_not_busy("load sheets")
        selected = self.session.selected_file
        if selected is None:
            self.session.error_message = MSG_NO_FILE_SELECTED
            self._notify_display()
            return []

        try:
            sheets = await self.sheet_catalog.list_sheets(selected)
        except TransportError as e:
            logger.error(f"Sheet listing failed for {selected.name}: {e.message}")
            if self.session.selected_file is selected:
                self.session.sheets = []
                self.session.error_message = MSG_SHEETS_FAILED
                self._notify_display()
            return []

        if self.session.selected_file is not selected:
            logger.debug(f"Discarding sheet list of replaced file {selected.name}")
            return []

        self.session.sheets = sheets
        self.session.error_message = None
        self._transition(UploadState.SHEETS_LISTED)
        self._notify_display()
        return sheets

    def choose_sheet(self, sheet_name: Optional[str]) -> bool:
        """
        Choose the sheet to preview and import.

        Returns:
            False (with error_message set) if no file is selected, the name is
            empty, or the sheet is not part of the listed sheets
        """
        self._ensure_not_busy("choose a sheet")
        if self.session.selected_file is None or not sheet_name:
            self.session.error_message = MSG_SHEET_REQUIRED
            self._notify_display()
            return False
        if sheet_name not in self.session.sheets:
            self.session.error_message = MSG_UNKNOWN_SHEET.format(sheet=sheet_name)
            self._notify_display()
            return False

        self.session.selected_sheet = sheet_name
        self.session.preview = PreviewDataset.empty()
        self.session.duplicate_warning = None
        self.session.reset_progress()
        self._transition(UploadState.SHEET_CHOSEN)
        self._notify_display()
        return True

    # ------------------------------------------------------------------
    # Preview and duplicate warning
    # ------------------------------------------------------------------

    def refresh_duplicate_warning(self) -> Optional[str]:
        """Recompute the non-blocking duplicate warning for the current pair."""
        selected = self.session.selected_file
        sheet_name = self.session.selected_sheet
        warning = None
        if (
            selected is not None
            and sheet_name
            and self.history_store.is_duplicate(selected.name, sheet_name)
        ):
            warning = MSG_DUPLICATE_WARNING.format(
                file_name=selected.name, sheet_name=sheet_name
            )
        self.session.duplicate_warning = warning
        return warning

    async def preview(self) -> Optional[PreviewDataset]:
        """
        Show the duplicate warning, then fetch the preview.

        A failed preview request keeps the previous preview on screen.
        """
        self._ensure_not_busy("preview")
        selected = self.session.selected_file
        sheet_name = self.session.selected_sheet

        self.refresh_duplicate_warning()
        self._notify_display()

        try:
            dataset = await self.preview_service.preview(selected, sheet_name)
        except SelectionError as e:
            self.session.error_message = e.message
            self._notify_display()
            return None
        except TransportError as e:
            logger.error(f"Preview failed for {selected.name}/{sheet_name}: {e.message}")
            self.session.error_message = MSG_PREVIEW_FAILED
            self._notify_display()
            return None

        if (
            self.session.selected_file is not selected
            or self.session.selected_sheet != sheet_name
        ):
            logger.debug(f"Discarding preview of replaced selection {sheet_name}")
            return None

        self.session.preview = dataset
        self.session.error_message = None
        self._transition(UploadState.PREVIEW_SHOWN)
        self._notify_display()
        return dataset

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def start_upload(self) -> Optional[HistoryEntry]:
        """
        Import the selected sheet.

        Returns:
            The committed HistoryEntry (SUCCESS or ERROR), or None when the
            upload did not start (selection incomplete or duplicate cancelled)

        Raises:
            UploadInProgressError: An upload is already running or confirming
        """
        self._ensure_not_busy("start an upload")
        selected = self.session.selected_file
        sheet_name = self.session.selected_sheet

        if selected is None:
            self.session.error_message = MSG_NO_FILE_SELECTED
            self._notify_display()
            return None
        if not sheet_name:
            self.session.error_message = MSG_SHEET_REQUIRED
            self._notify_display()
            return None

        previous_state = self.state
        if previous_state.is_completed:
            logger.info(
                f"Retrying import of {selected.name}/{sheet_name} "
                f"after {previous_state.value}"
            )

        if self.history_store.is_duplicate(selected.name, sheet_name):
            confirmed = await self._confirm_duplicate(
                selected, sheet_name, previous_state
            )
            if not confirmed:
                logger.info(f"Duplicate import of {selected.name}/{sheet_name} cancelled")
                self.session.error_message = MSG_DUPLICATE_CANCELLED
                self._notify_display()
                return None

        self.session.reset_progress()
        self.session.duplicate_warning = None
        self._transition(UploadState.UPLOADING)
        self._notify_display()

        return await self._run_upload(selected, sheet_name, previous_state)

    async def _confirm_duplicate(
        self, selected: SelectedFile, sheet_name: str, previous_state: UploadState
    ) -> bool:
        self._transition(UploadState.CONFIRMING)
        self._notify_display()
        confirmed = False
        try:
            confirmed = await self.confirmation_prompt.confirm(
                MSG_DUPLICATE_CONFIRM.format(
                    file_name=selected.name, sheet_name=sheet_name
                )
            )
        finally:
            if not confirmed:
                self._transition(previous_state)
        return confirmed

    async def _run_upload(
        self, selected: SelectedFile, sheet_name: str, previous_state: UploadState
    ) -> HistoryEntry:
        self._attempt += 1
        attempt = self._attempt
        channel: ProcessingChannelProtocol = self.channel_factory()
        entry: Optional[HistoryEntry] = None

        try:
            await channel.open(
                lambda message: self._on_processing_message(attempt, message)
            )
            response = await self.import_client.upload(
                selected,
                sheet_name,
                on_progress=lambda sent, total: self._on_transfer_progress(
                    attempt, sent, total
                ),
            )
            entry = await self._complete(selected, sheet_name, response)
            return entry
        finally:
            await channel.close()
            if entry is None:
                logger.error(
                    f"Upload of {selected.name}/{sheet_name} aborted without a "
                    f"terminal response"
                )
                self._transition(previous_state)
                self._notify_display()

    async def _complete(
        self, selected: SelectedFile, sheet_name: str, response: ImportResponse
    ) -> HistoryEntry:
        # History is committed before leaving UPLOADING
        if isinstance(response, ImportResult):
            entry = HistoryEntry.success(selected.name, sheet_name, response.count)
            await self._commit(entry)
            self._transition(UploadState.COMPLETED_SUCCESS)
            self.session.outcome = entry
            self.session.transfer_progress = TransferProgress.complete(
                self.session.transfer_progress.bytes_total
            )
            self._notify_display()
            self._notify_catalog(entry)
            return entry

        entry = HistoryEntry.error(selected.name, sheet_name)
        await self._commit(entry)
        self._transition(UploadState.COMPLETED_ERROR)
        self.session.outcome = entry
        self.session.error_message = response.detail or MSG_UPLOAD_FAILED
        self._notify_display()
        return entry

    async def _commit(self, entry: HistoryEntry) -> None:
        try:
            await asyncio.to_thread(self.history_store.append, entry)
        except HistoryPersistenceError as e:
            # Entry is kept in memory; only the persisted copy is stale
            logger.error(f"Import history not persisted: {e.message}")

    def _on_transfer_progress(self, attempt: int, sent: int, total: int) -> None:
        if attempt != self._attempt or self.state != UploadState.UPLOADING:
            return
        if total <= 0:
            return
        self.session.transfer_progress = TransferProgress(
            bytes_sent=min(max(sent, 0), total), bytes_total=total
        )
        self._notify_display()

    def _on_processing_message(self, attempt: int, message: ProcessingMessage) -> None:
        if attempt != self._attempt or self.state != UploadState.UPLOADING:
            logger.debug(f"Ignoring processing message outside its upload: {message}")
            return
        self.session.processing_progress = message.to_progress()
        self._notify_display()

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def clear_history(self) -> bool:
        """
        Clear the import history after operator confirmation.

        Returns:
            True if the history was cleared, False if the operator declined
            or the persisted history could not be removed (see
            ``session.error_message``)
        """
        self._ensure_not_busy("clear the history")
        if not await self.confirmation_prompt.confirm(MSG_CLEAR_HISTORY_CONFIRM):
            return False
        try:
            await asyncio.to_thread(self.history_store.clear)
        except HistoryPersistenceError as e:
            logger.error(f"Import history not cleared: {e.message}")
            self.session.error_message = MSG_CLEAR_HISTORY_FAILED
            self._notify_display()
            return False
        self.session.duplicate_warning = None
        self._notify_display()
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_not_busy(self, action: str) -> None:
        if self.state.is_busy:
            raise UploadInProgressError(
                f"Cannot {action} while the upload is {self.state.value}"
            )

    def _transition(self, new_state: UploadState) -> None:
        if new_state != self.state:
            logger.info(f"Upload state: {self.state.value} -> {new_state.value}")
        self.state = new_state

    def _notify_display(self) -> None:
        for listener in list(self._display_listeners):
            try:
                listener(self.session)
            except Exception:
                logger.exception("Display listener failed")

    def _notify_catalog(self, entry: HistoryEntry) -> None:
        for listener in list(self._catalog_listeners):
            try:
                listener(entry)
            except Exception:
                logger.exception("Catalog listener failed")
