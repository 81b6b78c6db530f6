"""
Tests for UploadOrchestrator.

Covers:
- File selection and session reset
- Sheet listing, sheet choice and preview (including failures)
- Duplicate warning and the confirmation gate
- Upload success / error commit, progress signals, processing channel lifecycle
- Busy guard while confirming or uploading
- History clearing
"""

import asyncio
import logging
import threading

import pytest

from src.application.models import UploadState
from src.application.ports import DeferredConfirmation, ImportFailure, ImportResult
from src.domain.catalog_import.entities import HistoryEntry, ImportOutcome
from src.domain.catalog_import.value_objects import FileCandidate
from src.domain.shared.exceptions import TransportError, UploadInProgressError
from src.infrastructure.websocket import WebSocketProcessingChannel


async def _ready(orchestrator, catalog_file, sheet="Products"):
    """Select the file, choose the sheet and show the preview."""
    assert await orchestrator.select_file(catalog_file)
    assert orchestrator.choose_sheet(sheet)
    assert await orchestrator.preview() is not None


# ============================================================================
# FILE SELECTION
# ============================================================================


@pytest.mark.asyncio
async def test_select_file_lists_sheets(orchestrator, catalog_file, import_client):
    """Test a valid file is accepted and its sheets are listed."""
    accepted = await orchestrator.select_file(catalog_file)

    assert accepted
    assert orchestrator.state == UploadState.SHEETS_LISTED
    assert orchestrator.session.selected_file.name == "catalog.xlsx"
    assert orchestrator.session.sheets == ["Products", "Prices"]
    assert import_client.count("list_sheets") == 1


@pytest.mark.asyncio
async def test_select_invalid_file_resets_session(
    orchestrator, catalog_file, import_client
):
    """Test a rejected file drops the previous selection entirely."""
    await _ready(orchestrator, catalog_file)

    accepted = await orchestrator.select_file(FileCandidate(name="notes.txt"))

    assert not accepted
    assert orchestrator.state == UploadState.IDLE
    assert orchestrator.session.selected_file is None
    assert orchestrator.session.sheets == []
    assert orchestrator.session.preview.is_empty
    assert orchestrator.session.error_message == "Only Excel files are allowed."
    assert import_client.count("list_sheets") == 1


@pytest.mark.asyncio
async def test_select_file_sheet_listing_failure(orchestrator, catalog_file, import_client):
    """Test a failed sheet listing leaves the file chosen with an error."""
    import_client.sheets = TransportError("connection refused")

    accepted = await orchestrator.select_file(catalog_file)

    assert accepted
    assert orchestrator.state == UploadState.FILE_CHOSEN
    assert orchestrator.session.sheets == []
    assert orchestrator.session.error_message == "Could not load the sheets."


@pytest.mark.asyncio
async def test_load_sheets_retry_is_manual(orchestrator, catalog_file, import_client):
    """Test a failed listing can be retried explicitly."""
    import_client.sheets = TransportError("connection refused")
    await orchestrator.select_file(catalog_file)

    import_client.sheets = ["Only"]
    sheets = await orchestrator.load_sheets()

    assert sheets == ["Only"]
    assert orchestrator.state == UploadState.SHEETS_LISTED
    assert orchestrator.session.error_message is None


@pytest.mark.asyncio
async def test_new_selection_resets_progress_and_outcome(orchestrator, catalog_file):
    """Test selecting a file after a completed upload clears its state."""
    await _ready(orchestrator, catalog_file)
    await orchestrator.start_upload()
    assert orchestrator.session.transfer_progress.percent == 100

    await orchestrator.select_file(FileCandidate(name="other.xlsx", content=b"PK"))

    session = orchestrator.session
    assert session.selected_sheet is None
    assert session.outcome is None
    assert session.transfer_progress.percent == 0
    assert session.processing_progress.step_label == ""
    assert session.duplicate_warning is None


# ============================================================================
# SHEET CHOICE AND PREVIEW
# ============================================================================


@pytest.mark.asyncio
async def test_choose_unknown_sheet_is_rejected(orchestrator, catalog_file):
    """Test only listed sheets can be chosen."""
    await orchestrator.select_file(catalog_file)

    assert not orchestrator.choose_sheet("Missing")
    assert orchestrator.state == UploadState.SHEETS_LISTED
    assert orchestrator.session.selected_sheet is None


@pytest.mark.asyncio
async def test_choose_sheet_requires_name(orchestrator, catalog_file):
    """Test an empty sheet name yields the selection message."""
    await orchestrator.select_file(catalog_file)

    assert not orchestrator.choose_sheet("")
    assert orchestrator.session.error_message == "You must select a sheet."


@pytest.mark.asyncio
async def test_preview_shows_rows_and_columns(orchestrator, catalog_file):
    """Test a successful preview moves to PREVIEW_SHOWN."""
    await orchestrator.select_file(catalog_file)
    orchestrator.choose_sheet("Products")

    dataset = await orchestrator.preview()

    assert orchestrator.state == UploadState.PREVIEW_SHOWN
    assert dataset.columns == ("SKU", "Name", "Price")
    assert orchestrator.session.preview == dataset
    assert orchestrator.session.duplicate_warning is None


@pytest.mark.asyncio
async def test_preview_failure_keeps_previous_preview(
    orchestrator, catalog_file, import_client
):
    """Test a failed preview leaves the old rows on screen."""
    await _ready(orchestrator, catalog_file)
    shown = orchestrator.session.preview

    import_client.preview_rows = TransportError("HTTP 500")
    result = await orchestrator.preview()

    assert result is None
    assert orchestrator.session.preview == shown
    assert orchestrator.session.error_message == "Error previewing the sheet."


@pytest.mark.asyncio
async def test_preview_without_sheet(orchestrator, catalog_file, import_client):
    """Test preview without a chosen sheet does not call the backend."""
    await orchestrator.select_file(catalog_file)

    assert await orchestrator.preview() is None
    assert orchestrator.session.error_message == "You must select a sheet."
    assert import_client.count("preview") == 0


@pytest.mark.asyncio
async def test_preview_shows_duplicate_warning(orchestrator, catalog_file, history_store):
    """Test a previously successful pair raises the non-blocking warning."""
    history_store.append(HistoryEntry.success("catalog.xlsx", "Products", 5))

    await _ready(orchestrator, catalog_file)

    warning = orchestrator.session.duplicate_warning
    assert warning is not None
    assert "catalog.xlsx" in warning and "Products" in warning
    assert orchestrator.state == UploadState.PREVIEW_SHOWN


@pytest.mark.asyncio
async def test_error_entries_do_not_warn(orchestrator, catalog_file, history_store):
    """Test failed imports never trigger the duplicate warning."""
    history_store.append(HistoryEntry.error("catalog.xlsx", "Products"))

    await _ready(orchestrator, catalog_file)

    assert orchestrator.session.duplicate_warning is None


# ============================================================================
# UPLOAD - SUCCESS
# ============================================================================


@pytest.mark.asyncio
async def test_upload_success_commits_entry(
    orchestrator, catalog_file, history_store, channel_factory
):
    """Test a 2xx response commits a SUCCESS entry with the server count."""
    catalog_changes = []
    orchestrator.add_catalog_listener(catalog_changes.append)
    await _ready(orchestrator, catalog_file)

    entry = await orchestrator.start_upload()

    assert entry.outcome == ImportOutcome.SUCCESS
    assert entry.records_imported == 42
    assert entry.file_name == "catalog.xlsx"
    assert entry.sheet_name == "Products"
    assert orchestrator.state == UploadState.COMPLETED_SUCCESS
    assert orchestrator.session.outcome == entry
    assert orchestrator.session.upload_succeeded
    assert orchestrator.session.transfer_progress.percent == 100
    assert history_store.entries[0] == entry
    assert catalog_changes == [entry]
    assert len(channel_factory.channels) == 1
    assert channel_factory.last.opened and channel_factory.last.closed


@pytest.mark.asyncio
async def test_upload_success_without_count(orchestrator, catalog_file, import_client):
    """Test a success response without count records zero."""
    import_client.response = ImportResult()
    await _ready(orchestrator, catalog_file)

    entry = await orchestrator.start_upload()

    assert entry.is_success
    assert entry.records_imported == 0


@pytest.mark.asyncio
async def test_upload_success_forces_full_transfer_progress(
    orchestrator, catalog_file, import_client
):
    """Test 100% transfer progress even if no byte event was reported."""
    import_client.progress_steps = []
    await _ready(orchestrator, catalog_file)

    await orchestrator.start_upload()

    assert orchestrator.session.transfer_progress.percent == 100


# ============================================================================
# UPLOAD - ERROR
# ============================================================================


@pytest.mark.asyncio
async def test_upload_error_with_detail(
    orchestrator, catalog_file, import_client, history_store, channel_factory
):
    """Test a non-2xx response commits an ERROR entry and shows the detail."""
    catalog_changes = []
    orchestrator.add_catalog_listener(catalog_changes.append)
    import_client.response = ImportFailure(detail="bad schema", status_code=422)
    await _ready(orchestrator, catalog_file)

    entry = await orchestrator.start_upload()

    assert entry.outcome == ImportOutcome.ERROR
    assert entry.records_imported == 0
    assert orchestrator.state == UploadState.COMPLETED_ERROR
    assert orchestrator.session.error_message == "bad schema"
    assert history_store.entries[0] == entry
    assert catalog_changes == []
    assert channel_factory.last.closed


@pytest.mark.asyncio
async def test_upload_error_without_detail(orchestrator, catalog_file, import_client):
    """Test the generic message is used when the server sent no detail."""
    import_client.response = ImportFailure()
    await _ready(orchestrator, catalog_file)

    await orchestrator.start_upload()

    assert orchestrator.session.error_message == "Error uploading the file."


@pytest.mark.asyncio
async def test_retry_after_error_uses_fresh_channel(
    orchestrator, catalog_file, import_client, history_store, channel_factory, caplog
):
    """Test an error can be retried and each attempt gets its own channel."""
    import_client.response = ImportFailure(detail="bad schema")
    await _ready(orchestrator, catalog_file)
    await orchestrator.start_upload()
    assert orchestrator.state.is_completed

    import_client.response = ImportResult(count=3)
    with caplog.at_level(logging.INFO):
        entry = await orchestrator.start_upload()

    assert "Retrying import of catalog.xlsx/Products after completed_error" in caplog.text
    assert entry.is_success
    assert [e.outcome for e in history_store.entries] == [
        ImportOutcome.SUCCESS,
        ImportOutcome.ERROR,
    ]
    assert len(channel_factory.channels) == 2
    assert all(channel.closed for channel in channel_factory.channels)
    assert orchestrator.session.error_message is None


@pytest.mark.asyncio
async def test_upload_exception_closes_channel_and_restores_state(
    orchestrator, catalog_file, import_client, history_store, channel_factory
):
    """Test an unexpected client failure leaves no entry and no open channel."""
    import_client.response = RuntimeError("transport crashed")
    await _ready(orchestrator, catalog_file)

    with pytest.raises(RuntimeError):
        await orchestrator.start_upload()

    assert channel_factory.last.closed
    assert orchestrator.state == UploadState.PREVIEW_SHOWN
    assert history_store.entries == ()


@pytest.mark.asyncio
async def test_history_write_failure_keeps_outcome(
    orchestrator, catalog_file, history_slot, history_store
):
    """Test a persistence failure does not change the upload outcome."""
    history_slot.fail_writes = True
    await _ready(orchestrator, catalog_file)

    entry = await orchestrator.start_upload()

    assert entry.is_success
    assert orchestrator.state == UploadState.COMPLETED_SUCCESS
    assert history_store.entries == (entry,)


@pytest.mark.asyncio
async def test_history_write_runs_off_the_event_loop(
    orchestrator, catalog_file, history_slot
):
    """Test the history write runs in a worker thread while still UPLOADING."""
    seen = {}
    original_write = history_slot.write

    def recording_write(document):
        seen["thread"] = threading.get_ident()
        seen["state"] = orchestrator.state
        original_write(document)

    history_slot.write = recording_write
    await _ready(orchestrator, catalog_file)

    await orchestrator.start_upload()

    assert seen["thread"] != threading.get_ident()
    assert seen["state"] == UploadState.UPLOADING
    assert orchestrator.state == UploadState.COMPLETED_SUCCESS


# ============================================================================
# PROGRESS SIGNALS
# ============================================================================


@pytest.mark.asyncio
async def test_processing_messages_update_display_only(
    orchestrator, catalog_file, import_client, channel_factory
):
    """Test channel messages update processing progress but not the state."""
    seen = []

    async def emit_steps():
        channel = channel_factory.last
        channel.emit("Parsing rows", 30)
        seen.append((orchestrator.state, orchestrator.session.processing_progress))
        channel.emit("Saving", 80.5)
        seen.append((orchestrator.state, orchestrator.session.processing_progress))

    import_client.during_upload = emit_steps
    await _ready(orchestrator, catalog_file)

    await orchestrator.start_upload()

    assert [state for state, _ in seen] == [UploadState.UPLOADING] * 2
    assert seen[0][1].step_label == "Parsing rows"
    assert seen[1][1].percent_complete == 80.5
    # Byte progress is an independent signal
    assert orchestrator.session.transfer_progress.percent == 100


@pytest.mark.asyncio
async def test_transfer_progress_reported_while_uploading(
    orchestrator, catalog_file, import_client
):
    """Test byte progress events reach display listeners in order."""
    percents = []
    import_client.progress_steps = [(0, 0), (256, 1024), (1024, 1024)]
    await _ready(orchestrator, catalog_file)
    orchestrator.add_display_listener(
        lambda session: percents.append(session.transfer_progress.percent)
    )

    await orchestrator.start_upload()

    assert 25 in percents
    assert percents.index(25) < percents.index(100)


@pytest.mark.asyncio
async def test_processing_message_after_completion_is_ignored(
    orchestrator, catalog_file, channel_factory
):
    """Test a late channel message cannot alter a completed session."""
    await _ready(orchestrator, catalog_file)
    await orchestrator.start_upload()
    before = orchestrator.session.processing_progress

    channel_factory.last.emit("Late step", 99)

    assert orchestrator.session.processing_progress == before
    assert orchestrator.state == UploadState.COMPLETED_SUCCESS


@pytest.mark.asyncio
async def test_new_upload_resets_processing_progress(
    orchestrator, catalog_file, import_client, channel_factory
):
    """Test a second attempt starts from zero on both signals."""

    async def emit_step():
        channel_factory.last.emit("Saving", 90)

    import_client.during_upload = emit_step
    await _ready(orchestrator, catalog_file)
    await orchestrator.start_upload()
    assert orchestrator.session.processing_progress.step_label == "Saving"

    snapshots = []
    import_client.during_upload = None
    orchestrator.add_display_listener(
        lambda session: snapshots.append(
            (orchestrator.state, session.processing_progress.step_label)
        )
    )
    orchestrator.confirmation_prompt.answers = [True]
    await orchestrator.start_upload()

    uploading = [label for state, label in snapshots if state == UploadState.UPLOADING]
    assert uploading[0] == ""



@pytest.mark.asyncio
async def test_malformed_channel_message_keeps_last_valid_progress(
    orchestrator, catalog_file, import_client, channel_factory
):
    """Test undecodable channel data changes neither progress nor outcome."""
    decoder = WebSocketProcessingChannel(url="ws://unused")

    async def emit_mixed():
        callback = channel_factory.last.on_message
        decoder.dispatch('{"step": "Parsing", "progress": 20}', callback)
        decoder.dispatch("{broken", callback)
        decoder.dispatch('{"step": "Saving", "progress": "lots"}', callback)
        decoder.dispatch('{"step": "Saving", "progress": NaN}', callback)

    import_client.during_upload = emit_mixed
    await _ready(orchestrator, catalog_file)

    entry = await orchestrator.start_upload()

    assert entry.is_success
    assert orchestrator.session.processing_progress.step_label == "Parsing"
    assert orchestrator.session.processing_progress.percent_complete == 20
    assert orchestrator.session.transfer_progress.percent == 100
    assert decoder.messages_discarded == 3


@pytest.mark.asyncio
async def test_preview_is_idempotent(orchestrator, catalog_file):
    """Test previewing the same pair twice yields the same dataset."""
    await _ready(orchestrator, catalog_file)
    first = orchestrator.session.preview

    second = await orchestrator.preview()

    assert second == first
    assert orchestrator.state == UploadState.PREVIEW_SHOWN

# ============================================================================
# DUPLICATE CONFIRMATION GATE
# ============================================================================


@pytest.mark.asyncio
async def test_duplicate_cancel_does_not_upload(
    orchestrator, catalog_file, import_client, history_store, channel_factory,
    confirmation_prompt,
):
    """Test declining the duplicate prompt issues no request and no entry."""
    history_store.append(HistoryEntry.success("catalog.xlsx", "Products", 5))
    confirmation_prompt.answers = [False]
    await _ready(orchestrator, catalog_file)

    entry = await orchestrator.start_upload()

    assert entry is None
    assert import_client.count("upload") == 0
    assert channel_factory.channels == []
    assert len(history_store) == 1
    assert orchestrator.state == UploadState.PREVIEW_SHOWN
    assert orchestrator.session.error_message == "Import cancelled: duplicate file."
    assert "catalog.xlsx" in confirmation_prompt.messages[0]


@pytest.mark.asyncio
async def test_duplicate_confirm_uploads(
    orchestrator, catalog_file, import_client, history_store, confirmation_prompt
):
    """Test confirming the duplicate prompt proceeds with the upload."""
    history_store.append(HistoryEntry.success("catalog.xlsx", "Products", 5))
    confirmation_prompt.answers = [True]
    await _ready(orchestrator, catalog_file)

    entry = await orchestrator.start_upload()

    assert entry.is_success
    assert import_client.count("upload") == 1
    assert len(history_store) == 2
    assert orchestrator.session.duplicate_warning is None


@pytest.mark.asyncio
async def test_no_prompt_for_new_pair(
    orchestrator, catalog_file, history_store, confirmation_prompt
):
    """Test a different sheet of an imported file is not a duplicate."""
    history_store.append(HistoryEntry.success("catalog.xlsx", "Prices", 5))
    await _ready(orchestrator, catalog_file, sheet="Products")

    await orchestrator.start_upload()

    assert confirmation_prompt.messages == []


@pytest.mark.asyncio
async def test_busy_while_confirming(orchestrator, catalog_file, history_store):
    """Test the session cannot change while the confirmation is pending."""
    history_store.append(HistoryEntry.success("catalog.xlsx", "Products", 5))
    prompt = DeferredConfirmation()
    orchestrator.confirmation_prompt = prompt
    await _ready(orchestrator, catalog_file)

    task = asyncio.create_task(orchestrator.start_upload())
    while not prompt.is_pending:
        await asyncio.sleep(0)

    assert orchestrator.state == UploadState.CONFIRMING
    with pytest.raises(UploadInProgressError):
        await orchestrator.start_upload()
    with pytest.raises(UploadInProgressError):
        await orchestrator.select_file(catalog_file)

    prompt.resolve(False)

    assert await task is None
    assert orchestrator.state == UploadState.PREVIEW_SHOWN


# ============================================================================
# BUSY GUARD / PRECONDITIONS
# ============================================================================


@pytest.mark.asyncio
async def test_busy_while_uploading(orchestrator, catalog_file, import_client):
    """Test selection changes are rejected during the upload."""
    errors = []

    async def interfere():
        for action in (
            lambda: orchestrator.select_file(catalog_file),
            orchestrator.start_upload,
            orchestrator.clear_history,
        ):
            try:
                await action()
            except UploadInProgressError as e:
                errors.append(e)
        try:
            orchestrator.choose_sheet("Prices")
        except UploadInProgressError as e:
            errors.append(e)

    import_client.during_upload = interfere
    await _ready(orchestrator, catalog_file)

    entry = await orchestrator.start_upload()

    assert len(errors) == 4
    assert entry.is_success
    assert import_client.count("upload") == 1


@pytest.mark.asyncio
async def test_start_upload_without_sheet(orchestrator, catalog_file, import_client):
    """Test upload requires a chosen sheet."""
    await orchestrator.select_file(catalog_file)

    assert await orchestrator.start_upload() is None
    assert orchestrator.session.error_message == "You must select a sheet."
    assert import_client.count("upload") == 0


@pytest.mark.asyncio
async def test_start_upload_without_file(orchestrator, import_client):
    """Test upload requires a selected file."""
    assert await orchestrator.start_upload() is None
    assert orchestrator.session.error_message == "No file selected."
    assert orchestrator.state == UploadState.IDLE


@pytest.mark.asyncio
async def test_upload_allowed_without_preview(orchestrator, catalog_file):
    """Test a chosen sheet can be imported before previewing."""
    await orchestrator.select_file(catalog_file)
    orchestrator.choose_sheet("Prices")

    entry = await orchestrator.start_upload()

    assert entry.sheet_name == "Prices"


# ============================================================================
# LISTENERS AND HISTORY
# ============================================================================


@pytest.mark.asyncio
async def test_failing_listener_does_not_break_upload(orchestrator, catalog_file):
    """Test listener exceptions are logged, not propagated."""

    def broken(_):
        raise ValueError("render failed")

    orchestrator.add_display_listener(broken)
    orchestrator.add_catalog_listener(broken)
    await _ready(orchestrator, catalog_file)

    entry = await orchestrator.start_upload()

    assert entry.is_success


@pytest.mark.asyncio
async def test_clear_history_confirmed(
    orchestrator, catalog_file, history_store, confirmation_prompt
):
    """Test clearing the history also clears the duplicate warning."""
    history_store.append(HistoryEntry.success("catalog.xlsx", "Products", 5))
    await _ready(orchestrator, catalog_file)
    assert orchestrator.session.duplicate_warning

    confirmation_prompt.answers = [True]
    cleared = await orchestrator.clear_history()

    assert cleared
    assert orchestrator.history == ()
    assert orchestrator.session.duplicate_warning is None
    assert confirmation_prompt.messages == [
        "Are you sure you want to clear the history?"
    ]


@pytest.mark.asyncio
async def test_clear_history_declined(orchestrator, history_store, confirmation_prompt):
    """Test declining keeps the history."""
    history_store.append(HistoryEntry.success("catalog.xlsx", "Products", 5))
    confirmation_prompt.answers = [False]

    assert not await orchestrator.clear_history()
    assert len(history_store) == 1


@pytest.mark.asyncio
async def test_clear_history_storage_failure(
    orchestrator, catalog_file, history_store, history_slot, confirmation_prompt
):
    """Test a failed removal reports an error and keeps the history."""
    history_store.append(HistoryEntry.success("catalog.xlsx", "Products", 5))
    await _ready(orchestrator, catalog_file)
    history_slot.fail_removes = True
    confirmation_prompt.answers = [True]

    cleared = await orchestrator.clear_history()

    assert not cleared
    assert len(orchestrator.history) == 1
    assert history_slot.document is not None
    assert orchestrator.session.error_message == "Could not clear the history."
    assert orchestrator.session.duplicate_warning
