"""
Catalog Import Domain Constants

Allowed spreadsheet extensions, persisted storage key and the user-facing
messages of the upload workflow.
"""

from typing import Dict, Tuple


# ============================================================================
# FILE SELECTION
# ============================================================================

DEFAULT_ALLOWED_EXTENSIONS: Tuple[str, ...] = (".xlsx", ".xls")

DEFAULT_MAX_FILE_SIZE_MB: int = 10

CONTENT_TYPES: Dict[str, str] = {
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".xls": "application/vnd.ms-excel",
}

FALLBACK_CONTENT_TYPE: str = "application/octet-stream"


# ============================================================================
# HISTORY PERSISTENCE
# ============================================================================

# Single named slot holding the JSON-serialized history
HISTORY_STORAGE_KEY: str = "excel_upload_history"


# ============================================================================
# USER-FACING MESSAGES
# ============================================================================

MSG_NO_FILE_SELECTED = "No file selected."
MSG_ONLY_EXCEL_ALLOWED = "Only Excel files are allowed."
MSG_FILE_TOO_LARGE = "File is too large ({size_mb:.2f} MB, limit {limit_mb} MB)."
MSG_SHEET_REQUIRED = "You must select a sheet."
MSG_UNKNOWN_SHEET = 'Sheet "{sheet}" is not part of the selected file.'
MSG_SHEETS_FAILED = "Could not load the sheets."
MSG_PREVIEW_FAILED = "Error previewing the sheet."
MSG_UPLOAD_FAILED = "Error uploading the file."
MSG_DUPLICATE_CANCELLED = "Import cancelled: duplicate file."

MSG_DUPLICATE_WARNING = (
    'A successful import of "{file_name}" - sheet "{sheet_name}" already exists.'
)
MSG_DUPLICATE_CONFIRM = (
    'The file "{file_name}" with sheet "{sheet_name}" was already imported '
    "successfully.\n\nDo you want to import it again?"
)
MSG_CLEAR_HISTORY_CONFIRM = "Are you sure you want to clear the history?"
MSG_CLEAR_HISTORY_FAILED = "Could not clear the history."
