"""
Domain Layer Exceptions

This module defines the exception hierarchy shared by every layer of the
catalog importer. All importer-specific exceptions inherit from DomainException.

Responsibility:
    - Base exception class for domain errors
    - Error taxonomy of the upload workflow (validation, selection, transport,
      processing channel, concurrent upload guard, history persistence)
    - Clear separation from framework exceptions (httpx, websockets, redis)

Architecture Notes:
    - Part of Shared Domain (used across all subdomains)
    - Infrastructure translates library exceptions into these types
    - Application Layer turns user-recoverable ones into session messages
"""


class DomainException(Exception):
    """
    Base exception for all domain layer errors.

    All importer exceptions inherit from this class to enable type-safe error
    handling in the Application and CLI layers.

    Usage:
        - Catch this in Application Layer to handle all domain errors
        - The CLI prints ``exc.message`` for user-facing failures

    Examples:
        >>> raise DomainException("Business rule violation")

        >>> try:
        ...     gate.select(candidate)
        ... except DomainException as e:
        ...     logger.error(f"Domain error: {e}")
    """

    def __init__(self, message: str) -> None:
        """
        Initialize domain exception with error message.

        Args:
            message: Human-readable error description
        """
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        """String representation of the exception."""
        return f"{self.__class__.__name__}: {self.message}"

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"{self.__class__.__name__}(message={self.message!r})"


class ValidationError(DomainException):
    """
    Raised when a selected file is rejected by the FileGate.

    This exception is raised when:
    - No file was selected
    - The file name does not end in a recognized spreadsheet extension
    - The file exceeds the configured size limit (see FileSizeExceededError)

    Recovered locally: the orchestrator shows ``message`` and keeps a clean
    session.

    Examples:
        >>> raise ValidationError("Only Excel files are allowed.", file_name="notes.txt")
    """

    def __init__(self, message: str, file_name: str | None = None) -> None:
        """
        Initialize validation error.

        Args:
            message: Error description shown to the operator
            file_name: Name of the rejected file (optional)
        """
        self.file_name = file_name
        super().__init__(message)


class FileSizeExceededError(ValidationError):
    """
    Raised when a selected file exceeds the maximum allowed size.

    Examples:
        >>> raise FileSizeExceededError("File too large", 15728640, 10485760)
    """

    def __init__(
        self,
        message: str,
        file_size: int,
        max_size: int,
        file_name: str | None = None,
    ) -> None:
        """
        Initialize file size error.

        Args:
            message: Error description
            file_size: Actual file size in bytes
            max_size: Maximum allowed size in bytes
            file_name: Name of the rejected file (optional)
        """
        self.file_size = file_size
        self.max_size = max_size
        super().__init__(message, file_name=file_name)


class SelectionError(DomainException):
    """
    Raised when an operation needs a file and a sheet but one is missing.

    Examples:
        >>> raise SelectionError("You must select a sheet.")
    """


class TransportError(DomainException):
    """
    Raised when a request to the import backend fails.

    Covers connection errors, timeouts, non-2xx responses and response bodies
    that do not have the documented shape.

    Examples:
        >>> raise TransportError("Sheet listing failed", status_code=502)
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """
        Initialize transport error.

        Args:
            message: Error description
            status_code: HTTP status code when a response was received
        """
        self.status_code = status_code
        super().__init__(message)


class ChannelError(DomainException):
    """
    Processing channel failure (connect, disconnect, handshake).

    Only ever logged: a broken channel never blocks or aborts an upload.
    """


class UploadInProgressError(DomainException):
    """
    Raised when the session is changed while an upload is running.

    Starting a second upload or selecting another file while the orchestrator
    is Uploading or Confirming is rejected with this error.
    """


class HistoryPersistenceError(DomainException):
    """
    Raised when the import history cannot be written or removed.

    Examples:
        >>> raise HistoryPersistenceError("Cannot write /home/op/.catalog_importer/history.json")
    """
