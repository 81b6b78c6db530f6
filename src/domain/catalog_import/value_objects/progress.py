"""
Progress Value Objects

The two independent progress signals of an in-flight import.

Responsibility:
    - TransferProgress: bytes of the upload request sent so far (HTTP layer)
    - ProcessingProgress: step label and percentage pushed by the server over
      the processing channel
    - ProcessingMessage: decoded wire message of the processing channel

Architecture Notes:
    - Immutable value objects (frozen pydantic models)
    - The two signals are never merged into a single number; each one is
      replaced wholesale by its own event source
"""

from typing import Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr


class TransferProgress(BaseModel):
    """
    Byte-level progress of the upload request.

    Attributes:
        bytes_sent: Bytes handed to the transport so far
        bytes_total: Total request body size (0 if unknown)

    Examples:
        >>> TransferProgress(bytes_sent=512, bytes_total=1024).percent
        50
        >>> TransferProgress.complete().percent
        100
    """

    bytes_sent: int = Field(default=0, ge=0)
    bytes_total: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def complete(cls, bytes_total: int = 0) -> "TransferProgress":
        """Progress forced to 100% once the terminal success response arrives."""
        if bytes_total <= 0:
            return cls(bytes_sent=1, bytes_total=1)
        return cls(bytes_sent=bytes_total, bytes_total=bytes_total)

    @property
    def percent(self) -> int:
        """Rounded percentage (0-100), 0 while the total is unknown."""
        if self.bytes_total <= 0:
            return 0
        return min(100, round(self.bytes_sent * 100 / self.bytes_total))


class ProcessingProgress(BaseModel):
    """
    Server-side processing progress (last valid channel message).

    Attributes:
        step_label: Current step as reported by the server
        percent_complete: Percentage reported by the server
    """

    step_label: str = ""
    percent_complete: float = 0.0

    model_config = ConfigDict(frozen=True)


class ProcessingMessage(BaseModel):
    """
    Wire format of a processing channel message: {"step": str, "progress": number}.

    Decoding is strict: ``step`` must be a JSON string and ``progress`` a JSON
    number (finite: NaN and Infinity literals are rejected). Extra keys are
    ignored.

    Examples:
        >>> ProcessingMessage.model_validate_json('{"step": "Saving", "progress": 80}')
        ProcessingMessage(step='Saving', progress=80)
    """

    step: StrictStr
    progress: Union[StrictInt, StrictFloat]

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    def to_progress(self) -> ProcessingProgress:
        return ProcessingProgress(
            step_label=self.step, percent_complete=float(self.progress)
        )
