"""
Values produced by a submission attempt. None of them is persisted.
"""
from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID


class PipelineStage(str, Enum):
    """Submission state machine."""
    VALIDATING = "VALIDATING"
    NUMBER_GENERATION = "NUMBER_GENERATION"
    PERSISTING = "PERSISTING"
    RENDERING = "RENDERING"
    DELIVERING = "DELIVERING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ConfirmationDocument:
    """Rendered confirmation message."""
    subject: str
    html_body: str
    text_body: str


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one delivery attempt."""
    success: bool
    message_id: str | None = None
    error: str | None = None

    @classmethod
    def delivered(cls, message_id: str) -> "DeliveryResult":
        return cls(success=True, message_id=message_id)

    @classmethod
    def failed(cls, error: str) -> "DeliveryResult":
        return cls(success=False, error=error)


@dataclass
class SubmissionResult:
    """A committed order, with whatever happened to its confirmation."""
    order_id: UUID
    order_number: str
    delivery: DeliveryResult | None = None
    rendering_error: str | None = None
    awaiting_commit: bool = False
    delivery_future: Future | None = field(default=None, repr=False, compare=False)

    ok = True
    stage = PipelineStage.COMPLETED


@dataclass(frozen=True)
class SubmissionFailed:
    """Submission rejected before or during persistence; nothing was committed."""
    reason: str
    code: str
    stage: PipelineStage
    retryable: bool = False
    errors: tuple[str, ...] = ()

    ok = False
