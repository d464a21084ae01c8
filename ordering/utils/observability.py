"""
Structured observability hook for the submission pipeline.
"""
from __future__ import annotations

import logging

from ordering.infra.pii_masker import mask_pii_in_dict

logger = logging.getLogger("ordering.events")

EVENT_LEVELS = {
    "order_validation_failed": logging.WARNING,
    "order_number_collision": logging.WARNING,
    "order_submission_failed": logging.ERROR,
    "subtotal_mismatch": logging.WARNING,
    "confirmation_render_failed": logging.ERROR,
    "confirmation_delivery_failed": logging.WARNING,
    "confirmation_queue_failed": logging.ERROR,
}


class SubmissionObserver:
    """Receives named events with structured fields. Does nothing by default."""

    def emit(self, event: str, **fields) -> None:
        pass


class LoggingObserver(SubmissionObserver):
    """Writes events to the ``ordering.events`` logger with PII masked."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    def emit(self, event: str, **fields) -> None:
        level = EVENT_LEVELS.get(event, logging.INFO)
        extra = mask_pii_in_dict(fields)
        extra["event"] = event
        self.log.log(level, event, extra=extra)
