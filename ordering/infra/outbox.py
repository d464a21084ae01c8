"""
Outbox of confirmations that still have to reach the customer.

Entries are written after the order has committed, in their own unit of
work, and drained by the resend_confirmations command.
"""
from __future__ import annotations

from uuid import UUID, uuid4

from django.db import models, transaction
from django.db.models import F
from django.utils import timezone

from ordering.infra.models import OrderORM, TimeStampedModel


class ConfirmationOutbox(TimeStampedModel):
    """Undelivered order confirmation."""
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order = models.ForeignKey(
        OrderORM,
        on_delete=models.CASCADE,
        related_name="pending_confirmations",
    )
    recipient = models.EmailField(max_length=255)
    last_error = models.TextField(blank=True, default="")
    delivered = models.BooleanField(default=False)
    delivered_at = models.DateTimeField(null=True, blank=True)
    message_id = models.CharField(max_length=255, blank=True, default="")
    retry_count = models.IntegerField(default=0)

    class Meta:
        indexes = [
            models.Index(fields=("delivered", "created_at")),
        ]


class OutboxRepository:
    """Repository for confirmation outbox entries."""

    @transaction.atomic
    def add_failure(self, order_id: UUID, recipient: str, error: str) -> UUID:
        """Queue a confirmation that could not be delivered."""
        entry = ConfirmationOutbox.objects.create(
            order_id=order_id,
            recipient=recipient,
            last_error=error,
        )
        return entry.id

    def get_pending(self, limit: int = 100, max_attempts: int | None = None) -> list[ConfirmationOutbox]:
        """Get undelivered entries, oldest first."""
        queryset = ConfirmationOutbox.objects.filter(delivered=False)
        if max_attempts is not None:
            queryset = queryset.filter(retry_count__lt=max_attempts)
        return list(queryset.order_by("created_at")[:limit])

    def mark_delivered(self, entry_id: UUID, message_id: str) -> None:
        """Mark entry as delivered."""
        ConfirmationOutbox.objects.filter(id=entry_id).update(
            delivered=True,
            delivered_at=timezone.now(),
            message_id=message_id,
            last_error="",
        )

    def increment_retry(self, entry_id: UUID, error: str) -> None:
        """Increment retry count and keep the latest error."""
        ConfirmationOutbox.objects.filter(id=entry_id).update(
            retry_count=F("retry_count") + 1,
            last_error=error,
        )
