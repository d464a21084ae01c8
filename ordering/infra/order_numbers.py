"""
Order number generation: ORD-YYYYMMDD-NNNN.

Candidates are not guaranteed unique; the unique index on order_number is
the source of truth and callers retry on collision.
"""
from __future__ import annotations

import re
from datetime import datetime
from typing import Callable

from django.db.models.functions import Length
from django.utils import timezone

from ordering.infra.models import OrderORM


class OrderNumberGenerator:
    """Date-based sequential order numbers."""

    def __init__(self, prefix: str = "ORD", clock: Callable[[], datetime] | None = None):
        self.prefix = prefix
        self._clock = clock or timezone.now

    def generate(self) -> str:
        stem = f"{self.prefix}-{timezone.localdate(self._clock()):%Y%m%d}-"
        # Longest first so that 10000 sorts after 9999
        last = (
            OrderORM.objects
            .filter(order_number__regex=rf"^{re.escape(stem)}[0-9]+$")
            .order_by(Length("order_number").desc(), "-order_number")
            .values_list("order_number", flat=True)
            .first()
        )
        counter = int(last[len(stem):]) + 1 if last else 1
        return f"{stem}{counter:04d}"
