"""
Order confirmation rendering.

Pure function of the order: no clock, no I/O beyond loading templates, so
identical orders always give byte-identical documents.
"""
from __future__ import annotations

from decimal import Decimal

from django.template import TemplateDoesNotExist, TemplateSyntaxError
from django.template.loader import render_to_string
from django.utils import timezone

from ordering.config import SubmissionSettings
from ordering.domain.errors import RenderingError
from ordering.domain.order import CENT, Order, OrderItem
from ordering.domain.results import ConfirmationDocument

HTML_TEMPLATE = "ordering/emails/order_confirmation.html"
TEXT_TEMPLATE = "ordering/emails/order_confirmation.txt"


class ConfirmationRenderer:
    """Builds the confirmation email for a committed order."""

    def __init__(self, settings: SubmissionSettings | None = None):
        self.settings = settings or SubmissionSettings()

    def render(self, order: Order, items: list[OrderItem]) -> ConfirmationDocument:
        self._check_required(order, items)
        context = self._build_context(order, items)
        try:
            html_body = render_to_string(HTML_TEMPLATE, context)
            text_body = render_to_string(TEXT_TEMPLATE, context)
        except (TemplateDoesNotExist, TemplateSyntaxError) as e:
            raise RenderingError(f"Confirmation template unavailable: {e}") from e

        subject = f"Order confirmation {order.order_number} - {self.settings.restaurant_name}"
        return ConfirmationDocument(subject=subject, html_body=html_body, text_body=text_body)

    def _check_required(self, order: Order, items: list[OrderItem]) -> None:
        missing = []
        if not order.order_number:
            missing.append("order number")
        if not order.customer_name:
            missing.append("customer name")
        if order.estimated_ready_at is None:
            missing.append("estimated time")
        for name in ("subtotal", "delivery_fee", "total_amount"):
            if getattr(order, name) is None:
                missing.append(name.replace("_", " "))
        if not items:
            missing.append("items")
        if missing:
            raise RenderingError(f"Cannot render confirmation, missing: {', '.join(missing)}")

    def _build_context(self, order: Order, items: list[OrderItem]) -> dict:
        money = self._money
        return {
            "restaurant_name": self.settings.restaurant_name,
            "restaurant_address": self.settings.restaurant_address,
            "restaurant_phone": self.settings.restaurant_phone,
            "order_number": order.order_number,
            "customer_name": order.customer_name,
            "is_delivery": order.is_delivery,
            "order_type": order.order_type.value,
            "estimated_time": self._format_time(order.estimated_ready_at),
            "delivery_address": order.delivery_address,
            "delivery_instructions": order.delivery_instructions,
            "special_instructions": order.special_instructions,
            "subtotal": money(order.subtotal),
            "delivery_fee": money(order.delivery_fee),
            "total": money(order.total_amount),
            "items": [
                {
                    "name": item.label,
                    "quantity": item.quantity,
                    "unit_price": money(item.unit_price),
                    "line_total": money(item.total_price),
                    "special_instructions": item.special_instructions,
                    "customizations": [
                        {
                            "name": custom.label,
                            "quantity": custom.quantity,
                            "total": money(custom.total_price),
                        }
                        for custom in item.customizations
                    ],
                }
                for item in items
            ],
        }

    def _format_time(self, value) -> str:
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.strftime("%Y-%m-%d %H:%M")

    def _money(self, amount: Decimal) -> str:
        return f"{self.settings.currency_symbol}{Decimal(amount).quantize(CENT)}"
