"""
Domain model for Order aggregate.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any
from uuid import UUID

from ordering.domain.errors import ValidationFailure

CENT = Decimal("0.01")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class OrderStatus(str, Enum):
    """Order status enumeration."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERING = "delivering"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderType(str, Enum):
    """How the order reaches the customer."""
    PICKUP = "pickup"
    DELIVERY = "delivery"


def to_money(value: Any, field: str) -> Decimal:
    """Parse an amount, refusing anything finer than a cent."""
    if value is None or value == "":
        raise ValidationFailure(f"{field} is required")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationFailure(f"{field} must be a number, got {value!r}")
    if not amount.is_finite():
        raise ValidationFailure(f"{field} must be a finite number")
    quantized = amount.quantize(CENT)
    if quantized != amount:
        raise ValidationFailure(f"{field} must have at most two decimal places")
    return quantized


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


class Customization:
    """Modifier applied to a line item (topping, extra, ...)."""

    def __init__(
        self,
        name: str | None,
        unit_price: Decimal,
        quantity: int = 1,
        topping_id: int | None = None,
    ):
        if not name and topping_id is None:
            raise ValidationFailure("Customization must have either topping ID or name")
        if quantity <= 0:
            raise ValidationFailure("Customization quantity must be greater than 0")
        if unit_price < 0:
            raise ValidationFailure("Customization unit price cannot be negative")

        self.name = name
        self.topping_id = topping_id
        self.quantity = quantity
        self.unit_price = unit_price

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def label(self) -> str:
        return self.name or f"Topping #{self.topping_id}"

    @classmethod
    def from_request(cls, data: dict) -> "Customization":
        return cls(
            name=_pick(data, "name", "toppingName", "topping_name"),
            topping_id=_optional_int(_pick(data, "toppingId", "topping_id"), "toppingId"),
            quantity=_as_int(_pick(data, "quantity", default=1), "customization quantity"),
            unit_price=to_money(_pick(data, "unitPrice", "unit_price", "price", default=0), "customization unitPrice"),
        )


class OrderItem:
    """Order line item value object."""

    def __init__(
        self,
        product_id: int | None,
        quantity: int,
        unit_price: Decimal,
        product_name: str | None = None,
        special_instructions: str | None = None,
        customizations: list[Customization] | None = None,
    ):
        if product_id is None and not product_name:
            raise ValidationFailure("Either product ID or product name is required")
        if quantity <= 0:
            raise ValidationFailure("Quantity must be greater than 0")
        if unit_price < 0:
            raise ValidationFailure("Unit price cannot be negative")

        self.product_id = product_id
        self.product_name = product_name
        self.quantity = quantity
        self.unit_price = unit_price
        self.special_instructions = special_instructions or ""
        self.customizations = list(customizations or [])

    @property
    def total_price(self) -> Decimal:
        """Line total without customizations."""
        return self.unit_price * self.quantity

    @property
    def customizations_total(self) -> Decimal:
        return sum((c.total_price for c in self.customizations), Decimal("0.00"))

    @property
    def label(self) -> str:
        return self.product_name or f"Product #{self.product_id}"

    @classmethod
    def from_request(cls, data: dict) -> "OrderItem":
        if not isinstance(data, dict):
            raise ValidationFailure("Each item must be an object")
        customizations = _pick(data, "customizations", default=[]) or []
        if not isinstance(customizations, (list, tuple)):
            raise ValidationFailure("customizations must be a list")
        return cls(
            product_id=_optional_int(_pick(data, "productId", "product_id"), "productId"),
            product_name=_pick(data, "name", "productName", "product_name"),
            quantity=_as_int(_pick(data, "quantity"), "quantity"),
            unit_price=to_money(_pick(data, "unitPrice", "unit_price", "price"), "unitPrice"),
            special_instructions=_pick(data, "specialInstructions", "special_instructions"),
            customizations=[Customization.from_request(c) for c in customizations],
        )


class Order:
    """Order aggregate root."""

    def __init__(
        self,
        customer_name: str,
        customer_email: str,
        order_type: OrderType,
        subtotal: Decimal,
        delivery_fee: Decimal,
        total_amount: Decimal,
        items: list[OrderItem] | None = None,
        customer_phone: str = "",
        delivery_address: str = "",
        delivery_instructions: str = "",
        special_instructions: str = "",
        status: OrderStatus = OrderStatus.PENDING,
        id: UUID | None = None,
        order_number: str | None = None,
        estimated_ready_at: datetime | None = None,
        created_at: datetime | None = None,
    ):
        self.id = id
        self.order_number = order_number
        self.customer_name = customer_name
        self.customer_email = customer_email
        self.customer_phone = customer_phone or ""
        self.order_type = order_type
        self.delivery_address = delivery_address or ""
        self.delivery_instructions = delivery_instructions or ""
        self.special_instructions = special_instructions or ""
        self.subtotal = subtotal
        self.delivery_fee = delivery_fee
        self.total_amount = total_amount
        self.status = status
        self.estimated_ready_at = estimated_ready_at
        self.created_at = created_at
        self._items = list(items or [])

    @property
    def items(self) -> list[OrderItem]:
        """Get order items (immutable)."""
        return list(self._items)

    @property
    def items_total(self) -> Decimal:
        """Sum of line totals including customizations."""
        return sum(
            (item.total_price + item.customizations_total for item in self._items),
            Decimal("0.00"),
        )

    @property
    def is_delivery(self) -> bool:
        return self.order_type == OrderType.DELIVERY

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def reconciles(self) -> bool:
        """Whether the item totals add up to the declared subtotal."""
        return self.items_total == self.subtotal

    def validate(self) -> None:
        """Raise ValidationFailure listing every problem found."""
        errors = []

        if not self.customer_name:
            errors.append("Customer name is required")
        if not self.customer_email:
            errors.append("Customer email is required")
        elif not EMAIL_RE.match(self.customer_email):
            errors.append("Invalid email format")
        if self.order_type not in (OrderType.PICKUP, OrderType.DELIVERY):
            errors.append('Order type must be either "delivery" or "pickup"')
        if self.order_type == OrderType.DELIVERY and not self.delivery_address:
            errors.append("Delivery address is required for delivery orders")
        if not self._items:
            errors.append("Order must contain at least one item")
        if self.subtotal < 0:
            errors.append("Subtotal cannot be negative")
        if self.delivery_fee < 0:
            errors.append("Delivery fee cannot be negative")
        if self.total_amount <= 0:
            errors.append("Total amount must be greater than 0")
        if self.subtotal + self.delivery_fee != self.total_amount:
            errors.append(
                f"Total amount {self.total_amount} does not match "
                f"subtotal {self.subtotal} + delivery fee {self.delivery_fee}"
            )

        if errors:
            raise ValidationFailure(f"Order validation failed: {', '.join(errors)}", errors)

    def schedule(self, now: datetime, pickup_minutes: int = 30, delivery_minutes: int = 45) -> None:
        """Set the estimated fulfillment time relative to ``now``."""
        minutes = delivery_minutes if self.is_delivery else pickup_minutes
        self.estimated_ready_at = now + timedelta(minutes=minutes)

    def mark_persisted(self, order_id: UUID, order_number: str, created_at: datetime | None = None) -> None:
        """Attach the identity assigned by storage."""
        if self.is_persisted:
            raise ValueError(f"Order {self.order_number} is already persisted")
        self.id = order_id
        self.order_number = order_number
        self.created_at = created_at

    @classmethod
    def from_request(cls, data: dict) -> "Order":
        """Build an order from API input (camelCase or snake_case keys)."""
        if not isinstance(data, dict):
            raise ValidationFailure("Order request must be an object")

        customer = _pick(data, "customer", default={})
        if not isinstance(customer, dict):
            customer = {"name": customer}

        raw_type = _pick(data, "orderType", "order_type", "deliveryType", "delivery_type", default="delivery")
        try:
            order_type = OrderType(str(raw_type).lower())
        except ValueError:
            raise ValidationFailure('Order type must be either "delivery" or "pickup"')

        raw_items = _pick(data, "items", default=[])
        if not isinstance(raw_items, (list, tuple)):
            raise ValidationFailure("items must be a list")

        return cls(
            customer_name=_pick(data, "customerName", "customer_name", default=customer.get("name", "")),
            customer_email=_pick(data, "customerEmail", "customer_email", "email", default=customer.get("email", "")),
            customer_phone=_pick(data, "customerPhone", "customer_phone", "phone", default=customer.get("phone", "")),
            order_type=order_type,
            delivery_address=_pick(data, "deliveryAddress", "delivery_address", "delivery_address_text", default=""),
            delivery_instructions=_pick(data, "deliveryInstructions", "delivery_instructions", default=""),
            special_instructions=_pick(data, "specialInstructions", "special_instructions", default=""),
            subtotal=to_money(_pick(data, "subtotal"), "subtotal"),
            delivery_fee=to_money(_pick(data, "deliveryFee", "delivery_fee", default=0), "deliveryFee"),
            total_amount=to_money(_pick(data, "total", "totalAmount", "total_amount"), "total"),
            items=[OrderItem.from_request(item) for item in raw_items],
        )


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationFailure(f"{field} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationFailure(f"{field} must be an integer, got {value!r}")
    if number != value and str(number) != str(value).strip():
        raise ValidationFailure(f"{field} must be an integer, got {value!r}")
    return number


def _optional_int(value: Any, field: str) -> int | None:
    if value is None or value == "":
        return None
    return _as_int(value, field)
