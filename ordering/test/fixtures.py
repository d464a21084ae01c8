"""
Shared request payloads and doubles for ordering tests.
"""
from decimal import Decimal

from ordering.domain.errors import UniqueConstraintViolation
from ordering.domain.order import Order, OrderItem, OrderType


def order_request(**overrides) -> dict:
    """A valid pickup order: 2 x 7.50 = 15.00."""
    data = {
        "customerName": "Test Customer",
        "customerEmail": "test@example.com",
        "customerPhone": "+34 600 111 222",
        "orderType": "pickup",
        "subtotal": "15.00",
        "deliveryFee": "0.00",
        "total": "15.00",
        "items": [
            {"productId": 1, "name": "Margherita", "quantity": 2, "unitPrice": "7.50"},
        ],
    }
    data.update(overrides)
    return data


def delivery_request(**overrides) -> dict:
    data = order_request(
        orderType="delivery",
        deliveryAddress="Calle Mayor 1, Madrid",
        deliveryInstructions="Ring twice",
        deliveryFee="2.50",
        total="17.50",
    )
    data.update(overrides)
    return data


def make_order(**overrides) -> Order:
    fields = {
        "customer_name": "Test Customer",
        "customer_email": "test@example.com",
        "order_type": OrderType.PICKUP,
        "subtotal": Decimal("15.00"),
        "delivery_fee": Decimal("0.00"),
        "total_amount": Decimal("15.00"),
        "items": [
            OrderItem(product_id=1, product_name="Margherita", quantity=2, unit_price=Decimal("7.50")),
        ],
    }
    fields.update(overrides)
    return Order(**fields)


class FixedNumbers:
    """Number generator handing out a fixed sequence of candidates."""

    def __init__(self, *numbers):
        self.numbers = list(numbers)
        self.calls = 0

    def generate(self):
        number = self.numbers[min(self.calls, len(self.numbers) - 1)]
        self.calls += 1
        return number


class AlwaysCollides:
    """Persistence double that reports every number as taken."""

    def __init__(self):
        self.attempted = []

    def execute(self, order, items, order_number):
        self.attempted.append(order_number)
        raise UniqueConstraintViolation(order_number)


class RecordingObserver:
    def __init__(self):
        self.events = []

    def emit(self, event, **fields):
        self.events.append((event, fields))

    def names(self):
        return [event for event, _ in self.events]


class FailingTransport:
    """Transport double that always raises the given exception."""

    def __init__(self, error):
        self.error = error
        self.calls = 0

    def send(self, recipient, subject, html_body, text_body):
        self.calls += 1
        raise self.error
