"""
Unit tests for domain models.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from django.test import TestCase

from ordering.domain.errors import ValidationFailure
from ordering.domain.order import (
    Customization,
    Order,
    OrderItem,
    OrderStatus,
    OrderType,
    to_money,
)
from ordering.test.fixtures import delivery_request, make_order, order_request


class MoneyTest(TestCase):
    """Tests for amount parsing."""

    def test_parses_strings_and_numbers(self):
        self.assertEqual(to_money("7.5", "unitPrice"), Decimal("7.50"))
        self.assertEqual(to_money(15, "total"), Decimal("15.00"))

    def test_rejects_fractions_of_a_cent(self):
        with self.assertRaises(ValidationFailure) as context:
            to_money("1.005", "unitPrice")
        self.assertIn("two decimal places", context.exception.message)

    def test_rejects_garbage_and_missing(self):
        with self.assertRaises(ValidationFailure):
            to_money("abc", "total")
        with self.assertRaises(ValidationFailure):
            to_money(None, "total")
        with self.assertRaises(ValidationFailure):
            to_money("NaN", "total")


class OrderItemTest(TestCase):
    """Tests for OrderItem value object."""

    def test_create_order_item(self):
        """Test creating order item with valid data."""
        item = OrderItem(product_id=1, quantity=2, unit_price=Decimal("7.50"))
        self.assertEqual(item.quantity, 2)
        self.assertEqual(item.total_price, Decimal("15.00"))
        self.assertEqual(item.label, "Product #1")

    def test_order_item_zero_quantity_fails(self):
        with self.assertRaises(ValueError):
            OrderItem(product_id=1, quantity=0, unit_price=Decimal("7.50"))

    def test_order_item_negative_price_fails(self):
        with self.assertRaises(ValidationFailure):
            OrderItem(product_id=1, quantity=1, unit_price=Decimal("-1.00"))

    def test_order_item_needs_product_id_or_name(self):
        with self.assertRaises(ValidationFailure):
            OrderItem(product_id=None, quantity=1, unit_price=Decimal("1.00"))

    def test_customizations_total(self):
        item = OrderItem(
            product_id=1,
            quantity=1,
            unit_price=Decimal("9.00"),
            customizations=[
                Customization(name="Extra cheese", unit_price=Decimal("1.50"), quantity=2),
                Customization(name=None, topping_id=7, unit_price=Decimal("0.75")),
            ],
        )
        self.assertEqual(item.customizations_total, Decimal("3.75"))
        self.assertEqual(item.customizations[1].label, "Topping #7")

    def test_from_request_rejects_fractional_quantity(self):
        with self.assertRaises(ValidationFailure):
            OrderItem.from_request({"productId": 1, "quantity": 1.5, "unitPrice": "2.00"})


class OrderTest(TestCase):
    """Tests for Order aggregate."""

    def test_valid_order_passes_validation(self):
        order = make_order()
        order.validate()
        self.assertEqual(order.status, OrderStatus.PENDING)
        self.assertFalse(order.is_persisted)

    def test_validation_collects_every_problem(self):
        order = make_order(customer_name="", customer_email="not-an-email", items=[])
        with self.assertRaises(ValidationFailure) as context:
            order.validate()
        errors = context.exception.errors
        self.assertIn("Customer name is required", errors)
        self.assertIn("Invalid email format", errors)
        self.assertIn("Order must contain at least one item", errors)

    def test_delivery_order_requires_address(self):
        order = make_order(order_type=OrderType.DELIVERY)
        with self.assertRaises(ValidationFailure) as context:
            order.validate()
        self.assertIn("Delivery address is required for delivery orders", context.exception.errors)

    def test_total_must_equal_subtotal_plus_fee(self):
        order = make_order(delivery_fee=Decimal("2.00"), total_amount=Decimal("15.00"))
        with self.assertRaises(ValidationFailure) as context:
            order.validate()
        self.assertIn("does not match", context.exception.message)

    def test_total_must_be_positive(self):
        order = make_order(subtotal=Decimal("0.00"), total_amount=Decimal("0.00"))
        with self.assertRaises(ValidationFailure):
            order.validate()

    def test_subtotal_mismatch_is_reported_not_rejected(self):
        order = make_order(subtotal=Decimal("16.00"), total_amount=Decimal("16.00"))
        order.validate()
        self.assertFalse(order.reconciles())

    def test_schedule_uses_order_type(self):
        now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
        pickup = make_order()
        pickup.schedule(now)
        self.assertEqual(pickup.estimated_ready_at, now + timedelta(minutes=30))

        delivery = make_order(order_type=OrderType.DELIVERY, delivery_address="Calle Mayor 1")
        delivery.schedule(now)
        self.assertEqual(delivery.estimated_ready_at, now + timedelta(minutes=45))

    def test_mark_persisted_only_once(self):
        order = make_order()
        order.mark_persisted(uuid4(), "ORD-20260301-0001")
        self.assertTrue(order.is_persisted)
        with self.assertRaises(ValueError):
            order.mark_persisted(uuid4(), "ORD-20260301-0002")

    def test_items_are_copied(self):
        order = make_order()
        order.items.clear()
        self.assertEqual(len(order.items), 1)


class OrderFromRequestTest(TestCase):
    """Tests for building orders from API input."""

    def test_camel_case_request(self):
        order = Order.from_request(order_request())
        self.assertEqual(order.customer_name, "Test Customer")
        self.assertEqual(order.order_type, OrderType.PICKUP)
        self.assertEqual(order.total_amount, Decimal("15.00"))
        self.assertEqual(order.items[0].product_name, "Margherita")
        self.assertEqual(order.items[0].unit_price, Decimal("7.50"))

    def test_snake_case_request(self):
        order = Order.from_request({
            "customer": {"name": "Ana", "email": "ana@example.com", "phone": "600"},
            "order_type": "delivery",
            "delivery_address": "Calle Luna 3",
            "subtotal": "10.00",
            "delivery_fee": "2.50",
            "total_amount": "12.50",
            "items": [{"product_id": 3, "quantity": 1, "unit_price": "10.00"}],
        })
        self.assertEqual(order.customer_email, "ana@example.com")
        self.assertEqual(order.delivery_fee, Decimal("2.50"))
        self.assertTrue(order.is_delivery)
        order.validate()

    def test_customizations_are_parsed(self):
        data = order_request(
            subtotal="16.00",
            total="16.00",
            items=[{
                "productId": 1,
                "quantity": 2,
                "unitPrice": "7.50",
                "customizations": [{"name": "Olives", "unitPrice": "1.00"}],
            }],
        )
        order = Order.from_request(data)
        self.assertEqual(order.items[0].customizations[0].quantity, 1)
        self.assertTrue(order.reconciles())

    def test_unknown_order_type(self):
        with self.assertRaises(ValidationFailure):
            Order.from_request(order_request(orderType="drone"))

    def test_delivery_request_is_valid(self):
        order = Order.from_request(delivery_request())
        order.validate()
        self.assertEqual(order.delivery_instructions, "Ring twice")
