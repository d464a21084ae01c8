"""
Tests for order number generation.
"""
from datetime import datetime, timezone
from decimal import Decimal

from django.test import TestCase

from ordering.infra.models import OrderORM
from ordering.infra.order_numbers import OrderNumberGenerator

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _store(order_number):
    return OrderORM.objects.create(
        order_number=order_number,
        order_type="pickup",
        customer_name="Test Customer",
        customer_email="test@example.com",
        subtotal=Decimal("10.00"),
        total_amount=Decimal("10.00"),
    )


class OrderNumberGeneratorTest(TestCase):
    """Tests for OrderNumberGenerator."""

    def setUp(self):
        self.generator = OrderNumberGenerator(clock=lambda: NOW)

    def test_first_number_of_the_day(self):
        self.assertEqual(self.generator.generate(), "ORD-20260301-0001")

    def test_continues_after_highest_existing(self):
        _store("ORD-20260301-0001")
        _store("ORD-20260301-0007")
        self.assertEqual(self.generator.generate(), "ORD-20260301-0008")

    def test_counter_is_numeric_not_lexicographic(self):
        _store("ORD-20260301-9999")
        _store("ORD-20260301-10000")
        self.assertEqual(self.generator.generate(), "ORD-20260301-10001")

    def test_other_days_do_not_count(self):
        _store("ORD-20260228-0042")
        self.assertEqual(self.generator.generate(), "ORD-20260301-0001")

    def test_custom_prefix(self):
        _store("ORD-20260301-0003")
        generator = OrderNumberGenerator(prefix="WEB", clock=lambda: NOW)
        self.assertEqual(generator.generate(), "WEB-20260301-0001")

    def test_generate_does_not_reserve(self):
        first = self.generator.generate()
        second = self.generator.generate()
        self.assertEqual(first, second)
