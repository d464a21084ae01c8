from __future__ import annotations

from uuid import uuid4

from django.db import models


STATUS_CHOICES = (
    ("pending", "Pending"),
    ("confirmed", "Confirmed"),
    ("preparing", "Preparing"),
    ("ready", "Ready"),
    ("delivering", "Delivering"),
    ("delivered", "Delivered"),
    ("cancelled", "Cancelled"),
)

ORDER_TYPE_CHOICES = (
    ("pickup", "Pickup"),
    ("delivery", "Delivery"),
)


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class OrderORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order_number = models.CharField(max_length=50, unique=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    order_type = models.CharField(max_length=20, choices=ORDER_TYPE_CHOICES)

    customer_name = models.CharField(max_length=200)
    customer_email = models.EmailField(max_length=255)
    customer_phone = models.CharField(max_length=20, blank=True, default="")

    delivery_address = models.TextField(blank=True, default="")
    delivery_instructions = models.TextField(blank=True, default="")
    special_instructions = models.TextField(blank=True, default="")

    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)

    estimated_ready_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=("customer_email",)),
            models.Index(fields=("status", "created_at")),
        ]

    def __str__(self):
        return self.order_number


class OrderItemORM(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    order = models.ForeignKey(
        OrderORM,
        on_delete=models.CASCADE,
        related_name="items",
    )
    position = models.PositiveIntegerField()
    product_id = models.PositiveIntegerField(null=True, blank=True)
    product_name = models.CharField(max_length=200, blank=True, default="")
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    special_instructions = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["position"]
        indexes = [
            models.Index(fields=("order",)),
        ]


class OrderItemCustomizationORM(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    item = models.ForeignKey(
        OrderItemORM,
        on_delete=models.CASCADE,
        related_name="customizations",
    )
    position = models.PositiveIntegerField()
    topping_id = models.PositiveIntegerField(null=True, blank=True)
    name = models.CharField(max_length=200, blank=True, default="")
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        ordering = ["position"]
