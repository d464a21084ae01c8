from django.contrib import admin

from ordering.infra.models import OrderItemCustomizationORM, OrderItemORM, OrderORM
from ordering.infra.outbox import ConfirmationOutbox


class OrderItemInline(admin.TabularInline):
    model = OrderItemORM
    extra = 0
    fields = ("position", "product_id", "product_name", "quantity", "unit_price", "total_price")
    readonly_fields = fields


@admin.register(OrderORM)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "customer_name", "order_type", "status", "total_amount", "created_at")
    list_filter = ("status", "order_type", "created_at")
    search_fields = ("order_number", "customer_name", "customer_email")
    inlines = (OrderItemInline,)


@admin.register(OrderItemCustomizationORM)
class OrderItemCustomizationAdmin(admin.ModelAdmin):
    list_display = ("id", "item", "name", "topping_id", "quantity", "unit_price", "total_price")


@admin.register(ConfirmationOutbox)
class ConfirmationOutboxAdmin(admin.ModelAdmin):
    list_display = ("id", "order", "recipient", "delivered", "retry_count", "created_at")
    list_filter = ("delivered", "created_at")
    readonly_fields = ("id", "order", "recipient", "last_error", "delivered", "delivered_at", "message_id", "retry_count")
