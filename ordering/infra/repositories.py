"""
Infrastructure repositories for domain entities.
"""
from __future__ import annotations

from uuid import UUID

from django.db.models import Prefetch

from ordering.domain.order import Customization, Order, OrderItem, OrderStatus, OrderType
from ordering.infra.models import OrderItemORM, OrderORM


class OrderRepository:
    """Read access to the Order aggregate."""

    def _queryset(self):
        return OrderORM.objects.prefetch_related(
            Prefetch("items", queryset=OrderItemORM.objects.prefetch_related("customizations")),
        )

    def get_by_id(self, order_id: UUID) -> Order | None:
        """Get order by ID with items and customizations."""
        try:
            return self._to_domain(self._queryset().get(id=order_id))
        except OrderORM.DoesNotExist:
            return None

    def get_by_number(self, order_number: str) -> Order | None:
        """Get order by its public order number."""
        try:
            return self._to_domain(self._queryset().get(order_number=order_number))
        except OrderORM.DoesNotExist:
            return None

    def exists(self, order_number: str) -> bool:
        return OrderORM.objects.filter(order_number=order_number).exists()

    def _to_domain(self, order_orm: OrderORM) -> Order:
        """Convert ORM model to domain entity."""
        items = []
        for item_orm in order_orm.items.all():
            items.append(OrderItem(
                product_id=item_orm.product_id,
                product_name=item_orm.product_name or None,
                quantity=item_orm.quantity,
                unit_price=item_orm.unit_price,
                special_instructions=item_orm.special_instructions,
                customizations=[
                    Customization(
                        name=custom_orm.name or None,
                        topping_id=custom_orm.topping_id,
                        quantity=custom_orm.quantity,
                        unit_price=custom_orm.unit_price,
                    )
                    for custom_orm in item_orm.customizations.all()
                ],
            ))

        return Order(
            id=order_orm.id,
            order_number=order_orm.order_number,
            customer_name=order_orm.customer_name,
            customer_email=order_orm.customer_email,
            customer_phone=order_orm.customer_phone,
            order_type=OrderType(order_orm.order_type),
            delivery_address=order_orm.delivery_address,
            delivery_instructions=order_orm.delivery_instructions,
            special_instructions=order_orm.special_instructions,
            subtotal=order_orm.subtotal,
            delivery_fee=order_orm.delivery_fee,
            total_amount=order_orm.total_amount,
            status=OrderStatus(order_orm.status),
            estimated_ready_at=order_orm.estimated_ready_at,
            created_at=order_orm.created_at,
            items=items,
        )
