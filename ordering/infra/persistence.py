"""
All-or-nothing write of one order and its line items.
"""
from __future__ import annotations

import logging
from uuid import UUID

from django.core.exceptions import ValidationError as ModelValidationError
from django.db import (
    DataError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    transaction,
)

from ordering.domain.errors import (
    TransientStorageError,
    UniqueConstraintViolation,
    ValidationFailure,
)
from ordering.domain.order import Order, OrderItem
from ordering.infra.models import OrderItemCustomizationORM, OrderItemORM, OrderORM

logger = logging.getLogger(__name__)


class OrderPersistenceTransaction:
    """Insert an order row and its item rows inside a single atomic block.

    Nothing is visible outside the block unless every insert succeeded.
    Storage errors are translated into the ordering error taxonomy and
    propagated; retrying is up to the caller.
    """

    def execute(self, order: Order, items: list[OrderItem], order_number: str) -> tuple[UUID, str]:
        """Persist ``order`` with ``items`` under ``order_number``."""
        order.validate()
        try:
            with transaction.atomic():
                order_orm = self._insert_order(order, order_number)
                for position, item in enumerate(items):
                    self._insert_item(order_orm, position, item)
        except IntegrityError as e:
            if "order_number" in str(e):
                raise UniqueConstraintViolation(order_number) from e
            raise ValidationFailure(f"Order rejected by storage: {e}") from e
        except DataError as e:
            raise ValidationFailure(f"Order rejected by storage: {e}") from e
        except ModelValidationError as e:
            raise ValidationFailure("Order row validation failed", e.messages) from e
        except (OperationalError, InterfaceError) as e:
            raise TransientStorageError(f"Storage unavailable: {e}") from e

        logger.debug(
            "order_rows_committed",
            extra={"order_number": order_number, "status": "committed"},
        )
        order.mark_persisted(order_orm.id, order_orm.order_number, order_orm.created_at)
        return order_orm.id, order_orm.order_number

    def _insert_order(self, order: Order, order_number: str) -> OrderORM:
        order_orm = OrderORM(
            order_number=order_number,
            status=order.status.value,
            order_type=order.order_type.value,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            customer_phone=order.customer_phone,
            delivery_address=order.delivery_address,
            delivery_instructions=order.delivery_instructions,
            special_instructions=order.special_instructions,
            subtotal=order.subtotal,
            delivery_fee=order.delivery_fee,
            total_amount=order.total_amount,
            estimated_ready_at=order.estimated_ready_at,
        )
        # Uniqueness is left to the index so collisions surface as IntegrityError
        order_orm.full_clean(validate_unique=False)
        order_orm.save(force_insert=True)
        return order_orm

    def _insert_item(self, order_orm: OrderORM, position: int, item: OrderItem) -> OrderItemORM:
        item_orm = OrderItemORM.objects.create(
            order=order_orm,
            position=position,
            product_id=item.product_id,
            product_name=item.product_name or "",
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.unit_price * item.quantity,
            special_instructions=item.special_instructions,
        )
        for custom_position, custom in enumerate(item.customizations):
            OrderItemCustomizationORM.objects.create(
                item=item_orm,
                position=custom_position,
                topping_id=custom.topping_id,
                name=custom.name or "",
                quantity=custom.quantity,
                unit_price=custom.unit_price,
                total_price=custom.total_price,
            )
        return item_orm
