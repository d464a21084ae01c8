"""
GraphQL schema definition using Ariadne.
"""
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from uuid import UUID

from ariadne import (
    MutationType,
    QueryType,
    ScalarType,
    load_schema_from_path,
    make_executable_schema,
)

from ordering.api.middleware import ErrorHandler
from ordering.domain.order import Order
from ordering.services import OrderQueryService, build_submission_pipeline

# Load schema from .graphql files
SCHEMAS_DIR = Path(__file__).parent / "schemas"
type_defs = "\n".join([
    load_schema_from_path(SCHEMAS_DIR / "common.graphql"),
    load_schema_from_path(SCHEMAS_DIR / "query.graphql"),
    load_schema_from_path(SCHEMAS_DIR / "mutation.graphql"),
])

query = QueryType()
mutation = MutationType()


def _pipeline(info):
    return info.context.get("pipeline") or build_submission_pipeline()


def order_to_dict(order: Order) -> dict:
    """Serialize a domain order into the GraphQL Order shape."""
    return {
        "id": order.id,
        "orderNumber": order.order_number,
        "status": order.status.value,
        "orderType": order.order_type.value,
        "customerName": order.customer_name,
        "customerEmail": order.customer_email,
        "customerPhone": order.customer_phone,
        "deliveryAddress": order.delivery_address,
        "deliveryInstructions": order.delivery_instructions,
        "specialInstructions": order.special_instructions,
        "subtotal": order.subtotal,
        "deliveryFee": order.delivery_fee,
        "totalAmount": order.total_amount,
        "estimatedReadyAt": order.estimated_ready_at,
        "createdAt": order.created_at,
        "items": [
            {
                "productId": item.product_id,
                "productName": item.label,
                "quantity": item.quantity,
                "unitPrice": item.unit_price,
                "totalPrice": item.total_price,
                "specialInstructions": item.special_instructions,
                "customizations": [
                    {
                        "name": custom.label,
                        "toppingId": custom.topping_id,
                        "quantity": custom.quantity,
                        "unitPrice": custom.unit_price,
                        "totalPrice": custom.total_price,
                    }
                    for custom in item.customizations
                ],
            }
            for item in order.items
        ],
    }


@query.field("order")
def resolve_order(_, info, orderNumber: str):
    """Resolve order lookup by public number."""
    order = OrderQueryService().get_by_number(orderNumber)
    if order is None:
        return None
    return order_to_dict(order)


@mutation.field("submitOrder")
def resolve_submit_order(_, info, input: dict):
    """Resolve submit order mutation."""
    outcome = _pipeline(info).submit(input)

    if not outcome.ok:
        return {"ok": False, "error": ErrorHandler.payload_for(outcome)}

    if outcome.delivery is None:
        confirmation = {
            "sent": None,
            "pending": outcome.awaiting_commit or outcome.delivery_future is not None,
            "messageId": None,
            "error": outcome.rendering_error,
        }
    else:
        confirmation = {
            "sent": outcome.delivery.success,
            "pending": False,
            "messageId": outcome.delivery.message_id,
            "error": outcome.delivery.error,
        }

    return {
        "ok": True,
        "orderId": outcome.order_id,
        "orderNumber": outcome.order_number,
        "confirmation": confirmation,
    }


# Define custom scalars
decimal_scalar = ScalarType("Decimal")
uuid_scalar = ScalarType("UUID")
datetime_scalar = ScalarType("DateTime")


@decimal_scalar.serializer
def serialize_decimal(value):
    """Serialize Decimal to string."""
    return str(value)


@decimal_scalar.value_parser
def parse_decimal_value(value):
    """Parse Decimal from string or number."""
    return Decimal(str(value))


@uuid_scalar.serializer
def serialize_uuid(value):
    return str(value)


@uuid_scalar.value_parser
def parse_uuid_value(value):
    """Parse UUID from string."""
    if isinstance(value, UUID):
        return value
    return UUID(str(value))


@datetime_scalar.serializer
def serialize_datetime(value):
    """Serialize DateTime to ISO format string."""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


@datetime_scalar.value_parser
def parse_datetime_value(value):
    """Parse DateTime from string."""
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


# Create executable schema
schema = make_executable_schema(
    type_defs,
    query,
    mutation,
    datetime_scalar,
    decimal_scalar,
    uuid_scalar,
)
