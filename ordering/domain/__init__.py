from ordering.domain.order import Customization, Order, OrderItem, OrderStatus, OrderType
from ordering.domain.results import (
    ConfirmationDocument,
    DeliveryResult,
    PipelineStage,
    SubmissionFailed,
    SubmissionResult,
)

__all__ = [
    "ConfirmationDocument",
    "Customization",
    "DeliveryResult",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderType",
    "PipelineStage",
    "SubmissionFailed",
    "SubmissionResult",
]
