"""
Error taxonomy for order submission.

Everything raised at or before commit is fatal to a submission; rendering and
delivery errors are recovered after commit and only reported.
"""
from __future__ import annotations


class OrderingError(Exception):
    """Base class for order submission errors."""
    code = "ORDERING_ERROR"
    retryable = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationFailure(OrderingError, ValueError):
    """Malformed or inconsistent order input."""
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = list(errors) if errors else [message]


class UniqueConstraintViolation(OrderingError):
    """Order number already taken in storage."""
    code = "ORDER_NUMBER_TAKEN"

    def __init__(self, order_number: str):
        super().__init__(f"Order number {order_number} already exists")
        self.order_number = order_number


class DuplicateIdentifier(OrderingError):
    """Could not obtain a free order number within the attempt bound."""
    code = "DUPLICATE_IDENTIFIER"

    def __init__(self, attempts: int):
        super().__init__(f"Could not allocate a unique order number after {attempts} attempts")
        self.attempts = attempts


class TransientStorageError(OrderingError):
    """Connection or timeout failure while talking to the store."""
    code = "STORAGE_UNAVAILABLE"
    retryable = True


class RenderingError(OrderingError):
    """Confirmation document could not be built from the order."""
    code = "RENDERING_ERROR"


class DeliveryFailure(OrderingError):
    """Transport could not hand over the confirmation."""
    code = "DELIVERY_FAILED"
