"""
Error mapping for API responses.
"""
import logging

from django.http import JsonResponse

from ordering.domain.errors import OrderingError
from ordering.domain.results import SubmissionFailed

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Error handler for API responses."""

    ERROR_CODES = {
        "VALIDATION_ERROR": 400,
        "NOT_FOUND": 404,
        "DUPLICATE_IDENTIFIER": 409,
        "ORDER_NUMBER_TAKEN": 409,
        "STORAGE_UNAVAILABLE": 503,
        "INTERNAL_ERROR": 500,
    }

    @classmethod
    def status_for(cls, code: str) -> int:
        return cls.ERROR_CODES.get(code, 500)

    @classmethod
    def payload_for(cls, failure: SubmissionFailed) -> dict:
        """Error object returned inside SubmitOrderPayload."""
        return {
            "code": failure.code,
            "message": failure.reason,
            "stage": failure.stage.value,
            "retryable": failure.retryable,
            "status": cls.status_for(failure.code),
            "details": list(failure.errors),
        }

    @classmethod
    def handle_error(cls, error: Exception) -> JsonResponse:
        """Handle error and return JSON response."""
        if isinstance(error, OrderingError):
            return JsonResponse(
                {
                    "error": {
                        "code": error.code,
                        "message": error.message,
                    }
                },
                status=cls.status_for(error.code),
            )

        logger.error(
            "unexpected_error",
            extra={
                "error": f"{type(error).__name__}: {error}",
            },
            exc_info=True,
        )

        return JsonResponse(
            {
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                }
            },
            status=500,
        )
