"""
Application services for order submission and confirmation follow-up.
"""
from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from datetime import datetime
from typing import Callable

from django.conf import settings as django_settings
from django.db import connections, transaction
from django.utils import timezone

from ordering.config import MailSettings, SubmissionSettings
from ordering.domain.errors import (
    DuplicateIdentifier,
    OrderingError,
    RenderingError,
    UniqueConstraintViolation,
    ValidationFailure,
)
from ordering.domain.order import Order
from ordering.domain.results import (
    DeliveryResult,
    PipelineStage,
    SubmissionFailed,
    SubmissionResult,
)
from ordering.infra.order_numbers import OrderNumberGenerator
from ordering.infra.outbox import OutboxRepository
from ordering.infra.persistence import OrderPersistenceTransaction
from ordering.infra.repositories import OrderRepository
from ordering.infra.retry import retry_with_backoff
from ordering.notifications.delivery import DjangoMailTransport, NotificationDelivery
from ordering.notifications.renderer import ConfirmationRenderer
from ordering.utils.observability import LoggingObserver, SubmissionObserver

logger = logging.getLogger(__name__)


class OrderSubmissionPipeline:
    """Validate, number, persist, then render and deliver the confirmation.

    The submission succeeds as soon as the order is committed. Rendering and
    delivery happen strictly afterwards and their failures are reported on the
    result, never turned into a failed submission.
    """

    def __init__(
        self,
        number_generator: OrderNumberGenerator,
        persistence: OrderPersistenceTransaction,
        renderer: ConfirmationRenderer,
        delivery: NotificationDelivery,
        settings: SubmissionSettings | None = None,
        observer: SubmissionObserver | None = None,
        outbox: OutboxRepository | None = None,
        executor: Executor | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        self.number_generator = number_generator
        self.persistence = persistence
        self.renderer = renderer
        self.delivery = delivery
        self.settings = settings or SubmissionSettings()
        self.observer = observer or SubmissionObserver()
        self.outbox = outbox
        self.executor = executor
        self._clock = clock or timezone.now
        self._sleep = sleep

    def submit(self, order_request: dict) -> SubmissionResult | SubmissionFailed:
        # Validating
        try:
            order = Order.from_request(order_request)
            order.validate()
        except ValidationFailure as e:
            self.observer.emit("order_validation_failed", reason=e.message, errors=e.errors)
            return self._failed(e, PipelineStage.VALIDATING)

        if not order.reconciles():
            self.observer.emit(
                "subtotal_mismatch",
                subtotal=str(order.subtotal),
                items_total=str(order.items_total),
            )
        order.schedule(
            self._clock(),
            pickup_minutes=self.settings.pickup_minutes,
            delivery_minutes=self.settings.delivery_minutes,
        )

        # NumberGeneration + Persisting
        try:
            order_id, order_number = self._persist(order)
        except DuplicateIdentifier as e:
            return self._failed(e, PipelineStage.NUMBER_GENERATION)
        except OrderingError as e:
            return self._failed(e, PipelineStage.PERSISTING)
        except Exception as e:
            logger.error(
                "order_persistence_unexpected_error",
                extra={"stage": PipelineStage.PERSISTING.value, "error": str(e)},
                exc_info=True,
            )
            return self._failed(e, PipelineStage.PERSISTING, code="INTERNAL_ERROR")

        self.observer.emit(
            "order_persisted",
            order_number=order_number,
            total=str(order.total_amount),
            items=len(order.items),
        )
        result = SubmissionResult(order_id=order_id, order_number=order_number)

        if transaction.get_connection().in_atomic_block:
            # The persistence block is only a savepoint here; confirm once the outermost block commits.
            result.awaiting_commit = True
            transaction.on_commit(lambda: self._confirm(order, result))
            return result

        self._confirm(order, result)
        return result

    def _confirm(self, order: Order, result: SubmissionResult) -> None:
        """Render and deliver the confirmation of a committed order."""
        result.awaiting_commit = False

        # Rendering
        try:
            document = self.renderer.render(order, order.items)
        except RenderingError as e:
            self._render_failed(order, result, e.message)
            return
        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            logger.error(
                "confirmation_render_unexpected_error",
                extra={
                    "order_number": order.order_number,
                    "stage": PipelineStage.RENDERING.value,
                    "error": error,
                },
                exc_info=True,
            )
            self._render_failed(order, result, error)
            return

        # Delivering
        if self.executor is not None:
            result.delivery_future = self.executor.submit(self._deliver_in_worker, order, document)
            return

        result.delivery = self._deliver(order, document)

    def _render_failed(self, order: Order, result: SubmissionResult, error: str) -> None:
        self.observer.emit(
            "confirmation_render_failed",
            order_number=order.order_number,
            stage=PipelineStage.RENDERING.value,
            error=error,
        )
        result.rendering_error = error
        result.delivery = DeliveryResult.failed(f"Confirmation not rendered: {error}")
        self._queue_for_resend(order, error)

    def _persist(self, order: Order) -> tuple:
        """Generate a number and persist, retrying on number collisions."""

        def on_collision(attempt: int, error: BaseException) -> None:
            self.observer.emit(
                "order_number_collision",
                order_number=getattr(error, "order_number", None),
                attempt=attempt,
            )

        retry_kwargs = {}
        if self._sleep is not None:
            retry_kwargs["sleep"] = self._sleep

        @retry_with_backoff(
            max_retries=max(self.settings.max_number_attempts - 1, 0),
            initial_delay=self.settings.number_retry_delay,
            max_delay=1.0,
            exceptions=(UniqueConstraintViolation,),
            on_retry=on_collision,
            **retry_kwargs,
        )
        def attempt():
            order_number = self.number_generator.generate()
            return self.persistence.execute(order, order.items, order_number=order_number)

        try:
            return attempt()
        except UniqueConstraintViolation:
            raise DuplicateIdentifier(self.settings.max_number_attempts)

    def _deliver(self, order: Order, document) -> DeliveryResult:
        delivery = self.delivery.deliver(document, order.customer_email)
        if delivery.success:
            self.observer.emit(
                "confirmation_delivered",
                order_number=order.order_number,
                message_id=delivery.message_id,
            )
        else:
            self.observer.emit(
                "confirmation_delivery_failed",
                order_number=order.order_number,
                recipient=order.customer_email,
                error=delivery.error,
            )
            self._queue_for_resend(order, delivery.error)
        return delivery

    def _deliver_in_worker(self, order: Order, document) -> DeliveryResult:
        try:
            return self._deliver(order, document)
        finally:
            connections.close_all()

    def _queue_for_resend(self, order: Order, error: str) -> None:
        if self.outbox is None:
            return
        try:
            self.outbox.add_failure(order.id, order.customer_email, error)
        except Exception as e:
            self.observer.emit(
                "confirmation_queue_failed",
                order_number=order.order_number,
                error=str(e),
            )
        else:
            self.observer.emit("confirmation_queued", order_number=order.order_number)

    def _failed(self, error: Exception, stage: PipelineStage, code: str | None = None) -> SubmissionFailed:
        failure = SubmissionFailed(
            reason=getattr(error, "message", str(error)),
            code=code or getattr(error, "code", "INTERNAL_ERROR"),
            stage=stage,
            retryable=getattr(error, "retryable", False),
            errors=tuple(getattr(error, "errors", ())),
        )
        self.observer.emit(
            "order_submission_failed",
            stage=stage.value,
            code=failure.code,
            reason=failure.reason,
        )
        return failure


class ConfirmationResender:
    """Retries undelivered confirmations from the outbox, one attempt per entry per run."""

    def __init__(
        self,
        renderer: ConfirmationRenderer,
        delivery: NotificationDelivery,
        outbox_repo: OutboxRepository | None = None,
        order_repo: OrderRepository | None = None,
        max_attempts: int = 5,
        observer: SubmissionObserver | None = None,
    ):
        self.renderer = renderer
        self.delivery = delivery
        self.outbox_repo = outbox_repo or OutboxRepository()
        self.order_repo = order_repo or OrderRepository()
        self.max_attempts = max_attempts
        self.observer = observer or SubmissionObserver()

    def process_pending(self, limit: int = 100) -> int:
        """Attempt delivery for pending entries. Returns how many were delivered."""
        delivered = 0
        for entry in self.outbox_repo.get_pending(limit=limit, max_attempts=self.max_attempts):
            order = self.order_repo.get_by_id(entry.order_id)
            try:
                document = self.renderer.render(order, order.items)
            except RenderingError as e:
                self.outbox_repo.increment_retry(entry.id, e.message)
                self.observer.emit(
                    "confirmation_render_failed",
                    order_number=order.order_number,
                    error=e.message,
                )
                continue

            result = self.delivery.deliver(document, entry.recipient)
            if result.success:
                self.outbox_repo.mark_delivered(entry.id, result.message_id)
                self.observer.emit(
                    "confirmation_resent",
                    order_number=order.order_number,
                    message_id=result.message_id,
                )
                delivered += 1
            else:
                self.outbox_repo.increment_retry(entry.id, result.error)
                self.observer.emit(
                    "confirmation_delivery_failed",
                    order_number=order.order_number,
                    recipient=entry.recipient,
                    error=result.error,
                    attempt=entry.retry_count + 1,
                )
        return delivered


class OrderQueryService:
    """Read side used by the API."""

    def __init__(self, order_repo: OrderRepository | None = None):
        self.order_repo = order_repo or OrderRepository()

    def get_by_number(self, order_number: str) -> Order | None:
        return self.order_repo.get_by_number(order_number)


_delivery_executor: ThreadPoolExecutor | None = None


def _background_executor(workers: int) -> ThreadPoolExecutor:
    global _delivery_executor
    if _delivery_executor is None:
        _delivery_executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="confirmations")
    return _delivery_executor


def build_notification_delivery(settings=None) -> NotificationDelivery:
    settings = settings or django_settings
    return NotificationDelivery(DjangoMailTransport(MailSettings.from_django_settings(settings)))


def build_submission_pipeline(settings=None) -> OrderSubmissionPipeline:
    """Wire the pipeline from Django settings."""
    settings = settings or django_settings
    submission_settings = SubmissionSettings.from_django_settings(settings)
    executor = None
    if submission_settings.deliver_in_background:
        executor = _background_executor(submission_settings.delivery_workers)

    return OrderSubmissionPipeline(
        number_generator=OrderNumberGenerator(prefix=submission_settings.order_number_prefix),
        persistence=OrderPersistenceTransaction(),
        renderer=ConfirmationRenderer(submission_settings),
        delivery=build_notification_delivery(settings),
        settings=submission_settings,
        observer=LoggingObserver(),
        outbox=OutboxRepository(),
        executor=executor,
    )


def build_confirmation_resender(settings=None) -> ConfirmationResender:
    settings = settings or django_settings
    submission_settings = SubmissionSettings.from_django_settings(settings)
    return ConfirmationResender(
        renderer=ConfirmationRenderer(submission_settings),
        delivery=build_notification_delivery(settings),
        max_attempts=submission_settings.resend_max_attempts,
        observer=LoggingObserver(),
    )
