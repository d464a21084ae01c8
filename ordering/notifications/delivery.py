"""
Hand confirmation documents to the mail transport.
"""
from __future__ import annotations

import logging
from email.utils import make_msgid

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.mail import EmailMultiAlternatives, get_connection
from django.core.validators import validate_email

from ordering.config import SMTP_BACKEND, MailSettings
from ordering.domain.errors import DeliveryFailure
from ordering.domain.results import ConfirmationDocument, DeliveryResult
from ordering.infra.pii_masker import mask_email

logger = logging.getLogger(__name__)


class DjangoMailTransport:
    """Sends one message through a Django email backend built from explicit settings."""

    def __init__(self, settings: MailSettings):
        self.settings = settings
        if settings.backend == SMTP_BACKEND and settings.missing_smtp_settings():
            logger.warning(
                "smtp_not_configured",
                extra={"error": "missing " + ", ".join(settings.missing_smtp_settings())},
            )

    def _connection(self):
        return get_connection(
            backend=self.settings.backend,
            fail_silently=False,
            host=self.settings.host,
            port=self.settings.port,
            username=self.settings.username,
            password=self.settings.password,
            use_tls=self.settings.use_tls,
            use_ssl=self.settings.use_ssl,
            timeout=self.settings.timeout,
        )

    def send(self, recipient: str, subject: str, html_body: str, text_body: str) -> str:
        """Send the message and return its Message-ID."""
        message_id = make_msgid(domain=self.settings.message_id_domain)
        message = EmailMultiAlternatives(
            subject=subject,
            body=text_body,
            from_email=self.settings.sender,
            to=[recipient],
            headers={"Message-ID": message_id},
            connection=self._connection(),
        )
        message.attach_alternative(html_body, "text/html")
        if message.send() != 1:
            raise DeliveryFailure(f"Transport accepted no message for {mask_email(recipient)}")
        return message_id


class NotificationDelivery:
    """One delivery attempt per call; every transport failure becomes a failed DeliveryResult."""

    def __init__(self, transport):
        self.transport = transport

    def deliver(self, document: ConfirmationDocument, recipient: str) -> DeliveryResult:
        try:
            validate_email(recipient)
        except DjangoValidationError:
            logger.warning(
                "confirmation_recipient_invalid",
                extra={"recipient": mask_email(recipient or ""), "status": "failed"},
            )
            return DeliveryResult.failed(f"Invalid recipient address: {mask_email(recipient or '')}")

        try:
            message_id = self.transport.send(
                recipient,
                document.subject,
                document.html_body,
                document.text_body,
            )
        except Exception as e:
            logger.warning(
                "confirmation_send_failed",
                extra={
                    "recipient": mask_email(recipient),
                    "status": "failed",
                    "error": f"{type(e).__name__}: {e}",
                },
                exc_info=True,
            )
            return DeliveryResult.failed(f"{type(e).__name__}: {e}")

        logger.info(
            "confirmation_sent",
            extra={"recipient": mask_email(recipient), "message_id": message_id, "status": "sent"},
        )
        return DeliveryResult.delivered(message_id)
