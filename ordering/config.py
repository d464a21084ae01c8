"""
Typed views over Django settings, built once and injected into components.
"""
from __future__ import annotations

from dataclasses import dataclass

SMTP_BACKEND = "django.core.mail.backends.smtp.EmailBackend"


@dataclass(frozen=True)
class MailSettings:
    backend: str = "django.core.mail.backends.console.EmailBackend"
    host: str = ""
    port: int = 587
    username: str = ""
    password: str = ""
    use_tls: bool = False
    use_ssl: bool = False
    timeout: int = 10
    from_email: str = "orders@bellavista.local"
    from_name: str = "Bella Vista Restaurant"
    message_id_domain: str = "bellavista.local"

    @property
    def sender(self) -> str:
        return f'"{self.from_name}" <{self.from_email}>' if self.from_name else self.from_email

    def missing_smtp_settings(self) -> list[str]:
        """Names of the SMTP variables an SMTP backend still needs."""
        required = {
            "SMTP_HOST": self.host,
            "SMTP_USER": self.username,
            "SMTP_PASS": self.password,
        }
        return [name for name, value in required.items() if not value]

    @classmethod
    def from_django_settings(cls, settings) -> "MailSettings":
        options = getattr(settings, "ORDERFLOW", {})
        return cls(
            backend=settings.EMAIL_BACKEND,
            host=settings.EMAIL_HOST,
            port=settings.EMAIL_PORT,
            username=settings.EMAIL_HOST_USER,
            password=settings.EMAIL_HOST_PASSWORD,
            use_tls=settings.EMAIL_USE_TLS,
            use_ssl=settings.EMAIL_USE_SSL,
            timeout=settings.EMAIL_TIMEOUT or 10,
            from_email=settings.DEFAULT_FROM_EMAIL,
            from_name=options.get("FROM_NAME", cls.from_name),
            message_id_domain=options.get("MESSAGE_ID_DOMAIN", cls.message_id_domain),
        )


@dataclass(frozen=True)
class SubmissionSettings:
    max_number_attempts: int = 3
    number_retry_delay: float = 0.05
    order_number_prefix: str = "ORD"
    deliver_in_background: bool = False
    delivery_workers: int = 2
    resend_max_attempts: int = 5
    pickup_minutes: int = 30
    delivery_minutes: int = 45
    restaurant_name: str = "Bella Vista Restaurant"
    restaurant_address: str = "Calle Gran Vía, 123, Madrid"
    restaurant_phone: str = "+34 91 123 45 67"
    currency_symbol: str = "€"

    @classmethod
    def from_django_settings(cls, settings) -> "SubmissionSettings":
        options = getattr(settings, "ORDERFLOW", {})
        defaults = cls()
        return cls(
            max_number_attempts=options.get("MAX_NUMBER_ATTEMPTS", defaults.max_number_attempts),
            number_retry_delay=options.get("NUMBER_RETRY_DELAY", defaults.number_retry_delay),
            order_number_prefix=options.get("ORDER_NUMBER_PREFIX", defaults.order_number_prefix),
            deliver_in_background=options.get("DELIVER_IN_BACKGROUND", defaults.deliver_in_background),
            delivery_workers=options.get("DELIVERY_WORKERS", defaults.delivery_workers),
            resend_max_attempts=options.get("RESEND_MAX_ATTEMPTS", defaults.resend_max_attempts),
            pickup_minutes=options.get("PICKUP_MINUTES", defaults.pickup_minutes),
            delivery_minutes=options.get("DELIVERY_MINUTES", defaults.delivery_minutes),
            restaurant_name=options.get("RESTAURANT_NAME", defaults.restaurant_name),
            restaurant_address=options.get("RESTAURANT_ADDRESS", defaults.restaurant_address),
            restaurant_phone=options.get("RESTAURANT_PHONE", defaults.restaurant_phone),
            currency_symbol=options.get("CURRENCY_SYMBOL", defaults.currency_symbol),
        )
