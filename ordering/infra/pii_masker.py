"""
PII (Personally Identifiable Information) masking utilities.
"""
import re
from typing import Any

PHONE_RE = re.compile(r'^[\d\s\+\-\(\)]+$')
PII_FIELDS = {
    "email", "customer_email", "recipient",
    "phone", "customer_phone",
    "name", "customer_name",
    "address", "delivery_address",
}


def mask_email(email: str) -> str:
    """Mask email address."""
    if "@" not in email:
        return email
    local, domain = email.split("@", 1)
    if len(local) <= 2:
        masked = "**"
    else:
        masked = local[:2] + "*" * (len(local) - 2)
    return f"{masked}@{domain}"


def mask_phone(phone: str) -> str:
    """Mask phone number."""
    if len(phone) <= 4:
        return "*" * len(phone)
    return phone[:2] + "*" * (len(phone) - 4) + phone[-2:]


def mask_name(name: str) -> str:
    """Mask name."""
    if len(name) <= 2:
        return "**"
    return name[0] + "*" * (len(name) - 2) + name[-1]


def mask_value(key: str, value: Any) -> Any:
    """Mask a single value according to its field name and shape."""
    if not isinstance(value, str) or not value:
        return value
    if "@" in value:
        return mask_email(value)
    if PHONE_RE.match(value):
        return mask_phone(value)
    if "address" in key.lower():
        return value[:3] + "***"
    return mask_name(value)


def mask_pii_in_dict(data: dict) -> dict:
    """Mask PII in dictionary recursively."""
    masked = {}
    for key, value in data.items():
        if isinstance(value, dict):
            masked[key] = mask_pii_in_dict(value)
        elif isinstance(value, list):
            masked[key] = [mask_pii_in_dict(item) if isinstance(item, dict) else item for item in value]
        elif key.lower() in PII_FIELDS:
            masked[key] = mask_value(key, value)
        else:
            masked[key] = value
    return masked
