"""Payload validation and field normalization for signup submissions."""

from __future__ import annotations

import re
from typing import Any

from jsonschema import ValidationError, validate

from models import NormalizedSignup
from services.messages import message
from services.schemas import SIGNUP_PAYLOAD_SCHEMA

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
EMAIL_MIN_LENGTH = 6
EMAIL_MAX_LENGTH = 254

FIELD_MAX_LENGTHS = {
    "FNAME": 80,
    "LNAME": 80,
    "ORGANISATI": 120,
    "MMERGE7": 200,
    "MMERGE8": 200,
}

# (payload field, message key), checked in this order.
_REQUIRED_FIELDS = (
    ("EMAIL", "missing_email"),
    ("FNAME", "missing_first_name"),
    ("LNAME", "missing_last_name"),
    ("LEEFTIJD", "missing_age_bracket"),
)


class SignupValidationError(ValueError):
    """Raised when a submission fails shape or field validation."""

    def __init__(self, field: str, user_message: str) -> None:
        super().__init__(f"{field}: {user_message}")
        self.field = field
        self.user_message = user_message


def validate_payload_shape(payload: Any) -> dict[str, Any]:
    """Reject anything that is not an object of scalar fields."""
    if not isinstance(payload, dict):
        raise SignupValidationError("payload", message("invalid_request"))
    try:
        validate(instance=payload, schema=SIGNUP_PAYLOAD_SCHEMA)
    except ValidationError as exc:
        path = ".".join(str(part) for part in exc.path)
        raise SignupValidationError(path or "payload", message("invalid_request")) from exc
    return payload


def field_text(value: Any) -> str:
    """Coerce a scalar field to trimmed text; null and booleans count as empty."""
    if value is None or isinstance(value, bool):
        return ""
    return str(value).strip()


def clean_text(value: Any, max_length: int) -> str:
    return field_text(value)[:max_length]


def is_valid_email(email: str) -> bool:
    if not (EMAIL_MIN_LENGTH <= len(email) <= EMAIL_MAX_LENGTH):
        return False
    return bool(EMAIL_PATTERN.match(email))


def normalize_email(value: Any) -> str:
    """Trim and lower-case an address without truncating it."""
    return field_text(value).lower()


def normalize_signup(payload: Any, *, age_brackets: tuple[str, ...]) -> NormalizedSignup:
    """Validate a raw submission and return clamped, typed fields."""
    body = validate_payload_shape(payload)

    email = normalize_email(body.get("EMAIL"))
    fields = {name: clean_text(body.get(name), cap) for name, cap in FIELD_MAX_LENGTHS.items()}
    fields["EMAIL"] = email
    # Membership in the configured set bounds the length, so no clamp here.
    fields["LEEFTIJD"] = field_text(body.get("LEEFTIJD"))

    for name, message_key in _REQUIRED_FIELDS:
        if not fields[name]:
            raise SignupValidationError(name, message(message_key))

    # Over-long addresses fail validation instead of being clamped into a
    # different address.
    if not is_valid_email(email):
        raise SignupValidationError("EMAIL", message("invalid_email"))

    if fields["LEEFTIJD"] not in age_brackets:
        raise SignupValidationError("LEEFTIJD", message("invalid_age_bracket"))

    return NormalizedSignup(
        email=email,
        first_name=fields["FNAME"],
        last_name=fields["LNAME"],
        age_bracket=fields["LEEFTIJD"],
        organization=fields["ORGANISATI"],
        referral_source=fields["MMERGE7"],
        needs=fields["MMERGE8"],
    )
