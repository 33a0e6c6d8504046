"""JSON schema for inbound signup payloads."""

from __future__ import annotations

_SCALAR: dict[str, object] = {"type": ["string", "number", "boolean", "null"]}

SIGNUP_FIELDS = (
    "EMAIL",
    "FNAME",
    "LNAME",
    "ORGANISATI",
    "LEEFTIJD",
    "MMERGE7",
    "MMERGE8",
)

# Required fields are enforced by the normalizer so each one gets its own
# message; the schema only pins the shape.
SIGNUP_PAYLOAD_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        **{name: _SCALAR for name in SIGNUP_FIELDS},
        "_start": {"type": ["string", "number", "null"]},
    },
}
