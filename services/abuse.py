"""Bot heuristics and client identification for the signup form."""

from __future__ import annotations

from typing import Any

START_FIELD = "_start"
UNKNOWN_CLIENT = "unknown"


def client_key_from_headers(headers: dict[str, str]) -> str:
    """Derive a rate-limit key from proxy headers.

    Expects lower-cased header names. The value is client-controlled when no
    trusted proxy rewrites ``X-Forwarded-For``.
    """
    remote_addr = headers.get("x-forwarded-for", "") or headers.get("x-real-ip", "")
    return remote_addr.split(",", 1)[0].strip() or UNKNOWN_CLIENT


def is_honeypot_tripped(payload: dict[str, Any], field_name: str) -> bool:
    value = payload.get(field_name)
    # Falsy scalars (null, false, 0) are what an untouched field serializes to.
    if not value:
        return False
    return bool(str(value).strip())


def parse_start_ms(raw: Any) -> float | None:
    """Parse the form render timestamp (epoch milliseconds)."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    try:
        return float(str(raw).strip())
    except ValueError:
        return None


def is_submitted_too_fast(payload: dict[str, Any], *, now_ms: float, min_elapsed_ms: int) -> bool:
    """Flag forms submitted faster than a human could fill them in.

    Missing, unparseable and future timestamps are not treated as bots.
    """
    start_ms = parse_start_ms(payload.get(START_FIELD))
    if start_ms is None:
        return False
    elapsed = now_ms - start_ms
    return 0 <= elapsed < min_elapsed_ms
