"""Transport-level request guards: method, origin and content type."""

from __future__ import annotations

from urllib.parse import urlparse

ALLOWED_METHOD = "POST"


def normalize_headers(headers: dict[str, str] | None) -> dict[str, str]:
    if not headers:
        return {}
    return {str(k).lower(): str(v) for k, v in headers.items()}


def is_method_allowed(method: str) -> bool:
    return method.upper() == ALLOWED_METHOD


def is_json_content_type(content_type: str) -> bool:
    """Accept ``application/json`` and ``+json`` suffixed media types."""
    media_type = content_type.split(";", 1)[0].strip().lower()
    if not media_type:
        return False
    return media_type == "application/json" or media_type.endswith("+json")


def request_host(headers: dict[str, str]) -> str:
    """Return the host the request was addressed to, proxy header first."""
    forwarded = headers.get("x-forwarded-host", "").split(",", 1)[0].strip()
    return (forwarded or headers.get("host", "")).strip().lower()


def is_origin_allowed(
    *,
    origin: str,
    host: str,
    allowed_origins: tuple[str, ...],
    production: bool,
) -> bool:
    """Check the ``Origin`` header against the configured policy.

    An explicit allow-list requires an exact match. Without one, production
    deployments only accept same-origin requests (or requests that carry no
    origin at all) while other environments accept everything.
    """
    if allowed_origins:
        return bool(origin and origin in allowed_origins)
    if not production:
        return True
    if not origin:
        return True
    parsed = urlparse(origin)
    if not parsed.scheme or not parsed.netloc:
        return False
    return bool(host) and parsed.netloc.lower() == host
