"""Signup API endpoint with validation, origin checks, and abuse protections."""

from __future__ import annotations

import json
import threading
import time
import uuid
from typing import Any, Protocol

from config import ConfigError, SignupConfig, get_config, missing_required_envs
from models import NormalizedSignup, RejectionReason, UpstreamOutcome
from services.abuse import (
    UNKNOWN_CLIENT,
    client_key_from_headers,
    is_honeypot_tripped,
    is_submitted_too_fast,
)
from services.mailchimp import MailchimpClient
from services.messages import message
from services.observability import LogContext, get_logger
from services.rate_limit import FixedWindowRateLimiter, InMemoryRateLimitStore
from services.responses import (
    EndpointResponse,
    decoy_success_response,
    outcome_response,
    rejection_response,
)
from services.transport import (
    ALLOWED_METHOD,
    is_json_content_type,
    is_method_allowed,
    is_origin_allowed,
    normalize_headers,
    request_host,
)
from services.validator import SignupValidationError, normalize_signup

MAX_BODY_BYTES = 16 * 1024

_RATE_LIMIT_STORE = InMemoryRateLimitStore()
_RATE_LIMIT_LOCK = threading.Lock()


class ListClient(Protocol):
    def subscribe(
        self,
        signup: NormalizedSignup,
        *,
        context: LogContext | None = None,
    ) -> UpstreamOutcome: ...


def process_request(
    *,
    method: str,
    headers: dict[str, str] | None,
    raw_body: str,
    config: SignupConfig | None = None,
    mailchimp_client: ListClient | None = None,
    rate_limiter: FixedWindowRateLimiter | None = None,
    now_ts: float | None = None,
) -> EndpointResponse:
    """Process a signup request for serverless and unit test use.

    Never raises: unexpected failures become a generic 500.
    """
    request_headers = normalize_headers(headers)
    context = LogContext(
        request_id=uuid.uuid4().hex,
        client_key=client_key_from_headers(request_headers),
    )
    try:
        return _run_pipeline(
            method=method,
            headers=request_headers,
            raw_body=raw_body,
            config=config,
            mailchimp_client=mailchimp_client,
            rate_limiter=rate_limiter,
            now_ts=now_ts if now_ts is not None else time.time(),
            context=context,
        )
    except Exception as exc:  # noqa: BLE001
        get_logger().error(
            "signup_internal_error",
            context=context,
            error=type(exc).__name__,
            detail=str(exc),
        )
        return rejection_response(RejectionReason.INTERNAL_FAULT)


def _run_pipeline(
    *,
    method: str,
    headers: dict[str, str],
    raw_body: str,
    config: SignupConfig | None,
    mailchimp_client: ListClient | None,
    rate_limiter: FixedWindowRateLimiter | None,
    now_ts: float,
    context: LogContext,
) -> EndpointResponse:
    logger = get_logger()

    if not is_method_allowed(method):
        logger.info("signup_rejected", context=context, reason="method_not_allowed", method=method)
        return rejection_response(
            RejectionReason.METHOD_NOT_ALLOWED,
            headers={"Allow": ALLOWED_METHOD},
        )

    if config is None:
        try:
            config = get_config()
        except ConfigError as exc:
            missing = missing_required_envs()
            diagnostic = " / ".join(missing) if missing else str(exc)
            logger.error("signup_rejected", context=context, reason="server_misconfigured")
            return rejection_response(
                RejectionReason.SERVER_MISCONFIGURED,
                user_message=message("server_misconfigured", missing=diagnostic),
            )

    origin = headers.get("origin", "")
    if not is_origin_allowed(
        origin=origin,
        host=request_host(headers),
        allowed_origins=config.allowed_origins,
        production=config.production,
    ):
        logger.info("signup_rejected", context=context, reason="origin_rejected", origin=origin)
        return rejection_response(RejectionReason.ORIGIN_REJECTED)

    if not is_json_content_type(headers.get("content-type", "")):
        logger.info("signup_rejected", context=context, reason="unsupported_media_type")
        return rejection_response(RejectionReason.UNSUPPORTED_MEDIA_TYPE)

    limiter = rate_limiter or _default_rate_limiter(config, now_ts=now_ts)
    decision = limiter.hit(context.client_key or UNKNOWN_CLIENT)
    if not decision.allowed:
        logger.info(
            "signup_rejected",
            context=context,
            reason="rate_limited",
            window_reset_at=decision.entry.window_reset_at,
        )
        return rejection_response(RejectionReason.RATE_LIMITED)

    payload = _parse_payload(raw_body)
    if payload is None:
        logger.info("signup_rejected", context=context, reason="invalid_request")
        return rejection_response(RejectionReason.INVALID_REQUEST)

    if is_honeypot_tripped(payload, config.honeypot_field):
        # Silent bot sink: return success-like response without touching provider.
        logger.info("signup_bot_filtered", context=context, heuristic="honeypot")
        return decoy_success_response()

    if is_submitted_too_fast(payload, now_ms=now_ts * 1000, min_elapsed_ms=config.min_submit_ms):
        logger.info("signup_bot_filtered", context=context, heuristic="timing")
        return decoy_success_response()

    try:
        signup = normalize_signup(payload, age_brackets=config.age_brackets)
    except SignupValidationError as exc:
        logger.info("signup_rejected", context=context, reason="validation_failed", field=exc.field)
        return rejection_response(
            RejectionReason.VALIDATION_FAILED,
            user_message=exc.user_message,
        )

    client = mailchimp_client or MailchimpClient(config)
    outcome = client.subscribe(signup, context=context)
    return outcome_response(outcome, production=config.production)


def handler(request: Any) -> Any:
    """Vercel-style handler adapter."""
    method = str(getattr(request, "method", "GET"))
    headers = dict(getattr(request, "headers", {}) or {})

    body_value = getattr(request, "body", b"")
    if isinstance(body_value, (bytes, bytearray)):
        raw_body = body_value.decode("utf-8", errors="replace")
    else:
        raw_body = str(body_value or "")

    response = process_request(method=method, headers=headers, raw_body=raw_body)

    # Vercel python runtime accepts tuple (body, status, headers).
    return json.dumps(response.body), response.status_code, response.headers


def reset_rate_limits() -> None:
    """Drop all in-process rate limit counters."""
    with _RATE_LIMIT_LOCK:
        _RATE_LIMIT_STORE.clear()


def _default_rate_limiter(config: SignupConfig, *, now_ts: float) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(
        _RATE_LIMIT_STORE,
        window_seconds=config.rate_limit_window_seconds,
        max_requests=config.rate_limit_max_requests,
        clock=lambda: now_ts,
        lock=_RATE_LIMIT_LOCK,
    )


def _parse_payload(raw_body: str) -> dict[str, Any] | None:
    if not raw_body.strip():
        return None
    if len(raw_body.encode("utf-8", errors="replace")) > MAX_BODY_BYTES:
        return None
    try:
        payload = json.loads(raw_body)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    return payload
