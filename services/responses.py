"""Mapping of pipeline decisions onto HTTP responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from models import RejectionReason, UpstreamOutcome, UpstreamOutcomeKind
from services.messages import message


@dataclass(frozen=True)
class EndpointResponse:
    """HTTP-like response shape used by tests and serverless adapters."""

    status_code: int
    headers: dict[str, str]
    body: dict[str, Any]


_REJECTION_STATUS = {
    RejectionReason.METHOD_NOT_ALLOWED: 405,
    RejectionReason.ORIGIN_REJECTED: 403,
    RejectionReason.UNSUPPORTED_MEDIA_TYPE: 415,
    RejectionReason.RATE_LIMITED: 429,
    RejectionReason.INVALID_REQUEST: 400,
    RejectionReason.VALIDATION_FAILED: 400,
    RejectionReason.SERVER_MISCONFIGURED: 500,
    RejectionReason.INTERNAL_FAULT: 500,
}

_OUTCOME_STATUS = {
    UpstreamOutcomeKind.ALREADY_SUBSCRIBED: (200, "already_subscribed"),
    UpstreamOutcomeKind.PENDING_CONFIRMATION: (200, "pending_confirmation"),
    UpstreamOutcomeKind.VALIDATION_REJECTED: (400, "upstream_validation_rejected"),
    UpstreamOutcomeKind.RATE_LIMITED: (429, "upstream_rate_limited"),
    UpstreamOutcomeKind.TRANSIENT_FAILURE: (500, "upstream_transient_failure"),
    UpstreamOutcomeKind.MEMBER_EXISTS: (409, "already_subscribed"),
}


def base_headers(extra: dict[str, str] | None = None) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Cache-Control": "no-store",
        **(extra or {}),
    }


def rejection_response(
    reason: RejectionReason,
    *,
    user_message: str | None = None,
    headers: dict[str, str] | None = None,
) -> EndpointResponse:
    """Build the response for a locally decided outcome."""
    status_code = _REJECTION_STATUS[reason]
    return EndpointResponse(
        status_code=status_code,
        headers=base_headers(headers),
        body={
            "ok": status_code < 300,
            "message": user_message or message(reason.value),
        },
    )


def outcome_response(outcome: UpstreamOutcome, *, production: bool) -> EndpointResponse:
    """Build the response for a classified provider outcome."""
    status_code, message_key = _OUTCOME_STATUS[outcome.kind]
    text = message(message_key)
    if (
        outcome.kind == UpstreamOutcomeKind.VALIDATION_REJECTED
        and not production
        and outcome.detail
    ):
        text = f"{text} ({outcome.detail})"

    body: dict[str, Any] = {"ok": status_code < 300, "message": text}
    if status_code < 300 and outcome.member_status:
        body["status"] = outcome.member_status
    return EndpointResponse(status_code=status_code, headers=base_headers(), body=body)


def decoy_success_response() -> EndpointResponse:
    """Response for filtered bots, identical to a new pending signup."""
    return outcome_response(
        UpstreamOutcome(kind=UpstreamOutcomeKind.PENDING_CONFIRMATION, member_status="pending"),
        production=True,
    )
