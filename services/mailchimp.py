"""Mailchimp list members adapter with idempotent upsert semantics."""

from __future__ import annotations

import hashlib
from typing import Any

import requests

from config import SignupConfig
from models import NormalizedSignup, UpstreamOutcome, UpstreamOutcomeKind
from services.observability import LogContext, get_logger

MAILCHIMP_MEMBERS_URL = "https://{prefix}.api.mailchimp.com/3.0/lists/{list_id}/members"


def member_hash(email: str) -> str:
    """Return the subscriber hash Mailchimp uses as the member resource key."""
    return hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()


def decode_json_body(response: requests.Response) -> dict[str, Any]:
    """Decode a JSON object body, falling back to an empty dict."""
    try:
        payload = response.json()
    except ValueError:
        return {}
    if not isinstance(payload, dict):
        return {}
    return payload


def classify_response(
    status_code: int,
    body: dict[str, Any],
    *,
    legacy_create: bool = False,
) -> UpstreamOutcome:
    """Translate a provider response into an upstream outcome."""
    if 200 <= status_code < 300:
        member_status = str(body.get("status") or "") or None
        if member_status == "subscribed":
            return UpstreamOutcome(
                kind=UpstreamOutcomeKind.ALREADY_SUBSCRIBED,
                member_status=member_status,
            )
        return UpstreamOutcome(
            kind=UpstreamOutcomeKind.PENDING_CONFIRMATION,
            member_status=member_status,
        )

    title = str(body.get("title") or "").strip().lower()
    detail = str(body.get("detail") or "").strip() or None

    if status_code == 429 or title == "too many requests":
        return UpstreamOutcome(kind=UpstreamOutcomeKind.RATE_LIMITED, detail=detail)
    if "invalid resource" in title:
        return UpstreamOutcome(kind=UpstreamOutcomeKind.VALIDATION_REJECTED, detail=detail)
    if legacy_create and "member exists" in title:
        return UpstreamOutcome(kind=UpstreamOutcomeKind.MEMBER_EXISTS, detail=detail)
    return UpstreamOutcome(kind=UpstreamOutcomeKind.TRANSIENT_FAILURE, detail=detail)


class MailchimpClient:
    """Add or update list members through the Mailchimp Marketing API."""

    def __init__(self, config: SignupConfig) -> None:
        self._config = config
        self._base_url = MAILCHIMP_MEMBERS_URL.format(
            prefix=config.mailchimp_server_prefix,
            list_id=config.mailchimp_list_id,
        )
        # Mailchimp ignores the basic auth username.
        self._auth = ("anystring", config.mailchimp_api_key)

    def member_url(self, email: str) -> str:
        return f"{self._base_url}/{member_hash(email)}"

    def subscribe(
        self,
        signup: NormalizedSignup,
        *,
        context: LogContext | None = None,
    ) -> UpstreamOutcome:
        """Create the member as pending, or update fields of an existing one.

        Upsert mode only sets the subscription status on new members, so an
        existing member's status is never changed by a resubmission.
        """
        legacy_create = self._config.legacy_create
        try:
            if legacy_create:
                response = requests.post(
                    self._base_url,
                    json={
                        "email_address": signup.email,
                        "status": "pending",
                        "merge_fields": signup.merge_fields(),
                    },
                    auth=self._auth,
                    timeout=self._config.request_timeout_seconds,
                )
            else:
                response = requests.put(
                    self.member_url(signup.email),
                    json={
                        "email_address": signup.email,
                        "status_if_new": "pending",
                        "merge_fields": signup.merge_fields(),
                    },
                    auth=self._auth,
                    timeout=self._config.request_timeout_seconds,
                )
        except (requests.RequestException, ValueError) as exc:
            get_logger().error(
                "signup_upstream_error",
                context=context,
                member_hash=member_hash(signup.email),
                error=type(exc).__name__,
            )
            return UpstreamOutcome(kind=UpstreamOutcomeKind.TRANSIENT_FAILURE)

        body = decode_json_body(response)
        outcome = classify_response(response.status_code, body, legacy_create=legacy_create)
        get_logger().info(
            "signup_upstream_result",
            context=context,
            member_hash=member_hash(signup.email),
            upstream_status_code=response.status_code,
            outcome=outcome.kind.value,
        )
        return outcome
