"""Core typed models used across the signup pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class UpstreamOutcomeKind(StrEnum):
    """Classified result of a list provider call."""

    ALREADY_SUBSCRIBED = "already_subscribed"
    PENDING_CONFIRMATION = "pending_confirmation"
    VALIDATION_REJECTED = "validation_rejected"
    RATE_LIMITED = "rate_limited"
    TRANSIENT_FAILURE = "transient_failure"
    MEMBER_EXISTS = "member_exists"


class RejectionReason(StrEnum):
    """Local terminal decisions taken before or instead of the provider call."""

    METHOD_NOT_ALLOWED = "method_not_allowed"
    ORIGIN_REJECTED = "origin_rejected"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    RATE_LIMITED = "rate_limited"
    INVALID_REQUEST = "invalid_request"
    VALIDATION_FAILED = "validation_failed"
    SERVER_MISCONFIGURED = "server_misconfigured"
    INTERNAL_FAULT = "internal_fault"


@dataclass(frozen=True)
class NormalizedSignup:
    """Validated signup fields ready to be sent to the list provider."""

    email: str
    first_name: str
    last_name: str
    age_bracket: str
    organization: str = ""
    referral_source: str = ""
    needs: str = ""

    def merge_fields(self) -> dict[str, str]:
        """Map fields onto the list's merge tags."""
        return {
            "FNAME": self.first_name,
            "LNAME": self.last_name,
            "ORGANISATI": self.organization,
            "LEEFTIJD": self.age_bracket,
            "MMERGE7": self.referral_source,
            "MMERGE8": self.needs,
        }


@dataclass(frozen=True)
class RateLimitEntry:
    """Fixed-window counter for one client key."""

    count: int
    window_reset_at: float


@dataclass(frozen=True)
class UpstreamOutcome:
    """Tagged provider result."""

    kind: UpstreamOutcomeKind
    detail: str | None = None
    member_status: str | None = None
