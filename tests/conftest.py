"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from config import DEFAULT_AGE_BRACKETS, SignupConfig, reset_config_cache
from models import NormalizedSignup, UpstreamOutcome, UpstreamOutcomeKind
from signup.api import subscribe


class FakeListClient:
    """Records subscriptions and replays scripted outcomes."""

    def __init__(self, *outcomes: UpstreamOutcome) -> None:
        self.calls: list[NormalizedSignup] = []
        self._outcomes = list(outcomes)

    @property
    def called(self) -> int:
        return len(self.calls)

    def subscribe(self, signup: NormalizedSignup, *, context: Any = None) -> UpstreamOutcome:
        self.calls.append(signup)
        if self._outcomes:
            return self._outcomes.pop(0)
        return UpstreamOutcome(
            kind=UpstreamOutcomeKind.PENDING_CONFIRMATION,
            member_status="pending",
        )


@pytest.fixture(autouse=True)
def _isolate_process_state() -> Iterator[None]:
    reset_config_cache()
    subscribe.reset_rate_limits()
    yield
    reset_config_cache()
    subscribe.reset_rate_limits()


@pytest.fixture
def signup_config() -> SignupConfig:
    return SignupConfig(
        mailchimp_api_key="mc-test-us5",
        mailchimp_server_prefix="us5",
        mailchimp_list_id="list123",
        allowed_origins=("https://site.example.com",),
        production=True,
        honeypot_field="b_hidden_field",
        age_brackets=DEFAULT_AGE_BRACKETS,
        rate_limit_window_seconds=3600,
        rate_limit_max_requests=12,
        min_submit_ms=800,
        upsert_mode="upsert",
        request_timeout_seconds=None,
    )


@pytest.fixture
def valid_payload() -> dict[str, Any]:
    return {
        "EMAIL": "Jan.Jansen@Example.com ",
        "FNAME": " Jan",
        "LNAME": "Jansen",
        "ORGANISATI": "Stichting Voorbeeld",
        "LEEFTIJD": "26 - 35",
        "MMERGE7": "Via een vriend",
        "MMERGE8": "",
        "b_hidden_field": "",
        "_start": 1_000_000.0,
    }
