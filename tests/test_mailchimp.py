"""Tests for the Mailchimp list members adapter."""

from __future__ import annotations

import hashlib
import json
from dataclasses import replace
from typing import Any

import pytest
import requests

from config import SignupConfig
from models import NormalizedSignup, UpstreamOutcomeKind
from services.mailchimp import MailchimpClient, classify_response, decode_json_body, member_hash


class _FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, *, text: str | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self._text = text

    def json(self) -> Any:
        if self._text is not None:
            return json.loads(self._text)
        return self._payload


def _signup() -> NormalizedSignup:
    return NormalizedSignup(
        email="jan@example.com",
        first_name="Jan",
        last_name="Jansen",
        age_bracket="26 - 35",
        organization="Stichting Voorbeeld",
    )


def test_member_hash_is_case_insensitive() -> None:
    expected = hashlib.md5(b"foo@bar.com").hexdigest()

    assert member_hash("Foo@Bar.com") == expected
    assert member_hash(" foo@bar.com ") == expected


def test_decode_json_body_falls_back_to_empty_dict() -> None:
    assert decode_json_body(_FakeResponse(200, text="<html>oops</html>")) == {}  # type: ignore[arg-type]
    assert decode_json_body(_FakeResponse(200, ["not", "a", "dict"])) == {}  # type: ignore[arg-type]
    assert decode_json_body(_FakeResponse(200, {"status": "pending"})) == {"status": "pending"}  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("status_code", "body", "expected"),
    [
        (200, {"status": "subscribed"}, UpstreamOutcomeKind.ALREADY_SUBSCRIBED),
        (200, {"status": "pending"}, UpstreamOutcomeKind.PENDING_CONFIRMATION),
        (200, {}, UpstreamOutcomeKind.PENDING_CONFIRMATION),
        (400, {"title": "Invalid Resource", "detail": "merge_fields.FNAME"}, UpstreamOutcomeKind.VALIDATION_REJECTED),
        (429, {}, UpstreamOutcomeKind.RATE_LIMITED),
        (400, {"title": "Member Exists"}, UpstreamOutcomeKind.TRANSIENT_FAILURE),
        (503, {}, UpstreamOutcomeKind.TRANSIENT_FAILURE),
    ],
)
def test_classify_response(status_code: int, body: dict[str, Any], expected: UpstreamOutcomeKind) -> None:
    assert classify_response(status_code, body).kind == expected


def test_classify_response_member_exists_in_legacy_mode() -> None:
    outcome = classify_response(400, {"title": "Member Exists"}, legacy_create=True)

    assert outcome.kind == UpstreamOutcomeKind.MEMBER_EXISTS


def test_classify_response_keeps_detail_and_status() -> None:
    rejected = classify_response(400, {"title": "Invalid Resource", "detail": "Bad email"})
    pending = classify_response(200, {"status": "pending"})

    assert rejected.detail == "Bad email"
    assert pending.member_status == "pending"


def test_subscribe_issues_idempotent_upsert(
    signup_config: SignupConfig,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    captured: dict[str, Any] = {}

    def _fake_put(url: str, **kwargs: Any) -> _FakeResponse:
        captured["url"] = url
        captured.update(kwargs)
        return _FakeResponse(200, {"status": "pending"})

    monkeypatch.setattr(requests, "put", _fake_put)

    outcome = MailchimpClient(signup_config).subscribe(_signup())

    assert outcome.kind == UpstreamOutcomeKind.PENDING_CONFIRMATION
    assert captured["url"] == (
        "https://us5.api.mailchimp.com/3.0/lists/list123/members/" + member_hash("jan@example.com")
    )
    assert captured["auth"] == ("anystring", "mc-test-us5")
    assert captured["timeout"] is None
    assert captured["json"]["status_if_new"] == "pending"
    assert "status" not in captured["json"]
    assert captured["json"]["email_address"] == "jan@example.com"
    assert captured["json"]["merge_fields"]["ORGANISATI"] == "Stichting Voorbeeld"


def test_subscribe_legacy_mode_creates_member(
    signup_config: SignupConfig,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    captured: dict[str, Any] = {}

    def _fake_post(url: str, **kwargs: Any) -> _FakeResponse:
        captured["url"] = url
        captured.update(kwargs)
        return _FakeResponse(400, {"title": "Member Exists", "detail": "already a list member"})

    monkeypatch.setattr(requests, "post", _fake_post)
    config = replace(signup_config, upsert_mode="create")

    outcome = MailchimpClient(config).subscribe(_signup())

    assert outcome.kind == UpstreamOutcomeKind.MEMBER_EXISTS
    assert captured["url"] == "https://us5.api.mailchimp.com/3.0/lists/list123/members"
    assert captured["json"]["status"] == "pending"


def test_subscribe_network_error_is_transient(
    signup_config: SignupConfig,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def _fake_put(*_: Any, **__: Any) -> Any:
        raise requests.ConnectionError("boom")

    monkeypatch.setattr(requests, "put", _fake_put)

    outcome = MailchimpClient(signup_config).subscribe(_signup())

    assert outcome.kind == UpstreamOutcomeKind.TRANSIENT_FAILURE


def test_subscribe_undecodable_error_body_is_transient(
    signup_config: SignupConfig,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(requests, "put", lambda *_, **__: _FakeResponse(502, text="Bad Gateway"))

    outcome = MailchimpClient(signup_config).subscribe(_signup())

    assert outcome.kind == UpstreamOutcomeKind.TRANSIENT_FAILURE


def test_subscribe_value_error_is_transient(
    signup_config: SignupConfig,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def _fake_put(*_: Any, **__: Any) -> Any:
        raise ValueError("Invalid header value")

    monkeypatch.setattr(requests, "put", _fake_put)

    outcome = MailchimpClient(signup_config).subscribe(_signup())

    assert outcome.kind == UpstreamOutcomeKind.TRANSIENT_FAILURE
