"""Tests for transport guards."""

from __future__ import annotations

import pytest

from services.transport import (
    is_json_content_type,
    is_method_allowed,
    is_origin_allowed,
    normalize_headers,
    request_host,
)


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "OPTIONS", "HEAD", "PATCH"])
def test_only_post_is_allowed(method: str) -> None:
    assert is_method_allowed(method) is False


def test_post_is_allowed_case_insensitive() -> None:
    assert is_method_allowed("post") is True


@pytest.mark.parametrize(
    ("content_type", "expected"),
    [
        ("application/json", True),
        ("application/json; charset=utf-8", True),
        ("Application/JSON", True),
        ("application/vnd.api+json", True),
        ("text/plain", False),
        ("application/x-www-form-urlencoded", False),
        ("", False),
    ],
)
def test_json_content_type(content_type: str, expected: bool) -> None:
    assert is_json_content_type(content_type) is expected


def test_allow_list_requires_exact_origin() -> None:
    allowed = ("https://site.example.com",)

    assert is_origin_allowed(
        origin="https://site.example.com", host="", allowed_origins=allowed, production=True
    )
    assert not is_origin_allowed(
        origin="https://evil.example.com", host="", allowed_origins=allowed, production=True
    )
    assert not is_origin_allowed(origin="", host="", allowed_origins=allowed, production=False)


def test_same_origin_fallback_in_production() -> None:
    assert is_origin_allowed(
        origin="https://site.example.com",
        host="site.example.com",
        allowed_origins=(),
        production=True,
    )
    assert not is_origin_allowed(
        origin="https://evil.example.com",
        host="site.example.com",
        allowed_origins=(),
        production=True,
    )
    assert not is_origin_allowed(
        origin="null", host="site.example.com", allowed_origins=(), production=True
    )
    assert is_origin_allowed(origin="", host="site.example.com", allowed_origins=(), production=True)


def test_permissive_outside_production() -> None:
    assert is_origin_allowed(
        origin="http://localhost:3000",
        host="site.example.com",
        allowed_origins=(),
        production=False,
    )


def test_request_host_prefers_forwarded_host() -> None:
    headers = normalize_headers({"Host": "internal:8080", "X-Forwarded-Host": "Site.Example.com, proxy"})

    assert request_host(headers) == "site.example.com"
    assert request_host({"host": "site.example.com"}) == "site.example.com"
