"""Centralized configuration loading for the signup endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


class ConfigError(ValueError):
    """Raised when required configuration is missing or invalid."""


DEFAULT_HONEYPOT_FIELD = "b_c9c512e493e7843d1aaf9a471_2519fc7af4"

DEFAULT_AGE_BRACKETS = (
    "Jonger dan 18",
    "18 - 25",
    "26 - 35",
    "36 - 50",
    "51 - 65",
    "Ouder dan 65",
)

VALID_UPSERT_MODES = {"upsert", "create"}


@dataclass(frozen=True)
class SignupConfig:
    """Typed endpoint configuration loaded from environment variables."""

    mailchimp_api_key: str
    mailchimp_server_prefix: str
    mailchimp_list_id: str
    allowed_origins: tuple[str, ...]
    production: bool
    honeypot_field: str
    age_brackets: tuple[str, ...]
    rate_limit_window_seconds: int
    rate_limit_max_requests: int
    min_submit_ms: int
    upsert_mode: str
    request_timeout_seconds: float | None

    @property
    def legacy_create(self) -> bool:
        return self.upsert_mode == "create"


_REQUIRED_ENV_VARS = (
    "MAILCHIMP_API_KEY",
    "MAILCHIMP_SERVER_PREFIX",
    "MAILCHIMP_LIST_ID",
)


def _get_required_env(name: str) -> str:
    import os

    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        raise ConfigError(f"Missing required environment variable: {name}")
    return raw.strip()


def _parse_bool(name: str, raw: str) -> bool:
    normalized = raw.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ConfigError(f"Invalid boolean value for {name}: {raw!r}")


def _parse_int(name: str, raw: str, minimum: int | None = None, maximum: int | None = None) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid integer value for {name}: {raw!r}") from exc

    if minimum is not None and value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    if maximum is not None and value > maximum:
        raise ConfigError(f"{name} must be <= {maximum}, got {value}")
    return value


def _parse_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid number value for {name}: {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be > 0, got {value}")
    return value


def _parse_csv(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    values = [item.strip() for item in raw.split(",") if item.strip()]
    return tuple(values)


def missing_required_envs() -> tuple[str, ...]:
    """Return the names of required variables that are absent or blank."""
    import os

    return tuple(
        name for name in _REQUIRED_ENV_VARS if not (os.environ.get(name) or "").strip()
    )


def _validate_required_envs() -> None:
    missing = missing_required_envs()
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")


@lru_cache(maxsize=1)
def get_config(load_dotenv_file: bool = True) -> SignupConfig:
    """Load and cache endpoint configuration.

    Failures are not memoized, so a misconfigured deployment is reported on
    every request until the environment is fixed.
    """
    if load_dotenv_file:
        load_dotenv()

    _validate_required_envs()

    import os

    upsert_mode = (os.environ.get("SIGNUP_UPSERT_MODE") or "upsert").strip().lower()
    if upsert_mode not in VALID_UPSERT_MODES:
        raise ConfigError(
            f"Invalid SIGNUP_UPSERT_MODE: {upsert_mode!r}. Expected one of {sorted(VALID_UPSERT_MODES)}"
        )

    age_brackets = _parse_csv(os.environ.get("SIGNUP_AGE_BRACKETS")) or DEFAULT_AGE_BRACKETS

    timeout_raw = os.environ.get("MAILCHIMP_TIMEOUT_SECONDS")
    request_timeout_seconds = (
        _parse_float("MAILCHIMP_TIMEOUT_SECONDS", timeout_raw) if timeout_raw else None
    )

    return SignupConfig(
        mailchimp_api_key=_get_required_env("MAILCHIMP_API_KEY"),
        mailchimp_server_prefix=_get_required_env("MAILCHIMP_SERVER_PREFIX"),
        mailchimp_list_id=_get_required_env("MAILCHIMP_LIST_ID"),
        allowed_origins=_parse_csv(os.environ.get("SIGNUP_ALLOWED_ORIGINS")),
        production=_parse_bool("SIGNUP_PRODUCTION", os.environ.get("SIGNUP_PRODUCTION") or "true"),
        honeypot_field=(os.environ.get("SIGNUP_HONEYPOT_FIELD") or DEFAULT_HONEYPOT_FIELD).strip(),
        age_brackets=age_brackets,
        rate_limit_window_seconds=_parse_int(
            "SIGNUP_RATE_LIMIT_WINDOW_SECONDS",
            os.environ.get("SIGNUP_RATE_LIMIT_WINDOW_SECONDS") or "3600",
            minimum=1,
        ),
        rate_limit_max_requests=_parse_int(
            "SIGNUP_RATE_LIMIT_MAX_REQUESTS",
            os.environ.get("SIGNUP_RATE_LIMIT_MAX_REQUESTS") or "12",
            minimum=1,
        ),
        min_submit_ms=_parse_int(
            "SIGNUP_MIN_SUBMIT_MS",
            os.environ.get("SIGNUP_MIN_SUBMIT_MS") or "800",
            minimum=0,
        ),
        upsert_mode=upsert_mode,
        request_timeout_seconds=request_timeout_seconds,
    )


def reset_config_cache() -> None:
    """Clear memoized configuration for tests and process reloads."""
    get_config.cache_clear()
