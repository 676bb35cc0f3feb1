from __future__ import annotations

import pytest

from wellnest.container import build_rules
from wellnest.shared.config.settings import AppConfig, OtpConfig, RateLimitConfig


def test_nested_sections_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RATE_LIMIT_BACKEND", "REDIS")
    monkeypatch.setenv("AUTH_RATE_LIMIT", "7")
    monkeypatch.setenv("ENABLE_RATE_LIMIT", "false")
    monkeypatch.setenv("AUTH_EXPOSE_OTP", "1")

    config = AppConfig()

    assert config.rate_limit.backend == "redis"
    assert config.rate_limit.auth_limit == 7
    assert config.rate_limit.enabled is False
    assert config.otp.expose_in_response is True


def test_default_rules() -> None:
    rules = build_rules(RateLimitConfig())

    assert {name: rule.limit for name, rule in rules.items()} == {
        "auth": 5,
        "api": 100,
        "global": 500,
        "otp_send": 5,
        "otp_verify": 3,
    }
    assert {rule.window_seconds for rule in rules.values()} == {60}


def test_unknown_backend_is_rejected() -> None:
    with pytest.raises(ValueError):
        RateLimitConfig(backend="memcached")


def test_idle_multiple_has_floor() -> None:
    with pytest.raises(ValueError):
        RateLimitConfig(idle_multiple=2)


def test_otp_defaults() -> None:
    config = OtpConfig()

    assert (config.length, config.expiry_seconds, config.max_attempts) == (6, 300, 3)
    assert config.resend_cooldown_seconds == 60


def test_production_refuses_default_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("JWT_SECRET", "dev-only-jwt-secret-change-me-0000")

    with pytest.raises(SystemExit):
        AppConfig()


@pytest.mark.parametrize(("trusted", "warned"), [("true", True), ("false", False)])
def test_production_warns_about_trusted_forwarded_for(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], trusted: str, warned: bool
) -> None:
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.setenv("JWT_SECRET", "a-strong-production-secret-7f3c9e1b5d2a8046")
    monkeypatch.setenv("TRUST_X_FORWARDED_FOR", trusted)

    config = AppConfig()

    assert config.security.trust_forwarded_for is warned
    assert ("X-Forwarded-For is trusted" in capsys.readouterr().err) is warned
