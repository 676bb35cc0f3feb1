# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class _EnvSection(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_by_name=True,
        extra="ignore",
    )


def _parse_bool(value: str | bool) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)


class DatabaseConfig(_EnvSection):
    url: str = Field("sqlite:///wellnest.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(5.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")
    query_timeout: float = Field(5.0, gt=0, alias="DATABASE_QUERY_TIMEOUT")


class AuthConfig(_EnvSection):
    jwt_secret: str = Field("dev-only-jwt-secret-change-me-0000", alias="JWT_SECRET")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    token_ttl_seconds: int = Field(24 * 60 * 60, ge=1, alias="JWT_EXPIRES_IN")


class OtpConfig(_EnvSection):
    length: int = Field(6, ge=4, le=10, alias="OTP_LENGTH")
    expiry_seconds: int = Field(5 * 60, ge=1, alias="OTP_EXPIRY_SECONDS")
    max_attempts: int = Field(3, ge=1, alias="OTP_MAX_ATTEMPTS")
    resend_cooldown_seconds: int = Field(60, ge=0, alias="OTP_RESEND_COOLDOWN")
    expose_in_response: bool = Field(False, alias="AUTH_EXPOSE_OTP")

    @field_validator("expose_in_response", mode="before")
    @classmethod
    def _parse_expose(cls, value: str | bool) -> bool:
        return _parse_bool(value)


class RateLimitConfig(_EnvSection):
    enabled: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    backend: str = Field("memory", alias="RATE_LIMIT_BACKEND")
    redis_url: str = Field("redis://localhost:6379/0", alias="REDIS_URL")
    store_timeout: float = Field(0.25, gt=0, alias="RATE_LIMIT_STORE_TIMEOUT")
    window_seconds: int = Field(60, ge=1, alias="RATE_LIMIT_WINDOW_SECONDS")
    cleanup_interval: float = Field(60.0, gt=0, alias="RATE_LIMIT_CLEANUP_INTERVAL")
    idle_multiple: int = Field(5, ge=5, alias="RATE_LIMIT_IDLE_MULTIPLE")
    shards: int = Field(64, ge=1, alias="RATE_LIMIT_SHARDS")

    auth_limit: int = Field(5, ge=0, alias="AUTH_RATE_LIMIT")
    api_limit: int = Field(100, ge=0, alias="API_RATE_LIMIT")
    global_limit: int = Field(500, ge=0, alias="RATE_LIMIT_GLOBAL")
    otp_send_limit: int = Field(5, ge=0, alias="AUTH_OTP_SEND_LIMIT")
    otp_verify_limit: int = Field(3, ge=0, alias="AUTH_OTP_VERIFY_LIMIT")

    @field_validator("enabled", mode="before")
    @classmethod
    def _parse_enabled(cls, value: str | bool) -> bool:
        return _parse_bool(value)

    @field_validator("backend", mode="after")
    @classmethod
    def _check_backend(cls, value: str) -> str:
        value = value.lower()
        if value not in ("memory", "redis"):
            raise ValueError("RATE_LIMIT_BACKEND must be 'memory' or 'redis'")
        return value


class ResilienceConfig(_EnvSection):
    max_retries: int = Field(2, ge=0, alias="RESILIENCE_RETRIES")
    backoff_base: float = Field(0.2, ge=0.0, alias="RESILIENCE_BACKOFF_BASE")
    backoff_cap: float = Field(2.0, ge=0.0, alias="RESILIENCE_BACKOFF_CAP")


class ObservabilityConfig(_EnvSection):
    metrics_enabled: bool = Field(True, alias="METRICS_ENABLED")
    service_name: str = Field("wellnest-backend", alias="SERVICE_NAME")


class SecurityConfig(_EnvSection):
    allowed_origins: list[str] = Field(["*"], alias="ALLOWED_ORIGINS")
    trust_forwarded_for: bool = Field(True, alias="TRUST_X_FORWARDED_FOR")
    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("trust_forwarded_for", "enable_hsts", mode="before")
    @classmethod
    def _parse_flags(cls, value: str | bool) -> bool:
        return _parse_bool(value)


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _auth_config_factory() -> AuthConfig:
    return AuthConfig()  # type: ignore[call-arg]


def _otp_config_factory() -> OtpConfig:
    return OtpConfig()  # type: ignore[call-arg]


def _rate_limit_config_factory() -> RateLimitConfig:
    return RateLimitConfig()  # type: ignore[call-arg]


def _resilience_config_factory() -> ResilienceConfig:
    return ResilienceConfig()  # type: ignore[call-arg]


def _observability_config_factory() -> ObservabilityConfig:
    return ObservabilityConfig()  # type: ignore[call-arg]


def _security_config_factory() -> SecurityConfig:
    return SecurityConfig()  # type: ignore[call-arg]


_INSECURE_SECRETS = ("", "dev", "test", "dev-only-jwt-secret-change-me-0000")


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    auth: AuthConfig = Field(default_factory=_auth_config_factory)
    otp: OtpConfig = Field(default_factory=_otp_config_factory)
    rate_limit: RateLimitConfig = Field(default_factory=_rate_limit_config_factory)
    resilience: ResilienceConfig = Field(default_factory=_resilience_config_factory)
    observability: ObservabilityConfig = Field(default_factory=_observability_config_factory)
    security: SecurityConfig = Field(default_factory=_security_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        return _parse_bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.auth.jwt_secret in _INSECURE_SECRETS:
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure JWT_SECRET detected in production!\n"
                "   JWT_SECRET must be a strong random value in production.\n"
                "   Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(48))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        warnings = []
        if self.otp.expose_in_response:
            warnings.append("⚠️  AUTH_EXPOSE_OTP is ENABLED (codes are returned to clients)")
        if not self.rate_limit.enabled:
            warnings.append("⚠️  Rate limiting is DISABLED")
        if self.rate_limit.backend == "memory":
            warnings.append("⚠️  In-memory rate limiting only covers a single process")
        if "*" in self.security.allowed_origins:
            warnings.append("⚠️  CORS allows wildcard (*) origins")
        if self.security.trust_forwarded_for:
            warnings.append(
                "⚠️  X-Forwarded-For is trusted; only enable behind a proxy that overwrites it"
            )

        if warnings:
            print("\n⚠️  PRODUCTION SECURITY WARNINGS:", file=sys.stderr)
            for warning in warnings:
                print(f"   {warning}", file=sys.stderr)

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]


__all__ = ["AppConfig", "load_config"]
