"""Application dependency container."""

from __future__ import annotations

from functools import cached_property

from wellnest.application.services.admission import RequestAdmission
from wellnest.application.services.code_hashing import WerkzeugCodeHasher
from wellnest.application.services.rate_limiter import RateLimiter
from wellnest.application.services.session_guard import SessionValidityGuard
from wellnest.application.services.token_issuer import JwtTokenIssuer
from wellnest.application.use_cases.auth.logout_user import LogoutUserUseCase
from wellnest.application.use_cases.auth.send_otp import SendOtpUseCase
from wellnest.application.use_cases.auth.verify_otp import VerifyOtpUseCase
from wellnest.domain.ratelimit.entities import RateLimitRule
from wellnest.domain.ratelimit.repositories import CounterStore
from wellnest.domain.users.repositories import SmsSender
from wellnest.infrastructure.ratelimit import (
    CounterSweeper,
    InMemoryCounterStore,
    RedisCounterStore,
)
from wellnest.infrastructure.repositories.users import (
    SqlAlchemyCredentialStore,
    SqlAlchemyOtpRepository,
    SqlAlchemyUserRepository,
)
from wellnest.infrastructure.sms import LoggingSmsSender
from wellnest.interfaces.http.controllers.auth_controller import AuthController
from wellnest.interfaces.http.controllers.misc_controller import MiscController
from wellnest.shared.clock import Clock, SystemClock
from wellnest.shared.config import AppConfig, RateLimitConfig, load_config
from wellnest.shared.middleware.authentication import AuthenticationMiddleware
from wellnest.shared.middleware.rate_limit import RateLimitMiddleware


def build_rules(config: RateLimitConfig) -> dict[str, RateLimitRule]:
    window = config.window_seconds
    limits = {
        "auth": config.auth_limit,
        "api": config.api_limit,
        "global": config.global_limit,
        "otp_send": config.otp_send_limit,
        "otp_verify": config.otp_verify_limit,
    }
    return {name: RateLimitRule(name, limit, window) for name, limit in limits.items()}


class Container:
    def __init__(
        self,
        *,
        config: AppConfig | None = None,
        clock: Clock | None = None,
        counter_store: CounterStore | None = None,
        sms_sender: SmsSender | None = None,
    ) -> None:
        self.config = config or load_config()
        self.clock = clock or SystemClock()
        self._counter_store = counter_store
        self._sms_sender = sms_sender

    @cached_property
    def rules(self) -> dict[str, RateLimitRule]:
        return build_rules(self.config.rate_limit)

    @cached_property
    def counter_store(self) -> CounterStore:
        if self._counter_store is not None:
            return self._counter_store
        rl = self.config.rate_limit
        if rl.backend == "redis":
            return RedisCounterStore.from_url(rl.redis_url, timeout=rl.store_timeout)
        return InMemoryCounterStore(
            clock=self.clock, shards=rl.shards, idle_multiple=rl.idle_multiple
        )

    @cached_property
    def counter_sweeper(self) -> CounterSweeper:
        return CounterSweeper(self.counter_store, interval=self.config.rate_limit.cleanup_interval)

    @cached_property
    def rate_limiter(self) -> RateLimiter:
        return RateLimiter(self.counter_store)

    @cached_property
    def code_hasher(self) -> WerkzeugCodeHasher:
        return WerkzeugCodeHasher()

    @cached_property
    def sms_sender(self) -> SmsSender:
        return self._sms_sender or LoggingSmsSender()

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository()

    @cached_property
    def credential_store(self) -> SqlAlchemyCredentialStore:
        return SqlAlchemyCredentialStore()

    @cached_property
    def otp_repository(self) -> SqlAlchemyOtpRepository:
        return SqlAlchemyOtpRepository()

    @cached_property
    def token_issuer(self) -> JwtTokenIssuer:
        auth = self.config.auth
        return JwtTokenIssuer(
            secret=auth.jwt_secret,
            clock=self.clock,
            ttl_seconds=auth.token_ttl_seconds,
            algorithm=auth.jwt_algorithm,
        )

    @cached_property
    def session_guard(self) -> SessionValidityGuard:
        return SessionValidityGuard(credentials=self.credential_store, clock=self.clock)

    @cached_property
    def request_admission(self) -> RequestAdmission:
        return RequestAdmission(
            issuer=self.token_issuer,
            guard=self.session_guard,
            limiter=self.rate_limiter,
            rate_limit_enabled=self.config.rate_limit.enabled,
        )

    @cached_property
    def authentication_middleware(self) -> AuthenticationMiddleware:
        return AuthenticationMiddleware(
            self.request_admission,
            trust_forwarded_for=self.config.security.trust_forwarded_for,
        )

    @cached_property
    def rate_limit_middleware(self) -> RateLimitMiddleware:
        return RateLimitMiddleware(
            self.rate_limiter,
            enabled=self.config.rate_limit.enabled,
            trust_forwarded_for=self.config.security.trust_forwarded_for,
        )

    @cached_property
    def send_otp_use_case(self) -> SendOtpUseCase:
        return SendOtpUseCase(
            otps=self.otp_repository,
            hasher=self.code_hasher,
            sms=self.sms_sender,
            clock=self.clock,
            config=self.config.otp,
            resilience=self.config.resilience,
        )

    @cached_property
    def verify_otp_use_case(self) -> VerifyOtpUseCase:
        return VerifyOtpUseCase(
            users=self.user_repository,
            otps=self.otp_repository,
            hasher=self.code_hasher,
            issuer=self.token_issuer,
            guard=self.session_guard,
            clock=self.clock,
            config=self.config.otp,
        )

    @cached_property
    def logout_user_use_case(self) -> LogoutUserUseCase:
        return LogoutUserUseCase(guard=self.session_guard)

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            send_otp_use_case=self.send_otp_use_case,
            verify_otp_use_case=self.verify_otp_use_case,
            logout_use_case=self.logout_user_use_case,
            rate_limits=self.rate_limit_middleware,
            authentication=self.authentication_middleware,
            rules=self.rules,
            expose_otp=self.config.otp.expose_in_response,
        )

    @cached_property
    def misc_controller(self) -> MiscController:
        observability = self.config.observability
        store = self.counter_store
        return MiscController(
            metrics_enabled=observability.metrics_enabled,
            service_name=observability.service_name,
            counter_store_probe=store.ping if isinstance(store, RedisCounterStore) else None,
        )
