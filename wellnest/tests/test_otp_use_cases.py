from __future__ import annotations

import pytest

from wellnest.application.services.session_guard import SessionValidityGuard
from wellnest.application.services.token_issuer import JwtTokenIssuer
from wellnest.application.use_cases.auth.logout_user import LogoutUserUseCase
from wellnest.application.use_cases.auth.send_otp import SendOtpUseCase, generate_code
from wellnest.application.use_cases.auth.verify_otp import VerifyOtpUseCase
from wellnest.domain.sessions.exceptions import SessionSupersededError
from wellnest.domain.users.exceptions import (
    AccountDisabledError,
    InvalidOtpError,
    OtpCooldownError,
    OtpDeliveryError,
    OtpExpiredError,
)
from wellnest.shared.config.settings import OtpConfig, ResilienceConfig
from wellnest.tests.fakes import (
    DeterministicHasher,
    FakeClock,
    InMemoryCredentialStore,
    InMemoryOtpRepository,
    InMemoryUserRepository,
    RecordingSmsSender,
    make_user,
)

PHONE = "5550000001"


class _Harness:
    def __init__(self, *, sms_failures: int = 0) -> None:
        self.clock = FakeClock(1000.0)
        self.credentials = InMemoryCredentialStore(make_user(9, phone="5550000009", is_active=False))
        self.users = InMemoryUserRepository(self.credentials)
        self.otps = InMemoryOtpRepository()
        self.sms = RecordingSmsSender(failures=sms_failures)
        self.config = OtpConfig()
        self.issuer = JwtTokenIssuer(
            secret="otp-test-secret-0123456789abcdefgh", clock=self.clock, ttl_seconds=86400
        )
        self.guard = SessionValidityGuard(credentials=self.credentials, clock=self.clock)
        self.send = SendOtpUseCase(
            otps=self.otps,
            hasher=DeterministicHasher(),
            sms=self.sms,
            clock=self.clock,
            config=self.config,
            resilience=ResilienceConfig(max_retries=2, backoff_base=0, backoff_cap=0),
        )
        self.verify = VerifyOtpUseCase(
            users=self.users,
            otps=self.otps,
            hasher=DeterministicHasher(),
            issuer=self.issuer,
            guard=self.guard,
            clock=self.clock,
            config=self.config,
        )
        self.logout = LogoutUserUseCase(guard=self.guard)


@pytest.fixture()
def harness() -> _Harness:
    return _Harness()


def test_generated_code_has_requested_length() -> None:
    for _ in range(50):
        code = generate_code(6)
        assert len(code) == 6
        assert code.isdigit()


def test_send_stores_hash_and_delivers_code(harness: _Harness) -> None:
    code = harness.send.execute(PHONE)

    stored = harness.otps.codes[PHONE]
    assert stored.code_hash == f"hashed:{code}"
    assert stored.attempts == 0
    assert (stored.expires_at - harness.clock.now()).total_seconds() == 300
    assert harness.sms.sent == [(PHONE, code)]


def test_resend_within_cooldown_is_rejected(harness: _Harness) -> None:
    harness.send.execute(PHONE)
    harness.clock.advance(45)

    with pytest.raises(OtpCooldownError) as exc_info:
        harness.send.execute(PHONE)

    assert exc_info.value.wait_seconds == 15
    assert exc_info.value.headers() == {"Retry-After": "15"}

    harness.clock.advance(15)
    harness.send.execute(PHONE)
    assert len(harness.sms.sent) == 2


def test_delivery_is_retried() -> None:
    harness = _Harness(sms_failures=2)

    code = harness.send.execute(PHONE)

    assert harness.sms.calls == 3
    assert harness.sms.sent == [(PHONE, code)]


def test_delivery_failure_after_retries() -> None:
    harness = _Harness(sms_failures=5)

    with pytest.raises(OtpDeliveryError):
        harness.send.execute(PHONE)
    assert harness.sms.calls == 3


def test_verify_creates_user_and_records_login(harness: _Harness) -> None:
    code = harness.send.execute(PHONE)

    result = harness.verify.execute(PHONE, code)

    assert result.created
    assert result.user.name == "New User"
    assert result.user.role == "user"
    assert result.user.profile_completed is False
    assert result.user.last_login_at == result.token.issued_at
    assert harness.otps.codes[PHONE].is_used
    claims = harness.issuer.verify(result.token.token)
    assert harness.guard.authenticate(claims).id == result.user.id


def test_second_login_supersedes_first(harness: _Harness) -> None:
    first = harness.verify.execute(PHONE, harness.send.execute(PHONE))
    harness.clock.advance(1000)
    second = harness.verify.execute(PHONE, harness.send.execute(PHONE))

    assert not second.created
    assert second.user.id == first.user.id
    with pytest.raises(SessionSupersededError):
        harness.guard.authenticate(harness.issuer.verify(first.token.token))


def test_wrong_code_counts_attempts(harness: _Harness) -> None:
    code = harness.send.execute(PHONE)
    wrong = "000000" if code != "000000" else "111111"

    with pytest.raises(InvalidOtpError) as first:
        harness.verify.execute(PHONE, wrong)
    assert first.value.context == {"remaining_attempts": 2}

    with pytest.raises(InvalidOtpError):
        harness.verify.execute(PHONE, wrong)
    with pytest.raises(InvalidOtpError) as last:
        harness.verify.execute(PHONE, wrong)
    assert last.value.context == {"remaining_attempts": 0}

    with pytest.raises(OtpExpiredError):
        harness.verify.execute(PHONE, code)


def test_expired_code_is_rejected(harness: _Harness) -> None:
    code = harness.send.execute(PHONE)
    harness.clock.advance(300)

    with pytest.raises(OtpExpiredError):
        harness.verify.execute(PHONE, code)


def test_code_is_single_use(harness: _Harness) -> None:
    code = harness.send.execute(PHONE)
    harness.verify.execute(PHONE, code)

    with pytest.raises(OtpExpiredError):
        harness.verify.execute(PHONE, code)


def test_unknown_phone_is_rejected(harness: _Harness) -> None:
    with pytest.raises(OtpExpiredError):
        harness.verify.execute("5559999999", "123456")


def test_disabled_account_cannot_log_in(harness: _Harness) -> None:
    code = harness.send.execute("5550000009")

    with pytest.raises(AccountDisabledError):
        harness.verify.execute("5550000009", code)


def test_logout_supersedes_current_token(harness: _Harness) -> None:
    result = harness.verify.execute(PHONE, harness.send.execute(PHONE))
    harness.clock.advance(0.001)

    harness.logout.execute(result.user.id)

    with pytest.raises(SessionSupersededError):
        harness.guard.authenticate(harness.issuer.verify(result.token.token))
