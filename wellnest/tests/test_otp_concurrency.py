from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from wellnest.application.services.code_hashing import WerkzeugCodeHasher
from wellnest.application.services.session_guard import SessionValidityGuard
from wellnest.application.services.token_issuer import JwtTokenIssuer
from wellnest.application.use_cases.auth.verify_otp import VerifyOtpUseCase
from wellnest.domain.users.entities import OtpCode
from wellnest.domain.users.exceptions import InvalidOtpError, OtpExpiredError
from wellnest.infrastructure.repositories.users import SqlAlchemyOtpRepository
from wellnest.shared.config.settings import OtpConfig
from wellnest.tests.fakes import FakeClock, InMemoryCredentialStore, InMemoryUserRepository

PHONE = "5550004444"
CODE = "482913"
WORKERS = 6


@pytest.fixture()
def verify(clean_db) -> VerifyOtpUseCase:
    clock = FakeClock(1000.0)
    hasher = WerkzeugCodeHasher()
    otps = SqlAlchemyOtpRepository()
    otps.save(
        OtpCode(
            phone=PHONE,
            code_hash=hasher.hash(CODE),
            expires_at=clock.now() + timedelta(minutes=5),
            updated_at=clock.now(),
        )
    )
    credentials = InMemoryCredentialStore()
    return VerifyOtpUseCase(
        users=InMemoryUserRepository(credentials),
        otps=otps,
        hasher=hasher,
        issuer=JwtTokenIssuer(
            secret="concurrency-secret-0123456789abcdef", clock=clock, ttl_seconds=3600
        ),
        guard=SessionValidityGuard(credentials=credentials, clock=clock),
        clock=clock,
        config=OtpConfig(max_attempts=3),
    )


def _race(verify: VerifyOtpUseCase, code: str) -> list[str]:
    barrier = threading.Barrier(WORKERS)
    outcomes: list[str] = []
    lock = threading.Lock()

    def _attempt() -> None:
        barrier.wait()
        try:
            verify.execute(PHONE, code)
            outcome = "ok"
        except InvalidOtpError:
            outcome = "invalid"
        except OtpExpiredError:
            outcome = "expired"
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=_attempt) for _ in range(WORKERS)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return outcomes


def test_concurrent_wrong_guesses_respect_attempt_limit(verify: VerifyOtpUseCase) -> None:
    outcomes = _race(verify, "000000")

    assert len(outcomes) == WORKERS
    assert outcomes.count("invalid") <= 3
    assert set(outcomes) <= {"invalid", "expired"}

    stored = SqlAlchemyOtpRepository().get(PHONE)
    assert stored is not None
    assert stored.attempts == outcomes.count("invalid")

    with pytest.raises(OtpExpiredError):
        verify.execute(PHONE, CODE)


def test_correct_code_is_accepted_once_under_contention(verify: VerifyOtpUseCase) -> None:
    outcomes = _race(verify, CODE)

    assert outcomes.count("ok") == 1
    assert outcomes.count("expired") == WORKERS - 1


def test_failed_attempts_stop_at_limit(clean_db) -> None:
    repo = SqlAlchemyOtpRepository()
    clock = FakeClock(1000.0)
    repo.save(
        OtpCode(
            phone=PHONE,
            code_hash="h",
            expires_at=clock.now() + timedelta(minutes=5),
            updated_at=clock.now(),
        )
    )

    assert [repo.record_failure(PHONE, 3) for _ in range(4)] == [1, 2, 3, None]
    assert repo.consume(PHONE, 3, clock.now()) is False


def test_consume_rejects_expired_and_used_codes(clean_db) -> None:
    repo = SqlAlchemyOtpRepository()
    clock = FakeClock(1000.0)
    repo.save(
        OtpCode(
            phone=PHONE,
            code_hash="h",
            expires_at=clock.now() + timedelta(minutes=5),
            updated_at=clock.now(),
        )
    )

    assert repo.consume(PHONE, 3, clock.now() + timedelta(minutes=5)) is False
    assert repo.consume(PHONE, 3, clock.now()) is True
    assert repo.consume(PHONE, 3, clock.now()) is False
    assert repo.record_failure(PHONE, 3) is None
