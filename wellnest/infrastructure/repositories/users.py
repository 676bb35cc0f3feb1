# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import or_, update
from sqlalchemy.exc import SQLAlchemyError

from wellnest.domain.users.entities import OtpCode as DomainOtpCode
from wellnest.domain.users.entities import User as DomainUser
from wellnest.domain.users.exceptions import CredentialStoreUnavailable
from wellnest.domain.users.repositories import CredentialStore, OtpRepository, UserRepository
from wellnest.infrastructure.db.models import OtpCode, User
from wellnest.infrastructure.db.session import session_scope
from wellnest.shared.clock import as_utc


def _to_domain(row: User) -> DomainUser:
    return DomainUser(
        id=row.id,
        phone=row.phone,
        name=row.name,
        role=row.role,
        is_active=row.is_active,
        profile_completed=row.profile_completed,
        created_at=as_utc(row.created_at),
        last_login_at=as_utc(row.last_login_at) if row.last_login_at else None,
    )


class SqlAlchemyUserRepository(UserRepository):
    def find_by_phone(self, phone: str) -> DomainUser | None:
        with session_scope() as session:
            row = session.query(User).filter(User.phone == phone).first()
            return _to_domain(row) if row else None

    def find_by_id(self, user_id: int) -> DomainUser | None:
        with session_scope() as session:
            row = session.get(User, user_id)
            return _to_domain(row) if row else None

    def add(self, user: DomainUser) -> DomainUser:
        with session_scope() as session:
            row = User(
                phone=user.phone,
                name=user.name,
                role=user.role,
                is_active=user.is_active,
                profile_completed=user.profile_completed,
                created_at=user.created_at,
                last_login_at=user.last_login_at,
            )
            session.add(row)
            session.flush()
            session.refresh(row)
            return _to_domain(row)


class SqlAlchemyCredentialStore(CredentialStore):
    def load(self, user_id: int) -> DomainUser | None:
        try:
            with session_scope() as session:
                row = session.get(User, user_id)
                return _to_domain(row) if row else None
        except SQLAlchemyError as exc:
            raise CredentialStoreUnavailable(type(exc).__name__) from exc

    def set_last_login(self, user_id: int, instant: datetime) -> datetime:
        instant = instant.astimezone(UTC)
        try:
            with session_scope() as session:
                # Only move forward: a delayed write from an older login must not
                # bring its token back to life.
                session.execute(
                    update(User)
                    .where(
                        User.id == user_id,
                        or_(User.last_login_at.is_(None), User.last_login_at < instant),
                    )
                    .values(last_login_at=instant)
                )
                marker = session.query(User.last_login_at).filter(User.id == user_id).scalar()
        except SQLAlchemyError as exc:
            raise CredentialStoreUnavailable(type(exc).__name__) from exc
        return as_utc(marker) if marker else instant


class SqlAlchemyOtpRepository(OtpRepository):
    def get(self, phone: str) -> DomainOtpCode | None:
        with session_scope() as session:
            row = session.query(OtpCode).filter(OtpCode.phone == phone).first()
            if not row:
                return None
            return DomainOtpCode(
                phone=row.phone,
                code_hash=row.code_hash,
                expires_at=as_utc(row.expires_at),
                updated_at=as_utc(row.updated_at),
                attempts=row.attempts,
                is_used=row.is_used,
            )

    def save(self, otp: DomainOtpCode) -> None:
        with session_scope() as session:
            row = session.query(OtpCode).filter(OtpCode.phone == otp.phone).first()
            if row is None:
                row = OtpCode(phone=otp.phone)
                session.add(row)
            row.code_hash = otp.code_hash
            row.expires_at = otp.expires_at
            row.updated_at = otp.updated_at
            row.attempts = otp.attempts
            row.is_used = otp.is_used

    def record_failure(self, phone: str, max_attempts: int) -> int | None:
        with session_scope() as session:
            result = session.execute(
                update(OtpCode)
                .where(
                    OtpCode.phone == phone,
                    OtpCode.is_used.is_(False),
                    OtpCode.attempts < max_attempts,
                )
                .values(attempts=OtpCode.attempts + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                return None
            return session.query(OtpCode.attempts).filter(OtpCode.phone == phone).scalar()

    def consume(self, phone: str, max_attempts: int, now: datetime) -> bool:
        with session_scope() as session:
            result = session.execute(
                update(OtpCode)
                .where(
                    OtpCode.phone == phone,
                    OtpCode.is_used.is_(False),
                    OtpCode.attempts < max_attempts,
                    OtpCode.expires_at > now.astimezone(UTC),
                )
                .values(is_used=True)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1


__all__ = [
    "SqlAlchemyCredentialStore",
    "SqlAlchemyOtpRepository",
    "SqlAlchemyUserRepository",
]
