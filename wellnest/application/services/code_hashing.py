"""One-time code hashing strategies."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from wellnest.domain.users.repositories import CodeHasher


class WerkzeugCodeHasher(CodeHasher):
    def hash(self, code: str) -> str:
        return str(generate_password_hash(code))

    def verify(self, code: str, hashed: str) -> bool:
        return bool(check_password_hash(hashed, code))
