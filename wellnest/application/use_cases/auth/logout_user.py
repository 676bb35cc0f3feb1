"""Use-case for ending the current session."""

from __future__ import annotations

from datetime import datetime

from wellnest.application.services.session_guard import SessionValidityGuard


class LogoutUserUseCase:
    def __init__(self, *, guard: SessionValidityGuard) -> None:
        self._guard = guard

    def execute(self, user_id: int) -> datetime:
        return self._guard.record_login(user_id)
