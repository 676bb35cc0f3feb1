# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime


def is_current(issued_at: datetime, last_login_at: datetime | None) -> bool:
    """Return True when a token issued at ``issued_at`` is the newest session.

    A missing marker means the identity never logged in through a path that
    records it, so any verified token is accepted. Equality is accepted: the
    login that wrote the marker is the one that minted the token.
    """
    if last_login_at is None:
        return True
    return issued_at >= last_login_at


__all__ = ["is_current"]
