# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Counter key construction.

Anonymous endpoints count per client IP and route, authenticated endpoints
per identity, and one-time code endpoints per phone number so that a single
number cannot be flooded from many addresses.
"""

from __future__ import annotations

import re

_NON_DIGITS = re.compile(r"\D")


def clean_phone(phone: object) -> str:
    if phone is None or isinstance(phone, bool):
        return ""
    if not isinstance(phone, (str, int)):
        return ""
    return _NON_DIGITS.sub("", str(phone))


def ip_route_key(prefix: str, ip: str, path: str) -> str:
    return f"{prefix}:{ip}:{path}"


def identity_key(prefix: str, user_id: int) -> str:
    return f"{prefix}:user:{user_id}"


def phone_key(phone: str, path: str) -> str:
    return f"phone:{phone}:{path}"


def phone_or_ip_key(phone: object, ip: str, path: str, *, prefix: str = "otp") -> str:
    digits = clean_phone(phone)
    if not digits:
        return ip_route_key(prefix, ip, path)
    return phone_key(digits, path)


__all__ = [
    "clean_phone",
    "identity_key",
    "ip_route_key",
    "phone_key",
    "phone_or_ip_key",
]
