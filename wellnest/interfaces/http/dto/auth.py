from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

_PHONE = re.compile(r"^\d{10}$")


def _check_phone(value: str) -> str:
    value = value.strip()
    if not _PHONE.match(value):
        raise PydanticCustomError(
            "phone_invalid",
            "Valid 10-digit phone number required",
            {"pattern": _PHONE.pattern},
        )
    return value


class SendOtpRequestDTO(BaseModel):
    phone: str

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        return _check_phone(value)


class VerifyOtpRequestDTO(BaseModel):
    phone: str
    otp: str = Field(min_length=1, max_length=16)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str) -> str:
        return _check_phone(value)

    @field_validator("otp")
    @classmethod
    def validate_otp(cls, value: str) -> str:
        value = value.strip()
        if not value.isdigit():
            raise PydanticCustomError("otp_invalid", "OTP must contain only digits", {})
        return value


class SendOtpResponseDTO(BaseModel):
    success: bool = True
    message: str = "OTP sent successfully"
    otp: str | None = None


class VerifyOtpResponseDTO(BaseModel):
    success: bool = True
    message: str = "Login successful"
    token: str
    expiresAt: str
    isNewUser: bool
    user: dict[str, object]


class LogoutResponseDTO(BaseModel):
    success: bool = True
    message: str = "Logged out successfully"
    action: str = "redirect_to_login"
