# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, g, jsonify, request
from pydantic import ValidationError

from wellnest.application.use_cases.auth.logout_user import LogoutUserUseCase
from wellnest.application.use_cases.auth.send_otp import SendOtpUseCase
from wellnest.application.use_cases.auth.verify_otp import VerifyOtpUseCase
from wellnest.domain.ratelimit.entities import RateLimitRule
from wellnest.infrastructure.audit import AuditAction, audit_log
from wellnest.interfaces.http.dto.auth import (
    LogoutResponseDTO,
    SendOtpRequestDTO,
    SendOtpResponseDTO,
    VerifyOtpRequestDTO,
    VerifyOtpResponseDTO,
)
from wellnest.shared.errors import DomainError, client_ip
from wellnest.shared.errors.validation import raise_validation_error
from wellnest.shared.logging import logger, mask_phone
from wellnest.shared.middleware.authentication import AuthenticationMiddleware
from wellnest.shared.middleware.rate_limit import RateLimitMiddleware


class AuthController:
    def __init__(
        self,
        *,
        send_otp_use_case: SendOtpUseCase,
        verify_otp_use_case: VerifyOtpUseCase,
        logout_use_case: LogoutUserUseCase,
        rate_limits: RateLimitMiddleware,
        authentication: AuthenticationMiddleware,
        rules: dict[str, RateLimitRule],
        expose_otp: bool = False,
    ) -> None:
        self._send_otp_use_case = send_otp_use_case
        self._verify_otp_use_case = verify_otp_use_case
        self._logout_use_case = logout_use_case
        self._rate_limits = rate_limits
        self._authentication = authentication
        self._rules = rules
        self._expose_otp = expose_otp

    def send_otp(self) -> tuple[Response, int]:
        try:
            dto = SendOtpRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        code = self._send_otp_use_case.execute(dto.phone)

        audit_log(
            AuditAction.OTP_REQUESTED,
            ip_address=client_ip(),
            details={"phone": dto.phone},
        )
        payload = SendOtpResponseDTO(otp=code if self._expose_otp else None)
        logger.info(f"auth.send_otp: ok phone={mask_phone(dto.phone)}")
        return jsonify(payload.model_dump(exclude_none=True)), 200

    def verify_otp(self) -> tuple[Response, int]:
        try:
            dto = VerifyOtpRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = client_ip()
        try:
            result = self._verify_otp_use_case.execute(dto.phone, dto.otp)
        except DomainError as exc:
            audit_log(
                AuditAction.LOGIN_FAILED,
                ip_address=ip_address,
                details={"phone": dto.phone, "reason": exc.code},
                success=False,
            )
            raise

        if result.created:
            audit_log(AuditAction.ACCOUNT_CREATED, user_id=result.user.id, ip_address=ip_address)
        audit_log(AuditAction.LOGIN_SUCCESS, user_id=result.user.id, ip_address=ip_address)

        payload = VerifyOtpResponseDTO(
            token=result.token.token,
            expiresAt=result.token.expires_at.isoformat(),
            isNewUser=result.created,
            user=result.user.summary(),
        )
        response = jsonify(payload.model_dump())
        response.headers["Authorization"] = f"Bearer {result.token.token}"
        logger.info(f"auth.verify_otp: ok user_id={result.user.id} new={result.created}")
        return response, 200

    def logout(self) -> tuple[Response, int]:
        user_id: int = g.user_id
        self._logout_use_case.execute(user_id)

        audit_log(AuditAction.LOGOUT, user_id=user_id, ip_address=client_ip())
        logger.info(f"auth.logout: ok user_id={user_id}")
        return jsonify(LogoutResponseDTO().model_dump()), 200

    def profile(self) -> tuple[Response, int]:
        return jsonify({"success": True, "user": g.user.summary()}), 200

    def as_blueprint(self) -> Blueprint:
        limits = self._rate_limits
        protect = self._authentication.protect
        rules = self._rules

        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bp.add_url_rule(
            "/send-otp",
            view_func=limits.per_phone(self.send_otp, rules["otp_send"]),
            methods=["POST"],
        )
        bp.add_url_rule(
            "/verify-otp",
            view_func=limits.per_phone(self.verify_otp, rules["otp_verify"]),
            methods=["POST"],
        )
        bp.add_url_rule(
            "/logout", view_func=protect(self.logout, rules["auth"]), methods=["POST"]
        )
        bp.add_url_rule(
            "/profile", view_func=protect(self.profile, rules["api"]), methods=["GET"]
        )
        return bp
