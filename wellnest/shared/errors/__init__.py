from .base import AppError, DomainError, InfrastructureError, ValidationError
from .http import client_ip, handle_app_error, register_error_handler

__all__ = [
    "AppError",
    "DomainError",
    "InfrastructureError",
    "ValidationError",
    "client_ip",
    "handle_app_error",
    "register_error_handler",
]
