from __future__ import annotations

from enum import Enum


class ServiceError(Exception):
    status_code = 500

    def __init__(self, code: str | Enum, message: str | None = None) -> None:
        self.code = code.value if isinstance(code, Enum) else code
        self.message = message or self.code
        super().__init__(self.message)


class NotFoundError(ServiceError):
    status_code = 404


class PermissionDeniedError(ServiceError):
    status_code = 403


class ConflictError(ServiceError):
    status_code = 409


class InvalidStateError(ServiceError):
    status_code = 400


class ValidationError(ServiceError):
    status_code = 400
