# backend/maintrack/core/errors.py
"""
Uygulama hata sınıfları.

Hepsi HTTPException'dan türer; main.py'deki global zarf handler'ı
status_code + code + mesajı tek tip {"ok": false, "error": {...}} olarak döner.
"""
from typing import Any, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code_default: int = status.HTTP_400_BAD_REQUEST
    code: str = "ERROR"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(status_code=self.status_code_default, detail=message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message


class NotFoundError(AppError):
    status_code_default = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class ValidationError(AppError):
    status_code_default = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class InvalidOperationError(AppError):
    status_code_default = status.HTTP_400_BAD_REQUEST
    code = "INVALID_OPERATION"


class ForbiddenError(AppError):
    status_code_default = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"

    def __init__(self, message: str = "Forbidden: insufficient permissions"):
        super().__init__(message)


class InvalidTransitionError(AppError):
    status_code_default = status.HTTP_409_CONFLICT
    code = "INVALID_TRANSITION"

    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Invalid status transition from {current} to {requested}",
            details={"from": current, "to": requested},
        )
        self.current = current
        self.requested = requested


class ConflictError(AppError):
    status_code_default = status.HTTP_409_CONFLICT
    code = "CONFLICT"
