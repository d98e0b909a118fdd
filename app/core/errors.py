"""
Domain errors raised by the reservation and queue services.

Services never import FastAPI: they raise these, and the handler registered in
main.py turns each one into a JSON response with the error's status code.
"""
from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class DomainError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, **self.extra}


class InvalidDateError(DomainError):
    default_message = "Invalid date. Use the YYYY-MM-DD format"


class PastDateError(DomainError):
    default_message = "Dates in the past are not allowed"


class InvalidSlotError(DomainError):
    default_message = "Invalid time slot for this date"


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "This time slot is already reserved or blocked"


class QueueConflictError(ConflictError):
    """Re-join signal: carries the caller's existing code and position."""

    default_message = "You are already in the queue"

    def __init__(self, code: str, position: int, message: Optional[str] = None):
        super().__init__(message, code=code, position=position)
        self.code = code
        self.position = position


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class InvalidTransitionError(DomainError):
    default_message = "This status change is not allowed"


class CodeGenerationError(DomainError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Could not generate a queue code. Please try again"


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
