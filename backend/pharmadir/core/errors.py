# pharmadir/core/errors.py
"""
Error taxonomy shared by all services.

Services raise a ServiceError subclass for expected outcomes (bad input,
missing identity, missing resource, missing ownership). The HTTP layer turns
them into the error envelope with the matching status code; anything else is
treated as an unexpected fault.
"""
from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"


class ServiceError(Exception):
    """Base class for client-visible failures. `message` is safe to show."""

    kind: ErrorKind = ErrorKind.INVALID_INPUT
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.kind.value, "message": self.message}


class InvalidInputError(ServiceError):
    kind = ErrorKind.INVALID_INPUT
    status_code = 400


class UnauthorizedError(ServiceError):
    kind = ErrorKind.UNAUTHORIZED
    status_code = 401


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404


class ForbiddenError(ServiceError):
    kind = ErrorKind.FORBIDDEN
    status_code = 403
