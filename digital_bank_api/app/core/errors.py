"""
Error taxonomy shared by the service layer and the HTTP boundary.

Services raise subclasses of :class:`BankError`; ``main.create_app``
registers a handler that turns them into ``{"code", "message"}`` JSON
bodies with the status code attached to each :class:`ErrorKind`.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Abstract error kinds and the HTTP status each maps to."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    DUPLICATE = "DUPLICATE"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    LOCKED_OUT = "LOCKED_OUT"
    OPERATION_FAILED = "OPERATION_FAILED"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.DUPLICATE: 409,
    ErrorKind.INSUFFICIENT_FUNDS: 422,
    ErrorKind.LOCKED_OUT: 403,
    ErrorKind.OPERATION_FAILED: 422,
}


class BankError(Exception):
    """Base exception for all domain errors."""

    kind = ErrorKind.OPERATION_FAILED

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.kind.value, "message": self.message}


class ValidationFailedError(BankError):
    """Raised when request data is malformed or inconsistent."""

    kind = ErrorKind.VALIDATION_FAILED


class NotFoundError(BankError):
    """Raised when a referenced account or user does not exist."""

    kind = ErrorKind.NOT_FOUND


class InvalidCredentialsError(BankError):
    """Raised on a password mismatch or a failed login."""

    kind = ErrorKind.INVALID_CREDENTIALS


class DuplicateError(BankError):
    """Raised when an account number or email is already registered."""

    kind = ErrorKind.DUPLICATE


class InsufficientFundsError(BankError):
    """Raised when a payment or transfer exceeds the current balance."""

    kind = ErrorKind.INSUFFICIENT_FUNDS


class LockedOutError(BankError):
    """Raised when too many failed logins were recorded for an identifier."""

    kind = ErrorKind.LOCKED_OUT

    def __init__(self, message: str, wait_minutes: int) -> None:
        super().__init__(message)
        self.wait_minutes = wait_minutes


class OperationFailedError(BankError):
    """Raised when a store write unexpectedly has no effect."""

    kind = ErrorKind.OPERATION_FAILED
