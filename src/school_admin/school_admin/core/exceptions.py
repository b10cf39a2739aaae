from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    AUTHENTICATION = "AUTHENTICATION"
    AUTHORIZATION = "AUTHORIZATION"


class DomainError(Exception):
    """Base exception for business rule violations.

    Subclasses pin an error ``kind`` and the HTTP status it maps to. Extra keyword
    arguments are kept as structured ``details`` and returned to the client as-is.
    """

    kind = ErrorKind.VALIDATION
    status_code = 400

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced entity is absent or outside the caller's scope."""

    kind = ErrorKind.NOT_FOUND
    status_code = 404


class ConflictError(DomainError):
    """Raised when an operation is invalid for the entity's current status."""

    kind = ErrorKind.CONFLICT
    status_code = 400


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or the session is missing."""

    kind = ErrorKind.AUTHENTICATION
    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    kind = ErrorKind.AUTHORIZATION
    status_code = 403


class FsNumberRequiredError(ValidationError):
    """Raised instead of a receipt while invoices still lack an FS number."""

    def __init__(self, message: str, *, invoices_needing_fs: list):
        super().__init__(message, needs_fs_number=True, invoices_needing_fs=invoices_needing_fs)
        self.invoices_needing_fs = invoices_needing_fs
