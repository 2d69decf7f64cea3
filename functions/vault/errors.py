"""
Error taxonomy for vault operations.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    EMAIL_NOT_FOUND = "EMAIL_NOT_FOUND"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    VALIDATION_FAILURE = "VALIDATION_FAILURE"
    STORAGE_FAILURE = "STORAGE_FAILURE"


DEFAULT_MESSAGES = {
    ErrorKind.NOT_FOUND: "The requested item could not be found.",
    ErrorKind.DUPLICATE_EMAIL: "Email already in use.",
    ErrorKind.USER_NOT_FOUND: "User not found.",
    ErrorKind.EMAIL_NOT_FOUND: "Email not found.",
    ErrorKind.NOT_AUTHENTICATED: "Not authenticated.",
    ErrorKind.NOT_AUTHORIZED: "Only the owner can do that.",
    ErrorKind.VALIDATION_FAILURE: "Some required fields are missing or invalid.",
    ErrorKind.STORAGE_FAILURE: "Could not read or write vault storage.",
}


class VaultError(Exception):
    """Base error carrying an ErrorKind and a short human-readable message."""

    kind: ErrorKind = ErrorKind.STORAGE_FAILURE

    def __init__(self, message: str | None = None):
        self.message = message or DEFAULT_MESSAGES[self.kind]
        super().__init__(self.message)


class NotFound(VaultError):
    kind = ErrorKind.NOT_FOUND


class DuplicateEmail(VaultError):
    kind = ErrorKind.DUPLICATE_EMAIL


class UserNotFound(VaultError):
    kind = ErrorKind.USER_NOT_FOUND


class EmailNotFound(VaultError):
    kind = ErrorKind.EMAIL_NOT_FOUND


class NotAuthenticated(VaultError):
    kind = ErrorKind.NOT_AUTHENTICATED


class NotAuthorized(VaultError):
    kind = ErrorKind.NOT_AUTHORIZED


class ValidationFailure(VaultError):
    kind = ErrorKind.VALIDATION_FAILURE


class StorageFailure(VaultError):
    kind = ErrorKind.STORAGE_FAILURE
