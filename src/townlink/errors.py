from __future__ import annotations


class DirectoryError(Exception):
    """Base exception for directory failures surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ValidationError(DirectoryError):
    """Raised when submitted fields are missing or outside their domain."""

    status_code = 400


class NotFoundError(DirectoryError):
    status_code = 404


class UnauthorizedError(DirectoryError):
    """Raised by the admin gate. The message never says why the key was refused."""

    status_code = 403

    def __init__(self, message: str = "Unauthorized: Invalid admin key"):
        super().__init__(message)


class StoreError(DirectoryError):
    """Raised when the relational store is unreachable or a query fails."""

    status_code = 500
