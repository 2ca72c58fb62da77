"""Exceptions raised by the Bitwarden Secrets Manager integration."""

from __future__ import annotations


class BitwardenError(Exception):
    """Base exception for Secrets Manager operations.

    Attributes:
        message: Human-readable error message.
        original_error: The SDK exception that caused this error, if any.
    """

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error is not None:
            return f"{self.message}: {self.original_error}"
        return self.message


class BitwardenClientError(BitwardenError):
    """The SDK client could not be constructed."""


class BitwardenAuthError(BitwardenError):
    """The access token login was rejected."""


class BitwardenSyncError(BitwardenError):
    """Fetching the secrets delta failed."""
