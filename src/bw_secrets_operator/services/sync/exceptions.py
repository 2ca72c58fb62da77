"""Errors raised while materializing a target Secret."""

from __future__ import annotations


class SyncError(Exception):
    """Base exception for local sync failures."""


class OwnerReferenceError(SyncError):
    """The controller owner reference could not be set on the target Secret."""


class SecretMapSerializationError(SyncError):
    """The key-map could not be serialized into its annotation."""
