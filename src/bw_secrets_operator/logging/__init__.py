"""Logging configuration for bw_secrets_operator."""

from bw_secrets_operator.logging.config import configure_logging

__all__ = ["configure_logging"]
