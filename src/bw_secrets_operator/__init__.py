"""Bitwarden Secrets Manager to Kubernetes Secret sync operator."""

from bw_secrets_operator.__version__ import __version__

__all__ = ["__version__"]
