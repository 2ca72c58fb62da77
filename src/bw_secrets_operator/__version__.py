"""Version information for bw_secrets_operator."""

__version__ = "0.1.0"
