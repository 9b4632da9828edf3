"""Access to Sia consensus through siad's HTTP API."""

from .client import DEFAULT_SIAD_URL, SiadClient, SiadError

__all__ = ["DEFAULT_SIAD_URL", "SiadClient", "SiadError"]
