"""Error taxonomy for ledger operations.

Every error raised here is surfaced to the submitting caller and leaves the
ledger unchanged.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for rejected ledger operations."""


class InputValidationError(LedgerError):
    """Empty name/password, malformed email, or malformed payload."""


class AuthenticationError(LedgerError):
    """Password does not match the stored hash of an existing user."""


class BusinessRuleError(LedgerError):
    """Request is well formed but violates a creation rule."""


__all__ = [
    "AuthenticationError",
    "BusinessRuleError",
    "InputValidationError",
    "LedgerError",
]
