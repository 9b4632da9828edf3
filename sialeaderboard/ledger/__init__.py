"""Contract ledger accounting for the storage leaderboard.

Submitted file contracts are validated against consensus, deduplicated per
host within a submission, scaled down when underpriced, and credited to
exactly one user. Expired contracts are purged by the sweeper.
"""

from .errors import (
    AuthenticationError,
    BusinessRuleError,
    InputValidationError,
    LedgerError,
)
from .models import (
    ContractEntry,
    FileContractRevision,
    LeaderEntry,
    LedgerSnapshot,
    SiacoinOutput,
    Transaction,
    UserSnapshot,
)
from .pricing import PricingConfig, scale_size
from .selector import ContractSelector, SelectionResult
from .state import Ledger, UpsertResult

__all__ = [
    "AuthenticationError",
    "BusinessRuleError",
    "ContractEntry",
    "ContractSelector",
    "FileContractRevision",
    "InputValidationError",
    "LeaderEntry",
    "Ledger",
    "LedgerError",
    "LedgerSnapshot",
    "PricingConfig",
    "SelectionResult",
    "SiacoinOutput",
    "Transaction",
    "UpsertResult",
    "UserSnapshot",
    "scale_size",
]
