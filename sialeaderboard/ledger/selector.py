"""Contract selection for a single submission batch.

Turns a batch of submitted transactions into ledger entries:

1. Shape check: exactly one revision carrying exactly two valid proof outputs.
2. Dedup by host payout address within the batch. The larger declared size
   wins; on a tie the later candidate wins. Losers are never sent to siad.
3. Consensus validation of each survivor through the transaction validator.
4. Price scaling of the survivor's size by its host payout.

Dedup only looks at the current batch. Contracts a user already owns from an
earlier submission are not consulted, so separate submissions can leave a user
holding two contracts with the same host.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence

import bittensor as bt

from .models import ContractEntry, FileContractRevision, Transaction
from .pricing import PricingConfig, scale_size


class TransactionValidator(Protocol):
    """Consensus validity check for one transaction (siad in production)."""

    async def validate_transaction(self, txn: Transaction) -> bool:
        ...


@dataclass
class SelectionResult:
    """Outcome of selecting a batch."""

    entries: dict[str, ContractEntry] = field(default_factory=dict)
    submitted: int = 0
    errors: int = 0  # validator calls that failed outright

    @property
    def valid(self) -> int:
        return len(self.entries)

    @property
    def invalid(self) -> int:
        return self.submitted - self.valid


@dataclass
class _Candidate:
    txn: Transaction
    revision: FileContractRevision

    @property
    def host_output(self) -> str:
        return self.revision.new_valid_proof_outputs[1].unlock_hash

    @property
    def size(self) -> int:
        return self.revision.new_file_size


def _candidate(txn: Transaction) -> _Candidate | None:
    if len(txn.file_contract_revisions) != 1:
        return None
    rev = txn.file_contract_revisions[0]
    if len(rev.new_valid_proof_outputs) != 2 or not rev.parent_id:
        return None
    return _Candidate(txn=txn, revision=rev)


class ContractSelector:
    """Validates, dedups and scales submitted contracts."""

    def __init__(self, validator: TransactionValidator, pricing: PricingConfig | None = None):
        self.validator = validator
        self.pricing = pricing or PricingConfig()

    def dedup(self, batch: Sequence[Transaction]) -> list[_Candidate]:
        """Well-formed candidates left after intra-batch host dedup, in input order."""
        best: dict[str, tuple[int, _Candidate]] = {}
        for pos, txn in enumerate(batch):
            cand = _candidate(txn)
            if cand is None:
                continue
            current = best.get(cand.host_output)
            if current is not None and current[1].size > cand.size:
                continue
            best[cand.host_output] = (pos, cand)
        return [cand for _, cand in sorted(best.values(), key=lambda item: item[0])]

    async def select(self, batch: Sequence[Transaction]) -> SelectionResult:
        result = SelectionResult(submitted=len(batch))

        for cand in self.dedup(batch):
            try:
                valid = await self.validator.validate_transaction(cand.txn)
            except Exception as e:
                result.errors += 1
                bt.logging.warning({"contract_selector": {"event": "validator_error", "contract": cand.revision.parent_id, "error": str(e)}})
                continue
            if not valid:
                continue

            rev = cand.revision
            result.entries[rev.parent_id] = ContractEntry(
                id=rev.parent_id,
                size=scale_size(rev.new_file_size, rev.new_valid_proof_outputs[1].value, self.pricing),
                end_height=rev.new_window_start,
                host_output=cand.host_output,
            )

        bt.logging.debug({"contract_selector": {"submitted": result.submitted, "valid": result.valid, "errors": result.errors}})
        return result


__all__ = ["ContractSelector", "SelectionResult", "TransactionValidator"]
