"""Pydantic models for submitted transactions, ledger entries and snapshots.

Transaction models only declare the fields the ledger reads. Every other
key sent by the client is kept as an extra and forwarded untouched to siad
for consensus validation.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


# ---------------------------------------------------------------------------
# Snapshot schema version - bump on breaking changes to the on-disk format
# ---------------------------------------------------------------------------

SNAPSHOT_SCHEMA_VERSION = 1


# ---------------------------------------------------------------------------
# Submitted transactions (siad JSON encoding)
# ---------------------------------------------------------------------------


class SiacoinOutput(BaseModel):
    """A payment output. `value` is hastings, encoded by siad as a decimal string."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    value: int = Field(default=0, ge=0)
    unlock_hash: str = Field(default="", alias="unlockhash")

    @field_serializer("value")
    def _serialize_value(self, value: int) -> str:
        return str(value)


class FileContractRevision(BaseModel):
    """The subset of a file contract revision used for accounting."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    parent_id: str = Field(default="", alias="parentid")
    new_file_size: int = Field(default=0, ge=0, alias="newfilesize")
    new_window_start: int = Field(default=0, ge=0, alias="newwindowstart")
    new_valid_proof_outputs: list[SiacoinOutput] = Field(
        default_factory=list, alias="newvalidproofoutputs",
    )

    @field_validator("new_valid_proof_outputs", mode="before")
    @classmethod
    def _null_outputs(cls, v: Any) -> Any:
        return [] if v is None else v


class Transaction(BaseModel):
    """A submitted transaction carrying file contract revisions."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    file_contract_revisions: list[FileContractRevision] = Field(
        default_factory=list, alias="filecontractrevisions",
    )

    @field_validator("file_contract_revisions", mode="before")
    @classmethod
    def _null_revisions(cls, v: Any) -> Any:
        return [] if v is None else v

    def to_wire(self) -> dict[str, Any]:
        """Encode back to the siad JSON shape, keeping only the keys that were submitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


# ---------------------------------------------------------------------------
# Ledger entries
# ---------------------------------------------------------------------------


class ContractEntry(BaseModel):
    """A contract credited to exactly one user."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    size: int = Field(ge=0, description="Effective (price-scaled) size in bytes")
    end_height: int = Field(ge=0, description="Expires once chain height exceeds this")
    host_output: str = Field(description="Unlock hash of the host payout")


class LeaderEntry(BaseModel):
    """One leaderboard row."""

    name: str
    size: int
    groups: list[str] = Field(default_factory=list)
    timestamp: int


# ---------------------------------------------------------------------------
# Persisted snapshot
# ---------------------------------------------------------------------------


class UserSnapshot(BaseModel):
    """Persisted user record. Hash and salt are hex encoded."""

    name: str = Field(min_length=1)
    email: str
    password: str = Field(pattern=r"^[0-9a-f]{64}$")
    salt: str = Field(pattern=r"^[0-9a-f]{64}$")
    groups: list[str] = Field(default_factory=list)
    contracts: list[ContractEntry] = Field(default_factory=list)
    last_modified: int = 0


class LedgerSnapshot(BaseModel):
    """Whole-ledger snapshot written after every mutation."""

    schema_version: int = SNAPSHOT_SCHEMA_VERSION
    users: list[UserSnapshot] = Field(default_factory=list)


__all__ = [
    "SNAPSHOT_SCHEMA_VERSION",
    "ContractEntry",
    "FileContractRevision",
    "LeaderEntry",
    "LedgerSnapshot",
    "SiacoinOutput",
    "Transaction",
    "UserSnapshot",
]
