"""The contract ledger: users, their contracts, and the global owner index.

All state is private to `Ledger` and every public coroutine takes the
reader/writer lock for its whole duration. Invariant maintained by every
mutation:

    contract_id in users[name].contracts  <=>  contracts[contract_id] == name

Mutations save a full snapshot while still holding the write lock, so
snapshot writes never interleave. A failed save is logged and the in-memory
ledger stays authoritative.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Sequence

import bittensor as bt

from .auth import (
    check_email,
    generate_salt,
    hash_password,
    normalize_groups,
    verify_password,
)
from .errors import AuthenticationError, BusinessRuleError, InputValidationError
from .models import ContractEntry, LeaderEntry, LedgerSnapshot, Transaction, UserSnapshot
from .projector import project_group_totals, project_leaderboard
from .rwlock import ReadWriteLock
from .selector import ContractSelector, SelectionResult
from .store.interface import SnapshotStore


@dataclass
class _UserEntry:
    name: str
    email: str
    password_hash: bytes
    salt: bytes
    groups: list[str] = field(default_factory=list)
    contracts: dict[str, ContractEntry] = field(default_factory=dict)
    last_modified: int = 0

    def to_snapshot(self) -> UserSnapshot:
        return UserSnapshot(
            name=self.name,
            email=self.email,
            password=self.password_hash.hex(),
            salt=self.salt.hex(),
            groups=list(self.groups),
            contracts=list(self.contracts.values()),
            last_modified=self.last_modified,
        )

    @classmethod
    def from_snapshot(cls, snap: UserSnapshot) -> _UserEntry:
        return cls(
            name=snap.name,
            email=snap.email,
            password_hash=bytes.fromhex(snap.password),
            salt=bytes.fromhex(snap.salt),
            groups=list(snap.groups),
            contracts={c.id: c for c in snap.contracts},
            last_modified=snap.last_modified,
        )


@dataclass
class UpsertResult:
    """What an insert_user call changed."""

    name: str
    created: bool
    valid: int = 0
    invalid: int = 0
    stolen: int = 0
    contracts_replaced: bool = False


class Ledger:
    """Process-wide contract ledger."""

    def __init__(
        self,
        selector: ContractSelector,
        store: SnapshotStore | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.selector = selector
        self.store = store
        self._clock = clock
        self._lock = ReadWriteLock()
        self._users: dict[str, _UserEntry] = {}
        self._contracts: dict[str, str] = {}  # contract id -> owner name

    @classmethod
    def from_store(
        cls,
        selector: ContractSelector,
        store: SnapshotStore,
        clock: Callable[[], float] = time.time,
    ) -> Ledger:
        """Build a ledger from the store's last snapshot (empty if none)."""
        ledger = cls(selector=selector, store=store, clock=clock)
        snapshot = store.load()
        if snapshot is None:
            bt.logging.info({"ledger": {"event": "no_snapshot, starting empty"}})
            return ledger

        for user_snap in snapshot.users:
            user = _UserEntry.from_snapshot(user_snap)
            for cid in user.contracts:
                previous = ledger._contracts.get(cid)
                if previous is not None and previous != user.name:
                    ledger._users[previous].contracts.pop(cid, None)
                ledger._contracts[cid] = user.name
            ledger._users[user.name] = user

        bt.logging.info({"ledger": {"event": "snapshot_loaded", "users": len(ledger._users), "contracts": len(ledger._contracts)}})
        return ledger

    # -- Mutations --

    async def insert_user(
        self,
        name: str,
        email: str,
        password: str,
        groups: list[str] | None,
        batch: Sequence[Transaction],
    ) -> UpsertResult:
        """Create a user or update an existing one.

        Raises InputValidationError, AuthenticationError or BusinessRuleError
        without changing anything. Contract validation against siad happens
        outside the ledger lock.
        """
        if not name:
            raise InputValidationError("invalid name")
        if not password:
            raise InputValidationError("password must not be empty")
        if email:
            check_email(email)
        groups = normalize_groups(groups)

        # Reject bad credentials before spending validator calls on the batch.
        async with self._lock.read():
            self._authorize(name, email, password, batch)

        selection: SelectionResult | None = None
        if batch:
            selection = await self.selector.select(batch)

        async with self._lock.write():
            user = self._authorize(name, email, password, batch)
            result = self._apply(user, name, email, password, groups, selection)
            self._save_locked()
        return result

    async def purge_expired(self, current_height: int) -> int:
        """Drop every contract whose end height is below `current_height`.

        Returns the number of contracts removed.
        """
        async with self._lock.write():
            removed = 0
            for user in self._users.values():
                expired = [
                    cid for cid, c in user.contracts.items()
                    if c.end_height < current_height
                ]
                for cid in expired:
                    del user.contracts[cid]
                    self._contracts.pop(cid, None)
                removed += len(expired)

            if removed:
                bt.logging.info({"ledger": {"event": "contracts_expired", "height": current_height, "removed": removed}})
                self._save_locked()
            return removed

    # -- Reads --

    async def leaderboard(self) -> list[LeaderEntry]:
        async with self._lock.read():
            return project_leaderboard(self._users.values())

    async def group_totals(self) -> dict[str, int]:
        async with self._lock.read():
            return project_group_totals(project_leaderboard(self._users.values()))

    async def snapshot(self) -> LedgerSnapshot:
        """A detached copy of the full ledger state."""
        async with self._lock.read():
            return self._to_snapshot()

    async def contract_owners(self) -> dict[str, str]:
        """A copy of the contract id -> owner name index."""
        async with self._lock.read():
            return dict(self._contracts)

    # -- Internals (caller holds the lock) --

    def _authorize(
        self, name: str, email: str, password: str, batch: Sequence[Transaction],
    ) -> _UserEntry | None:
        """Return the existing user after a password check, or None for a valid creation."""
        user = self._users.get(name)
        if user is not None:
            if not verify_password(password, user.salt, user.password_hash):
                raise AuthenticationError("wrong password")
            return user

        if not email:
            raise BusinessRuleError("no email supplied")
        if not batch:
            raise BusinessRuleError("no contracts supplied")
        return None

    def _apply(
        self,
        user: _UserEntry | None,
        name: str,
        email: str,
        password: str,
        groups: list[str],
        selection: SelectionResult | None,
    ) -> UpsertResult:
        now = int(self._clock())
        has_contracts = selection is not None and selection.valid > 0
        result = UpsertResult(name=name, created=user is None)
        if selection is not None:
            result.valid = selection.valid
            result.invalid = selection.invalid

        if user is None:
            if not has_contracts:
                raise BusinessRuleError("all supplied contracts were invalid")
            salt = generate_salt()
            user = _UserEntry(
                name=name,
                email=email,
                password_hash=hash_password(password, salt),
                salt=salt,
                groups=groups,
            )
        else:
            if email:
                user.email = email
            if groups:
                user.groups = groups

        if has_contracts:
            result.stolen = self._replace_contracts(user, selection.entries)
            result.contracts_replaced = True

        user.last_modified = now
        self._users[name] = user
        self._log_upsert(result, email, groups)
        return result

    def _replace_contracts(self, user: _UserEntry, entries: dict[str, ContractEntry]) -> int:
        """Make `entries` the user's full contract set, stealing from other owners."""
        for cid in user.contracts:
            if cid not in entries and self._contracts.get(cid) == user.name:
                del self._contracts[cid]

        stolen = 0
        for cid in entries:
            owner = self._contracts.get(cid)
            if owner is not None and owner != user.name:
                other = self._users.get(owner)
                if other is not None:
                    other.contracts.pop(cid, None)
                stolen += 1
                bt.logging.info({"ledger": {"event": "contract_stolen", "contract": cid, "from": owner, "to": user.name}})
            self._contracts[cid] = user.name

        user.contracts = dict(entries)
        return stolen

    def _log_upsert(self, result: UpsertResult, email: str, groups: list[str]) -> None:
        if result.created:
            bt.logging.info({"ledger": {"event": "user_created", "name": result.name, "email": email, "groups": groups, "valid": result.valid, "invalid": result.invalid}})
            return
        if email:
            bt.logging.info({"ledger": {"event": "email_changed", "name": result.name, "email": email}})
        if groups:
            bt.logging.info({"ledger": {"event": "groups_changed", "name": result.name, "groups": groups}})
        if result.valid or result.invalid:
            bt.logging.info({"ledger": {"event": "contracts_updated", "name": result.name, "valid": result.valid, "invalid": result.invalid, "replaced": result.contracts_replaced}})

    def _to_snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(users=[u.to_snapshot() for u in self._users.values()])

    def _save_locked(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self._to_snapshot())
        except Exception as e:
            bt.logging.error({"ledger": {"event": "save_failed", "error": str(e)}})


__all__ = ["Ledger", "UpsertResult"]
