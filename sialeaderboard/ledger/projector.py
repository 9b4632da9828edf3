"""Read-only leaderboard projections.

Rows come out in no particular order; sorting is left to the frontend.
"""

from __future__ import annotations

from typing import Iterable, Protocol

from .models import ContractEntry, LeaderEntry


class _UserView(Protocol):
    name: str
    groups: list[str]
    contracts: dict[str, ContractEntry]
    last_modified: int


def project_leaderboard(users: Iterable[_UserView]) -> list[LeaderEntry]:
    """One row per user: total effective size of currently owned contracts."""
    return [
        LeaderEntry(
            name=user.name,
            size=sum(c.size for c in user.contracts.values()),
            groups=list(user.groups),
            timestamp=user.last_modified,
        )
        for user in users
    ]


def project_group_totals(entries: Iterable[LeaderEntry]) -> dict[str, int]:
    """Sum leaderboard sizes per group. A user counts toward each of their groups."""
    totals: dict[str, int] = {}
    for entry in entries:
        for group in entry.groups:
            totals[group] = totals.get(group, 0) + entry.size
    return totals


__all__ = ["project_group_totals", "project_leaderboard"]
