"""Expiry sweeper.

Background loop: wait one tick -> fetch chain height -> purge expired
contracts. A failed height query is logged and retried on the next tick.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

import bittensor as bt

from sialeaderboard.ledger.state import Ledger

# Roughly one Sia block.
DEFAULT_SWEEP_INTERVAL_SECONDS = 600


class HeightOracle(Protocol):
    async def get_block_height(self) -> int:
        ...


class ExpirySweeper:
    """Periodically evicts contracts whose window has passed."""

    def __init__(
        self,
        ledger: Ledger,
        oracle: HeightOracle,
        interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ):
        self.ledger = ledger
        self.oracle = oracle
        self.interval = interval
        self.last_height: int | None = None
        self.consecutive_failures = 0
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def run(self) -> None:
        """Sweep loop. Runs until stopped or cancelled."""
        self._running = True
        bt.logging.info({"expiry_sweeper": {"status": "starting", "interval": self.interval}})

        while self._running:
            try:
                await asyncio.sleep(self.interval)
            except asyncio.CancelledError:
                break
            if not self._running:
                break

            try:
                await self.sweep_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                self.consecutive_failures += 1
                bt.logging.error({"expiry_sweeper_error": str(e), "consecutive_failures": self.consecutive_failures})

        self._running = False
        bt.logging.info({"expiry_sweeper": "stopped"})

    def stop(self) -> None:
        """Signal the loop to stop after the current tick."""
        self._running = False

    async def sweep_once(self) -> int | None:
        """Run a single tick.

        Returns the number of purged contracts, or None when the height
        could not be fetched.
        """
        try:
            height = await self.oracle.get_block_height()
        except Exception as e:
            self.consecutive_failures += 1
            bt.logging.warning({"expiry_sweeper": {
                "event": "height_unavailable",
                "error": str(e),
                "consecutive_failures": self.consecutive_failures,
            }})
            return None

        self.last_height = height
        removed = await self.ledger.purge_expired(height)
        self.consecutive_failures = 0
        bt.logging.debug({"expiry_sweeper": {"height": height, "removed": removed}})
        return removed


__all__ = ["DEFAULT_SWEEP_INTERVAL_SECONDS", "ExpirySweeper", "HeightOracle"]
