"""HTTP client for the local siad daemon.

Two calls are used by the leaderboard:
  POST /consensus/validate/transactionset - consensus validity of one transaction
  GET  /consensus                         - current block height

siad rejects requests without the `Sia-Agent` user agent.
"""

from __future__ import annotations

from typing import Any

import bittensor as bt
import httpx

from sialeaderboard.ledger.models import Transaction

DEFAULT_SIAD_URL = "http://localhost:9980"


class SiadError(Exception):
    """siad was unreachable or answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class SiadClient:
    """Async siad client. Implements both the transaction validator and the height oracle."""

    def __init__(
        self,
        base_url: str = DEFAULT_SIAD_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": "Sia-Agent"},
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def validate_transaction(self, txn: Transaction) -> bool:
        """Ask siad whether a single transaction is consensus-valid.

        Returns False for any non-2xx answer. Raises SiadError on transport
        failure.
        """
        try:
            resp = await self._client.post(
                f"{self.base_url}/consensus/validate/transactionset",
                json=[txn.to_wire()],
            )
        except httpx.HTTPError as e:
            raise SiadError(f"validate request failed: {e}") from e

        valid = _is_success(resp.status_code)
        if not valid:
            bt.logging.debug({"siad": {"event": "txn_rejected", "status": resp.status_code, "detail": _error_message(resp)}})
        return valid

    async def get_block_height(self) -> int:
        """Fetch the current consensus height."""
        try:
            resp = await self._client.get(f"{self.base_url}/consensus")
        except httpx.HTTPError as e:
            raise SiadError(f"consensus request failed: {e}") from e

        if not _is_success(resp.status_code):
            raise SiadError(_error_message(resp), status_code=resp.status_code)

        try:
            return int(resp.json()["height"])
        except (ValueError, KeyError, TypeError) as e:
            raise SiadError(f"malformed consensus response: {e}", status_code=resp.status_code) from e


def _error_message(resp: httpx.Response) -> str:
    """Extract siad's `{"message": ...}` error body, falling back to the raw text."""
    try:
        body: Any = resp.json()
    except ValueError:
        return resp.text or f"status {resp.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return resp.text or f"status {resp.status_code}"


__all__ = ["DEFAULT_SIAD_URL", "SiadClient", "SiadError"]
