"""Background expiry of contracts past their proof window."""

from .runtime import DEFAULT_SWEEP_INTERVAL_SECONDS, ExpirySweeper, HeightOracle

__all__ = ["DEFAULT_SWEEP_INTERVAL_SECONDS", "ExpirySweeper", "HeightOracle"]
