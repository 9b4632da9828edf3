"""Sia storage leaderboard: contract ledger accounting and HTTP service."""

__version__ = "0.1.0"
