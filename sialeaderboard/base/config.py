"""Command line and environment configuration.

Options use dotted names (`--siad.url`). Every option can be overridden by
an environment variable `SIALEADERBOARD__<SECTION>__<NAME>`, which takes
precedence over the command line.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, field
from typing import Any, Callable

from sialeaderboard.api.http_server import DEFAULT_MAX_UPLOAD_BYTES
from sialeaderboard.consensus.client import DEFAULT_SIAD_URL
from sialeaderboard.ledger.pricing import DEFAULT_MIN_PRICE_SC_PER_TB, PricingConfig
from sialeaderboard.sweeper.runtime import DEFAULT_SWEEP_INTERVAL_SECONDS

ENV_PREFIX = "SIALEADERBOARD__"


def add_args(parser: argparse.ArgumentParser) -> None:
    """Adds leaderboard arguments to the parser."""

    parser.add_argument(
        "--server.host",
        type=str,
        help="Interface the HTTP server binds to.",
        default="0.0.0.0",
    )

    parser.add_argument(
        "--server.port",
        type=int,
        help="Port the HTTP server listens on.",
        default=8080,
    )

    parser.add_argument(
        "--server.static_dir",
        type=str,
        help="Directory with the built frontend. Static serving is off when unset.",
        default=None,
    )

    parser.add_argument(
        "--server.max_upload_bytes",
        type=int,
        help="Maximum size of a submission request body.",
        default=DEFAULT_MAX_UPLOAD_BYTES,
    )

    parser.add_argument(
        "--ledger.db_path",
        type=str,
        help="Path of the JSON ledger snapshot.",
        default="leaderboard.db",
    )

    parser.add_argument(
        "--siad.url",
        type=str,
        help="Base URL of the siad API.",
        default=DEFAULT_SIAD_URL,
    )

    parser.add_argument(
        "--siad.timeout",
        type=float,
        help="Timeout for siad requests in seconds. Keep well below the sweep interval.",
        default=10.0,
    )

    parser.add_argument(
        "--sweeper.interval",
        type=float,
        help="Seconds between expiry sweeps (approx. one block).",
        default=DEFAULT_SWEEP_INTERVAL_SECONDS,
    )

    parser.add_argument(
        "--pricing.min_price_sc_per_tb",
        type=int,
        help="Minimum storage price in SC/TB; cheaper contracts are scaled down.",
        default=DEFAULT_MIN_PRICE_SC_PER_TB,
    )


def _resolve(args: argparse.Namespace, dest: str, cast: Callable[[str], Any]) -> Any:
    env_name = ENV_PREFIX + dest.upper().replace(".", "__")
    env_value = os.environ.get(env_name)
    if env_value is not None and env_value != "":
        return cast(env_value)
    return getattr(args, dest)


@dataclass
class ServerSettings:
    """Resolved settings for one leaderboard process."""

    host: str = "0.0.0.0"
    port: int = 8080
    static_dir: str | None = None
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    db_path: str = "leaderboard.db"
    siad_url: str = DEFAULT_SIAD_URL
    siad_timeout: float = 10.0
    sweep_interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS
    pricing: PricingConfig = field(default_factory=PricingConfig)

    def __post_init__(self) -> None:
        if self.siad_timeout <= 0:
            raise ValueError("siad timeout must be positive")
        if self.sweep_interval <= 0:
            raise ValueError("sweep interval must be positive")
        if self.siad_timeout >= self.sweep_interval:
            raise ValueError("siad timeout must be shorter than the sweep interval")
        if self.max_upload_bytes <= 0:
            raise ValueError("max upload size must be positive")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> ServerSettings:
        return cls(
            host=_resolve(args, "server.host", str),
            port=_resolve(args, "server.port", int),
            static_dir=_resolve(args, "server.static_dir", str),
            max_upload_bytes=_resolve(args, "server.max_upload_bytes", int),
            db_path=_resolve(args, "ledger.db_path", str),
            siad_url=_resolve(args, "siad.url", str),
            siad_timeout=_resolve(args, "siad.timeout", float),
            sweep_interval=_resolve(args, "sweeper.interval", float),
            pricing=PricingConfig.from_sc_per_tb(
                _resolve(args, "pricing.min_price_sc_per_tb", int),
            ),
        )

    def as_log_dict(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "static_dir": self.static_dir,
            "db_path": self.db_path,
            "siad_url": self.siad_url,
            "sweep_interval": self.sweep_interval,
            "min_price": str(self.pricing.min_price),
        }


__all__ = ["ENV_PREFIX", "ServerSettings", "add_args"]
