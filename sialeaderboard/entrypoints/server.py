"""Leaderboard server entrypoint.

Loads the ledger snapshot, starts the HTTP server and the expiry sweeper,
and runs until SIGINT/SIGTERM.
"""

import argparse
import asyncio
import os
import signal
import sys

import bittensor as bt
from dotenv import load_dotenv


async def _serve(settings) -> None:
    from sialeaderboard.api.http_server import LeaderboardHTTPServer
    from sialeaderboard.consensus.client import SiadClient
    from sialeaderboard.ledger.selector import ContractSelector
    from sialeaderboard.ledger.state import Ledger
    from sialeaderboard.ledger.store.filesystem import FilesystemStore, SnapshotCorruptError
    from sialeaderboard.sweeper.runtime import ExpirySweeper

    siad = SiadClient(base_url=settings.siad_url, timeout=settings.siad_timeout)
    selector = ContractSelector(validator=siad, pricing=settings.pricing)
    try:
        ledger = Ledger.from_store(selector=selector, store=FilesystemStore(settings.db_path))
    except (SnapshotCorruptError, OSError) as e:
        bt.logging.error({"leaderboard": {"event": "snapshot_load_failed", "error": str(e)}})
        await siad.close()
        sys.exit(1)

    server = LeaderboardHTTPServer(
        ledger=ledger,
        host=settings.host,
        port=settings.port,
        static_dir=settings.static_dir,
        max_upload_bytes=settings.max_upload_bytes,
    )
    sweeper = ExpirySweeper(ledger=ledger, oracle=siad, interval=settings.sweep_interval)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _signal_handler() -> None:
        bt.logging.info({"leaderboard": "shutdown_signal_received"})
        sweeper.stop()
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    await server.start()
    sweep_task = asyncio.create_task(sweeper.run())
    try:
        await stop_event.wait()
    finally:
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass
        await server.stop()
        await siad.close()


def main() -> None:
    # Load .env if not in test mode
    if os.environ.get("SIALEADERBOARD_TEST_MODE") != "true":
        load_dotenv()

    from sialeaderboard.base.config import ServerSettings, add_args

    parser = argparse.ArgumentParser(description="Sia storage leaderboard")
    bt.logging.add_args(parser)
    add_args(parser)
    args = parser.parse_args()

    try:
        settings = ServerSettings.from_args(args)
    except ValueError as e:
        bt.logging.error({"leaderboard": {"event": "invalid_config", "error": str(e)}})
        sys.exit(1)

    bt.logging.info({"leaderboard_config": settings.as_log_dict()})

    try:
        asyncio.run(_serve(settings))
    except KeyboardInterrupt:
        bt.logging.info({"leaderboard": "keyboard_interrupt"})
    finally:
        bt.logging.info({"leaderboard": "stopped"})


if __name__ == "__main__":
    main()
