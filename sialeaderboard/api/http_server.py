"""HTTP endpoints for the leaderboard.

Routes:
  GET  /leaderboard         - per-user totals as a JSON array
  GET  /leaderboard/groups  - per-group totals as a JSON object
  POST /user                - multipart submission (name, email, password,
                              groups, contracts file)
  GET  /                    - static frontend, when a static dir is configured
"""

from __future__ import annotations

import json
from pathlib import Path

import bittensor as bt
from aiohttp import web
from pydantic import TypeAdapter, ValidationError

from sialeaderboard.ledger.errors import LedgerError
from sialeaderboard.ledger.models import Transaction
from sialeaderboard.ledger.state import Ledger

DEFAULT_MAX_UPLOAD_BYTES = 1_000_000

_BATCH_ADAPTER = TypeAdapter(list[Transaction])


def parse_groups(raw: str) -> list[str]:
    """Split the comma separated `groups` form field, trimming whitespace."""
    return [g.strip() for g in raw.split(",")]


class LeaderboardHTTPServer:
    """aiohttp server in front of a Ledger."""

    def __init__(
        self,
        ledger: Ledger,
        host: str = "0.0.0.0",
        port: int = 8080,
        static_dir: str | None = None,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        self.ledger = ledger
        self.host = host
        self.port = port
        self.static_dir = Path(static_dir) if static_dir else None
        self.max_upload_bytes = max_upload_bytes
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None

    def build_app(self) -> web.Application:
        app = web.Application(client_max_size=self.max_upload_bytes)
        app.router.add_get("/leaderboard", self._handle_leaderboard)
        app.router.add_get("/leaderboard/groups", self._handle_group_totals)
        app.router.add_post("/user", self._handle_post_user)
        if self.static_dir is not None:
            app.router.add_get("/", self._handle_index)
            app.router.add_static("/", self.static_dir)
        return app

    async def start(self) -> None:
        """Start the HTTP server."""
        self._app = self.build_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        bt.logging.info({"leaderboard_http": {"status": "started", "host": self.host, "port": self.port}})

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._runner:
            await self._runner.cleanup()
            bt.logging.info({"leaderboard_http": "stopped"})

    # -- Read routes --

    async def _handle_leaderboard(self, request: web.Request) -> web.Response:
        leaders = await self.ledger.leaderboard()
        bt.logging.debug({"leaderboard_request": {"endpoint": "leaderboard", "status": 200, "users": len(leaders)}})
        return web.json_response([entry.model_dump(mode="json") for entry in leaders])

    async def _handle_group_totals(self, request: web.Request) -> web.Response:
        totals = await self.ledger.group_totals()
        return web.json_response(totals)

    async def _handle_index(self, request: web.Request) -> web.StreamResponse:
        index = self.static_dir / "index.html"
        if not index.is_file():
            raise web.HTTPNotFound()
        return web.FileResponse(index)

    # -- Submission --

    async def _handle_post_user(self, request: web.Request) -> web.StreamResponse:
        if request.content_length is not None and request.content_length > self.max_upload_bytes:
            bt.logging.warning({"leaderboard_request": {"endpoint": "user", "status": 413, "peer": request.remote, "size": request.content_length}})
            return _too_large(self.max_upload_bytes)

        try:
            form = await request.post()
        except web.HTTPRequestEntityTooLarge:
            bt.logging.warning({"leaderboard_request": {"endpoint": "user", "status": 413, "peer": request.remote}})
            return _too_large(self.max_upload_bytes)
        except ValueError as e:
            return web.Response(text=f"could not parse form: {e}", status=400)

        contracts = form.get("contracts")
        if not isinstance(contracts, web.FileField):
            return web.Response(text="could not open contracts file: missing file field", status=400)

        try:
            batch = _BATCH_ADAPTER.validate_python(json.load(contracts.file))
        except (ValueError, ValidationError) as e:
            return web.Response(text=f"could not decode contracts file: {e}", status=400)

        name = str(form.get("name", ""))
        try:
            result = await self.ledger.insert_user(
                name=name,
                email=str(form.get("email", "")),
                password=str(form.get("password", "")),
                groups=parse_groups(str(form.get("groups", ""))),
                batch=batch,
            )
        except LedgerError as e:
            bt.logging.info({"leaderboard_request": {"endpoint": "user", "name": name, "status": 400, "reason": str(e)}})
            return web.Response(text=f"could not add or update user: {e}", status=400)

        bt.logging.info({"leaderboard_request": {"endpoint": "user", "name": name, "status": 303, "created": result.created, "valid": result.valid}})
        raise web.HTTPSeeOther(location="/")


def _too_large(limit: int) -> web.Response:
    return web.Response(text=f"request body must not exceed {limit} bytes", status=413)


__all__ = ["DEFAULT_MAX_UPLOAD_BYTES", "LeaderboardHTTPServer", "parse_groups"]
