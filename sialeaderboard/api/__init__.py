"""Public HTTP surface of the leaderboard."""

from .http_server import LeaderboardHTTPServer, parse_groups

__all__ = ["LeaderboardHTTPServer", "parse_groups"]
