"""
Server configuration.

Defaults mirror a permissive development setup: every origin may call the
API and browsers may cache the CORS preflight for twelve hours.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
CORS_METHODS = ["POST", "GET", "OPTIONS"]
CORS_HEADERS = ["Origin", "Content-Type"]
CORS_EXPOSE_HEADERS = ["Content-Length"]
CORS_MAX_AGE = 12 * 60 * 60  # seconds


@dataclass
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    cors_max_age: int = CORS_MAX_AGE

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        """Build a config from ``SCHEDSIM_*`` environment variables."""
        env = os.environ if environ is None else environ
        config = cls()

        if env.get("SCHEDSIM_HOST"):
            config.host = env["SCHEDSIM_HOST"]
        if env.get("SCHEDSIM_PORT"):
            try:
                config.port = int(env["SCHEDSIM_PORT"])
            except ValueError as exc:
                raise ValueError(f"SCHEDSIM_PORT must be an integer, got {env['SCHEDSIM_PORT']!r}") from exc
        if env.get("SCHEDSIM_CORS_ORIGINS"):
            origins = [o.strip() for o in env["SCHEDSIM_CORS_ORIGINS"].split(",") if o.strip()]
            config.cors_origins = origins or ["*"]

        return config
