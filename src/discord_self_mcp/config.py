"""Environment configuration for the Discord MCP server."""
import json
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_SERVER_NAME = "discord-self-mcp"

EXAMPLE_CLIENT_CONFIG = {
    "mcpServers": {
        "discord": {
            "command": "discord-self-mcp",
            "args": [],
            "env": {
                "DISCORD_TOKEN": "your_discord_token_here",
            },
        },
    },
}


class ConfigError(ValueError):
    """Raised when the environment does not describe a usable configuration."""


@dataclass(frozen=True)
class Settings:
    discord_token: str
    log_level: str = "INFO"
    ready_timeout: Optional[float] = None
    server_name: str = DEFAULT_SERVER_NAME

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        token = (env.get("DISCORD_TOKEN") or "").strip()
        if not token:
            raise ConfigError("DISCORD_TOKEN environment variable is required")

        ready_timeout = None
        raw_timeout = (env.get("DISCORD_READY_TIMEOUT") or "").strip()
        if raw_timeout:
            try:
                ready_timeout = float(raw_timeout)
            except ValueError:
                raise ConfigError(f"DISCORD_READY_TIMEOUT must be a number, got {raw_timeout!r}") from None
            if ready_timeout <= 0:
                raise ConfigError("DISCORD_READY_TIMEOUT must be positive")

        log_level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigError(f"Unknown LOG_LEVEL: {log_level}")

        return cls(
            discord_token=token,
            log_level=log_level,
            ready_timeout=ready_timeout,
            server_name=(env.get("MCP_SERVER_NAME") or DEFAULT_SERVER_NAME).strip(),
        )


def example_client_config() -> str:
    return json.dumps(EXAMPLE_CLIENT_CONFIG, indent=2)
