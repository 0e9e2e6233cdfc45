import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

import discord
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, METHOD_NOT_FOUND, ErrorData, TextContent

from discord_self_mcp import guilds, messages, users
from discord_self_mcp.tool_definitions import ARGUMENT_RULES

logger = logging.getLogger("discord-mcp-server.dispatcher")


class DiscordConnectionError(RuntimeError):
    """Raised to callers waiting on a Discord connection that never became ready."""


class ReadinessGate:
    """One-way NotReady -> Ready gate in front of every tool call.

    ``mark_failed`` rejects current and future waiters without opening the
    gate; nothing re-arms it, so a failed login stays failed until restart.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._ready = False
        self._error: Optional[BaseException] = None

    @property
    def is_ready(self) -> bool:
        return self._ready

    def mark_ready(self) -> None:
        if self._ready:
            return
        self._ready = True
        self._error = None
        self._event.set()

    def mark_failed(self, error: BaseException) -> None:
        if self._ready:
            logger.warning(f"Ignoring connection failure after ready: {error}")
            return
        self._error = error
        self._event.set()

    async def wait(self, timeout: Optional[float] = None) -> None:
        if self._ready:
            return
        if self._error is None:
            try:
                await asyncio.wait_for(self._event.wait(), timeout)
            except asyncio.TimeoutError:
                raise DiscordConnectionError(
                    f"Discord client not ready after {timeout} seconds"
                ) from None
        if not self._ready:
            raise DiscordConnectionError(f"Discord connection failed: {self._error}") from self._error


def _error(code: int, message: str) -> McpError:
    return McpError(ErrorData(code=code, message=message))


def validate_arguments(name: str, arguments: Any) -> Dict[str, Any]:
    """Check the shape of a tool's arguments against its required keys."""
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise _error(INVALID_PARAMS, "Invalid arguments provided")

    rule = ARGUMENT_RULES[name]
    missing = [key for key in rule.all_of if key not in arguments]
    if missing:
        raise _error(INVALID_PARAMS, f"Missing required parameters: {', '.join(missing)}")
    if rule.any_of and not any(key in arguments for key in rule.any_of):
        raise _error(
            INVALID_PARAMS,
            f"Missing required parameters: one of {', '.join(rule.any_of)}",
        )
    return dict(arguments)


class ToolDispatcher:
    def __init__(
        self,
        client: discord.Client,
        gate: ReadinessGate,
        ready_timeout: Optional[float] = None,
    ) -> None:
        self.client = client
        self.gate = gate
        self.ready_timeout = ready_timeout

    async def dispatch(self, name: str, arguments: Any) -> List[TextContent]:
        """Run one tool call, turning every failure into an ``McpError``."""
        try:
            await self.gate.wait(self.ready_timeout)
        except DiscordConnectionError as exc:
            raise _error(INTERNAL_ERROR, str(exc)) from exc

        if name not in ARGUMENT_RULES:
            raise _error(METHOD_NOT_FOUND, f"Unknown tool: {name}")

        args = validate_arguments(name, arguments)
        try:
            return await self._invoke(name, args)
        except McpError:
            raise
        except Exception as exc:
            logger.error(f"Tool {name} failed: {exc}")
            raise _error(INTERNAL_ERROR, f"Failed to run {name}: {exc}") from exc

    async def _invoke(self, name: str, arguments: Dict[str, Any]) -> List[TextContent]:
        client = self.client

        if name == "read_channel":
            return await messages.read_channel(
                client,
                arguments["channelId"],
                limit=arguments.get("limit", 50),
            )

        elif name == "search_messages":
            return await messages.search_messages(
                client,
                channel_id=arguments.get("channelId"),
                guild_id=arguments.get("guildId"),
                query=arguments.get("query"),
                author_id=arguments.get("authorId"),
                limit=arguments.get("limit", 100),
                before=arguments.get("before"),
                after=arguments.get("after"),
            )

        elif name == "send_message":
            return await messages.send_message(
                client,
                arguments["channelId"],
                arguments["content"],
                reply_to_message_id=arguments.get("replyToMessageId"),
            )

        elif name == "list_channels":
            return await guilds.list_channels(client, guild_id=arguments.get("guildId"))

        elif name == "list_guilds":
            return await guilds.list_guilds(client)

        elif name == "get_user_info":
            return await users.get_user_info(client)

        elif name == "list_guild_members":
            return await users.list_guild_members(
                client,
                arguments["guildId"],
                limit=arguments.get("limit", 100),
                include_roles=arguments.get("includeRoles", False),
            )

        raise ValueError(f"Unknown tool: {name}")
