import sys
import asyncio
import logging
from typing import List, Optional

import discord
from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool

from discord_self_mcp.config import ConfigError, Settings, example_client_config
from discord_self_mcp.dispatcher import ReadinessGate, ToolDispatcher
from discord_self_mcp.tool_definitions import TOOLS

logger = logging.getLogger("discord-mcp-server")


def create_client() -> discord.Client:
    # Initialize Discord client with the intents the tools read from
    intents = discord.Intents.default()
    intents.message_content = True
    intents.members = True
    return discord.Client(intents=intents)


def attach_gate(client: discord.Client, gate: ReadinessGate) -> None:
    """Open ``gate`` when the client finishes logging in."""

    @client.event
    async def on_ready():
        gate.mark_ready()
        logger.info(f"Logged in as {client.user} ({len(client.guilds)} guilds)")

    @client.event
    async def on_error(event, *args, **kwargs):
        logger.error(f"Discord client error in {event}: {args}, {kwargs}")

    @client.event
    async def on_disconnect():
        logger.warning("Discord client disconnected")


def create_server(dispatcher: ToolDispatcher, name: str = "discord-self-mcp") -> Server:
    app = Server(name)

    @app.list_tools()
    async def list_tools() -> List[Tool]:
        """List available Discord tools."""
        return TOOLS

    # McpError from dispatch propagates and is sent as a JSON-RPC error.
    async def call_tool(req: types.CallToolRequest) -> types.ServerResult:
        """Handle Discord tool calls."""
        content = await dispatcher.dispatch(req.params.name, req.params.arguments)
        return types.ServerResult(types.CallToolResult(content=content, isError=False))

    app.request_handlers[types.CallToolRequest] = call_tool

    return app


async def main(settings: Optional[Settings] = None):
    settings = settings or Settings.from_env()

    client = create_client()
    gate = ReadinessGate()
    attach_gate(client, gate)
    dispatcher = ToolDispatcher(client, gate, ready_timeout=settings.ready_timeout)
    app = create_server(dispatcher, settings.server_name)

    # Start Discord client in the background; a failed login fails the gate
    async def start_client():
        try:
            await client.start(settings.discord_token)
        except Exception as e:
            logger.error(f"Failed to start Discord client: {e}")
            gate.mark_failed(e)

    client_task = asyncio.create_task(start_client())

    try:
        async with stdio_server() as (read_stream, write_stream):
            logger.info("Discord MCP server running on stdio")
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options()
            )
    finally:
        if not client.is_closed():
            await client.close()
        await client_task


def run() -> None:
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Please configure DISCORD_TOKEN in your MCP client settings", file=sys.stderr)
        print("Example configuration:", file=sys.stderr)
        print(example_client_config(), file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )
    asyncio.run(main(settings))


if __name__ == "__main__":
    run()
