from typing import Any

import discord
from discord.abc import Messageable


def parse_snowflake(value: Any, field: str) -> int:
    """Convert a Discord ID argument (string or number) to an int."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid {field}: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValueError(f"Invalid {field}: {value!r}")


def is_text_channel(channel: Any) -> bool:
    return isinstance(channel, Messageable)


async def resolve_channel(client: discord.Client, channel_id: Any) -> Any:
    channel_id = parse_snowflake(channel_id, "channelId")
    channel = client.get_channel(channel_id)
    if channel is None:
        try:
            channel = await client.fetch_channel(channel_id)
        except discord.NotFound:
            channel = None
    return channel


async def resolve_text_channel(
    client: discord.Client,
    channel_id: Any,
    error: str = "Channel not found or not a text channel",
) -> Any:
    channel = await resolve_channel(client, channel_id)
    if channel is None or not is_text_channel(channel):
        raise ValueError(error)
    return channel


def get_cached_guild(client: discord.Client, guild_id: Any) -> discord.Guild:
    guild = client.get_guild(parse_snowflake(guild_id, "guildId"))
    if guild is None:
        raise ValueError("Guild not found")
    return guild

