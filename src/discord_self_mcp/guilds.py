from typing import Any, List, Optional

import discord
from mcp.types import TextContent

from discord_self_mcp.formatting import make_response
from discord_self_mcp.lookup import get_cached_guild
from discord_self_mcp.records import ChannelRecord, GuildRecord


async def list_channels(client: discord.Client, guild_id: Optional[Any] = None) -> List[TextContent]:
    """List cached channels of one guild, or of every guild plus DMs."""
    if guild_id:
        guild = get_cached_guild(client, guild_id)
        channels = [ChannelRecord.from_channel(c, "Unknown") for c in guild.channels]
    else:
        channels = [ChannelRecord.from_channel(c, "Unknown") for c in client.get_all_channels()]
        channels.extend(ChannelRecord.from_channel(c, "DM") for c in client.private_channels)

    channels.sort(key=lambda c: c.position)

    return make_response({
        "totalChannels": len(channels),
        "guildFilter": guild_id or None,
        "channels": [c.to_dict() for c in channels],
    })


async def list_guilds(client: discord.Client) -> List[TextContent]:
    user_id = client.user.id if client.user else None
    guilds = sorted(
        (GuildRecord.from_guild(g, user_id) for g in client.guilds),
        key=lambda g: g.name.casefold(),
    )

    return make_response({
        "totalGuilds": len(guilds),
        "guilds": [g.to_dict() for g in guilds],
    })
