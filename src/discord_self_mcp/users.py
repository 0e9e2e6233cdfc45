from datetime import datetime, timezone
from typing import Any, List

import discord
from mcp.types import TextContent

from discord_self_mcp.formatting import make_response
from discord_self_mcp.lookup import get_cached_guild
from discord_self_mcp.records import MemberRecord, UserRecord

MEMBER_LIMIT_MAX = 1000


async def get_user_info(client: discord.Client) -> List[TextContent]:
    """Describe the logged-in account and what it can currently see."""
    if client.user is None:
        raise ValueError("Client user not available")

    status = getattr(client, "status", None)
    channel_count = sum(1 for _ in client.get_all_channels()) + len(client.private_channels)

    return make_response({
        "user": UserRecord.from_user(client.user).to_dict(),
        "status": str(status) if status else "unknown",
        "guildCount": len(client.guilds),
        "channelCount": channel_count,
    })


async def list_guild_members(
    client: discord.Client,
    guild_id: Any,
    limit: Any = 100,
    include_roles: bool = False,
) -> List[TextContent]:
    max_limit = min(int(limit), MEMBER_LIMIT_MAX)
    include_roles = bool(include_roles)
    guild = get_cached_guild(client, guild_id)

    now = datetime.now(timezone.utc)
    members = []
    async for member in guild.fetch_members(limit=max_limit):
        members.append(MemberRecord.from_member(member, include_roles=include_roles, now=now))
    members.sort(key=lambda m: m.display_name.casefold())

    return make_response({
        "guild": {
            "id": str(guild.id),
            "name": guild.name,
            "memberCount": guild.member_count,
        },
        "totalMembers": len(members),
        "includeRoles": include_roles,
        "members": [m.to_dict() for m in members],
    })
