import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import discord
from mcp.types import TextContent

from discord_self_mcp.formatting import isoformat, make_response
from discord_self_mcp.lookup import get_cached_guild, is_text_channel, parse_snowflake, resolve_text_channel
from discord_self_mcp.records import ChannelSearchOutcome, MessageRecord

logger = logging.getLogger("discord-mcp-server.messages")

READ_LIMIT_MAX = 100
SEARCH_LIMIT_MAX = 500
PER_CHANNEL_LIMIT_MAX = 100


def _channel_summary(channel: Any) -> Dict[str, Any]:
    return {
        "id": str(channel.id),
        "name": getattr(channel, "name", None) or "DM",
        "type": channel.type.value,
    }


def _cursor(value: Optional[Any], field: str) -> Optional[discord.Object]:
    if not value:
        return None
    return discord.Object(id=parse_snowflake(value, field))


def _matches(message: discord.Message, query_lower: Optional[str], author_id: Optional[str]) -> bool:
    if author_id and str(message.author.id) != str(author_id):
        return False
    if query_lower and query_lower not in (message.content or "").lower():
        return False
    return True


async def _fetch_matching(
    channel: Any,
    limit: int,
    before: Optional[discord.Object],
    after: Optional[discord.Object],
    query_lower: Optional[str],
    author_id: Optional[str],
    now: datetime,
    tag_channel: bool = False,
) -> List[MessageRecord]:
    """Fetch newest-first, filter, and return the matches oldest-first."""
    records = []
    async for message in channel.history(limit=limit, before=before, after=after, oldest_first=False):
        if _matches(message, query_lower, author_id):
            records.append(MessageRecord.from_message(message, now, tag_channel=tag_channel))
    records.reverse()
    return records


async def read_channel(client: discord.Client, channel_id: Any, limit: Any = 50) -> List[TextContent]:
    max_limit = min(int(limit), READ_LIMIT_MAX)
    channel = await resolve_text_channel(client, channel_id)

    now = datetime.now(timezone.utc)
    records = await _fetch_matching(channel, max_limit, None, None, None, None, now)

    return make_response({
        "channel": _channel_summary(channel),
        "messages": [m.to_dict() for m in records],
    })


async def search_messages(
    client: discord.Client,
    channel_id: Optional[Any] = None,
    guild_id: Optional[Any] = None,
    query: Optional[str] = None,
    author_id: Optional[Any] = None,
    limit: Any = 100,
    before: Optional[Any] = None,
    after: Optional[Any] = None,
) -> List[TextContent]:
    """Search one channel, or every text channel of a guild.

    ``channel_id`` wins when both ids are supplied. In guild mode the limit
    is split evenly across the guild's text channels and a channel that
    cannot be read is reported in ``channelResults`` instead of failing the
    whole search.
    """
    if not channel_id and not guild_id:
        raise ValueError("Either channelId or guildId must be provided")

    max_limit = min(int(limit), SEARCH_LIMIT_MAX)
    before_cursor = _cursor(before, "before")
    after_cursor = _cursor(after, "after")
    query_lower = query.lower() if query else None
    author_filter = str(author_id) if author_id else None
    now = datetime.now(timezone.utc)

    if channel_id:
        channel = await resolve_text_channel(client, channel_id)
        records = await _fetch_matching(
            channel, max_limit, before_cursor, after_cursor, query_lower, author_filter, now
        )
        return make_response({
            "channel": _channel_summary(channel),
            "searchQuery": query,
            "authorFilter": author_filter,
            "totalResults": len(records),
            "messages": [m.to_dict() for m in records],
        })

    guild = get_cached_guild(client, guild_id)
    text_channels = [c for c in guild.channels if is_text_channel(c)]
    per_channel = min(max_limit // len(text_channels), PER_CHANNEL_LIMIT_MAX) if text_channels else 0

    all_records: List[MessageRecord] = []
    outcomes: List[ChannelSearchOutcome] = []
    for channel in text_channels:
        try:
            records = await _fetch_matching(
                channel, per_channel, before_cursor, after_cursor,
                query_lower, author_filter, now, tag_channel=True,
            )
        except discord.HTTPException as exc:
            logger.warning(f"Skipping channel {channel.id} in guild search: {exc}")
            outcomes.append(ChannelSearchOutcome(str(channel.id), channel.name, error=str(exc)))
            continue
        all_records.extend(records)
        outcomes.append(ChannelSearchOutcome(str(channel.id), channel.name, message_count=len(records)))

    all_records.sort(key=lambda m: m.timestamp)

    return make_response({
        "guild": {"id": str(guild.id), "name": guild.name},
        "channelResults": [o.to_dict() for o in outcomes],
        "searchQuery": query,
        "authorFilter": author_filter,
        "totalResults": len(all_records),
        "messages": [m.to_dict() for m in all_records],
    })


async def send_message(
    client: discord.Client,
    channel_id: Any,
    content: str,
    reply_to_message_id: Optional[Any] = None,
) -> List[TextContent]:
    channel = await resolve_text_channel(
        client, channel_id, "Channel not found or cannot send messages to this channel"
    )

    if reply_to_message_id:
        try:
            target = await channel.fetch_message(parse_snowflake(reply_to_message_id, "replyToMessageId"))
        except discord.NotFound:
            raise ValueError("Reply message not found") from None
        message = await target.reply(content)
    else:
        message = await channel.send(content)

    logger.info(f"Sent message {message.id} to channel {channel.id}")
    return make_response({
        "success": True,
        "messageId": str(message.id),
        "channelId": str(channel_id),
        "content": content,
        "timestamp": isoformat(message.created_at),
        "replyTo": str(reply_to_message_id) if reply_to_message_id else None,
    })
