"""Fakes for the discord.py objects the tool handlers read."""
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class AsyncIter:
    """Async iterator over a list, optionally raising once exhausted."""

    def __init__(self, items, error=None):
        self._items = list(items)
        self._error = error

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._items:
            return self._items.pop(0)
        if self._error is not None:
            error, self._error = self._error, None
            raise error
        raise StopAsyncIteration


class FakeUser:
    def __init__(self, id, name, discriminator="0", bot=False, **extra):
        self.id = id
        self.name = name
        self.discriminator = discriminator
        self.bot = bot
        for key, value in extra.items():
            setattr(self, key, value)

    def __str__(self):
        return self.name


def make_text_channel(id, name, position=0, guild=None, messages=()):
    channel = MagicMock(spec=discord.TextChannel)
    channel.id = id
    channel.name = name
    channel.position = position
    channel.guild = guild
    channel.type = discord.ChannelType.text
    channel.history = MagicMock(side_effect=lambda **kwargs: AsyncIter(messages))
    return channel


def make_message(id, content, author=None, created_at=None, channel=None,
                 attachments=(), embeds=()):
    return SimpleNamespace(
        id=id,
        content=content,
        author=author or FakeUser(1, "alice", "0001"),
        created_at=created_at or NOW,
        channel=channel,
        attachments=list(attachments),
        embeds=list(embeds),
    )


def newest_first(channel, contents, author=None, start=NOW):
    """Messages one minute apart, newest first as Discord returns them."""
    total = len(contents)
    return [
        make_message(
            id=1000 + i,
            content=content,
            author=author,
            created_at=start - timedelta(minutes=total - i),
            channel=channel,
        )
        for i, content in reversed(list(enumerate(contents)))
    ]


def make_client(channels=(), guilds=(), private_channels=(), user=None):
    by_id = {c.id: c for c in channels}
    client = MagicMock()
    client.user = user
    client.guilds = list(guilds)
    client.private_channels = list(private_channels)
    client.get_channel = MagicMock(side_effect=by_id.get)
    client.fetch_channel = AsyncMock(
        side_effect=discord.NotFound(MagicMock(status=404, reason="Not Found"), "Unknown Channel")
    )
    client.get_guild = MagicMock(side_effect={g.id: g for g in guilds}.get)
    client.fetch_guild = AsyncMock(
        side_effect=discord.NotFound(MagicMock(status=404, reason="Not Found"), "Unknown Guild")
    )
    client.get_all_channels = MagicMock(side_effect=lambda: iter(channels))
    return client


@pytest.fixture
def alice():
    return FakeUser(1, "alice", "0001")


@pytest.fixture
def bob():
    return FakeUser(2, "bob", "0002")
