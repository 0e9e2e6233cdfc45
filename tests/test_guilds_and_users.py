"""Tests for channel, guild and member listings and the current-user summary."""
import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import discord
import pytest

from conftest import NOW, AsyncIter, FakeUser, make_client, make_text_channel
from discord_self_mcp.guilds import list_channels, list_guilds
from discord_self_mcp.users import get_user_info, list_guild_members


def payload(response):
    return json.loads(response[0].text)


def make_guild(id, name, channels=(), members=(), owner_id=0, member_count=None):
    guild = MagicMock()
    guild.id = id
    guild.name = name
    guild.channels = list(channels)
    guild.owner_id = owner_id
    guild.member_count = member_count if member_count is not None else len(members)
    guild.me = SimpleNamespace(joined_at=NOW - timedelta(days=3))
    guild.fetch_members = MagicMock(side_effect=lambda limit=None: AsyncIter(members))
    return guild


def make_role(id, name, position, color=0):
    return SimpleNamespace(id=id, name=name, position=position, color=discord.Colour(color))


def make_member(guild, id, name, display_name, roles=(), nick=None, bot=False):
    return FakeUser(
        id, name, "0",
        bot=bot,
        guild=guild,
        display_name=display_name,
        nick=nick,
        joined_at=datetime.now(timezone.utc) - timedelta(days=1, hours=1),
        status=discord.Status.online,
        roles=list(roles),
    )


@pytest.mark.asyncio
async def test_list_channels_for_guild_sorted_by_position():
    guild = make_guild(99, "Lab")
    channels = [
        make_text_channel(12, "random", position=2, guild=guild),
        make_text_channel(10, "general", position=0, guild=guild),
        make_text_channel(11, "", position=1, guild=guild),
    ]
    guild.channels = channels
    client = make_client(guilds=[guild])

    data = payload(await list_channels(client, guild_id="99"))

    assert data["totalChannels"] == 3
    assert data["guildFilter"] == "99"
    assert [c["id"] for c in data["channels"]] == ["10", "11", "12"]
    assert data["channels"][1]["name"] == "Unknown"
    assert data["channels"][0] == {
        "id": "10",
        "name": "general",
        "type": 0,
        "typeDescription": "Text Channel",
        "guildName": "Lab",
        "guildId": "99",
        "position": 0,
    }


@pytest.mark.asyncio
async def test_list_channels_ties_keep_cache_order():
    guild = make_guild(99, "Lab")
    guild.channels = [make_text_channel(i, f"c{i}", position=0, guild=guild) for i in (5, 3, 4)]
    client = make_client(guilds=[guild])

    data = payload(await list_channels(client, guild_id="99"))

    assert [c["id"] for c in data["channels"]] == ["5", "3", "4"]


@pytest.mark.asyncio
async def test_list_channels_unknown_guild():
    with pytest.raises(ValueError, match="Guild not found"):
        await list_channels(make_client(), guild_id="99")


@pytest.mark.asyncio
async def test_list_channels_without_filter_includes_dms():
    guild = make_guild(99, "Lab")
    text = make_text_channel(10, "general", position=3, guild=guild)
    dm = SimpleNamespace(id=50, type=discord.ChannelType.private)
    client = make_client(channels=[text], private_channels=[dm])

    data = payload(await list_channels(client))

    assert data["guildFilter"] is None
    assert [c["id"] for c in data["channels"]] == ["50", "10"]
    assert data["channels"][0]["name"] == "DM"
    assert data["channels"][0]["typeDescription"] == "DM"
    assert data["channels"][0]["guildId"] is None


@pytest.mark.asyncio
async def test_list_guilds_sorted_by_name_and_flags_owner():
    me = FakeUser(7, "me")
    guilds = [
        make_guild(1, "zeta", owner_id=7, member_count=5),
        make_guild(2, "Alpha", member_count=10),
        make_guild(3, "beta", member_count=3),
    ]
    client = make_client(guilds=guilds, user=me)

    data = payload(await list_guilds(client))

    assert data["totalGuilds"] == 3
    assert [g["name"] for g in data["guilds"]] == ["Alpha", "beta", "zeta"]
    zeta = data["guilds"][2]
    assert zeta["owner"] is True
    assert zeta["memberCount"] == 5
    assert zeta["joinedAt"] == (NOW - timedelta(days=3)).isoformat()
    assert data["guilds"][0]["owner"] is False


@pytest.mark.asyncio
async def test_get_user_info():
    me = FakeUser(7, "me", "0", bot=True, verified=True, created_at=NOW - timedelta(days=30))
    guild = make_guild(99, "Lab")
    channels = [make_text_channel(10, "a", guild=guild), make_text_channel(11, "b", guild=guild)]
    client = make_client(channels=channels, guilds=[guild], private_channels=[SimpleNamespace(id=50)], user=me)
    client.status = discord.Status.idle

    data = payload(await get_user_info(client))

    assert data["user"] == {
        "id": "7",
        "username": "me",
        "discriminator": "0",
        "tag": "me",
        "bot": True,
        "verified": True,
        "createdAt": (NOW - timedelta(days=30)).isoformat(),
    }
    assert data["status"] == "idle"
    assert data["guildCount"] == 1
    assert data["channelCount"] == 3


@pytest.mark.asyncio
async def test_get_user_info_requires_login():
    with pytest.raises(ValueError, match="Client user not available"):
        await get_user_info(make_client(user=None))


@pytest.mark.asyncio
async def test_list_guild_members_without_roles():
    guild = make_guild(99, "Lab", member_count=250)
    members = [
        make_member(guild, 2, "zed", "Zed", roles=[make_role(99, "@everyone", 0)]),
        make_member(guild, 1, "amy", "amy", nick="amy"),
    ]
    guild.fetch_members = MagicMock(side_effect=lambda limit=None: AsyncIter(members))
    client = make_client(guilds=[guild])

    data = payload(await list_guild_members(client, "99", limit=5000))

    guild.fetch_members.assert_called_once_with(limit=1000)
    assert data["guild"] == {"id": "99", "name": "Lab", "memberCount": 250}
    assert data["totalMembers"] == 2
    assert data["includeRoles"] is False
    assert [m["displayName"] for m in data["members"]] == ["amy", "Zed"]
    assert all("roles" not in m for m in data["members"])
    assert data["members"][0]["nickname"] == "amy"
    assert "nickname" not in data["members"][1]
    assert data["members"][0]["status"] == "online"
    assert data["members"][0]["joinedAtRelative"] == "1 day ago"


@pytest.mark.asyncio
async def test_list_guild_members_roles_exclude_default_and_sort_descending():
    guild = make_guild(99, "Lab")
    roles = [
        make_role(99, "@everyone", 0),
        make_role(5, "mod", 3, color=0x00FF00),
        make_role(6, "admin", 7, color=0xFF0000),
        make_role(4, "member", 1),
    ]
    members = [make_member(guild, 1, "amy", "amy", roles=roles)]
    guild.fetch_members = MagicMock(side_effect=lambda limit=None: AsyncIter(members))
    client = make_client(guilds=[guild])

    data = payload(await list_guild_members(client, "99", include_roles=True))

    member_roles = data["members"][0]["roles"]
    assert [r["name"] for r in member_roles] == ["admin", "mod", "member"]
    assert member_roles[0] == {"id": "6", "name": "admin", "color": "#ff0000", "position": 7}
    positions = [r["position"] for r in member_roles]
    assert all(a > b for a, b in zip(positions, positions[1:]))


@pytest.mark.asyncio
async def test_list_guild_members_unknown_guild():
    with pytest.raises(ValueError, match="Guild not found"):
        await list_guild_members(make_client(), "99")
