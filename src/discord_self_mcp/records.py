"""Plain records built from discord.py objects right after each client call.

Handlers never hand discord.py objects to the response layer: every value
that leaves a handler goes through one of these dataclasses, whose
``to_dict`` produces the camelCase JSON shape of the tool surface.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

import discord

from discord_self_mcp.formatting import channel_type_label, isoformat, relative_time


def _drop_none(data: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    for key in keys:
        if data.get(key) is None:
            data.pop(key, None)
    return data


@dataclass(frozen=True)
class ChannelRecord:
    id: str
    name: str
    type: int
    type_description: str
    guild_name: Optional[str] = None
    guild_id: Optional[str] = None
    position: int = 0

    @classmethod
    def from_channel(cls, channel: Any, default_name: str) -> "ChannelRecord":
        guild = getattr(channel, "guild", None)
        type_code = channel.type.value
        return cls(
            id=str(channel.id),
            name=getattr(channel, "name", None) or default_name,
            type=type_code,
            type_description=channel_type_label(type_code),
            guild_name=guild.name if guild else None,
            guild_id=str(guild.id) if guild else None,
            position=getattr(channel, "position", None) or 0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "typeDescription": self.type_description,
            "guildName": self.guild_name,
            "guildId": self.guild_id,
            "position": self.position,
        }


@dataclass(frozen=True)
class GuildRecord:
    id: str
    name: str
    member_count: Optional[int]
    owner: bool
    joined_at: Optional[datetime]

    @classmethod
    def from_guild(cls, guild: discord.Guild, user_id: Optional[int]) -> "GuildRecord":
        me = guild.me
        return cls(
            id=str(guild.id),
            name=guild.name,
            member_count=guild.member_count,
            owner=user_id is not None and guild.owner_id == user_id,
            joined_at=me.joined_at if me else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "memberCount": self.member_count,
            "owner": self.owner,
            "joinedAt": isoformat(self.joined_at),
        }


@dataclass(frozen=True)
class AttachmentRecord:
    name: str
    url: str
    size: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "url": self.url, "size": self.size}


@dataclass(frozen=True)
class EmbedFieldRecord:
    name: str
    value: str
    inline: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value, "inline": self.inline}


@dataclass(frozen=True)
class EmbedRecord:
    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    fields: Tuple[EmbedFieldRecord, ...] = ()

    @classmethod
    def from_embed(cls, embed: discord.Embed) -> "EmbedRecord":
        return cls(
            title=embed.title or None,
            description=embed.description or None,
            url=embed.url or None,
            fields=tuple(
                EmbedFieldRecord(name=f.name, value=f.value, inline=bool(f.inline))
                for f in embed.fields
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "fields": [f.to_dict() for f in self.fields],
        }
        return _drop_none(data, "title", "description", "url")


@dataclass(frozen=True)
class AuthorRecord:
    id: str
    username: str
    discriminator: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "username": self.username, "discriminator": self.discriminator}


@dataclass(frozen=True)
class MessageRecord:
    id: str
    author: AuthorRecord
    content: str
    timestamp: datetime
    relative_time: str
    attachments: Tuple[AttachmentRecord, ...] = ()
    embeds: Tuple[EmbedRecord, ...] = ()
    channel_id: Optional[str] = None
    channel_name: Optional[str] = None

    @classmethod
    def from_message(
        cls,
        message: discord.Message,
        now: Optional[datetime] = None,
        tag_channel: bool = False,
    ) -> "MessageRecord":
        author = message.author
        channel = message.channel
        return cls(
            id=str(message.id),
            author=AuthorRecord(
                id=str(author.id),
                username=author.name,
                discriminator=author.discriminator,
            ),
            content=message.content or "",
            timestamp=message.created_at,
            relative_time=relative_time(message.created_at, now),
            attachments=tuple(
                AttachmentRecord(name=a.filename or "unknown", url=a.url, size=a.size)
                for a in message.attachments
            ),
            embeds=tuple(EmbedRecord.from_embed(e) for e in message.embeds),
            channel_id=str(channel.id) if tag_channel else None,
            channel_name=getattr(channel, "name", None) if tag_channel else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "author": self.author.to_dict(),
            "content": self.content,
            "timestamp": isoformat(self.timestamp),
            "relativeTime": self.relative_time,
            "attachments": [a.to_dict() for a in self.attachments],
            "embeds": [e.to_dict() for e in self.embeds],
        }
        if self.channel_id is not None:
            data["channelId"] = self.channel_id
            data["channelName"] = self.channel_name
        return data


@dataclass(frozen=True)
class RoleRecord:
    id: str
    name: str
    color: str
    position: int

    @classmethod
    def from_role(cls, role: discord.Role) -> "RoleRecord":
        return cls(id=str(role.id), name=role.name, color=str(role.color), position=role.position)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color, "position": self.position}


@dataclass(frozen=True)
class MemberRecord:
    id: str
    username: str
    discriminator: str
    tag: str
    display_name: str
    nickname: Optional[str]
    bot: bool
    joined_at: Optional[datetime]
    joined_at_relative: Optional[str]
    status: str
    roles: Optional[Tuple[RoleRecord, ...]] = None

    @classmethod
    def from_member(
        cls,
        member: discord.Member,
        include_roles: bool = False,
        now: Optional[datetime] = None,
    ) -> "MemberRecord":
        roles = None
        if include_roles:
            default_role_id = member.guild.id
            roles = tuple(sorted(
                (RoleRecord.from_role(r) for r in member.roles if r.id != default_role_id),
                key=lambda r: r.position,
                reverse=True,
            ))
        joined_at = member.joined_at
        return cls(
            id=str(member.id),
            username=member.name,
            discriminator=member.discriminator,
            tag=str(member),
            display_name=member.display_name,
            nickname=member.nick or None,
            bot=member.bot,
            joined_at=joined_at,
            joined_at_relative=relative_time(joined_at, now) if joined_at else None,
            status=str(member.status) if member.status else "offline",
            roles=roles,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "username": self.username,
            "discriminator": self.discriminator,
            "tag": self.tag,
            "displayName": self.display_name,
            "nickname": self.nickname,
            "bot": self.bot,
            "joinedAt": isoformat(self.joined_at),
            "joinedAtRelative": self.joined_at_relative,
            "status": self.status,
        }
        if self.roles is not None:
            data["roles"] = [r.to_dict() for r in self.roles]
        return _drop_none(data, "nickname")


@dataclass(frozen=True)
class UserRecord:
    id: str
    username: str
    discriminator: str
    tag: str
    bot: bool
    created_at: datetime
    verified: Optional[bool] = None

    @classmethod
    def from_user(cls, user: discord.ClientUser) -> "UserRecord":
        return cls(
            id=str(user.id),
            username=user.name,
            discriminator=user.discriminator,
            tag=str(user),
            bot=user.bot,
            created_at=user.created_at,
            verified=getattr(user, "verified", None),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "username": self.username,
            "discriminator": self.discriminator,
            "tag": self.tag,
            "bot": self.bot,
            "verified": self.verified,
            "createdAt": isoformat(self.created_at),
        }
        return _drop_none(data, "verified")


@dataclass(frozen=True)
class ChannelSearchOutcome:
    channel_id: str
    channel_name: Optional[str]
    message_count: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "channelId": self.channel_id,
            "channelName": self.channel_name,
            "messageCount": self.message_count,
            "status": "ok" if self.ok else "failed",
        }
        if self.error is not None:
            data["error"] = self.error
        return data
