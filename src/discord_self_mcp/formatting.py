import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from mcp.types import TextContent

CHANNEL_TYPE_LABELS: Dict[str, str] = {
    "0": "Text Channel",
    "1": "DM",
    "2": "Voice Channel",
    "3": "Group DM",
    "4": "Category",
    "5": "News Channel",
    "10": "News Thread",
    "11": "Public Thread",
    "12": "Private Thread",
    "13": "Stage Voice",
    "15": "Forum Channel",
    "GUILD_TEXT": "Text Channel",
    "DM": "DM",
    "GUILD_VOICE": "Voice Channel",
    "GROUP_DM": "Group DM",
    "GUILD_CATEGORY": "Category",
    "GUILD_NEWS": "News Channel",
    "GUILD_NEWS_THREAD": "News Thread",
    "GUILD_PUBLIC_THREAD": "Public Thread",
    "GUILD_PRIVATE_THREAD": "Private Thread",
    "GUILD_STAGE_VOICE": "Stage Voice",
    "GUILD_FORUM": "Forum Channel",
}

_UNITS = (
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
)


def channel_type_label(value: Union[int, str]) -> str:
    """Human readable name for a numeric channel type code or enum name."""
    return CHANNEL_TYPE_LABELS.get(str(value), f"Unknown ({value})")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def relative_time(timestamp: datetime, now: Optional[datetime] = None) -> str:
    """Render the age of ``timestamp`` using the coarsest whole unit, e.g. "3 hours ago"."""
    now = _as_utc(now) if now else datetime.now(timezone.utc)
    seconds = max(0, int((now - _as_utc(timestamp)).total_seconds()))

    for unit, size in _UNITS:
        count = seconds // size
        if count >= 1:
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    return f"{seconds} second{'s' if seconds != 1 else ''} ago"


def isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return _as_utc(value).isoformat()


def make_response(payload: Dict[str, Any]) -> List[TextContent]:
    """Wrap a payload in the single text block every tool returns."""
    return [TextContent(type="text", text=json.dumps(payload, indent=2, ensure_ascii=False))]
