"""
Shared record types for anon-diary.

These dataclasses are what the storage accessor hands back and what the
pipeline produces. The HTTP layer converts them into pydantic models.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional


def utc_now() -> str:
    """Get current timestamp as ISO string in UTC."""
    return datetime.now(timezone.utc).isoformat()


def parse_datetime(s: Optional[str]) -> Optional[datetime]:
    """Parse an ISO datetime string, returning None for empty or bad input."""
    if not s:
        return None
    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


DEFAULT_NAME = "Anonymous"


@dataclass
class Entry:
    """A diary post and its greentext rendering."""

    id: int
    content: str
    greentext: str
    device_id: str
    name: str = DEFAULT_NAME
    sub: str = ""
    created_at: Optional[str] = None
    # Only populated on the response to the post that created the entry
    memories: List[str] = field(default_factory=list)


@dataclass
class Memory:
    """A short fact extracted from a generated rewrite."""

    id: int
    memory_text: str
    device_id: str
    entry_id: Optional[int] = None
    created_at: Optional[str] = None
    # Content of the originating entry, when loaded through a join
    source_content: Optional[str] = None
