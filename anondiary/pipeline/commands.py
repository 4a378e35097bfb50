"""Resolve a submitted post into the command it carries.

The diary form has no separate command channel: typing ``clear`` into the
options field wipes the device's diary, and ``memory`` in the options or
subject field asks for a dump of remembered facts. The request is resolved
once, here, into one of three explicit command types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from ..errors import ValidationError
from ..types import DEFAULT_NAME, Memory, parse_datetime

CLEAR_SENTINEL = "clear"
MEMORY_SENTINEL = "memory"

MEMORY_DUMP_SUBJECT = "Memory Dump"
EMPTY_MEMORY_DUMP = ">be me\n>no memories yet\n>mfw empty mind"


@dataclass(frozen=True)
class CreateEntry:
    device_id: str
    content: str
    name: str = DEFAULT_NAME
    sub: str = ""


@dataclass(frozen=True)
class ClearDevice:
    device_id: str


@dataclass(frozen=True)
class RecallMemories:
    device_id: str


Command = Union[CreateEntry, ClearDevice, RecallMemories]


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip()


def _is_sentinel(value: Optional[str], sentinel: str) -> bool:
    return _normalize(value).lower() == sentinel


def resolve_command(
    device_id: str,
    content: Optional[str] = None,
    options: Optional[str] = None,
    name: Optional[str] = None,
    sub: Optional[str] = None,
) -> Command:
    """Turn raw form fields into a command.

    Raises:
        ValidationError: nothing was submitted, or a normal post has no content.
    """
    content = _normalize(content)
    if not content and not _normalize(options) and not _normalize(sub):
        raise ValidationError("Content is required")

    if _is_sentinel(options, CLEAR_SENTINEL):
        return ClearDevice(device_id=device_id)
    if _is_sentinel(options, MEMORY_SENTINEL) or _is_sentinel(sub, MEMORY_SENTINEL):
        return RecallMemories(device_id=device_id)

    if not content:
        raise ValidationError("Content is required")
    return CreateEntry(
        device_id=device_id,
        content=content,
        name=_normalize(name) or DEFAULT_NAME,
        sub=_normalize(sub),
    )


def format_memory_date(created_at: Optional[str]) -> str:
    """Short US-style date, e.g. ``Mar 4, 25``."""
    dt = parse_datetime(created_at)
    if dt is None:
        return "unknown date"
    return f"{dt:%b} {dt.day}, {dt:%y}"


def render_memory_dump(memories: Sequence[Memory]) -> str:
    """Greentext listing every memory, newest first as given."""
    if not memories:
        return EMPTY_MEMORY_DUMP

    lines = [">be me", ">memory dump activated", ">all key memories from the diary:"]
    for memory in memories:
        text = memory.memory_text or "unknown memory"
        lines.append(f">{format_memory_date(memory.created_at)}: {text}")
    lines.append(">mfw reliving the entire arc")
    lines.append(">end of memory dump")
    return "\n".join(lines)
