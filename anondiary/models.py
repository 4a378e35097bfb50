"""Pydantic models for API requests and responses."""

from datetime import datetime

from pydantic import BaseModel, Field

from .pipeline import ClearResult
from .types import DEFAULT_NAME, Entry, Memory

# =============================================================================
# Entry Models
# =============================================================================


class EntrySubmit(BaseModel):
    """Body of ``POST /api/entries``.

    Every field is optional; which ones are filled decides whether the post
    is a normal entry, a clear command or a memory dump.
    """
    content: str | None = None
    options: str | None = None
    name: str | None = None
    sub: str | None = None
    device_id: str | None = None


class EntryResponse(BaseModel):
    """A diary entry as returned to the client."""
    id: int
    content: str = ""
    greentext: str
    memories: list[str] = []
    name: str = DEFAULT_NAME
    sub: str = ""
    created_at: datetime | None = None

    @classmethod
    def from_entry(cls, entry: Entry) -> "EntryResponse":
        return cls(
            id=entry.id,
            content=entry.content,
            greentext=entry.greentext,
            memories=list(entry.memories),
            name=entry.name,
            sub=entry.sub,
            created_at=entry.created_at,
        )


class EntryListResponse(BaseModel):
    entries: list[EntryResponse]


class EntryDetailResponse(BaseModel):
    entry: EntryResponse


class EntryDeleteResponse(BaseModel):
    message: str = "Entry deleted"
    changes: int


class ClearResponse(BaseModel):
    """Response to the ``clear`` command."""
    message: str
    entries_deleted: int = Field(ge=0)
    memories_deleted: int = Field(ge=0)

    @classmethod
    def from_result(cls, result: ClearResult) -> "ClearResponse":
        return cls(
            message=result.message,
            entries_deleted=result.entries_deleted,
            memories_deleted=result.memories_deleted,
        )


# =============================================================================
# Memory Models
# =============================================================================


class MemoryResponse(BaseModel):
    """A stored memory with the content of the entry it came from."""
    id: int
    memory_text: str
    entry_id: int | None = None
    created_at: datetime | None = None
    source_content: str | None = None

    @classmethod
    def from_memory(cls, memory: Memory) -> "MemoryResponse":
        return cls(
            id=memory.id,
            memory_text=memory.memory_text,
            entry_id=memory.entry_id,
            created_at=memory.created_at,
            source_content=memory.source_content,
        )


class MemoryListResponse(BaseModel):
    memories: list[MemoryResponse]
