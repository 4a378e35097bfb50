"""Entry pipeline: turns a resolved command into persisted diary state.

A normal post goes through: load memory context, build the prompt, call the
generation endpoint, parse the completion, persist. Any failure before
persisting switches to the fallback greentext, so a post is never lost
because the model was unavailable.

Memory rows are written one by one after the entry, each on its own; a
failed memory insert is logged and skipped. Losing some memories of an
entry is acceptable, losing the entry is not.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List, Optional, Protocol

from ..database import DiaryStorage
from ..errors import GenerationError, StorageError
from ..logging_config import get_logger, log_entry_event
from ..types import DEFAULT_NAME, Entry, utc_now
from .commands import (
    MEMORY_DUMP_SUBJECT,
    ClearDevice,
    Command,
    CreateEntry,
    RecallMemories,
    render_memory_dump,
)
from .context import MEMORY_CONTEXT_LIMIT, load_memory_context
from .parser import ParsedGeneration, parse_generation
from .prompt import build_prompt

logger = get_logger("pipeline")

GREENTEXT_MARKER = ">"
FALLBACK_LINE = "be me"
CLEAR_MESSAGE = "All entries deleted. Database cleared."


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


@dataclass
class ClearResult:
    entries_deleted: int
    memories_deleted: int
    message: str = CLEAR_MESSAGE


def fallback_greentext(content: str) -> str:
    """Deterministic greentext: quote every line, ``be me`` for blank ones."""
    lines = content.strip().split("\n")
    return "\n".join(f"{GREENTEXT_MARKER}{line.strip() or FALLBACK_LINE}" for line in lines)


class EntryPipeline:
    """Runs commands against storage and the generation endpoint.

    Args:
        storage: Opened storage accessor.
        generator: Anything with ``async generate(prompt) -> str``.
        memory_context_limit: How many recent memories go into the prompt.
    """

    def __init__(
        self,
        storage: DiaryStorage,
        generator: TextGenerator,
        memory_context_limit: int = MEMORY_CONTEXT_LIMIT,
    ) -> None:
        self.storage = storage
        self.generator = generator
        self.memory_context_limit = memory_context_limit

    async def handle(self, command: Command) -> Entry | ClearResult:
        if isinstance(command, ClearDevice):
            return self.clear(command)
        if isinstance(command, RecallMemories):
            return self.recall_memories(command)
        if isinstance(command, CreateEntry):
            return await self.create_entry(command)
        raise TypeError(f"Unknown command: {command!r}")

    # === Commands ===

    def clear(self, command: ClearDevice) -> ClearResult:
        """Remove every entry and memory of the device. No generation call."""
        logger.info(f"Clear command triggered for {command.device_id}")
        entries_deleted, memories_deleted = self.storage.clear_device(command.device_id)
        log_entry_event(
            command.device_id,
            "clear",
            None,
            True,
            f"entries={entries_deleted} memories={memories_deleted}",
        )
        return ClearResult(entries_deleted=entries_deleted, memories_deleted=memories_deleted)

    def recall_memories(self, command: RecallMemories) -> Entry:
        """Render all of the device's memories as an unsaved pseudo-entry."""
        logger.info(f"Memory dump requested for {command.device_id}")
        memories = self.storage.list_memories(command.device_id)
        entry = Entry(
            # Not a row id: the entry is never stored, but clients key posts on id
            id=int(time.time() * 1000),
            content="",
            greentext=render_memory_dump(memories),
            name=DEFAULT_NAME,
            sub=MEMORY_DUMP_SUBJECT,
            device_id=command.device_id,
            created_at=utc_now(),
        )
        log_entry_event(command.device_id, "recall", None, True, f"memories={len(memories)}")
        return entry

    async def create_entry(self, command: CreateEntry) -> Entry:
        """Generate (or fall back), then persist the entry and its memories."""
        parsed = await self._generate(command.device_id, command.content)
        if parsed is None:
            parsed = ParsedGeneration(display_text=fallback_greentext(command.content))
            action = "fallback"
        else:
            action = "create"

        entry = self.storage.insert_entry(
            content=command.content,
            greentext=parsed.display_text,
            name=command.name,
            sub=command.sub,
            device_id=command.device_id,
        )
        entry.memories = list(parsed.memories)
        saved = self._save_memories(entry, parsed.memories)
        log_entry_event(
            command.device_id,
            action,
            entry.id,
            True,
            f"memories={saved}/{len(parsed.memories)}",
        )
        return entry

    # === Stages ===

    async def _generate(self, device_id: str, content: str) -> Optional[ParsedGeneration]:
        """Run the generation stage. Returns None when the fallback should be used."""
        try:
            memories = load_memory_context(self.storage, device_id, self.memory_context_limit)
            prompt = build_prompt(content, memories)
            raw = await self.generator.generate(prompt)
            parsed = parse_generation(raw)
            if not parsed.display_text:
                raise GenerationError("Completion has no greentext before its memory markers")
            return parsed
        except GenerationError as e:
            logger.warning(
                f"LLM call failed, using fallback: {e} (status={e.status_code})"
            )
        except Exception as e:
            logger.exception(f"Generation stage failed, using fallback: {e}")
        return None

    def _save_memories(self, entry: Entry, memories: List[str]) -> int:
        """Insert each memory independently. Returns how many were stored."""
        if not memories:
            logger.debug(f"No memories extracted from entry {entry.id}")
            return 0

        saved = 0
        for memory in memories:
            try:
                self.storage.insert_memory(
                    memory_text=memory, device_id=entry.device_id, entry_id=entry.id
                )
                saved += 1
            except StorageError as e:
                log_entry_event(entry.device_id, "memory", entry.id, False, str(e))
        return saved
