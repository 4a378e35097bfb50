"""Memory context loading for prompt construction."""

from typing import List

from ..database import DiaryStorage

MEMORY_CONTEXT_LIMIT = 6


def load_memory_context(
    storage: DiaryStorage, device_id: str, limit: int = MEMORY_CONTEXT_LIMIT
) -> List[str]:
    """Return up to ``limit`` memory facts for a device, most recent first.

    An empty list is a normal result for a device with no memories.
    """
    return [m.memory_text for m in storage.list_memories(device_id, limit=limit)]
