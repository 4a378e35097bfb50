"""Split a generated completion into greentext and memory facts.

The model is asked to end its answer with lines like ``[memory: some fact]``.
Everything before the first ``[memory:`` marker is the greentext; the
payload of every well-formed marker is a candidate memory.
"""

import re
from dataclasses import dataclass, field
from typing import List

# Boundary: first marker opening, closed or not, valid payload or not
MARKER_START = re.compile(r"\[memory:", re.IGNORECASE)
# Payloads never span lines
MARKER = re.compile(r"\[memory:\s*(.+?)\]", re.IGNORECASE)

MAX_MEMORY_LENGTH = 100


@dataclass
class ParsedGeneration:
    display_text: str
    memories: List[str] = field(default_factory=list)


def is_valid_memory(text: str) -> bool:
    """A memory must be non-empty and shorter than MAX_MEMORY_LENGTH."""
    return 0 < len(text) < MAX_MEMORY_LENGTH


def extract_memories(text: str) -> List[str]:
    """All valid marker payloads in order of appearance, trimmed."""
    memories = []
    for match in MARKER.finditer(text):
        memory = match.group(1).strip()
        if is_valid_memory(memory):
            memories.append(memory)
    return memories


def parse_generation(raw: str) -> ParsedGeneration:
    """Parse a raw completion into display text and extracted memories."""
    text = raw.strip()
    start = MARKER_START.search(text)
    if start is None:
        return ParsedGeneration(display_text=text)
    return ParsedGeneration(
        display_text=text[: start.start()].strip(),
        memories=extract_memories(text),
    )
