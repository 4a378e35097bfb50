"""Prompt construction for the greentext rewrite.

``build_prompt`` is pure: the same content and memory context always render
the same string.
"""

from typing import Sequence

PREAMBLE = (
    "You are anon's diary assistant. "
    "Turn journal entries into 4chan-style greentext stories."
)

INSTRUCTIONS = """INSTRUCTIONS:
1. Create a greentext story from the journal entry
2. Use > at the start of every line
3. Make it funny, ironic, self-deprecating
4. End with "mfw" or "tfw" if appropriate
5. Occasionally use format like: emotion.fileextension
6. After the greentext, on a new line, write 1 short summary about the user's patterns/habits/emotions but only IF they are MAJOR OR IMPORTANT
7. Format each memory as: [memory: short memory text]
8. every memory must have a unique topic
9. Do not repeat a memory that is already listed in the previous key memories
10. If the journal entry is longer than a few sentences, close the greentext with one line of commentary; keep short entries short"""

EXAMPLE = """Example:
> be me
> try to wake up early
> alarmClockScreaming.mp3
> hit snooze 5 times
> mfw it's already noon

[memory: always hits snooze multiple times]
[memory: struggles with morning routines]"""


def render_memory_block(memories: Sequence[str]) -> str:
    """Numbered list of previous memories, or an empty string when there are none."""
    if not memories:
        return ""
    lines = ["User's previous key memories:"]
    lines.extend(f"{index}. {memory}" for index, memory in enumerate(memories, start=1))
    return "\n".join(lines)


def build_prompt(content: str, memories: Sequence[str] = ()) -> str:
    """Render the generation request for one journal entry.

    Args:
        content: Trimmed, non-empty entry text. Appended verbatim at the end.
        memories: Memory context, most recent first.
    """
    if not content or not content.strip():
        raise ValueError("Prompt content must not be empty")

    sections = [PREAMBLE]
    memory_block = render_memory_block(memories)
    if memory_block:
        sections.append(memory_block)
    sections.append(INSTRUCTIONS)
    sections.append(EXAMPLE)
    sections.append(f"Now process this journal entry: {content}")
    return "\n\n".join(sections)
