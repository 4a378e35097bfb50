"""Memory-augmented greentext rewrite pipeline."""

from .commands import (
    ClearDevice,
    Command,
    CreateEntry,
    RecallMemories,
    render_memory_dump,
    resolve_command,
)
from .context import load_memory_context
from .generation import GenerationClient
from .parser import ParsedGeneration, extract_memories, parse_generation
from .prompt import build_prompt
from .service import ClearResult, EntryPipeline, fallback_greentext

__all__ = [
    # Commands
    "Command",
    "CreateEntry",
    "ClearDevice",
    "RecallMemories",
    "resolve_command",
    "render_memory_dump",
    # Stages
    "load_memory_context",
    "build_prompt",
    "GenerationClient",
    "ParsedGeneration",
    "parse_generation",
    "extract_memories",
    # Orchestration
    "EntryPipeline",
    "ClearResult",
    "fallback_greentext",
]
