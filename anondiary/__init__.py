"""
anon-diary - An anonymous diary that retells your day as greentext.

Entries are rewritten by a language model, which also extracts short
memory facts that feed back into later rewrites.
"""

from .types import Entry, Memory

try:
    from importlib.metadata import version

    __version__ = version("anon-diary")
except Exception:
    __version__ = "0.0.0"

__all__ = ["Entry", "Memory"]
