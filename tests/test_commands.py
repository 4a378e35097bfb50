"""Tests for command resolution and the memory dump rendering."""

import pytest

from anondiary.errors import ValidationError
from anondiary.pipeline.commands import (
    EMPTY_MEMORY_DUMP,
    ClearDevice,
    CreateEntry,
    RecallMemories,
    format_memory_date,
    render_memory_dump,
    resolve_command,
)
from anondiary.types import Memory


class TestResolveCommand:
    @pytest.mark.parametrize("options", ["clear", "CLEAR", "  Clear \n"])
    def test_clear_any_case_and_whitespace(self, options):
        assert resolve_command("d1", options=options) == ClearDevice(device_id="d1")

    def test_clear_wins_over_content(self):
        command = resolve_command("d1", content="some text", options="clear")
        assert isinstance(command, ClearDevice)

    @pytest.mark.parametrize(
        "fields",
        [{"options": "memory"}, {"sub": "Memory"}, {"sub": " MEMORY ", "content": "x"}],
    )
    def test_memory_from_options_or_subject(self, fields):
        assert resolve_command("d1", **fields) == RecallMemories(device_id="d1")

    def test_normal_post(self):
        command = resolve_command("d1", content="  went out \n", name=" ", sub=" day one ")
        assert command == CreateEntry(
            device_id="d1", content="went out", name="Anonymous", sub="day one"
        )

    def test_name_kept(self):
        command = resolve_command("d1", content="x", name="moot")
        assert command.name == "moot"

    def test_nothing_submitted(self):
        with pytest.raises(ValidationError):
            resolve_command("d1", content="  ", options="", sub=None)

    def test_subject_only_is_not_enough(self):
        with pytest.raises(ValidationError):
            resolve_command("d1", sub="just a subject")

    def test_unknown_option_needs_content(self):
        with pytest.raises(ValidationError):
            resolve_command("d1", options="sage")


class TestMemoryDump:
    def test_empty(self):
        assert render_memory_dump([]) == EMPTY_MEMORY_DUMP

    def test_lists_memories_in_given_order(self):
        memories = [
            Memory(id=2, memory_text="likes tea", device_id="d1",
                   created_at="2025-03-04T10:00:00+00:00"),
            Memory(id=1, memory_text="hates rain", device_id="d1",
                   created_at="2024-12-25T08:30:00+00:00"),
        ]
        assert render_memory_dump(memories) == "\n".join([
            ">be me",
            ">memory dump activated",
            ">all key memories from the diary:",
            ">Mar 4, 25: likes tea",
            ">Dec 25, 24: hates rain",
            ">mfw reliving the entire arc",
            ">end of memory dump",
        ])

    def test_bad_date(self):
        assert format_memory_date("not a date") == "unknown date"
        assert format_memory_date(None) == "unknown date"
