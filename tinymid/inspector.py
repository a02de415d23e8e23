"""Fixed-width diagnostic rows for decoded events.

Row layout (default widths)::

    offset | hex window                             | total  | delta  | name                      | channel    | detail

The hex window is the only column that is ever shortened: when the raw
bytes do not fit, the first K pairs are kept and ``[...]`` is appended so
every row lines up.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from .events import Event, EventKind, note_name

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "[...]"
MIN_HEX_WIDTH = len(TRUNCATION_MARKER) + 1


@dataclass(frozen=True)
class Columns:
    offset: int = 6
    hex: int = 39
    total: int = 6
    delta: int = 6
    name: int = 25
    channel: int = 10
    note: int = 9
    tempo: int = 6

    def __post_init__(self) -> None:
        if self.hex < MIN_HEX_WIDTH:
            raise ValueError(
                f"hex column must be at least {MIN_HEX_WIDTH} wide, got {self.hex}"
            )

    @property
    def hex_pairs(self) -> int:
        """Number of hex pairs kept when the window is truncated."""

        return (self.hex - MIN_HEX_WIDTH) // 3


def pad(text: str, width: int) -> str:
    """Left-justify ``text`` to ``width``; longer text is left intact."""

    return text.ljust(width)


def describe_note(note: int) -> str:
    """Note name, or ``?<raw>`` when the value is not a MIDI note."""

    try:
        return note_name(note)
    except ValueError:
        return f"?{note}"


def format_hex_window(window: bytes, columns: Columns) -> str:
    pairs = [f"{byte:02X}" for byte in window]
    content = "".join(f"{pair} " for pair in pairs)
    if len(content) > columns.hex:
        kept = "".join(f"{pair} " for pair in pairs[: columns.hex_pairs])
        content = f"{kept}{TRUNCATION_MARKER} "
    return pad(content, columns.hex)


@dataclass
class EventInspector:
    """Render events as fixed-column rows and hand them to a line sink."""

    sink: Callable[[str], None] | None = None
    columns: Columns = field(default_factory=Columns)

    def render(self, event: Event, window: bytes) -> str:
        cols = self.columns
        kind = event.kind

        row = pad(f"0x{event.source_offset:X}", cols.offset)
        row += " | "
        row += format_hex_window(window, cols)
        row += "| "
        row += pad(str(event.total_time), cols.total)
        row += " | "
        row += pad(str(event.delta_time), cols.delta)
        row += " | "
        row += pad(event.name, cols.name)
        row += " | "
        if event.channel is None:
            row += " " * cols.channel
        else:
            row += pad(f"Channel {event.channel}", cols.channel)
        row += " | "

        if kind in (EventKind.NOTE_ON, EventKind.NOTE_OFF):
            row += pad(f"Note {describe_note(event.note)}", cols.note)
            row += f"at velocity {event.velocity}"
        elif kind is EventKind.TEMPO:
            row += pad(str(event.tempo), cols.tempo)
            row += " us per quarter note"
        return row

    def emit(self, event: Event, window: bytes) -> str:
        row = self.render(event, window)
        sink = self.sink if self.sink is not None else logger.debug
        sink(row)
        return row

    def emit_from(self, data: bytes, event: Event) -> str:
        """Emit ``event`` using its own window sliced from ``data``."""

        return self.emit(event, data[event.source_offset : event.source_end])
