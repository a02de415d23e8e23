"""MIDI event classification, track decoding and diagnostic rendering."""

from .events import (  # noqa: F401
    EVENT_NAMES,
    FIXED_LENGTHS,
    META_MARKER,
    NOTE_NAMES,
    SYSTEM_EVENT_NAME,
    UNKNOWN_EVENT_NAME,
    Event,
    EventFamily,
    EventKind,
    channel,
    classify,
    event_name,
    fixed_length,
    note_name,
    strip_channel,
)
from .inspector import (  # noqa: F401
    TRUNCATION_MARKER,
    Columns,
    EventInspector,
    format_hex_window,
)
from .track_reader import (  # noqa: F401
    ByteCursor,
    Chunk,
    iter_chunks,
    read_file_events,
    read_track_events,
)
