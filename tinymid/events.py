"""Classify MIDI status / meta type bytes and model decoded events.

Three families share the type-byte space:

  Channel voice  status 0x80-0xEF, low nibble = channel
  Meta           0xFF marker, then a sub-type byte (0x00-0x7F)
  System         any other 0xF_ status (sysex, realtime, ...)

Meta sub-types overlap numerically with data bytes, so the caller has to
say whether a byte is a meta sub-type (``meta=True``).  Without that flag
every 0xF_ byte is a system message and never reaches the channel-voice
table.

Payload lengths:
  Channel voice  NoteOff/NoteOn/KeyPressure/ControlChange/PitchWheel = 2,
                 ProgramChange/ChannelPressure = 1
  Meta           SequenceNumber=2, ChannelPrefix=1, EndOfTrack=0, Tempo=3,
                 SmpteOffset=5, TimeSignature=4, KeySignature=2
  Everything else is length-prefixed in the stream; ``fixed_length``
  returns None for it (distinct from a real 0).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class EventFamily(Enum):
    CHANNEL = "channel"
    META = "meta"
    SYSTEM = "system"
    UNKNOWN = "unknown"


class EventKind(Enum):
    """Closed set of event kinds.  Value is (family, code)."""

    NOTE_OFF = (EventFamily.CHANNEL, 0x80)
    NOTE_ON = (EventFamily.CHANNEL, 0x90)
    KEY_PRESSURE = (EventFamily.CHANNEL, 0xA0)
    CONTROL_CHANGE = (EventFamily.CHANNEL, 0xB0)
    PROGRAM_CHANGE = (EventFamily.CHANNEL, 0xC0)
    CHANNEL_PRESSURE = (EventFamily.CHANNEL, 0xD0)
    PITCH_WHEEL_CHANGE = (EventFamily.CHANNEL, 0xE0)

    SEQUENCE_NUMBER = (EventFamily.META, 0x00)
    TEXT_EVENT = (EventFamily.META, 0x01)
    COPYRIGHT = (EventFamily.META, 0x02)
    SEQUENCE_NAME = (EventFamily.META, 0x03)
    INSTRUMENT = (EventFamily.META, 0x04)
    LYRIC = (EventFamily.META, 0x05)
    MARKER_TEXT = (EventFamily.META, 0x06)
    CUE_POINT = (EventFamily.META, 0x07)
    MIDI_CHANNEL_PREFIX = (EventFamily.META, 0x20)
    END_OF_TRACK = (EventFamily.META, 0x2F)
    TEMPO = (EventFamily.META, 0x51)
    SMPTE_OFFSET = (EventFamily.META, 0x54)
    TIME_SIGNATURE = (EventFamily.META, 0x58)
    KEY_SIGNATURE = (EventFamily.META, 0x59)
    SEQUENCER_SPECIFIC = (EventFamily.META, 0x7F)

    SYSTEM = (EventFamily.SYSTEM, 0xF0)
    UNKNOWN = (EventFamily.UNKNOWN, -1)

    @property
    def family(self) -> EventFamily:
        return self.value[0]

    @property
    def code(self) -> int:
        return self.value[1]

    @property
    def is_meta(self) -> bool:
        return self.family is EventFamily.META


META_MARKER = 0xFF
SYSEX_START = 0xF0
SYSEX_ESCAPE = 0xF7

UNKNOWN_EVENT_NAME = "Unknown event type"
SYSTEM_EVENT_NAME = "System message"

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

_CHANNEL_KINDS: Dict[int, EventKind] = {
    kind.code: kind for kind in EventKind if kind.family is EventFamily.CHANNEL
}
_META_KINDS: Dict[int, EventKind] = {
    kind.code: kind for kind in EventKind if kind.family is EventFamily.META
}

EVENT_NAMES: Dict[EventKind, str] = {
    EventKind.NOTE_OFF: "Note off",
    EventKind.NOTE_ON: "Note on",
    EventKind.KEY_PRESSURE: "Polyphonic key pressure",
    EventKind.CONTROL_CHANGE: "Control change",
    EventKind.PROGRAM_CHANGE: "Program change",
    EventKind.CHANNEL_PRESSURE: "Channel pressure",
    EventKind.PITCH_WHEEL_CHANGE: "Pitch wheel change",
    EventKind.SEQUENCE_NUMBER: "Sequence number",
    EventKind.TEXT_EVENT: "Text event",
    EventKind.COPYRIGHT: "Copyright notice",
    EventKind.SEQUENCE_NAME: "Sequence or track name",
    EventKind.INSTRUMENT: "Instrument name",
    EventKind.LYRIC: "Lyric text",
    EventKind.MARKER_TEXT: "Marker text",
    EventKind.CUE_POINT: "Cue point",
    EventKind.MIDI_CHANNEL_PREFIX: "MIDI channel prefix assignment",
    EventKind.END_OF_TRACK: "End of track",
    EventKind.TEMPO: "Tempo setting",
    EventKind.SMPTE_OFFSET: "SMPTE offset",
    EventKind.TIME_SIGNATURE: "Time signature",
    EventKind.KEY_SIGNATURE: "Key signature",
    EventKind.SEQUENCER_SPECIFIC: "Sequencer specific event",
    EventKind.SYSTEM: SYSTEM_EVENT_NAME,
    EventKind.UNKNOWN: UNKNOWN_EVENT_NAME,
}

# Kinds missing here carry an explicit length prefix in the stream.
FIXED_LENGTHS: Dict[EventKind, int] = {
    EventKind.NOTE_OFF: 2,
    EventKind.NOTE_ON: 2,
    EventKind.KEY_PRESSURE: 2,
    EventKind.CONTROL_CHANGE: 2,
    EventKind.PROGRAM_CHANGE: 1,
    EventKind.CHANNEL_PRESSURE: 1,
    EventKind.PITCH_WHEEL_CHANGE: 2,
    EventKind.SEQUENCE_NUMBER: 2,
    EventKind.MIDI_CHANNEL_PREFIX: 1,
    EventKind.END_OF_TRACK: 0,
    EventKind.TEMPO: 3,
    EventKind.SMPTE_OFFSET: 5,
    EventKind.TIME_SIGNATURE: 4,
    EventKind.KEY_SIGNATURE: 2,
}


def classify(type_byte: int, *, meta: bool = False) -> EventKind:
    """Map a status byte (or meta sub-type when ``meta``) to its kind."""

    if meta:
        return _META_KINDS.get(type_byte, EventKind.UNKNOWN)
    # System catch-all is checked before the channel-voice table.
    if type_byte & 0xF0 == 0xF0:
        return EventKind.SYSTEM
    return _CHANNEL_KINDS.get(type_byte & 0xF0, EventKind.UNKNOWN)


def event_name(type_byte: int, *, meta: bool = False) -> str:
    return EVENT_NAMES[classify(type_byte, meta=meta)]


def fixed_length(type_byte: int, *, meta: bool = False) -> int | None:
    """Return the payload byte count, or None when the stream carries it.

    ``0`` is a real length (End of track); only ``None`` means "read the
    length prefix".
    """

    return FIXED_LENGTHS.get(classify(type_byte, meta=meta))


def note_name(note: int) -> str:
    """Return the pitch name with octave, e.g. 60 -> ``C4``, 0 -> ``C-1``."""

    if isinstance(note, bool) or not isinstance(note, int):
        raise ValueError(f"note must be an int, got {note!r}")
    if note < 0 or note > 127:
        raise ValueError(f"note must be 0-127, got {note}")
    return f"{NOTE_NAMES[note % 12]}{note // 12 - 1}"


def channel(type_byte: int) -> int:
    """Channel nibble of a channel-voice status byte (0-based)."""

    return type_byte & 0x0F


def strip_channel(type_byte: int) -> int:
    return type_byte & 0xF0


@dataclass(frozen=True)
class Event:
    """One decoded track event.

    For meta events ``type`` holds the meta sub-type byte, not 0xFF.
    ``note``/``velocity`` are only meaningful for note events and
    ``tempo`` (microseconds per quarter note) only for Tempo; they stay 0
    otherwise.
    """

    type: int
    is_meta: bool = False
    note: int = 0
    velocity: int = 0
    tempo: int = 0
    delta_time: int = 0
    total_time: int = 0
    source_offset: int = 0
    source_length: int = 0
    data: bytes = b""

    @property
    def kind(self) -> EventKind:
        return classify(self.type, meta=self.is_meta)

    @property
    def name(self) -> str:
        return EVENT_NAMES[self.kind]

    @property
    def fixed_length(self) -> int | None:
        return FIXED_LENGTHS.get(self.kind)

    @property
    def channel(self) -> int | None:
        if self.kind.family is not EventFamily.CHANNEL:
            return None
        return channel(self.type)

    @property
    def is_note(self) -> bool:
        return self.kind in (EventKind.NOTE_ON, EventKind.NOTE_OFF)

    @property
    def note_name(self) -> str | None:
        if not self.is_note:
            return None
        return note_name(self.note)

    @property
    def source_end(self) -> int:
        return self.source_offset + self.source_length
