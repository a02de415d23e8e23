"""Tests for event classification, lengths and derived fields."""

from dataclasses import FrozenInstanceError

import pytest

from tinymid.events import (
    EVENT_NAMES,
    FIXED_LENGTHS,
    NOTE_NAMES,
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

CHANNEL_NAMES = {
    EVENT_NAMES[kind] for kind in EventKind if kind.family is EventFamily.CHANNEL
}
TEXT_META_TYPES = [0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07, 0x7F]


# ── classification ─────────────────────────────────────────────────


class TestClassify:
    def test_every_kind_has_a_name(self):
        assert set(EVENT_NAMES) == set(EventKind)

    @pytest.mark.parametrize("type_byte", range(0xF0, 0x100))
    def test_high_nibble_f_is_system_message(self, type_byte: int):
        assert classify(type_byte) is EventKind.SYSTEM
        assert event_name(type_byte) == "System message"
        assert event_name(type_byte) not in CHANNEL_NAMES

    @pytest.mark.parametrize(
        "status, kind, name",
        [
            (0x80, EventKind.NOTE_OFF, "Note off"),
            (0x9F, EventKind.NOTE_ON, "Note on"),
            (0xA3, EventKind.KEY_PRESSURE, "Polyphonic key pressure"),
            (0xB0, EventKind.CONTROL_CHANGE, "Control change"),
            (0xC5, EventKind.PROGRAM_CHANGE, "Program change"),
            (0xD0, EventKind.CHANNEL_PRESSURE, "Channel pressure"),
            (0xEE, EventKind.PITCH_WHEEL_CHANGE, "Pitch wheel change"),
        ],
    )
    def test_channel_voice_ignores_channel_nibble(self, status, kind, name):
        assert classify(status) is kind
        assert event_name(status) == name

    @pytest.mark.parametrize(
        "meta_type, name",
        [
            (0x00, "Sequence number"),
            (0x01, "Text event"),
            (0x02, "Copyright notice"),
            (0x03, "Sequence or track name"),
            (0x04, "Instrument name"),
            (0x05, "Lyric text"),
            (0x06, "Marker text"),
            (0x07, "Cue point"),
            (0x20, "MIDI channel prefix assignment"),
            (0x2F, "End of track"),
            (0x51, "Tempo setting"),
            (0x54, "SMPTE offset"),
            (0x58, "Time signature"),
            (0x59, "Key signature"),
            (0x7F, "Sequencer specific event"),
        ],
    )
    def test_meta_names(self, meta_type, name):
        assert classify(meta_type, meta=True).is_meta
        assert event_name(meta_type, meta=True) == name

    def test_meta_marker_without_sub_type_is_system(self):
        assert event_name(0xFF) == "System message"

    def test_unknown_bytes(self):
        assert classify(0x10) is EventKind.UNKNOWN
        assert event_name(0x10) == "Unknown event type"
        assert event_name(0x42, meta=True) == "Unknown event type"
        assert event_name(0x90, meta=True) == "Unknown event type"

    def test_classification_is_deterministic(self):
        for type_byte in range(0x100):
            assert classify(type_byte) is classify(type_byte)
            assert event_name(type_byte) == event_name(type_byte)
            assert fixed_length(type_byte) == fixed_length(type_byte)
            assert classify(type_byte, meta=True) is classify(type_byte, meta=True)
            assert event_name(type_byte, meta=True) == event_name(type_byte, meta=True)
            assert fixed_length(type_byte, meta=True) == fixed_length(type_byte, meta=True)
        assert fixed_length(0x42, meta=True) is None


# ── lengths ────────────────────────────────────────────────────────


class TestFixedLength:
    @pytest.mark.parametrize(
        "meta_type, length",
        [
            (0x51, 3),
            (0x2F, 0),
            (0x58, 4),
            (0x59, 2),
            (0x54, 5),
            (0x00, 2),
            (0x20, 1),
        ],
    )
    def test_fixed_meta_lengths(self, meta_type, length):
        assert fixed_length(meta_type, meta=True) == length

    @pytest.mark.parametrize("meta_type", TEXT_META_TYPES)
    def test_text_meta_is_variable(self, meta_type):
        assert fixed_length(meta_type, meta=True) is None

    def test_end_of_track_zero_is_not_unknown(self):
        assert fixed_length(0x2F, meta=True) == 0
        assert fixed_length(0x2F, meta=True) is not None

    @pytest.mark.parametrize(
        "status, length",
        [
            (0x80, 2),
            (0x90, 2),
            (0xA1, 2),
            (0xB2, 2),
            (0xC3, 1),
            (0xD4, 1),
            (0xE5, 2),
        ],
    )
    def test_channel_voice_lengths(self, status, length):
        assert fixed_length(status) == length

    @pytest.mark.parametrize("type_byte", [0xF0, 0xF7, 0xFF, 0x00, 0x7F])
    def test_system_and_unknown_are_variable(self, type_byte):
        assert fixed_length(type_byte) is None

    def test_no_negative_lengths(self):
        assert all(length >= 0 for length in FIXED_LENGTHS.values())


# ── note names / channel ───────────────────────────────────────────


def _split_note(name: str) -> tuple[str, int]:
    pitch = name.rstrip("-0123456789")
    return pitch, int(name[len(pitch):])


class TestNoteName:
    @pytest.mark.parametrize(
        "note, expected",
        [(60, "C4"), (69, "A4"), (0, "C-1"), (61, "C#4"), (127, "G9"), (11, "B-1")],
    )
    def test_known_names(self, note, expected):
        assert note_name(note) == expected

    def test_octave_steps_keep_pitch_class(self):
        for note in range(0, 116):
            pitch_a, octave_a = _split_note(note_name(note))
            pitch_b, octave_b = _split_note(note_name(note + 12))
            assert pitch_a == pitch_b == NOTE_NAMES[note % 12]
            assert octave_b - octave_a == 1

    @pytest.mark.parametrize("bad", [-1, 128, 1000, 1.5, True, None])
    def test_out_of_range_is_rejected(self, bad):
        with pytest.raises(ValueError):
            note_name(bad)


def test_channel_and_strip_channel():
    assert channel(0x91) == 1
    assert strip_channel(0x91) == 0x90
    assert channel(0xEF) == 15
    assert strip_channel(0xEF) == 0xE0


# ── Event ──────────────────────────────────────────────────────────


class TestEvent:
    def test_note_on_fields(self):
        event = Event(type=0x93, note=64, velocity=90)
        assert event.kind is EventKind.NOTE_ON
        assert event.name == "Note on"
        assert event.channel == 3
        assert event.note_name == "E4"
        assert event.fixed_length == 2

    def test_meta_has_no_channel(self):
        event = Event(type=0x51, is_meta=True, tempo=500000)
        assert event.kind is EventKind.TEMPO
        assert event.channel is None
        assert event.note_name is None
        assert event.fixed_length == 3

    def test_irrelevant_fields_default_to_zero(self):
        event = Event(type=0xB0)
        assert event.note == 0
        assert event.velocity == 0
        assert event.tempo == 0

    def test_source_end(self):
        event = Event(type=0x90, source_offset=0x20, source_length=3)
        assert event.source_end == 0x23

    def test_is_immutable(self):
        event = Event(type=0x90)
        with pytest.raises(FrozenInstanceError):
            event.note = 61  # type: ignore[misc]
