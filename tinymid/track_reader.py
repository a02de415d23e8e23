"""Decode MTrk chunk payloads into ``Event`` lists.

Per event the stream holds::

    <delta varlen> <status> <payload>

  status 0x80-0xEF  channel voice, payload length from ``fixed_length``
  status < 0x80     running status: reuse the previous channel status,
                    this byte is already the first payload byte
  status 0xFF       meta: <sub-type> <length varlen> <payload>
  status 0xF0/0xF7  sysex: <length varlen> <payload>

Other system statuses have no length the stream can tell us, so decoding
stops with an error there.  Offsets reported in events and errors are
absolute positions in the buffer handed to the reader.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List

from .events import (
    META_MARKER,
    SYSEX_ESCAPE,
    SYSEX_START,
    Event,
    EventFamily,
    EventKind,
    classify,
    fixed_length,
)

logger = logging.getLogger(__name__)

CHUNK_HEADER_SIZE = 8
TRACK_CHUNK_ID = b"MTrk"
MAX_VARLEN_BYTES = 4


class ByteCursor:
    """Bounded read cursor over an immutable buffer."""

    __slots__ = ("_data", "_pos", "_end")

    def __init__(self, data: bytes, start: int = 0, end: int | None = None):
        if end is None:
            end = len(data)
        if start < 0 or end > len(data) or start > end:
            raise ValueError(
                f"invalid window {start}:{end} for buffer of {len(data)} bytes"
            )
        self._data = data
        self._pos = start
        self._end = end

    def tell(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return self._end - self._pos

    def read_exact(self, size: int) -> bytes:
        if size < 0:
            raise ValueError(f"negative read size {size}")
        if self.remaining < size:
            raise ValueError(
                f"unexpected end of track data at 0x{self._pos:X} "
                f"(need {size} bytes, have {self.remaining})"
            )
        start = self._pos
        self._pos += size
        return bytes(self._data[start : start + size])

    def read_byte(self) -> int:
        return self.read_exact(1)[0]

    def peek_byte(self) -> int:
        if self.remaining <= 0:
            raise ValueError(f"unexpected end of track data at 0x{self._pos:X}")
        return self._data[self._pos]

    def read_varlen(self) -> int:
        """Read a variable-length quantity (7 bits per byte, MSB = more)."""

        start = self._pos
        value = 0
        for _ in range(MAX_VARLEN_BYTES):
            byte = self.read_byte()
            value = (value << 7) | (byte & 0x7F)
            if byte & 0x80 == 0:
                return value
        raise ValueError(
            f"variable-length quantity at 0x{start:X} exceeds {MAX_VARLEN_BYTES} bytes"
        )


@dataclass(frozen=True)
class Chunk:
    id: bytes
    offset: int  # position of the 4-byte id
    payload_offset: int
    length: int

    @property
    def payload_end(self) -> int:
        return self.payload_offset + self.length

    @property
    def is_track(self) -> bool:
        return self.id == TRACK_CHUNK_ID


def iter_chunks(data: bytes) -> Iterator[Chunk]:
    """Step over ``<id><u32 BE length>`` frames without interpreting them."""

    pos = 0
    while pos + CHUNK_HEADER_SIZE <= len(data):
        chunk_id = bytes(data[pos : pos + 4])
        length = int.from_bytes(data[pos + 4 : pos + 8], "big")
        payload_offset = pos + CHUNK_HEADER_SIZE
        if payload_offset + length > len(data):
            raise ValueError(
                f"chunk {chunk_id!r} at 0x{pos:X} declares {length} bytes, "
                f"only {len(data) - payload_offset} remain"
            )
        yield Chunk(id=chunk_id, offset=pos, payload_offset=payload_offset, length=length)
        pos = payload_offset + length


def _read_data_bytes(cursor: ByteCursor, count: int, status: int) -> bytes:
    offset = cursor.tell()
    payload = cursor.read_exact(count)
    for i, byte in enumerate(payload):
        if byte & 0x80:
            raise ValueError(
                f"data byte 0x{byte:02X} at 0x{offset + i:X} has the high bit set "
                f"(status 0x{status:02X})"
            )
    return payload


def read_track_events(data: bytes, start: int = 0, end: int | None = None) -> List[Event]:
    """Decode one track payload (``data[start:end]``) into events.

    ``total_time`` is the running sum of ``delta_time``.  Decoding stops
    after End of track or when the window is exhausted.
    """

    cursor = ByteCursor(data, start, end)
    events: List[Event] = []
    total_time = 0
    running_status: int | None = None

    while cursor.remaining > 0:
        delta = cursor.read_varlen()
        total_time += delta
        event_offset = cursor.tell()
        status = cursor.peek_byte()

        if status == META_MARKER:
            cursor.read_byte()
            meta_type = cursor.read_byte()
            length = cursor.read_varlen()
            # The length prefix decides how much to skip, even when it
            # disagrees with the fixed table (e.g. an empty sequence number).
            payload = cursor.read_exact(length)
            expected = fixed_length(meta_type, meta=True)
            if expected is not None and length != expected:
                logger.debug(
                    "meta event 0x%02X at 0x%X declares length %d, expected %d",
                    meta_type,
                    event_offset,
                    length,
                    expected,
                )
            tempo = 0
            if classify(meta_type, meta=True) is EventKind.TEMPO and length == expected:
                tempo = int.from_bytes(payload, "big")
            running_status = None
            event = Event(
                type=meta_type,
                is_meta=True,
                tempo=tempo,
                delta_time=delta,
                total_time=total_time,
                source_offset=event_offset,
                source_length=cursor.tell() - event_offset,
                data=payload,
            )
            events.append(event)
            if event.kind is EventKind.END_OF_TRACK:
                break
            continue

        if status in (SYSEX_START, SYSEX_ESCAPE):
            cursor.read_byte()
            length = cursor.read_varlen()
            payload = cursor.read_exact(length)
            running_status = None
            events.append(
                Event(
                    type=status,
                    delta_time=delta,
                    total_time=total_time,
                    source_offset=event_offset,
                    source_length=cursor.tell() - event_offset,
                    data=payload,
                )
            )
            continue

        if status & 0x80:
            cursor.read_byte()
            if classify(status).family is EventFamily.SYSTEM:
                raise ValueError(
                    f"system status 0x{status:02X} at 0x{event_offset:X} "
                    "has no derivable length"
                )
            running_status = status
        elif running_status is None:
            raise ValueError(
                f"data byte 0x{status:02X} at 0x{event_offset:X} without running status"
            )
        else:
            status = running_status

        length = fixed_length(status)
        if length is None:
            raise ValueError(
                f"no length for status 0x{status:02X} at 0x{event_offset:X}"
            )
        payload = _read_data_bytes(cursor, length, status)
        note = velocity = 0
        if classify(status) in (EventKind.NOTE_ON, EventKind.NOTE_OFF):
            note, velocity = payload[0], payload[1]
        events.append(
            Event(
                type=status,
                note=note,
                velocity=velocity,
                delta_time=delta,
                total_time=total_time,
                source_offset=event_offset,
                source_length=cursor.tell() - event_offset,
                data=payload,
            )
        )

    return events


def read_file_events(data: bytes) -> List[List[Event]]:
    """Decode every MTrk chunk in a Standard MIDI File buffer."""

    return [
        read_track_events(data, chunk.payload_offset, chunk.payload_end)
        for chunk in iter_chunks(data)
        if chunk.is_track
    ]
