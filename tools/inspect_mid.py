#!/usr/bin/env python3
"""Command line MIDI event viewer.

Decodes every MTrk chunk of a Standard MIDI File and logs one row per
event (with ``--debug``) or a short per-track summary.

Usage:
  python tools/inspect_mid.py song.mid
  python tools/inspect_mid.py --debug song.mid
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from tinymid.events import EventKind  # noqa: E402
from tinymid.inspector import EventInspector  # noqa: E402
from tinymid.track_reader import iter_chunks, read_track_events  # noqa: E402

logger = logging.getLogger("tinymid")


def inspect_file(data: bytes, inspector: EventInspector) -> int:
    """Decode and emit every track; return the number of tracks seen."""

    track_count = 0
    for chunk in iter_chunks(data):
        if not chunk.is_track:
            logger.debug("Skipping %s chunk at 0x%X", chunk.id.decode("latin-1"), chunk.offset)
            continue
        track_count += 1
        logger.debug("Track %d at 0x%X (%d bytes)", track_count, chunk.offset, chunk.length)
        events = read_track_events(data, chunk.payload_offset, chunk.payload_end)
        for event in events:
            inspector.emit_from(data, event)
        notes = sum(1 for event in events if event.kind is EventKind.NOTE_ON)
        end_time = events[-1].total_time if events else 0
        logger.info(
            "Track %d: %d events, %d note-on, %d ticks",
            track_count,
            len(events),
            notes,
            end_time,
        )
    return track_count


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="A command line MIDI viewer.")
    parser.add_argument("path", type=Path, help="MIDI file to read.")
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Log every decoded event.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if args.debug else logging.INFO,
        stream=sys.stdout,
    )

    try:
        data = args.path.read_bytes()
    except OSError as exc:
        logger.error("%s", exc)
        return 1

    inspector = EventInspector(sink=logger.debug)
    try:
        track_count = inspect_file(data, inspector)
    except ValueError as exc:
        logger.error("%s: %s", args.path, exc)
        return 1

    if track_count == 0:
        logger.error("%s: no MTrk chunks found", args.path)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
