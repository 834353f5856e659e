"""Channel-voice message construction and formatting.

Number ranges callers are expected to respect (none are enforced here):

    channel         1 - 16
    pitch           0 - 127
    velocity        0 - 127
    control value   0 - 127
    program value   0 - 127
    bend value      0 - 16383
    touch value     0 - 127

A note on with velocity 0 is equivalent to a note off, and most synths
ignore the velocity of a note off. Send velocity 64 if velocity is not used.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

NOTE_OFF = 0x80
NOTE_ON = 0x90
POLY_AFTERTOUCH = 0xA0
CONTROL_CHANGE = 0xB0
PROGRAM_CHANGE = 0xC0
AFTERTOUCH = 0xD0
PITCH_BEND = 0xE0

PITCH_BEND_MAX = (1 << 14) - 1
PITCH_BEND_CENTER = 1 << 13

_TYPE_NAMES = {
    NOTE_OFF: "note_off",
    NOTE_ON: "note_on",
    POLY_AFTERTOUCH: "poly_aftertouch",
    CONTROL_CHANGE: "control_change",
    PROGRAM_CHANGE: "program_change",
    AFTERTOUCH: "aftertouch",
    PITCH_BEND: "pitch_bend",
}


def status_byte(base: int, channel: int) -> int:
    """Combine a message type with a 1-based channel number."""
    return base + channel - 1


def pack(*values: int) -> bytes:
    """Build an outbound message, truncating each value to 8 bits."""
    return bytes(value & 0xFF for value in values)


def note_on(channel: int, pitch: int, velocity: int) -> bytes:
    return pack(status_byte(NOTE_ON, channel), pitch, velocity)


def note_off(channel: int, pitch: int, velocity: int) -> bytes:
    return pack(status_byte(NOTE_OFF, channel), pitch, velocity)


def control_change(channel: int, control: int, value: int) -> bytes:
    return pack(status_byte(CONTROL_CHANGE, channel), control, value)


def program_change(channel: int, value: int) -> bytes:
    return pack(status_byte(PROGRAM_CHANGE, channel), value)


def aftertouch(channel: int, value: int) -> bytes:
    return pack(status_byte(AFTERTOUCH, channel), value)


def poly_aftertouch(channel: int, pitch: int, value: int) -> bytes:
    return pack(status_byte(POLY_AFTERTOUCH, channel), pitch, value)


def pitch_bend_bytes(channel: int, lsb: int, msb: int) -> bytes:
    """Pitch bend from pre-split 7-bit bytes.

    NOTE: ``channel`` is accepted but not applied; the status byte is always
    ``PITCH_BEND`` (channel 1). Existing callers depend on this, so it is kept
    rather than silently readdressed.
    """
    return pack(PITCH_BEND, lsb, msb)


def split_pitch_bend(value: int) -> Tuple[int, int]:
    """Split a 14-bit bend value into (lsb, msb) 7-bit bytes."""
    return value & 0x7F, (value >> 7) & 0x7F


def join_pitch_bend(lsb: int, msb: int) -> int:
    return (lsb & 0x7F) | ((msb & 0x7F) << 7)


def pitch_bend_in_range(value: int) -> bool:
    return value >> 14 == 0


def parse_message(data: Sequence[int]) -> Tuple[str, int, Optional[int], Optional[int]]:
    """Split raw bytes into (message_type, channel, data1, data2)."""
    if not data:
        return ("unknown", 0, None, None)

    status = data[0]
    data1 = data[1] if len(data) > 1 else None
    data2 = data[2] if len(data) > 2 else None
    return (_TYPE_NAMES.get(status & 0xF0, "unknown"), status & 0x0F, data1, data2)


def format_message(data: Sequence[int]) -> str:
    """Render raw bytes for logging, e.g. ``NOTE_ON ch=1 note=60 vel=100``."""
    msg_type, channel, data1, data2 = parse_message(data)

    parts = [msg_type.upper(), f"ch={channel + 1}"]
    if msg_type in ("note_on", "note_off", "poly_aftertouch"):
        parts.append(f"note={data1}")
        if data2 is not None:
            parts.append(f"{'vel' if msg_type != 'poly_aftertouch' else 'val'}={data2}")
    elif msg_type == "control_change":
        parts.append(f"cc={data1}")
        if data2 is not None:
            parts.append(f"val={data2}")
    elif msg_type == "pitch_bend" and data1 is not None and data2 is not None:
        parts.append(f"value={join_pitch_bend(data1, data2)}")
    elif data1 is not None:
        parts.append(f"val={data1}")
    return " ".join(parts)


__all__ = [
    "AFTERTOUCH",
    "CONTROL_CHANGE",
    "NOTE_OFF",
    "NOTE_ON",
    "PITCH_BEND",
    "PITCH_BEND_CENTER",
    "PITCH_BEND_MAX",
    "POLY_AFTERTOUCH",
    "PROGRAM_CHANGE",
    "aftertouch",
    "control_change",
    "format_message",
    "join_pitch_bend",
    "note_off",
    "note_on",
    "pack",
    "parse_message",
    "pitch_bend_bytes",
    "pitch_bend_in_range",
    "poly_aftertouch",
    "program_change",
    "split_pitch_bend",
    "status_byte",
]
