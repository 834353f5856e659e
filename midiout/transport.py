"""Transport providers that move raw MIDI bytes to system output ports."""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

import mido
import rtmidi

LOGGER = logging.getLogger(__name__)

BACKENDS = ("rtmidi", "mido")


class TransportError(Exception):
    """A provider-level failure with a human-readable message."""


class MidiTransport(Protocol):
    """Capabilities a MidiOutput needs from the host MIDI system."""

    def port_count(self) -> int:
        ...

    def port_name(self, index: int) -> str:
        ...

    def open_port(self, index: int, label: str) -> None:
        ...

    def open_virtual_port(self, name: str) -> None:
        ...

    def close_port(self) -> None:
        ...

    def send(self, data: Sequence[int]) -> None:
        ...


class RtMidiTransport:
    """python-rtmidi output. Bytes are passed through without validation."""

    def __init__(self) -> None:
        self._midi = rtmidi.MidiOut()

    def port_count(self) -> int:
        return self._midi.get_port_count()

    def port_name(self, index: int) -> str:
        try:
            return self._midi.get_port_name(index) or ""
        except (rtmidi.RtMidiError, OverflowError) as exc:
            raise TransportError(str(exc)) from exc

    def open_port(self, index: int, label: str) -> None:
        try:
            self._midi.open_port(index, label)
        except (rtmidi.RtMidiError, OverflowError) as exc:
            raise TransportError(str(exc)) from exc

    def open_virtual_port(self, name: str) -> None:
        try:
            self._midi.open_virtual_port(name)
        except (rtmidi.RtMidiError, NotImplementedError) as exc:
            raise TransportError(str(exc) or "virtual ports are not supported") from exc

    def close_port(self) -> None:
        self._midi.close_port()

    def send(self, data: Sequence[int]) -> None:
        if not self._midi.is_port_open():
            LOGGER.debug("Dropping %d bytes, no port open", len(data))
            return
        self._midi.send_message(data)


class MidoTransport:
    """mido output, addressed by index into ``mido.get_output_names()``.

    mido validates messages, so bytes it cannot parse are dropped with a
    warning instead of reaching the port.
    """

    def __init__(self) -> None:
        self._port: Optional[mido.ports.BaseOutput] = None

    def port_count(self) -> int:
        return len(mido.get_output_names())

    def port_name(self, index: int) -> str:
        names = mido.get_output_names()
        if 0 <= index < len(names):
            return names[index]
        return ""

    def open_port(self, index: int, label: str) -> None:
        names = mido.get_output_names()
        if not 0 <= index < len(names):
            raise TransportError(f"invalid port number {index} ({len(names)} ports available)")
        self._port = self._open(names[index])

    def open_virtual_port(self, name: str) -> None:
        self._port = self._open(name, virtual=True)

    def close_port(self) -> None:
        if self._port is not None:
            self._port.close()
            self._port = None

    def send(self, data: Sequence[int]) -> None:
        if self._port is None:
            LOGGER.debug("Dropping %d bytes, no port open", len(data))
            return
        try:
            message = mido.Message.from_bytes(list(data))
        except ValueError as exc:
            LOGGER.warning("Dropping unencodable MIDI bytes %s: %s", list(data), exc)
            return
        self._port.send(message)

    @staticmethod
    def _open(name: str, virtual: bool = False) -> mido.ports.BaseOutput:
        try:
            return mido.open_output(name, virtual=virtual)
        except (IOError, NotImplementedError, rtmidi.RtMidiError) as exc:
            raise TransportError(str(exc)) from exc


def create_transport(backend: str = "rtmidi") -> MidiTransport:
    """Instantiate the named transport provider."""
    if backend == "rtmidi":
        return RtMidiTransport()
    if backend == "mido":
        return MidoTransport()
    raise ValueError(f"Unknown MIDI backend '{backend}', expected one of: {', '.join(BACKENDS)}")


__all__ = [
    "BACKENDS",
    "MidiTransport",
    "MidoTransport",
    "RtMidiTransport",
    "TransportError",
    "create_transport",
]
