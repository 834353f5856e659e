"""Connection to a single MIDI output port and the messages sent over it.

A MidiOutput is attached to at most one destination at a time: a real port
chosen by index, or a named virtual port. Opening either kind first closes
whatever was open before.

Not thread-safe. Callers sharing one MidiOutput across threads must serialise
open, close and send themselves.
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional, Sequence

from . import messages
from .diagnostics import DEFAULT_LOGGING, LoggingOptions
from .state import NO_PORT, ConnectionState
from .transport import MidiTransport, TransportError, create_transport

LOGGER = logging.getLogger(__name__)


def _log_event(event: str, **fields: object) -> None:
    LOGGER.info(json.dumps({"event": event, **fields}))


def _log_error(event: str, **fields: object) -> None:
    LOGGER.error(json.dumps({"event": event, **fields}))


class MidiOutput:
    """Owns one transport handle and sends channel-voice messages through it."""

    def __init__(
        self,
        display_name: str = "",
        transport: Optional[MidiTransport] = None,
        logging_options: Optional[LoggingOptions] = None,
        backend: str = "rtmidi",
    ) -> None:
        self.display_name = display_name
        self._transport = transport if transport is not None else create_transport(backend)
        self._options = logging_options if logging_options is not None else DEFAULT_LOGGING
        self._state = ConnectionState()

    def __enter__(self) -> "MidiOutput":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __del__(self) -> None:
        # __init__ may have failed before the transport existed
        if getattr(self, "_transport", None) is not None:
            self.close()

    # Ports -------------------------------------------------------------------

    def list_ports(self) -> List[str]:
        """Names of the available output ports; list index is the port number.

        The order may change whenever devices are added or removed. A virtual
        port opened by this connection does not appear in its own list.
        """
        return [self._transport.port_name(i) for i in range(self._transport.port_count())]

    def port_count(self) -> int:
        return self._transport.port_count()

    def port_name(self, index: int) -> str:
        """Name of the port at ``index``, or "" if the index is invalid."""
        try:
            return self._transport.port_name(index)
        except TransportError:
            return ""

    # Connection ---------------------------------------------------------------

    def open(self, index: int) -> bool:
        """Connect to the real port at ``index``. Returns False on failure."""
        try:
            self.close()
            self._transport.open_port(index, f"{self.display_name}Output {index}")
        except TransportError as exc:
            _log_error("port_open_failed", port=index, error=str(exc))
            return False

        self._state.port_index = index
        self._state.port_name = self.port_name(index)
        if self._options.verbose:
            _log_event("port_opened", port=index, name=self._state.port_name)
        return True

    def open_virtual(self, name: str) -> bool:
        """Create and connect to a virtual port (macOS and Linux ALSA only).

        While connected, ``current_port`` stays -1.
        """
        try:
            self.close()
            self._transport.open_virtual_port(name)
        except TransportError as exc:
            _log_error("virtual_port_open_failed", port=name, error=str(exc))
            return False

        self._state.port_name = name
        self._state.is_virtual = True
        if self._options.verbose:
            _log_event("virtual_port_opened", port=name)
        return True

    def close(self) -> None:
        """Release the port. Safe to call when nothing is open."""
        state = self._state
        if self._options.verbose:
            if state.is_virtual:
                _log_event("virtual_port_closed", port=state.port_name)
            elif state.port_index > NO_PORT:
                _log_event("port_closed", port=state.port_index, name=state.port_name)
        self._transport.close_port()
        state.reset()

    @property
    def is_open(self) -> bool:
        return self._state.is_open

    @property
    def is_virtual(self) -> bool:
        return self._state.is_virtual

    @property
    def current_port(self) -> int:
        """Index of the connected port, -1 when closed or virtual."""
        return self._state.port_index

    @property
    def current_name(self) -> str:
        return self._state.port_name

    # Sending ------------------------------------------------------------------

    def send_message(self, data: Sequence[int]) -> None:
        """Hand raw bytes to the transport unchanged.

        No open check is made; the transport decides what sending on a closed
        port means.
        """
        if LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug("Sending %s", messages.format_message(data))
        self._transport.send(data)

    def send_note_on(self, channel: int, pitch: int, velocity: int) -> None:
        self.send_message(messages.note_on(channel, pitch, velocity))

    def send_note_off(self, channel: int, pitch: int, velocity: int) -> None:
        self.send_message(messages.note_off(channel, pitch, velocity))

    def send_control_change(self, channel: int, control: int, value: int) -> None:
        self.send_message(messages.control_change(channel, control, value))

    def send_program_change(self, channel: int, value: int) -> None:
        self.send_message(messages.program_change(channel, value))

    def send_pitch_bend(self, channel: int, value: int) -> None:
        """Send a 14-bit bend value (0-16383, centre 8192).

        Out-of-range values are reported but still sent, masked to 14 bits.
        """
        if not messages.pitch_bend_in_range(value):
            _log_error("pitch_bend_out_of_range", value=value, limit=messages.PITCH_BEND_MAX + 1)
        lsb, msb = messages.split_pitch_bend(value)
        self.send_pitch_bend_bytes(channel, lsb, msb)

    def send_pitch_bend_bytes(self, channel: int, lsb: int, msb: int) -> None:
        """Send a bend from raw 7-bit bytes.

        NOTE: always addressed to channel 1, ``channel`` is ignored. See
        messages.pitch_bend_bytes.
        """
        self.send_message(messages.pitch_bend_bytes(channel, lsb, msb))

    def send_aftertouch(self, channel: int, value: int) -> None:
        self.send_message(messages.aftertouch(channel, value))

    def send_poly_aftertouch(self, channel: int, pitch: int, value: int) -> None:
        self.send_message(messages.poly_aftertouch(channel, pitch, value))


__all__ = ["MidiOutput"]
