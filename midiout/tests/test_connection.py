"""Tests for the output connection lifecycle and semantic sends."""

from __future__ import annotations

import gc
import json
import logging

import pytest

from midiout.connection import MidiOutput
from midiout.diagnostics import LoggingOptions, set_verbose_logging
from midiout.transport import TransportError


def _events(caplog: pytest.LogCaptureFixture) -> list:
    return [json.loads(record.getMessage()) for record in caplog.records if record.name == "midiout.connection"]


def test_new_connection_is_closed(transport) -> None:
    output = MidiOutput(transport=transport)
    assert not output.is_open
    assert not output.is_virtual
    assert output.current_port == -1
    assert output.current_name == ""


def test_list_ports_in_index_order(transport) -> None:
    output = MidiOutput(transport=transport)
    assert output.list_ports() == ["Synth A", "Synth B"]
    assert output.port_count() == 2
    assert output.port_name(1) == "Synth B"
    assert output.port_name(9) == ""


def test_port_count_is_live(transport) -> None:
    output = MidiOutput(transport=transport)
    transport.ports.append("Synth C")
    assert output.port_count() == 3


def test_open_without_ports_fails(transport, caplog: pytest.LogCaptureFixture) -> None:
    transport.ports.clear()
    output = MidiOutput(transport=transport)
    assert output.port_count() == 0

    with caplog.at_level(logging.ERROR):
        assert output.open(0) is False

    assert not output.is_open
    assert output.current_port == -1
    event = _events(caplog)[-1]
    assert event["event"] == "port_open_failed"
    assert event["port"] == 0
    assert "invalid port number" in event["error"]


def test_open_and_close(transport) -> None:
    output = MidiOutput("App ", transport=transport)
    assert output.open(0) is True
    assert output.is_open
    assert output.current_port == 0
    assert output.current_name == "Synth A"
    assert not output.is_virtual
    assert transport.labels == ["App Output 0"]

    output.close()
    assert not output.is_open
    assert output.current_port == -1
    assert output.current_name == ""
    assert transport.opened is None


def test_open_switches_ports(transport) -> None:
    output = MidiOutput(transport=transport)
    assert output.open(0)
    assert output.open(1)
    assert transport.opened == 1
    assert output.current_port == 1
    assert output.current_name == "Synth B"


def test_failed_open_leaves_previous_port_closed(transport) -> None:
    output = MidiOutput(transport=transport)
    assert output.open(0)
    assert output.open(5) is False
    assert not output.is_open
    assert transport.opened is None


def test_open_virtual(transport) -> None:
    output = MidiOutput(transport=transport)
    assert output.open_virtual("MyApp") is True
    assert output.is_virtual
    assert output.is_open
    assert output.current_port == -1
    assert output.current_name == "MyApp"


def test_open_virtual_closes_real_port(transport) -> None:
    output = MidiOutput(transport=transport)
    assert output.open(1)
    assert output.open_virtual("MyApp")
    assert transport.opened == "MyApp"
    assert output.is_virtual
    assert output.current_port == -1


def test_open_real_port_after_virtual(transport) -> None:
    output = MidiOutput(transport=transport)
    assert output.open_virtual("MyApp")
    assert output.open(0)
    assert not output.is_virtual
    assert output.current_port == 0


def test_open_virtual_unsupported(transport, caplog: pytest.LogCaptureFixture) -> None:
    transport.supports_virtual = False
    output = MidiOutput(transport=transport)
    with caplog.at_level(logging.ERROR):
        assert output.open_virtual("MyApp") is False
    assert not output.is_open
    assert not output.is_virtual
    event = _events(caplog)[-1]
    assert event == {
        "event": "virtual_port_open_failed",
        "port": "MyApp",
        "error": "virtual ports are not supported",
    }


def test_close_is_idempotent(transport) -> None:
    output = MidiOutput(transport=transport)
    assert not output.is_open
    output.close()
    output.close()
    assert not output.is_open
    assert output.current_port == -1
    assert output.current_name == ""


def test_context_manager_closes(transport) -> None:
    with MidiOutput(transport=transport) as output:
        assert output.open(0)
    assert transport.opened is None
    assert not output.is_open


def test_verbose_logging_is_shared(transport, caplog: pytest.LogCaptureFixture) -> None:
    first = MidiOutput(transport=transport)
    second = MidiOutput(transport=transport)

    with caplog.at_level(logging.INFO):
        first.open(0)
        first.close()
    assert _events(caplog) == []

    set_verbose_logging(True)
    with caplog.at_level(logging.INFO):
        second.open(1)
        second.close()
        second.open_virtual("MyApp")
        second.close()
    assert [event["event"] for event in _events(caplog)] == [
        "port_opened",
        "port_closed",
        "virtual_port_opened",
        "virtual_port_closed",
    ]
    assert _events(caplog)[1] == {"event": "port_closed", "port": 1, "name": "Synth B"}


def test_own_logging_options_ignore_global_switch(transport, caplog: pytest.LogCaptureFixture) -> None:
    output = MidiOutput(transport=transport, logging_options=LoggingOptions(verbose=False))
    set_verbose_logging(True)
    with caplog.at_level(logging.INFO):
        output.open(0)
    assert _events(caplog) == []


def test_semantic_sends(transport) -> None:
    output = MidiOutput(transport=transport)
    output.open(0)

    output.send_note_on(1, 60, 100)
    output.send_note_off(2, 60, 0)
    output.send_control_change(3, 7, 127)
    output.send_program_change(4, 12)
    output.send_aftertouch(5, 33)
    output.send_poly_aftertouch(6, 61, 44)
    output.send_pitch_bend_bytes(7, 0x00, 0x40)

    assert transport.sent == [
        bytes([0x90, 60, 100]),
        bytes([0x81, 60, 0]),
        bytes([0xB2, 7, 127]),
        bytes([0xC3, 12]),
        bytes([0xD4, 33]),
        bytes([0xA5, 61, 44]),
        bytes([0xE0, 0x00, 0x40]),
    ]


def test_pitch_bend_splits_value(transport, caplog: pytest.LogCaptureFixture) -> None:
    output = MidiOutput(transport=transport)
    with caplog.at_level(logging.ERROR):
        output.send_pitch_bend(1, 12345)
    assert transport.sent == [bytes([0xE0, 12345 & 0x7F, (12345 >> 7) & 0x7F])]
    assert _events(caplog) == []


def test_pitch_bend_out_of_range_still_sent(transport, caplog: pytest.LogCaptureFixture) -> None:
    output = MidiOutput(transport=transport)
    with caplog.at_level(logging.ERROR):
        output.send_pitch_bend(1, 16384 + 5)
    assert transport.sent == [bytes([0xE0, 5, 0])]
    assert _events(caplog) == [{"event": "pitch_bend_out_of_range", "value": 16389, "limit": 16384}]


def test_send_while_closed_reaches_transport(transport) -> None:
    output = MidiOutput(transport=transport)
    output.send_note_on(1, 60, 100)
    assert transport.sent == [bytes([0x90, 60, 100])]


def test_send_message_is_raw(transport) -> None:
    output = MidiOutput(transport=transport)
    output.send_message([0xF8, 0x01])
    assert transport.sent == [bytes([0xF8, 0x01])]


def test_port_name_transport_error_returns_empty(transport, monkeypatch: pytest.MonkeyPatch) -> None:
    def raise_error(index: int) -> str:
        raise TransportError("can't convert negative value to unsigned int")

    monkeypatch.setattr(transport, "port_name", raise_error)
    assert MidiOutput(transport=transport).port_name(-1) == ""


def test_destroying_connection_closes_port(transport) -> None:
    output = MidiOutput(transport=transport)
    assert output.open(1)
    del output
    gc.collect()
    assert transport.opened is None


def test_failed_construction_is_safe_to_collect() -> None:
    with pytest.raises(ValueError, match="Unknown MIDI backend"):
        MidiOutput(backend="coremidi")
    gc.collect()

    # an instance whose __init__ never ran has no transport to close
    MidiOutput.__new__(MidiOutput).__del__()
