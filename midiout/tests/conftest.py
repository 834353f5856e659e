"""Shared fixtures: an in-memory transport standing in for the MIDI system."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

import pytest

from midiout.diagnostics import reset_logging_options
from midiout.transport import TransportError


@dataclass
class FakeTransport:
    ports: List[str] = field(default_factory=list)
    supports_virtual: bool = True
    opened: Optional[Union[int, str]] = None
    labels: List[str] = field(default_factory=list)
    sent: List[bytes] = field(default_factory=list)
    close_calls: int = 0

    def port_count(self) -> int:
        return len(self.ports)

    def port_name(self, index: int) -> str:
        if 0 <= index < len(self.ports):
            return self.ports[index]
        return ""

    def open_port(self, index: int, label: str) -> None:
        if self.opened is not None:
            raise TransportError("a port is already open")
        if not 0 <= index < len(self.ports):
            raise TransportError(f"invalid port number {index}")
        self.opened = index
        self.labels.append(label)

    def open_virtual_port(self, name: str) -> None:
        if self.opened is not None:
            raise TransportError("a port is already open")
        if not self.supports_virtual:
            raise TransportError("virtual ports are not supported")
        self.opened = name

    def close_port(self) -> None:
        self.opened = None
        self.close_calls += 1

    def send(self, data) -> None:
        self.sent.append(bytes(data))


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport(ports=["Synth A", "Synth B"])


@pytest.fixture(autouse=True)
def _default_logging_options():
    reset_logging_options()
    yield
    reset_logging_options()
