"""Dataclass modelling the state of an output connection."""

from __future__ import annotations

from dataclasses import dataclass

NO_PORT = -1


@dataclass
class ConnectionState:
    """Which destination, if any, a connection is attached to.

    ``is_virtual`` implies ``port_index == NO_PORT``.
    """

    port_index: int = NO_PORT
    port_name: str = ""
    is_virtual: bool = False

    @property
    def is_open(self) -> bool:
        return self.port_index > NO_PORT or self.is_virtual

    def reset(self) -> None:
        self.port_index = NO_PORT
        self.port_name = ""
        self.is_virtual = False
