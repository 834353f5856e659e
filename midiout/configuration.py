"""Configuration loading and dataclasses for the midiout command line."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .transport import BACKENDS


@dataclass(frozen=True)
class OutputConfig:
    display_name: str = ""
    backend: str = "rtmidi"
    port: Optional[int] = 0
    virtual_name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(f"output.backend must be one of {BACKENDS}, got {self.backend!r}")


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    verbose: bool = False


@dataclass(frozen=True)
class AppConfig:
    output: OutputConfig
    logging: LoggingConfig


def load_config(path: Path) -> AppConfig:
    """Load configuration from a YAML file."""
    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    return AppConfig(
        output=_parse_output(raw.get("output", {})),
        logging=_parse_logging(raw.get("logging", {})),
    )


def _parse_output(raw: Any) -> OutputConfig:
    if not isinstance(raw, dict):
        raw = {}
    port = raw.get("port", 0)
    virtual_name = raw.get("virtual_name")
    return OutputConfig(
        display_name=str(raw.get("display_name", "")),
        backend=str(raw.get("backend", "rtmidi")),
        port=int(port) if port is not None else None,
        virtual_name=str(virtual_name) if virtual_name else None,
    )


def _parse_logging(raw: Any) -> LoggingConfig:
    if not isinstance(raw, dict):
        raw = {}
    return LoggingConfig(
        level=str(raw.get("level", "INFO")),
        verbose=bool(raw.get("verbose", False)),
    )


def load_default_config() -> AppConfig:
    """Load the default config.yaml shipped with the package."""
    path = Path(__file__).resolve().parent / "config.yaml"
    return load_config(path)


__all__ = [
    "AppConfig",
    "LoggingConfig",
    "OutputConfig",
    "load_config",
    "load_default_config",
]
