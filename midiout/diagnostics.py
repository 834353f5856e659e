"""The shared verbose-logging switch for output connections."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class LoggingOptions:
    """Controls which lifecycle events a connection reports.

    Failures are always logged; ``verbose`` adds successful open/close events.
    """

    verbose: bool = False


# Shared by every MidiOutput constructed without its own options.
DEFAULT_LOGGING = LoggingOptions()


def set_verbose_logging(enabled: bool) -> None:
    """Toggle verbose lifecycle logging for all connections using the default options."""
    DEFAULT_LOGGING.verbose = bool(enabled)


def reset_logging_options() -> None:
    DEFAULT_LOGGING.verbose = False


__all__ = [
    "DEFAULT_LOGGING",
    "LoggingOptions",
    "reset_logging_options",
    "set_verbose_logging",
]
