"""Command-line entry point for sending MIDI messages to an output port."""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Iterable, Optional

from .configuration import AppConfig, load_config, load_default_config
from .connection import MidiOutput
from .diagnostics import set_verbose_logging
from .messages import PITCH_BEND_CENTER
from .transport import BACKENDS

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send MIDI channel-voice messages to an output port.")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration YAML. Defaults to bundled config.yaml if omitted.",
    )
    parser.add_argument("--port", type=int, default=None, help="Output port index")
    parser.add_argument("--virtual", default=None, help="Open a virtual port with this name instead")
    parser.add_argument("--backend", choices=BACKENDS, default=None, help="MIDI backend")
    parser.add_argument("--verbose", action="store_true", help="Log port open/close events")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List available output ports")

    note = sub.add_parser("note", help="Send a note on, wait, then a note off")
    note.add_argument("note", type=int)
    note.add_argument("--channel", type=int, default=1)
    note.add_argument("--velocity", type=int, default=64)
    note.add_argument("--duration", type=float, default=0.5, help="Seconds to hold the note")

    cc = sub.add_parser("cc", help="Send a control change")
    cc.add_argument("control", type=int)
    cc.add_argument("value", type=int)
    cc.add_argument("--channel", type=int, default=1)

    program = sub.add_parser("program", help="Send a program change")
    program.add_argument("value", type=int)
    program.add_argument("--channel", type=int, default=1)

    bend = sub.add_parser("bend", help="Send a 14-bit pitch bend (0-16383)")
    bend.add_argument(
        "value", type=int, nargs="?", default=PITCH_BEND_CENTER, help="Bend value, defaults to centre"
    )
    bend.add_argument("--channel", type=int, default=1)

    return parser.parse_args(list(argv) if argv is not None else None)


def open_target(output: MidiOutput, config: AppConfig, args: argparse.Namespace) -> bool:
    """Open the port selected on the command line, falling back to the config."""
    if args.virtual:
        return output.open_virtual(args.virtual)
    if args.port is not None:
        return output.open(args.port)
    if config.output.virtual_name:
        return output.open_virtual(config.output.virtual_name)
    if config.output.port is None:
        LOGGER.error("No output port configured; pass --port or --virtual")
        return False
    return output.open(config.output.port)


def run(output: MidiOutput, config: AppConfig, args: argparse.Namespace) -> int:
    if args.command == "list":
        for index, name in enumerate(output.list_ports()):
            print(f"{index}: {name}")
        return 0

    if not open_target(output, config, args):
        return 1

    if args.command == "note":
        output.send_note_on(args.channel, args.note, args.velocity)
        try:
            time.sleep(max(0.0, args.duration))
        finally:
            output.send_note_off(args.channel, args.note, 0)
    elif args.command == "cc":
        output.send_control_change(args.channel, args.control, args.value)
    elif args.command == "program":
        output.send_program_change(args.channel, args.value)
    elif args.command == "bend":
        output.send_pitch_bend(args.channel, args.value)
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    config = load_config(args.config) if args.config else load_default_config()
    logging.basicConfig(level=getattr(logging, config.logging.level.upper(), logging.INFO))
    set_verbose_logging(args.verbose or config.logging.verbose)

    backend = args.backend or config.output.backend
    try:
        with MidiOutput(config.output.display_name, backend=backend) as output:
            return run(output, config, args)
    except KeyboardInterrupt:
        LOGGER.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
