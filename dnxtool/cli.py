"""Command-line interface for the DnX protocol tool."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

from dnxtool.events import (
    AckReceived,
    Complete,
    DeviceConnected,
    DeviceDisconnected,
    DnxEvent,
    DnxObserver,
    ErrorOccurred,
    Log,
    LogLevel,
    Packet,
    PhaseChanged,
    Progress,
)
from dnxtool.ifwi_version import IfwiError, get_image_fw_rev

logger = logging.getLogger("dnxtool")


class CliObserver(DnxObserver):
    """Prints session progress to a text stream (stderr by default)."""

    def __init__(self, verbose: bool = False, stream: Optional[TextIO] = None) -> None:
        self.verbose = verbose
        self.stream = stream

    def _write(self, text: str, end: str = "\n") -> None:
        out = self.stream if self.stream is not None else sys.stderr
        out.write(text + end)

    def on_event(self, event: DnxEvent) -> None:
        match event:
            case DeviceConnected(vid=vid, pid=pid):
                self._write(f"✓ Device connected: {vid:04X}:{pid:04X}")
            case DeviceDisconnected():
                self._write("✗ Device disconnected")
            case PhaseChanged(from_phase=src, to_phase=dst):
                if self.verbose:
                    self._write(f"→ Phase: {src} → {dst}")
            case Progress():
                self._write(
                    f"\r[{event.percent():>3}%] {event.phase}: {event.operation}",
                    end="",
                )
                if event.current == event.total:
                    self._write("")
            case Log(level=level, message=message):
                if level is LogLevel.ERROR:
                    self._write(f"ERROR: {message}")
                elif level is LogLevel.WARN:
                    self._write(f"WARN: {message}")
                elif self.verbose:
                    self._write(f"{level.name}: {message}")
            case AckReceived(ack=ack):
                if self.verbose:
                    self._write(f"← ACK: {ack}")
            case ErrorOccurred(code=code, message=message):
                self._write(f"✗ Error [{code}]: {message}")
            case Complete():
                self._write("✓ Operation complete!")
            case Packet():
                pass


def run_ifwi_version(file: str, as_json: bool, markdown: bool) -> None:
    """Print the version information of the IFWI image at ``file``."""
    path = Path(file)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file}")
    versions = get_image_fw_rev(path.read_bytes())
    if as_json:
        print(versions.to_json())
    elif markdown:
        print(versions.to_markdown())
    else:
        versions.dump()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dnx", description="Intel DnX Protocol Tool")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    commands = parser.add_subparsers(dest="command", required=True)
    ifwi = commands.add_parser(
        "ifwi-version", help="Dump IFWI version information from firmware image"
    )
    ifwi.add_argument("file", help="Path to IFWI/DnX image file")
    ifwi.add_argument("--json", action="store_true", help="Output in JSON format")
    ifwi.add_argument(
        "--markdown", action="store_true", help="Output in markdown format"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line; returns the process exit status."""
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.INFO,
    )
    logger.info("DnX Tool starting...")

    try:
        if args.command == "ifwi-version":
            run_ifwi_version(args.file, args.json, args.markdown)
    except (IfwiError, OSError) as exc:
        logger.error("Command failed: %s", exc)
        print(f"✗ FAILED: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())