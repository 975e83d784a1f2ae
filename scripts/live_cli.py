#!/usr/bin/env python
"""Command-line control panel for the Live bridge.

Usage
-----
    # Watch every notification until Ctrl-C
    python scripts/live_cli.py monitor

    # Transport
    python scripts/live_cli.py play
    python scripts/live_cli.py tempo 128

    # Mixer (track ids as reported by the bridge)
    python scripts/live_cli.py volume 2 0.7
    python scripts/live_cli.py mute 2 on

    # Clips
    python scripts/live_cli.py fire 1 0

Connection settings come from LIVE_BRIDGE_* environment variables (a local
.env file is honoured); --host / --port override them.

Exit codes
----------
    0  — command sent
    1  — bridge not reachable within --timeout, or command dropped
    2  — invalid arguments
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

# Add project root to sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv  # noqa: E402

load_dotenv()

from ableton_bridge.context import LiveContext, build_context  # noqa: E402
from ableton_bridge.controller import LiveController  # noqa: E402
from core.ableton.events import Channel, ConnectionChanged, Notification  # noqa: E402
from core.ableton.validation import (  # noqa: E402
    validate_bpm,
    validate_pan,
    validate_track_id,
    validate_volume,
)
from core.config import BridgeConfig  # noqa: E402
from infrastructure.logging_config import configure_logging  # noqa: E402

logger = logging.getLogger("live_cli")

_ON_OFF = {"on": True, "off": False}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Control Ableton Live through the companion bridge")
    p.add_argument("--host", default=None, help="Bridge host (default: LIVE_BRIDGE_HOST or localhost)")
    p.add_argument("--port", type=int, default=None, help="Bridge port (default: LIVE_BRIDGE_PORT or 9001)")
    p.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        metavar="SECONDS",
        help="How long to wait for the bridge before giving up (default: 5.0s)",
    )
    p.add_argument("--verbose", action="store_true", help="Log at DEBUG level")

    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("monitor", help="Connect and print every state change until Ctrl-C")
    sub.add_parser("play", help="Start playback")
    sub.add_parser("stop", help="Stop playback")
    sub.add_parser("record", help="Start recording")

    tempo = sub.add_parser("tempo", help="Set the song tempo")
    tempo.add_argument("bpm")

    for name in ("volume", "pan"):
        cmd = sub.add_parser(name, help=f"Set a track's {name}")
        cmd.add_argument("track")
        cmd.add_argument("value")

    for name in ("mute", "solo"):
        cmd = sub.add_parser(name, help=f"Toggle a track's {name}")
        cmd.add_argument("track")
        cmd.add_argument("state", choices=sorted(_ON_OFF))

    for name in ("fire", "stop-clip"):
        cmd = sub.add_parser(name, help="Launch a clip" if name == "fire" else "Stop a clip")
        cmd.add_argument("track")
        cmd.add_argument("clip", type=int)

    return p.parse_args(argv)


def _config_from(args: argparse.Namespace) -> BridgeConfig:
    config = replace(BridgeConfig.from_env(), auto_connect=False)
    if args.host is not None:
        config = replace(config, host=args.host)
    if args.port is not None:
        config = replace(config, port=args.port)
    return config


def _wait_connected(ctx: LiveContext, timeout: float) -> bool:
    """Connect and block until CONNECTED or ``timeout`` elapses."""
    connected = threading.Event()

    def on_change(note: ConnectionChanged) -> None:
        if note.connected:
            connected.set()

    with ctx.bus.subscribe(Channel.CONNECTION_CHANGED, on_change):
        ctx.supervisor.connect()
        return connected.wait(timeout)


def _prepare_command(args: argparse.Namespace) -> Callable[[LiveController], bool]:
    """Validate the arguments up front.  Raises ``ValueError`` on bad input."""
    command = args.command

    if command == "play":
        return lambda c: c.play()
    if command == "stop":
        return lambda c: c.stop()
    if command == "record":
        return lambda c: c.record()
    if command == "tempo":
        bpm = validate_bpm(args.bpm)
        return lambda c: c.set_bpm(bpm)

    track_id = validate_track_id(args.track)
    if command == "volume":
        volume = validate_volume(args.value)
        return lambda c: c.set_track_volume(track_id, volume)
    if command == "pan":
        pan = validate_pan(args.value)
        return lambda c: c.set_track_pan(track_id, pan)
    if command == "mute":
        muted = _ON_OFF[args.state]
        return lambda c: c.set_track_mute(track_id, muted)
    if command == "solo":
        soloed = _ON_OFF[args.state]
        return lambda c: c.set_track_solo(track_id, soloed)

    clip = args.clip
    if clip < 0:
        raise ValueError(f"clip index must be non-negative, got {clip}")
    if command == "fire":
        return lambda c: c.trigger_clip(track_id, clip)
    return lambda c: c.stop_clip(track_id, clip)


def _print_notification(note: Notification) -> None:
    print(f"{note.channel.value:<20} {note}")


def _monitor(ctx: LiveContext) -> int:
    subs = [ctx.bus.subscribe(channel, _print_notification) for channel in Channel]
    ctx.supervisor.connect()
    stop = threading.Event()
    try:
        while not stop.wait(0.5):
            pass
    except KeyboardInterrupt:
        print()
    finally:
        for s in subs:
            s.dispose()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = _config_from(args)
        action = None if args.command == "monitor" else _prepare_command(args)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    ctx = build_context(config)
    ctx.start()
    try:
        if action is None:
            return _monitor(ctx)

        if not _wait_connected(ctx, args.timeout):
            detail = ctx.supervisor.last_error or "no answer"
            print(f"error: Live bridge at {config.ws_url} not reachable ({detail})", file=sys.stderr)
            return 1

        if not action(ctx.controller):
            print("error: command dropped, connection lost", file=sys.stderr)
            return 1
        logger.info("%s sent", args.command)
        return 0
    finally:
        ctx.close()


if __name__ == "__main__":
    sys.exit(main())
