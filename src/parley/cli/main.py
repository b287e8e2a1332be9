#!/usr/bin/env python3
"""
Parley CLI - inspect and edit privacy settings.

Commands:
  parley show <key>                     Show level and exception summaries
  parley set <key> [--level L] [--allow ID ...] [--disallow ID ...]
                                        Run one edit session and commit it

Peer ids are signed: positive ids are users, negative ids are groups.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from ..core import defaults
from ..core.exceptions import ParleyException
from ..core.logging import configure_logging
from ..privacy import (
    ControllerState,
    ExceptionCategory,
    LifecycleSignal,
    PrivacyKey,
    SectionOptions,
    SettingController,
    StaticPeerPicker,
    VisibilityLevel,
    encode_rules,
    hydrate_rules,
)
from ..transport import TransportConfig, get_transport
from ..transport.adapter import RuleTransport, TransportError

logger = logging.getLogger(__name__)


def build_transport(args: argparse.Namespace) -> RuleTransport:
    """Create the transport selected on the command line."""
    config = TransportConfig.from_env()
    if args.backend:
        config.backend = args.backend
    if args.url:
        config.base_url = args.url
    if args.timeout is not None:
        config.request_timeout = args.timeout
    logger.debug(f"Using {config.backend} transport")
    if config.backend == "memory":
        print(
            "Warning: the memory backend keeps rules in this process only and nothing is saved. "
            "Pass --backend http or set PARLEY_TRANSPORT=http to use a server.",
            file=sys.stderr,
        )
    return get_transport(config)


# ============================================================================
# SHOW Command
# ============================================================================

async def _show(args: argparse.Namespace, transport: RuleTransport) -> int:
    key = PrivacyKey.parse(args.key)
    rules = await transport.fetch_rules(key)

    if args.json:
        print(json.dumps({"key": key.value, "rules": encode_rules(rules)}, indent=2))
        return 0

    result = hydrate_rules(rules)
    print(f"{key.value}: {result.setting.level.name.lower()}")
    for category in ExceptionCategory:
        visible = result.setting.visible[category]
        marker = "" if visible else " (hidden)"
        print(f"  {category.value}: {result.summary(category).describe()}{marker}")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Print the current privacy setting for a key."""
    transport = build_transport(args)
    try:
        return asyncio.run(_show(args, transport))
    except ParleyException as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


# ============================================================================
# SET Command
# ============================================================================

async def _set(args: argparse.Namespace, transport: RuleTransport) -> int:
    closed = LifecycleSignal()
    controller = SettingController(
        SectionOptions(key=PrivacyKey.parse(args.key), no_exceptions=args.no_exceptions),
        transport,
        closed,
    )
    controller.start()

    if not await controller.wait_ready():
        print(f"Error: could not load privacy rules for {controller.key.value}", file=sys.stderr)
        closed.emit()
        return 1

    if args.level:
        controller.set_level(args.level)
    if args.allow is not None:
        await controller.pick_exceptions(ExceptionCategory.ALLOW, StaticPeerPicker(args.allow))
    if args.disallow is not None:
        await controller.pick_exceptions(ExceptionCategory.DISALLOW, StaticPeerPicker(args.disallow))

    if args.dry_run:
        print(json.dumps(encode_rules(controller.compile()), indent=2))
        return 0

    closed.emit()
    if controller.state is not ControllerState.COMMITTED or controller.write_task is None:
        print("Error: nothing was committed", file=sys.stderr)
        return 1

    try:
        await controller.write_task
    except TransportError as e:
        print(f"Error: write failed: {e}", file=sys.stderr)
        return 1

    print(json.dumps(encode_rules(controller.committed_rules or []), indent=2))
    return 0


def cmd_set(args: argparse.Namespace) -> int:
    """Edit a privacy setting and commit it."""
    transport = build_transport(args)
    try:
        return asyncio.run(_set(args, transport))
    except ParleyException as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


# ============================================================================
# Main
# ============================================================================

def app() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="parley",
        description="Inspect and edit messaging privacy settings",
    )
    parser.add_argument("--backend", help=f"Transport backend (default: {defaults.DEFAULT_TRANSPORT})")
    parser.add_argument("--url", help="Base URL for the http backend")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("--log-level", default=None, help="Logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    keys = [key.value for key in PrivacyKey]
    levels = [level.name.lower() for level in VisibilityLevel]

    show_parser = subparsers.add_parser("show", help="Show a privacy setting")
    show_parser.add_argument("key", choices=keys)
    show_parser.add_argument("--json", action="store_true", help="Print wire rules as JSON")
    show_parser.set_defaults(func=cmd_show)

    set_parser = subparsers.add_parser("set", help="Edit and commit a privacy setting")
    set_parser.add_argument("key", choices=keys)
    set_parser.add_argument("--level", choices=levels)
    set_parser.add_argument("--allow", type=int, nargs="*", metavar="PEER_ID", help="Replace the allow list")
    set_parser.add_argument("--disallow", type=int, nargs="*", metavar="PEER_ID", help="Replace the disallow list")
    set_parser.add_argument("--no-exceptions", action="store_true", help="Edit the base level only")
    set_parser.add_argument("--dry-run", action="store_true", help="Print the rules without writing them")
    set_parser.set_defaults(func=cmd_set)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = app()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
