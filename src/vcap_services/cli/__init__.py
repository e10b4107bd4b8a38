"""vcap-services command line."""

from __future__ import annotations

import argparse
from typing import Sequence

from vcap_services.cli.commands import handle_command, register_parsers
from vcap_services.errors import main_with_error_handling
from vcap_services.logging import bind_context, configure_logging
from vcap_services.settings import get_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vcap-services",
        description="Resolve service credentials from the platform environment",
    )
    parser.add_argument(
        "--verbose",
        dest="debug",
        action="store_true",
        help="Log resolution details to stderr",
    )
    subparsers = parser.add_subparsers(dest="command")
    register_parsers(subparsers)
    return parser


@main_with_error_handling()
def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.debug else get_settings().log_level)
    bind_context(command=args.command).debug("command_started")
    return handle_command(args)


__all__ = ["build_parser", "main"]
