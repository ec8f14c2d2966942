"""Command line entry point for the dnet terminal client."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

from dnet.tui.app import ExitCode
from dnet.tui.channel import Mailbox
from dnet.tui.config import LOG_LEVELS, find_settings_file, load_settings
from dnet.tui.errors import ConfigError, ConfigurationFault
from dnet.tui.log import configure_logging

logger = logging.getLogger("dnet.tui")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="dnet-tui",
        description="dnet terminal client",
    )
    parser.add_argument("--config", help="Settings file (default: ./dnet-tui.json or ~/.dnet/tui.json)")
    parser.add_argument("--tick-ms", type=int, help="Tick interval in milliseconds")
    parser.add_argument("--log-file", help="Log file (default: ~/.dnet/tui.log)")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Log level")
    parser.add_argument("--strict", action="store_true", help="Treat undeclared view transitions as fatal")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(int(ExitCode.CONFIGURATION_FAULT))

    if args.tick_ms is not None and args.tick_ms <= 0:
        print("Error: --tick-ms must be positive", file=sys.stderr)
        sys.exit(int(ExitCode.CONFIGURATION_FAULT))

    # Command line overrides apply to this run only and are never saved
    overrides: dict[str, object] = {}
    if args.tick_ms is not None:
        overrides["tick_interval_ms"] = args.tick_ms
    if args.log_file:
        overrides["log_file"] = args.log_file
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.strict:
        overrides["strict_transitions"] = True
    runtime = dataclasses.replace(settings, **overrides)

    log_path = configure_logging(runtime.log_file, runtime.log_level)
    settings_path = args.config or find_settings_file()

    from dnet.tui.windows import build_demo

    mailbox: Mailbox[str] = Mailbox(maxsize=256)
    try:
        app = build_demo(settings, settings_path=settings_path, mailbox=mailbox, runtime=runtime)
    except ConfigurationFault as e:
        logger.error("configuration fault: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(int(ExitCode.CONFIGURATION_FAULT))

    mailbox.post(f"logging to {log_path}")
    mailbox.post(f"api {runtime.api_url}")
    if settings_path:
        mailbox.post(f"settings from {settings_path}")

    code = app.run()
    mailbox.close()
    if code is not ExitCode.OK:
        # The terminal has been restored by now
        print(f"Error: {app.error} (see {log_path})", file=sys.stderr)
    sys.exit(int(code))


if __name__ == "__main__":
    main()
