#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import os
import sys

from .commands.base import describe_error
from .commands.factory import CommandFactory
from .core.config_loader import CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE
from .core.docker_runtime import DEFAULT_STEP_TIMEOUT
from .core.errors import ConfigError

DEFAULT_BACKUP_DIR = "/var/backups/odoo"
BACKUP_DIR_ENV_VAR = "ODOO_BACKUP_DIR"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _positive_seconds(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid timeout: {value}") from None
    if seconds <= 0:
        raise argparse.ArgumentTypeError("timeout must be greater than zero")
    return seconds


class CliApplication:
    def __init__(self, factory: CommandFactory | None = None) -> None:
        self._factory = factory or CommandFactory()

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="odoo-backup",
            description="Automate Odoo backups inside Docker containers",
        )
        parser.add_argument(
            "-c",
            "--config",
            default=os.environ.get(CONFIG_ENV_VAR, str(DEFAULT_CONFIG_FILE)),
            help="Path to the databases configuration file "
            f"(default: ${CONFIG_ENV_VAR} or {DEFAULT_CONFIG_FILE})",
        )
        parser.add_argument(
            "-b",
            "--backup-dir",
            default=os.environ.get(BACKUP_DIR_ENV_VAR, DEFAULT_BACKUP_DIR),
            help="Host directory to store backups "
            f"(default: ${BACKUP_DIR_ENV_VAR} or {DEFAULT_BACKUP_DIR})",
        )
        parser.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="Enable debug logging and show underlying error causes",
        )
        parser.add_argument(
            "--timeout",
            type=_positive_seconds,
            default=DEFAULT_STEP_TIMEOUT,
            help=f"Deadline in seconds for each backup step (default: {DEFAULT_STEP_TIMEOUT:g})",
        )

        subparsers = parser.add_subparsers(dest="command", required=True)

        backup_parser = subparsers.add_parser(
            "backup",
            help="Run backups for all configured databases.",
        )
        backup_parser.add_argument(
            "--client",
            default=None,
            help="Backup only the client with this name.",
        )
        subparsers.add_parser("list", help="List all configured databases.")
        subparsers.add_parser("status", help="Check status of Docker containers.")
        clean_parser = subparsers.add_parser("clean", help="Clean old backup files.")
        clean_parser.add_argument(
            "--client",
            default=None,
            help="Clean backups for the client with this name.",
        )
        list_backups_parser = subparsers.add_parser(
            "list-backups",
            help="List existing backup files.",
        )
        list_backups_parser.add_argument(
            "--database",
            default=None,
            help="List backups for this database name only.",
        )
        return parser

    def run(self, argv: list[str] | None = None) -> int:
        args = self.build_parser().parse_args(argv)
        configure_logging(args.verbose)
        try:
            command = self._factory.create(args)
        except ConfigError as exc:
            lines = describe_error(exc, args.verbose)
            print(f"Configuration error: {lines[0]}", file=sys.stderr)
            for line in lines[1:]:
                print(f"  {line}", file=sys.stderr)
            return 1
        return command.run()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def main() -> int:
    return CliApplication().run()


if __name__ == "__main__":
    raise SystemExit(main())
