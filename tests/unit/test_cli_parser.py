from __future__ import annotations

import runpy
import sys
from argparse import Namespace
from pathlib import Path

import pytest

import odoo_backup.cli as cli_module
import odoo_backup.commands.factory as factory_module
from odoo_backup.cli import CliApplication
from odoo_backup.core.errors import ConfigError


def test_build_parser_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ODOO_BACKUP_CONFIG", raising=False)
    monkeypatch.delenv("ODOO_BACKUP_DIR", raising=False)

    args = CliApplication().build_parser().parse_args(["backup"])

    assert args.command == "backup"
    assert args.client is None
    assert args.config == "/etc/odoo-backup/config.json"
    assert args.backup_dir == "/var/backups/odoo"
    assert args.verbose is False
    assert args.timeout == 600.0


def test_build_parser_reads_defaults_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ODOO_BACKUP_CONFIG", "/srv/odoo/config.json")
    monkeypatch.setenv("ODOO_BACKUP_DIR", "/srv/odoo/backups")

    args = CliApplication().build_parser().parse_args(["list"])

    assert args.config == "/srv/odoo/config.json"
    assert args.backup_dir == "/srv/odoo/backups"


@pytest.mark.parametrize(
    ("argv", "attribute", "expected"),
    [
        (["backup", "--client", "Acme"], "client", "Acme"),
        (["clean", "--client", "Acme"], "client", "Acme"),
        (["clean"], "client", None),
        (["list-backups", "--database", "acme"], "database", "acme"),
        (["list-backups"], "database", None),
    ],
)
def test_build_parser_subcommand_options(argv: list[str], attribute: str, expected: str | None) -> None:
    args = CliApplication().build_parser().parse_args(argv)

    assert getattr(args, attribute) == expected


def test_build_parser_global_flags() -> None:
    args = CliApplication().build_parser().parse_args(
        ["-c", "custom.json", "-b", "/tmp/backups", "-v", "--timeout", "30", "status"]
    )

    assert args.config == "custom.json"
    assert args.backup_dir == "/tmp/backups"
    assert args.verbose is True
    assert args.timeout == 30.0
    assert args.command == "status"


@pytest.mark.parametrize("value", ["0", "-5", "soon"])
def test_build_parser_rejects_bad_timeout(value: str) -> None:
    with pytest.raises(SystemExit):
        CliApplication().build_parser().parse_args(["--timeout", value, "status"])


def test_build_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        CliApplication().build_parser().parse_args([])


def test_run_invokes_factory_and_command() -> None:
    observed: dict[str, Namespace] = {}

    class FakeCommand:
        def run(self) -> int:
            return 9

    class FakeFactory:
        def create(self, args: Namespace) -> FakeCommand:
            observed["args"] = args
            return FakeCommand()

    app = CliApplication(FakeFactory())  # type: ignore[arg-type]

    result = app.run(["-c", "/tmp/config.json", "backup", "--client", "Acme"])

    assert result == 9
    assert observed["args"].config == "/tmp/config.json"
    assert observed["args"].client == "Acme"


def test_run_reports_config_errors(capsys: pytest.CaptureFixture[str]) -> None:
    class FailingFactory:
        def create(self, args: Namespace) -> None:
            raise ConfigError("Database 1 (Globex): url cannot be empty")

    app = CliApplication(FailingFactory())  # type: ignore[arg-type]

    result = app.run(["list"])

    assert result == 1
    assert "Configuration error: Database 1 (Globex): url cannot be empty" in capsys.readouterr().err


def test_main_runs_application(monkeypatch: pytest.MonkeyPatch) -> None:
    class AppStub:
        def run(self) -> int:
            return 13

    monkeypatch.setattr(cli_module, "CliApplication", AppStub)

    assert cli_module.main() == 13


def test_cli_module_main_guard_executes(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    observed: dict[str, str] = {}

    class FakeCommand:
        def run(self) -> int:
            return 0

    class FactorySpy:
        def create(self, args: Namespace) -> FakeCommand:
            observed["command"] = args.command
            return FakeCommand()

    monkeypatch.setattr(factory_module, "CommandFactory", FactorySpy)
    monkeypatch.setattr(sys, "argv", ["odoo-backup", "-c", str(tmp_path / "c.json"), "list"])
    monkeypatch.delitem(sys.modules, "odoo_backup.cli", raising=False)

    with pytest.raises(SystemExit) as exc:
        runpy.run_module("odoo_backup.cli", run_name="__main__")

    assert exc.value.code == 0
    assert observed == {"command": "list"}
