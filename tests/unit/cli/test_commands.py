"""Unit tests for CLI commands."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from backupctl.cli.main import app
from backupctl.cli.router import CommandKind
from backupctl.cli.runtime import CommandInterrupted

runner = CliRunner()


@pytest.fixture
def dispatch():
    """Replace the router so no command reaches the network."""
    with patch("backupctl.cli.invocation.dispatch", new=AsyncMock(return_value=0)) as fake:
        yield fake


def dispatched(fake: AsyncMock):
    """(kind, settings) of the single dispatched command."""
    fake.assert_awaited_once()
    kind, settings = fake.await_args.args[:2]
    return kind, settings


class TestHelp:
    """Tests for help output."""

    def test_main_help(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "list" in result.stdout
        assert "run" in result.stdout
        assert "version" in result.stdout

    def test_list_help(self) -> None:
        result = runner.invoke(app, ["list", "--help"])
        assert result.exit_code == 0
        assert "nodes" in result.stdout
        assert "storage" in result.stdout

    def test_run_backup_help(self) -> None:
        result = runner.invoke(app, ["run", "backup", "--help"])
        assert result.exit_code == 0
        assert "--backup-type" in result.stdout


class TestVersion:
    def test_version(self) -> None:
        """version renders build info without a coordinator."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "Version" in result.stdout
        assert "Python version" in result.stdout


class TestGlobalOptions:
    """Global flags, environment and config file feed the resolved settings."""

    def test_defaults(self, dispatch) -> None:
        result = runner.invoke(app, ["list", "nodes"])
        assert result.exit_code == 0

        kind, settings = dispatched(dispatch)
        assert kind is CommandKind.LIST_NODES
        assert settings.server_address == "127.0.0.1:10001"
        assert settings.verbose is False

    def test_flag_beats_environment(self, dispatch, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BACKUPCTL_SERVER_ADDRESS", "env:1")
        result = runner.invoke(app, ["--server-address", "flag:2", "list", "backups"])
        assert result.exit_code == 0
        assert dispatched(dispatch)[1].server_address == "flag:2"

    def test_environment_used_without_flag(self, dispatch, monkeypatch: pytest.MonkeyPatch) -> None:
        """A flag left at its default does not mask the environment."""
        monkeypatch.setenv("BACKUPCTL_SERVER_ADDRESS", "env:1")
        runner.invoke(app, ["list", "backups"])
        assert dispatched(dispatch)[1].server_address == "env:1"

    def test_config_file(self, dispatch, tmp_path: Path) -> None:
        config = tmp_path / "backupctl.yaml"
        config.write_text("api_token: file-token\ntls: false\n", encoding="utf-8")

        result = runner.invoke(app, ["-c", str(config), "list", "storage"])

        assert result.exit_code == 0
        assert dispatched(dispatch)[1].api_token == "file-token"

    def test_missing_config_file(self, dispatch, tmp_path: Path) -> None:
        result = runner.invoke(app, ["-c", str(tmp_path / "missing.yaml"), "list", "nodes"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output
        dispatch.assert_not_awaited()

    def test_debug_sets_log_level(self, dispatch) -> None:
        runner.invoke(app, ["--debug", "list", "nodes"])
        assert dispatched(dispatch)[1].log_level == "DEBUG"

    def test_server_compressor(self, dispatch, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BACKUPCTL_SERVER_COMPRESSOR", "none")
        result = runner.invoke(app, ["--server-compressor", "deflate", "list", "nodes"])
        assert result.exit_code == 0

        compressor = dispatched(dispatch)[1].server_compressor
        assert compressor == "deflate"
        assert type(compressor) is str

    def test_invalid_server_compressor(self, dispatch) -> None:
        result = runner.invoke(app, ["--server-compressor", "brotli", "list", "nodes"])
        assert result.exit_code == 2
        dispatch.assert_not_awaited()

    def test_verbose(self, dispatch) -> None:
        runner.invoke(app, ["list", "nodes", "--verbose"])
        assert dispatched(dispatch)[1].verbose is True


class TestRunBackup:
    """Tests for `run backup`."""

    def test_flags(self, dispatch) -> None:
        result = runner.invoke(
            app,
            [
                "run", "backup",
                "--backup-type", "hot",
                "--compression-algorithm", "gzip",
                "--description", "nightly",
                "--storage", "s3-main",
            ],
        )
        assert result.exit_code == 0

        kind, settings = dispatched(dispatch)
        assert kind is CommandKind.RUN_BACKUP
        assert settings.backup_type == "hot"
        assert settings.compression_algorithm == "gzip"
        assert settings.description == "nightly"
        assert settings.storage_name == "s3-main"

    def test_missing_description(self, dispatch) -> None:
        result = runner.invoke(app, ["run", "backup", "--storage", "s3-main"])
        assert result.exit_code == 2
        assert "--description" in result.output
        dispatch.assert_not_awaited()

    def test_missing_storage(self, dispatch) -> None:
        """An unresolved required value is a usage error."""
        result = runner.invoke(app, ["run", "backup", "--description", "nightly"])
        assert result.exit_code == 2
        assert "--storage" in result.output
        dispatch.assert_not_awaited()

    def test_global_and_command_flags(self, dispatch, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BACKUPCTL_SERVER_ADDRESS", "env:1")
        result = runner.invoke(
            app,
            ["-s", "db9:10001", "run", "backup", "--description", "nightly", "--storage", "s3-main"],
        )
        assert result.exit_code == 0

        settings = dispatched(dispatch)[1]
        assert settings.server_address == "db9:10001"
        assert settings.storage_name == "s3-main"

    def test_storage_from_environment(self, dispatch, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BACKUPCTL_STORAGE", "fs")
        result = runner.invoke(app, ["run", "backup", "--description", "nightly"])
        assert result.exit_code == 0
        assert dispatched(dispatch)[1].storage_name == "fs"

    def test_failure_exit_code(self, dispatch) -> None:
        dispatch.return_value = 1
        result = runner.invoke(app, ["run", "backup", "--description", "d", "--storage", "s"])
        assert result.exit_code == 1

    def test_interrupted(self, dispatch) -> None:
        dispatch.side_effect = CommandInterrupted("Interrupted")
        result = runner.invoke(app, ["run", "backup", "--description", "d", "--storage", "s"])
        assert result.exit_code == 130


class TestRunRestore:
    """Tests for `run restore`."""

    def test_arguments(self, dispatch) -> None:
        result = runner.invoke(
            app,
            ["run", "restore", "2024-05-01T00:00:00Z.json", "--storage", "fs", "--skip-users-and-roles"],
        )
        assert result.exit_code == 0

        kind, settings = dispatched(dispatch)
        assert kind is CommandKind.RUN_RESTORE
        assert settings.restore_metadata_file == "2024-05-01T00:00:00Z.json"
        assert settings.skip_users_and_roles is True
        assert settings.storage_name == "fs"

    def test_missing_metadata_file(self, dispatch) -> None:
        result = runner.invoke(app, ["run", "restore", "--storage", "fs"])
        assert result.exit_code == 2
        dispatch.assert_not_awaited()

    def test_missing_storage(self, dispatch) -> None:
        result = runner.invoke(app, ["run", "restore", "a.json"])
        assert result.exit_code == 2
        assert "--storage" in result.output
