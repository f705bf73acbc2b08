"""Unit tests for CLI commands."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_logging():
    with patch("snack.backend.core.logging.setup_logging"):
        yield


class TestHelp:
    """Tests for command group help output."""

    @pytest.mark.parametrize("group", ["server", "db", "ops", "system"])
    def test_group_help(self, group: str) -> None:
        result = runner.invoke(app, [group, "--help"])
        assert result.exit_code == 0

    def test_ops_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["ops", "--help"])
        for command in ("check-save-counts", "fix-public-ids", "normalize-positions", "table-counts"):
            assert command in result.stdout


class TestSystemCommands:
    """Tests for system commands."""

    def test_system_info(self, mock_app_config) -> None:
        mock_app_config.application = SimpleNamespace(
            name="Snack API",
            version="1.0.0",
            description="Link lists",
            environment="test",
        )
        mock_app_config.features = MagicMock(
            model_dump=MagicMock(return_value={"payments_enabled": True, "emails_enabled": False}),
        )

        with patch("snack.backend.core.config.get_app_config", return_value=mock_app_config):
            result = runner.invoke(app, ["system", "info"])

        assert result.exit_code == 0
        assert "Application Info" in result.stdout
        assert "payments_enabled" in result.stdout
        assert "emails_enabled" not in result.stdout

    def test_unknown_config_section(self) -> None:
        with patch("snack.backend.core.config.get_app_config", return_value=MagicMock()):
            result = runner.invoke(app, ["system", "config", "nope"])

        assert result.exit_code == 1
        assert "Unknown section" in result.stdout

    def test_secrets_never_printed(self) -> None:
        settings = SimpleNamespace(
            db_password="hunter2",
            jwt_secret="x" * 40,
            stripe_secret_key="",
            stripe_webhook_secret="",
            resend_api_key="re_live_key",
            openai_api_key="sk-live-openai",
            revenuecat_webhook_secret="rc-live-secret",
        )

        with patch("snack.backend.core.config.get_settings", return_value=settings):
            result = runner.invoke(app, ["system", "secrets"])

        assert result.exit_code == 0
        assert "hunter2" not in result.stdout
        assert "re_live_key" not in result.stdout
        assert "sk-live-openai" not in result.stdout
        assert "rc-live-secret" not in result.stdout
        assert "revenuecat_webhook_secret" in result.stdout
        assert "stripe_secret_key" in result.stdout

    def test_health_all_ok(self) -> None:
        checks = [("YAML configuration", lambda: "Snack API"), ("Database", lambda: "3ms")]

        with patch("snack.cli.commands.system.HEALTH_CHECKS", checks):
            result = runner.invoke(app, ["system", "health"])

        assert result.exit_code == 0
        assert "failed" not in result.stdout

    def test_health_failure_exits_nonzero(self) -> None:
        def broken() -> str:
            raise RuntimeError("refused")

        checks = [("YAML configuration", lambda: "Snack API"), ("Database", broken)]

        with patch("snack.cli.commands.system.HEALTH_CHECKS", checks):
            result = runner.invoke(app, ["system", "health"])

        assert result.exit_code == 1
        assert "refused" in result.stdout


class TestOpsCommands:
    """Tests for data maintenance commands. The database layer is patched out."""

    def test_save_counts_clean(self) -> None:
        with patch("snack.cli.commands.ops._run", return_value=[]):
            result = runner.invoke(app, ["ops", "check-save-counts"])

        assert result.exit_code == 0
        assert "All save counts match" in result.stdout

    def test_save_counts_drift_without_fix(self) -> None:
        drifted = [{"public_id": "Ab3dEf9k", "title": "Ramen", "stored": 5, "actual": 3}]

        with patch("snack.cli.commands.ops._run", return_value=drifted) as run:
            result = runner.invoke(app, ["ops", "check-save-counts"])

        assert result.exit_code == 0
        assert "Ab3dEf9k" in result.stdout
        assert "--fix" in result.stdout
        assert run.call_args.kwargs["commit"] is False

    def test_save_counts_fix_commits(self) -> None:
        drifted = [{"public_id": "Ab3dEf9k", "title": "Ramen", "stored": 5, "actual": 3}]

        with patch("snack.cli.commands.ops._run", return_value=drifted) as run:
            result = runner.invoke(app, ["ops", "check-save-counts", "--fix"])

        assert result.exit_code == 0
        assert "Fixed 1 list(s)" in result.stdout
        assert run.call_args.kwargs["commit"] is True

    def test_fix_public_ids(self) -> None:
        with patch("snack.cli.commands.ops._run", return_value=[("legacy-id", "Ab3dEf9k")]):
            result = runner.invoke(app, ["ops", "fix-public-ids"])

        assert result.exit_code == 0
        assert "legacy-id" in result.stdout

    def test_normalize_positions_nothing_to_do(self) -> None:
        with patch("snack.cli.commands.ops._run", return_value={"list-1": 0}):
            result = runner.invoke(app, ["ops", "normalize-positions"])

        assert "contiguous" in result.stdout

    def test_table_counts(self) -> None:
        with patch("snack.cli.commands.ops._run", return_value={"users": 2, "lists": 5}):
            result = runner.invoke(app, ["ops", "table-counts"])

        assert result.exit_code == 0
        assert "lists" in result.stdout

    def test_database_error_exits_nonzero(self) -> None:
        async def failing(*args, **kwargs):
            raise RuntimeError("connection refused")

        with patch("snack.cli.commands.ops._with_service", failing):
            result = runner.invoke(app, ["ops", "table-counts"])

        assert result.exit_code == 1
        assert "connection refused" in result.stdout


class TestDbCommands:
    """Tests for migration commands. Alembic's command API is patched out."""

    def test_upgrade_defaults_to_head(self) -> None:
        with patch("snack.cli.commands.db.command.upgrade") as upgrade:
            result = runner.invoke(app, ["db", "upgrade"])

        assert result.exit_code == 0
        config, revision = upgrade.call_args.args
        assert revision == "head"
        assert config.config_file_name.endswith("alembic.ini")
        assert upgrade.call_args.kwargs == {"sql": False}

    def test_generate_autogenerates(self) -> None:
        with patch("snack.cli.commands.db.command.revision") as revision:
            result = runner.invoke(app, ["db", "generate", "-m", "add list tags"])

        assert result.exit_code == 0
        assert revision.call_args.kwargs == {"message": "add list tags", "autogenerate": True}

    def test_alembic_error_exits_nonzero(self) -> None:
        from alembic.util import CommandError

        with patch("snack.cli.commands.db.command.current", side_effect=CommandError("Can't locate revision")):
            result = runner.invoke(app, ["db", "current"])

        assert result.exit_code == 1
        assert "Can't locate revision" in result.stdout


class TestServerCommand:

    def test_start_uses_configured_host_and_port(self, mock_app_config) -> None:
        mock_app_config.application = SimpleNamespace(server=SimpleNamespace(host="127.0.0.1", port=8000))

        with patch("snack.backend.core.config.get_app_config", return_value=mock_app_config), \
             patch("snack.cli.commands.server.uvicorn.run") as run:
            result = runner.invoke(app, ["server", "start", "--port", "9000"])

        assert result.exit_code == 0
        assert run.call_args.args == ("snack.backend.main:app",)
        assert run.call_args.kwargs["host"] == "127.0.0.1"
        assert run.call_args.kwargs["port"] == 9000
        assert run.call_args.kwargs["workers"] == 1
