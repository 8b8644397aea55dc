"""Migration CLI commands."""

from pathlib import Path

from typer.testing import CliRunner

from src.cli import app

runner = CliRunner()


def _url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'cli.db'}"


def test_upgrade_then_status(tmp_path: Path):
    url = _url(tmp_path)

    result = runner.invoke(app, ["db", "upgrade", "--database-url", url])
    assert result.exit_code == 0, result.output
    assert "1752876321510-initial_schema" in result.output

    result = runner.invoke(app, ["db", "status", "--database-url", url])
    assert result.exit_code == 0
    assert "1753172334040" in result.output
    assert "No pending migrations" in result.output


def test_upgrade_is_idempotent(tmp_path: Path):
    url = _url(tmp_path)
    runner.invoke(app, ["db", "upgrade", "--database-url", url])

    result = runner.invoke(app, ["db", "upgrade", "--database-url", url])

    assert result.exit_code == 0
    assert "up to date" in result.output


def test_downgrade_and_history(tmp_path: Path):
    url = _url(tmp_path)
    runner.invoke(app, ["db", "upgrade", "--database-url", url])

    result = runner.invoke(app, ["db", "downgrade", "--steps", "2", "--database-url", url])
    assert result.exit_code == 0
    assert "1753172334040-add_display_name_column_to_users" in result.output
    assert "1753075461277-update_user_columns_nullability" in result.output

    result = runner.invoke(app, ["db", "history", "--database-url", url])
    assert result.exit_code == 0
    assert "Schema migrations" in result.output


def test_unknown_target_exits_nonzero(tmp_path: Path):
    result = runner.invoke(
        app, ["db", "upgrade", "--target", "42", "--database-url", _url(tmp_path)]
    )
    assert result.exit_code == 1
    assert "Migration failed" in result.output
