"""
Tests for the command-line interface.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from kvcache import __version__
from kvcache.cli.main import app

runner = CliRunner()


@pytest.fixture
def db_args(temp_dir: Path) -> list[str]:
    """Global options pointing the CLI at a temp database."""
    return ["--db", str(temp_dir / "cli.db"), "--namespace", "clitest"]


class TestCLIOperations:
    """Test cache commands end to end."""

    def test_set_then_get(self, db_args: list[str]) -> None:
        """Test a stored value is printed by get."""
        result = runner.invoke(app, [*db_args, "set", "greeting", "hello"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(app, [*db_args, "get", "greeting"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "hello"

    def test_get_missing_exits_1(self, db_args: list[str]) -> None:
        """Test get on a missing key fails with exit code 1."""
        result = runner.invoke(app, [*db_args, "get", "missing"])
        assert result.exit_code == 1

    def test_peek(self, db_args: list[str]) -> None:
        """Test peek prints the stored value."""
        runner.invoke(app, [*db_args, "set", "k", "v"])
        result = runner.invoke(app, [*db_args, "peek", "k"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "v"

    def test_remove(self, db_args: list[str]) -> None:
        """Test removed keys are no longer readable."""
        runner.invoke(app, [*db_args, "set", "a", "1"])
        runner.invoke(app, [*db_args, "set", "b", "2"])

        result = runner.invoke(app, [*db_args, "remove", "a", "b"])
        assert result.exit_code == 0

        assert runner.invoke(app, [*db_args, "get", "a"]).exit_code == 1
        assert runner.invoke(app, [*db_args, "get", "b"]).exit_code == 1

    def test_reserved_key_exits_2(self, db_args: list[str]) -> None:
        """Test setting the reserved metadata key fails with exit code 2."""
        result = runner.invoke(app, [*db_args, "set", "_metadata", "x"])
        assert result.exit_code == 2

    def test_max_entries_option(self, db_args: list[str]) -> None:
        """Test --max-entries evicts older entries."""
        limited = [*db_args, "--max-entries", "1"]
        runner.invoke(app, [*limited, "set", "a", "1"])
        runner.invoke(app, [*limited, "set", "b", "2"])

        assert runner.invoke(app, [*db_args, "get", "a"]).exit_code == 1
        assert runner.invoke(app, [*db_args, "get", "b"]).stdout.strip() == "2"

    def test_limits_from_environment(
        self, db_args: list[str], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test configured limits apply, and command-line limits override them."""
        monkeypatch.setenv("CACHE_MAX_ENTRIES", "1")
        runner.invoke(app, [*db_args, "set", "a", "1"])
        runner.invoke(app, [*db_args, "set", "b", "2"])
        assert runner.invoke(app, [*db_args, "get", "a"]).exit_code == 1

        wider = [*db_args, "--max-entries", "2"]
        runner.invoke(app, [*wider, "set", "c", "3"])
        assert runner.invoke(app, [*wider, "get", "b"]).stdout.strip() == "2"
        assert runner.invoke(app, [*wider, "get", "c"]).stdout.strip() == "3"

    def test_oversized_value_reported(self, db_args: list[str]) -> None:
        """Test a value over --max-size is reported as not cached."""
        result = runner.invoke(app, [*db_args, "--max-size", "50", "set", "big", "x" * 100])
        assert result.exit_code == 0
        assert "Not cached" in result.stdout

    def test_size_and_clear(self, db_args: list[str]) -> None:
        """Test size reflects stored data and clear empties the namespace."""
        runner.invoke(app, [*db_args, "set", "k", "v" * 100])
        size_before = int(runner.invoke(app, [*db_args, "size"]).stdout.strip())
        assert size_before > 100

        result = runner.invoke(app, [*db_args, "clear"])
        assert result.exit_code == 0

        size_after = int(runner.invoke(app, [*db_args, "size"]).stdout.strip())
        assert size_after < size_before
        assert runner.invoke(app, [*db_args, "get", "k"]).exit_code == 1

    def test_keys_lists_entries(self, db_args: list[str]) -> None:
        """Test keys shows stored keys."""
        runner.invoke(app, [*db_args, "set", "alpha", "1"])
        result = runner.invoke(app, [*db_args, "keys", "--values"])
        assert result.exit_code == 0
        assert "alpha" in result.stdout


class TestCLIInfo:
    """Test informational commands."""

    def test_version(self, db_args: list[str]) -> None:
        """Test version prints the package version."""
        result = runner.invoke(app, [*db_args, "version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_config_shows_overrides(self, db_args: list[str]) -> None:
        """Test config reflects command-line overrides."""
        result = runner.invoke(app, [*db_args, "config"])
        assert result.exit_code == 0
        assert "clitest" in result.stdout
