"""Tests for the command line interface."""

import pytest
from click.testing import CliRunner

from repo_indexer.cli import cli
from repo_indexer.config.settings import get_settings


@pytest.fixture
def runner(tmp_path, monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    monkeypatch.setenv("SQLITE_PATH", str(tmp_path / "repositories.db"))
    monkeypatch.setenv("SEARCH_INDEX_PATH", str(tmp_path / "search.db"))
    get_settings.cache_clear()
    yield CliRunner()
    get_settings.cache_clear()


@pytest.mark.unit
class TestCli:
    def test_index_rejects_invalid_url(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["index", "https://gitlab.com/octo/project"])

        assert result.exit_code == 1
        assert "Not a GitHub repository URL" in result.output

    def test_status_unknown_repository(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["status", "unknown"])

        assert result.exit_code == 1
        assert "Repository not found: unknown" in result.output

    def test_search_unknown_repository(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["search", "unknown", "parser"])

        assert result.exit_code == 1
        assert "Repository not found" in result.output
