"""Tests for the command line interface."""

from __future__ import annotations

import functools
import json

import pytest
from click.testing import CliRunner

from venvpruner import cli
from venvpruner.cli import main, parse_selection
from venvpruner.core.engine import PrunerEngine


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def venvs(fake_home, make_venv, monkeypatch):
    """Three environments under ~/.venvs, with the engine limited to that root."""
    monkeypatch.setattr(cli, "PrunerEngine", functools.partial(PrunerEngine, templates=(".venvs",)))
    root = fake_home / ".venvs"
    return {
        name: make_venv(root, name, size=size)
        for name, size in (("big", 50_000), ("mid", 20_000), ("tiny", 5_000))
    }


class TestParseSelection:
    def test_numbers(self):
        assert parse_selection("1, 3", 3) == [0, 2]

    def test_ranges(self):
        assert parse_selection("2-4,1", 5) == [0, 1, 2, 3]

    def test_all(self):
        assert parse_selection(" ALL ", 3) == [0, 1, 2]

    def test_ignores_garbage(self):
        assert parse_selection("0, 9, x, 2-y, , 2", 3) == [1]

    def test_empty(self):
        assert parse_selection("", 3) == []


class TestScanCommand:
    def test_json(self, runner, venvs):
        result = runner.invoke(main, ["scan", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [e["name"] for e in data["environments"]] == ["big", "mid", "tiny"]
        assert data["total_bytes"] == 75_000
        assert data["environments"][0]["python_version"] == "3.11.4"

    def test_human_output(self, runner, venvs):
        result = runner.invoke(main, ["scan"])

        assert result.exit_code == 0, result.output
        assert "Found 3 virtual environments" in result.output
        assert "big" in result.output
        assert str(venvs["tiny"].resolve()) in result.output

    def test_nothing_found(self, runner, fake_home, monkeypatch):
        monkeypatch.setattr(cli, "PrunerEngine", functools.partial(PrunerEngine, templates=(".venvs",)))
        result = runner.invoke(main, ["scan"])

        assert result.exit_code == 0
        assert "No virtual environments found." in result.output

    def test_missing_home(self, runner, monkeypatch, tmp_path):
        from pathlib import Path

        def no_home():
            raise RuntimeError("Could not determine home directory.")

        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        monkeypatch.setattr(Path, "home", staticmethod(no_home))
        result = runner.invoke(main, ["scan"])

        assert result.exit_code == 1
        assert "Could not find home directory" in result.output

    def test_missing_home_without_xdg(self, runner, monkeypatch):
        from pathlib import Path

        def no_home():
            raise RuntimeError("Could not determine home directory.")

        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", staticmethod(no_home))
        result = runner.invoke(main, ["scan"])

        assert result.exit_code == 1
        assert "Could not find home directory" in result.output
        assert not isinstance(result.exception, RuntimeError)

    def test_progress_stages(self, runner, venvs):
        result = runner.invoke(main, ["scan"])

        assert result.exit_code == 0, result.output
        assert "Searching 1 location(s)" in result.output
        assert "Found 3 candidate(s)" in result.output
        assert "Measured big" in result.output

    def test_json_has_no_progress(self, runner, venvs):
        result = runner.invoke(main, ["scan", "--json"])

        assert result.exit_code == 0, result.output
        assert "Measured" not in result.output
        assert len(json.loads(result.output)["environments"]) == 3

    def test_max_depth_from_settings(self, runner, venvs, fake_home):
        runner.invoke(main, ["config", "scan.max_depth", "1"])
        result = runner.invoke(main, ["scan", "--json"])
        assert json.loads(result.output)["environments"] == []

        result = runner.invoke(main, ["scan", "--json", "--max-depth", "4"])
        assert len(json.loads(result.output)["environments"]) == 3


class TestPruneCommand:
    def test_delete_selected(self, runner, venvs):
        result = runner.invoke(main, ["prune"], input="1,2\ny\nn\n")

        assert result.exit_code == 0, result.output
        assert not venvs["big"].exists()
        assert not venvs["mid"].exists()
        assert venvs["tiny"].exists()
        assert "2 virtual environment(s) deleted" in result.output

    def test_repeat_uses_remaining(self, runner, venvs):
        result = runner.invoke(main, ["prune"], input="1\ny\ny\nall\ny\n")

        assert result.exit_code == 0, result.output
        assert not any(path.exists() for path in venvs.values())
        assert "All virtual environments have been deleted." in result.output

    def test_cancel(self, runner, venvs):
        result = runner.invoke(main, ["prune"], input="1\nn\n")

        assert result.exit_code == 0
        assert "Deletion cancelled." in result.output
        assert all(path.exists() for path in venvs.values())

    def test_nothing_selected(self, runner, venvs):
        result = runner.invoke(main, ["prune"], input="\n")

        assert "No virtual environments selected for deletion." in result.output
        assert all(path.exists() for path in venvs.values())

    def test_dry_run(self, runner, venvs):
        result = runner.invoke(main, ["prune", "--dry-run"], input="all\n")

        assert result.exit_code == 0
        assert "dry run" in result.output
        assert all(path.exists() for path in venvs.values())

    def test_yes_skips_confirmation(self, runner, venvs):
        result = runner.invoke(main, ["prune", "--yes"], input="3\nn\n")

        assert result.exit_code == 0, result.output
        assert not venvs["tiny"].exists()
        assert venvs["big"].exists()


class TestConfigCommand:
    def test_show_defaults(self, runner, fake_home):
        result = runner.invoke(main, ["config"])
        assert json.loads(result.output) == {"scan": {"max_depth": 4, "workers": None}}

    def test_set_and_get(self, runner, fake_home):
        result = runner.invoke(main, ["config", "scan.workers", "2"])
        assert result.exit_code == 0

        result = runner.invoke(main, ["config", "scan.workers"])
        assert json.loads(result.output) == 2
        assert (fake_home / ".config" / "venvpruner" / "settings.json").is_file()

    def test_missing_home(self, runner, monkeypatch):
        from pathlib import Path

        def no_home():
            raise RuntimeError("Could not determine home directory.")

        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", staticmethod(no_home))
        result = runner.invoke(main, ["config"])

        assert result.exit_code == 1
        assert "Could not find home directory" in result.output
