"""Tests for the command line entry point."""

import json
import logging
import os
from pathlib import Path

import pytest

from dashboard.config import get_settings
from main import main

PAYLOAD = [
    {"id": "c", "name": "Coding", "unit": "hours", "data": {"2024-01-09": 4, "2024-01-10": 1}},
    {"id": "r", "name": "Reading", "unit": "pages", "data": {}},
]


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate the CLI from the real environment and working directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HEATMAP_DATA_FILE", str(tmp_path / "topics.json"))
    monkeypatch.setenv("HEATMAP_BACKUP_DIR", str(tmp_path / "backups"))
    monkeypatch.setenv("HEATMAP_STORAGE_BACKEND", "file")
    monkeypatch.setenv("HEATMAP_TIMEZONE", "UTC")
    monkeypatch.setenv("HEATMAP_LOG_LEVEL", "WARNING")
    monkeypatch.setenv("HEATMAP_SEED_SAMPLE_DATA", "false")
    yield tmp_path
    get_settings.cache_clear()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_heatmap_tracker", False):
            root.removeHandler(handler)


@pytest.fixture
def export_file(data_dir: Path) -> Path:
    path = data_dir / "export.json"
    path.write_text(json.dumps(PAYLOAD), encoding="utf-8")
    return path


class TestCli:
    def test_export_empty_store(self, data_dir: Path, capsys: pytest.CaptureFixture) -> None:
        assert main(["export"]) == 0
        assert json.loads(capsys.readouterr().out) == []

    def test_import_then_list(self, export_file: Path, capsys: pytest.CaptureFixture) -> None:
        assert main(["import", str(export_file)]) == 0
        assert "Successfully imported 2 topics" in capsys.readouterr().out

        assert main(["list"]) == 0
        out = capsys.readouterr().out
        assert "Coding (hours), 2 entries" in out
        assert "Reading (pages), 0 entries" in out

    def test_export_to_file(self, export_file: Path, data_dir: Path) -> None:
        main(["import", str(export_file)])
        target = data_dir / "out.json"
        assert main(["export", str(target)]) == 0
        assert json.loads(target.read_text(encoding="utf-8")) == PAYLOAD

    def test_show_by_name(self, export_file: Path, capsys: pytest.CaptureFixture) -> None:
        main(["import", str(export_file)])
        capsys.readouterr()
        assert main(["show", "coding"]) == 0
        out = capsys.readouterr().out
        assert out.startswith("Coding (hours) as of ")
        assert "Total: 5 hours" in out

    def test_show_unknown_topic(self, data_dir: Path, capsys: pytest.CaptureFixture) -> None:
        assert main(["show", "nope"]) == 1
        assert "Topic not found: nope" in capsys.readouterr().err

    def test_invalid_import(self, data_dir: Path, capsys: pytest.CaptureFixture) -> None:
        bad = data_dir / "bad.json"
        bad.write_text(json.dumps([{"id": "x", "name": "X", "unit": "u", "data": {"2024-01-01": -1}}]))
        assert main(["import", str(bad)]) == 1
        err = capsys.readouterr().err
        assert "Invalid topic data format" in err
        assert "[0] data.2024-01-01" in err

    def test_unreadable_import(self, data_dir: Path, capsys: pytest.CaptureFixture) -> None:
        assert main(["import", str(data_dir / "missing.json")]) == 1
        assert "cannot read" in capsys.readouterr().err

    def test_memory_backend_override(self, export_file: Path, data_dir: Path) -> None:
        assert main(["--backend", "memory", "import", str(export_file)]) == 0
        assert not (data_dir / "topics.json").exists()

    def test_overrides_apply_to_one_run_only(self, export_file: Path, data_dir: Path) -> None:
        assert main(["--backend", "memory", "import", str(export_file)]) == 0
        assert os.environ["HEATMAP_STORAGE_BACKEND"] == "file"

        assert main(["import", str(export_file)]) == 0
        assert (data_dir / "topics.json").exists()

    def test_serve_passes_overrides_to_environment(self, data_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []
        monkeypatch.setattr("main.run_dashboard", lambda settings, **kwargs: calls.append((settings, kwargs)))

        assert main(["--backend", "memory", "serve", "--port", "9001"]) == 0
        settings, kwargs = calls[0]
        assert settings.STORAGE_BACKEND == "memory"
        assert kwargs["port"] == 9001
        assert os.environ["HEATMAP_STORAGE_BACKEND"] == "memory"

    def test_invalid_setting(self, data_dir: Path, capsys: pytest.CaptureFixture) -> None:
        assert main(["--timezone", "Mars/Olympus", "list"]) == 2
        assert "invalid settings" in capsys.readouterr().err

    def test_backups(self, export_file: Path, capsys: pytest.CaptureFixture) -> None:
        assert main(["backups"]) == 0
        assert "No backups" in capsys.readouterr().out

        main(["import", str(export_file)])
        main(["import", str(export_file)])
        capsys.readouterr()

        assert main(["backups"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 1
        assert lines[0].startswith("backup_")
