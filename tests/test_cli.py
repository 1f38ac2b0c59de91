"""Tests for the command-line interface."""
import json
from unittest.mock import patch

from inventory_store import cli


class TestCli:
    """Tests for the init and list commands."""

    def test_init_creates_store(self, tmp_path, capsys):
        cache = tmp_path / "cache"
        assert cli.main(["init", "--cache", str(cache)]) == 0
        assert json.loads((cache / "inventory.json").read_text()) == {"next_id": 1, "items": []}
        assert (cache / "photos").is_dir()
        assert "0 items" in capsys.readouterr().out

    def test_list_prints_items(self, tmp_path, capsys):
        cache = tmp_path / "cache"
        cache.mkdir()
        (cache / "inventory.json").write_text(json.dumps({
            "next_id": 3,
            "items": [{"id": 2, "name": "Widget", "description": "A widget", "photo": None}],
        }))

        assert cli.main(["list", "--cache", str(cache)]) == 0
        out = capsys.readouterr().out
        assert "Widget - A widget" in out
        assert "1 item(s)" in out

    def test_list_reports_broken_document(self, tmp_path, capsys):
        cache = tmp_path / "cache"
        cache.mkdir()
        (cache / "inventory.json").write_text("[")

        assert cli.main(["list", "--cache", str(cache)]) == 1
        assert "Error" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_serve_passes_env_log_level_to_uvicorn(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        with patch("uvicorn.run") as mock_run:
            assert cli.main(["serve", "--port", "8123", "--cache", str(tmp_path)]) == 0

        kwargs = mock_run.call_args.kwargs
        assert kwargs["log_level"] == "debug"
        assert kwargs["port"] == 8123

    def test_command_line_log_level_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        with patch("uvicorn.run") as mock_run:
            cli.main(["--log-level", "WARNING", "serve", "--cache", str(tmp_path)])

        assert mock_run.call_args.kwargs["log_level"] == "warning"
