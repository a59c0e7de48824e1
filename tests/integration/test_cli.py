"""
Integration tests for the command line interface
"""

import pytest

from main import main, create_parser
from utils.path_utils import resolve_path


@pytest.mark.integration
class TestCommandLine:
    """Test cases for main.py commands"""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "serve" in capsys.readouterr().out

    def test_parser_defaults(self):
        args = create_parser().parse_args(["serve"])

        assert args.host is None
        assert args.port is None
        assert args.reload is False

    def test_validate_bundled_data(self, capsys):
        assert main(["validate", "--source", str(resolve_path("data/quotes.json")), "--strict-length"]) == 0
        assert capsys.readouterr().out.startswith("OK: 20 quotes loaded from")

    def test_validate_length_mismatch(self, capsys, write_json, sample_quotes):
        path = write_json("quotes.json", {"quotes": sample_quotes})

        assert main(["validate", "--source", str(path)]) == 0
        assert main(["validate", "--source", str(path), "--strict-length"]) == 1
        assert "INVALID:" in capsys.readouterr().out

    def test_validate_missing_file(self, capsys, temp_dir):
        assert main(["validate", "--source", str(temp_dir / "missing.json")]) == 1
        assert "INVALID: Quote source not found" in capsys.readouterr().out

    def test_stats(self, capsys, write_json, sample_quotes):
        path = write_json("quotes.json", sample_quotes)

        assert main(["stats", "--source", str(path)]) == 0

        out = capsys.readouterr().out
        assert "Quotes:  6" in out
        assert "Authors: 6" in out
        assert "Tags:    8" in out

    def test_stats_invalid_source(self, capsys, write_json):
        path = write_json("quotes.json", {"items": []})

        assert main(["stats", "--source", str(path)]) == 1
        assert capsys.readouterr().out.startswith("ERROR:")

    def test_serve_uses_runner(self, monkeypatch):
        calls = []
        monkeypatch.setattr("api.app.run", lambda **kwargs: calls.append(kwargs))

        assert main(["serve", "--port", "4000"]) == 0
        assert calls == [{"host": None, "port": 4000, "reload": None}]
