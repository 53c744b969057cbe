"""
tests/test_main.py

Tests for the command-line entry point (analyze subcommand).
"""

from __future__ import annotations

import pytest

from leakguard.backend.main import _parse_args, main


class TestParseArgs:

    def test_analyze_defaults(self):
        args = _parse_args(["analyze", "data.csv"])
        assert args.command == "analyze"
        assert args.file == "data.csv"
        assert args.report is None

    def test_serve_overrides(self):
        args = _parse_args(["--log-level", "DEBUG", "serve", "--host", "127.0.0.1", "--port", "9001"])
        assert args.log_level == "DEBUG"
        assert (args.host, args.port) == ("127.0.0.1", 9001)

    def test_command_required(self):
        with pytest.raises(SystemExit):
            _parse_args([])


class TestAnalyzeCommand:

    def test_prints_report(self, tmp_path, capsys):
        path = tmp_path / "logins.csv"
        path.write_text("user,action,status\nalice,login,failed\n")
        with pytest.raises(SystemExit) as exc:
            main(["analyze", str(path)])
        assert exc.value.code == 0
        out = capsys.readouterr().out
        assert "ADAPTIVE DATA LEAKAGE DETECTION REPORT" in out
        assert "- alice" in out

    def test_writes_report_file(self, tmp_path):
        path = tmp_path / "logins.csv"
        path.write_text("user,action,status\nalice,login,failed\n")
        out = tmp_path / "report.txt"
        with pytest.raises(SystemExit) as exc:
            main(["analyze", str(path), "--report", str(out)])
        assert exc.value.code == 0
        assert out.read_text().startswith("ADAPTIVE DATA LEAKAGE DETECTION REPORT")

    def test_rejects_non_csv(self, tmp_path, capsys):
        path = tmp_path / "logins.txt"
        path.write_text("user\nalice\n")
        with pytest.raises(SystemExit) as exc:
            main(["analyze", str(path)])
        assert exc.value.code == 1
        assert "ERROR" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["analyze", str(tmp_path / "nope.csv")])
        assert exc.value.code == 1
        assert "cannot read" in capsys.readouterr().err
