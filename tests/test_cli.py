import io
import logging
from unittest.mock import patch

import pytest

from calculator import cli


def test_format_result():
    assert cli.format_result(14.0) == "14"
    assert cli.format_result(-5.0) == "-5"
    assert cli.format_result(2.5) == "2.5"
    assert cli.format_result(float("inf")) == "inf"


def test_eval_prints_results(capsys):
    cli.main(["eval", "2+3*4", "(2+3)*4"])
    out = capsys.readouterr().out.splitlines()
    assert out == ["2+3*4 = 14", "(2+3)*4 = 20"]


def test_eval_reports_errors_and_exits_nonzero(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["eval", "3+-5", "1/0", "10/4"])
    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["3+-5 = -2", "10/4 = 2.5"]
    assert captured.err.strip() == "1/0: error: Division by zero."


def test_rpn_command(capsys):
    cli.main(["rpn", "2+3*4"])
    assert capsys.readouterr().out.strip() == "2.0 3.0 4.0 * +"


def test_rpn_command_error():
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["rpn", "(1+2"])
    assert excinfo.value.code == "error: Mismatched parentheses."


def test_repl_reads_stdin(capsys, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("1+1\n\n2*\n-(4)\n"))
    cli.main(["repl"])
    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["1+1 = 2", "-(4) = -4"]
    assert captured.err.strip() == "2*: error: Invalid expression."


def test_version(capsys, monkeypatch):
    monkeypatch.setattr(cli, "_app_version", lambda: "9.9.9")
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])
    assert excinfo.value.code == 0
    assert capsys.readouterr().out.strip().endswith("9.9.9")


def test_command_is_required():
    with pytest.raises(SystemExit) as excinfo:
        cli.main([])
    assert excinfo.value.code == 2


def test_verbose_enables_debug_logging(capsys):
    with patch("calculator.cli.logging.basicConfig") as basic_config:
        cli.main(["-v", "eval", "1+1"])
    assert basic_config.call_args.kwargs["level"] == logging.DEBUG
    assert capsys.readouterr().out.strip() == "1+1 = 2"


def test_default_logging_level_is_warning(capsys):
    with patch("calculator.cli.logging.basicConfig") as basic_config:
        cli.main(["eval", "1+1"])
    assert basic_config.call_args.kwargs["level"] == logging.WARNING


def test_app_version_reads_calculator_config(tmp_path, monkeypatch):
    base = tmp_path / "config.ini"
    base.write_text("[APP]\nversion = 4.2\n", encoding="utf-8")
    monkeypatch.setenv("CALCULATOR_CONFIG", str(base))
    assert cli._app_version() == "4.2"


def test_app_version_without_config_file(tmp_path, monkeypatch):
    monkeypatch.setenv("CALCULATOR_CONFIG", str(tmp_path / "missing.ini"))
    assert cli._app_version() == "unknown"
