from pathlib import Path

import pytest

from schedsim.cli import main

EXAMPLES = Path(__file__).resolve().parents[1] / "examples"


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setenv("COLUMNS", "200")


def test_run_plain(capsys):
    rc = main(["run", "-a", "fcfs", "-p", "0:5", "-p", "1:3", "-p", "2:2", "--plain"])
    out = capsys.readouterr().out
    assert rc == 0
    assert "P1 | P2 | P3" in out
    assert "3.33" in out


def test_run_workload_file(capsys):
    rc = main(["run", "-a", "rr", "-q", "2", "-w", str(EXAMPLES / "workload_small.json")])
    out = capsys.readouterr().out
    assert rc == 0
    assert "Round Robin" in out


def test_compare(capsys):
    rc = main(["compare", "-w", str(EXAMPLES / "workload_idle.csv")])
    out = capsys.readouterr().out
    assert rc == 0
    assert "FCFS" in out
    assert "Priority (preemptive)" in out


def test_rejected_input_returns_error_code(capsys):
    assert main(["run", "-a", "rr", "-p", "0:3"]) == 2
    assert main(["run", "-a", "fcfs", "-p", "0:0"]) == 2
    assert main(["run", "-a", "lottery", "-p", "0:3"]) == 2
    assert "Error" in capsys.readouterr().out


def test_menu(monkeypatch, capsys):
    answers = iter(["5", "2", "0 3", "0 2", "2", "7"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    assert main(["menu"]) == 0
    out = capsys.readouterr().out
    assert "Round Robin" in out


def test_missing_workload_file_returns_error_code(tmp_path, capsys):
    rc = main(["run", "-a", "fcfs", "-w", str(tmp_path / "nope.json")])
    assert rc == 2
    assert "Cannot read workload" in capsys.readouterr().out
