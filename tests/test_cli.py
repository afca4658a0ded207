import json
from pathlib import Path

import pytest

from schedsim.cli import main
from schedsim.workload_io import load_workload


def _write_workload(tmp_path: Path, with_priority: bool = True) -> Path:
    rows = [
        {"pid": "P1", "arrival_time": 0, "burst_time": 5, "priority": 2},
        {"pid": "P2", "arrival_time": 1, "burst_time": 3, "priority": 1},
        {"pid": "P3", "arrival_time": 2, "burst_time": 8, "priority": 3},
    ]
    if not with_priority:
        for row in rows:
            del row["priority"]
    path = tmp_path / "w.json"
    path.write_text(json.dumps(rows))
    return path


def test_run_plain(tmp_path, capsys):
    path = _write_workload(tmp_path)
    assert main(["run", "-a", "fcfs", "-w", str(path), "--plain"]) == 0
    out = capsys.readouterr().out
    assert "FCFS" in out
    assert "|=====|===|========|" in out


def test_run_rr_without_quantum_fails(tmp_path, capsys):
    path = _write_workload(tmp_path)
    assert main(["run", "-a", "rr", "-w", str(path)]) == 2
    assert "Quantum must be a positive integer" in capsys.readouterr().out


def test_run_priority_missing_field(tmp_path, capsys):
    path = _write_workload(tmp_path, with_priority=False)
    assert main(["run", "-a", "priority", "-w", str(path)]) == 2
    assert "missing priority" in capsys.readouterr().out


def test_compare_skips_priority_without_field(tmp_path, capsys):
    path = _write_workload(tmp_path, with_priority=False)
    assert main(["compare", "-w", str(path), "-q", "2"]) == 0
    out = capsys.readouterr().out
    assert "Skipping priority" in out
    assert "MLFQ" in out


def test_generate_writes_file(tmp_path, capsys):
    out_path = tmp_path / "gen.csv"
    assert main(["generate", "-n", "6", "--seed", "4", "-o", str(out_path)]) == 0
    assert len(load_workload(out_path)) == 6


def test_bench(capsys):
    assert main(["bench", "-n", "30", "--seed", "1", "-a", "fcfs", "srtf"]) == 0
    out = capsys.readouterr().out
    assert "fcfs" in out and "srtf" in out


def test_negative_step_delay_rejected_by_parser(tmp_path, capsys):
    path = _write_workload(tmp_path)
    with pytest.raises(SystemExit) as info:
        main(["run", "-a", "fcfs", "-w", str(path), "--step", "--step-delay", "-1"])
    assert info.value.code == 2
    assert "must be >= 0" in capsys.readouterr().err


def test_run_reports_starvation_bound(tmp_path, capsys):
    path = _write_workload(tmp_path)
    assert main(["run", "-a", "fcfs", "-w", str(path), "--plain", "--starvation-bound", "5"]) == 0
    out = capsys.readouterr().out
    assert "wait > 5" in out
