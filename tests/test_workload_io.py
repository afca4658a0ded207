from pathlib import Path

import pytest

from schedsim.errors import MalformedInputError
from schedsim.models import Process
from schedsim.workload_io import load_workload, save_workload


def test_load_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"pid":"A","arrival_time":0,"burst_time":3,"priority":1},'
                 '{"pid":"B","arrival_time":1,"burst_time":2}]')
    procs = load_workload(p)
    assert isinstance(procs[0], Process)
    assert procs[0].priority == 1
    assert procs[1].priority is None
    assert procs[1].arrival_time == 1


def test_load_csv(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time,burst_time,priority\nA,0,3,1\nB,1,2,\n")
    procs = load_workload(p)
    assert procs[0].pid == "A"
    assert procs[1].priority is None


def test_save_then_load_csv(tmp_path: Path):
    procs = [Process("A", 0, 3, 2), Process("B", 4, 1)]
    path = save_workload(procs, tmp_path / "out.csv")
    assert load_workload(path) == procs


def test_bad_row_is_reported(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"pid":"A","arrival_time":"soon","burst_time":3}]')
    with pytest.raises(MalformedInputError):
        load_workload(p)


def test_json_must_be_a_list(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('{"pid":"A"}')
    with pytest.raises(ValueError):
        load_workload(p)


def test_unknown_suffix(tmp_path: Path):
    with pytest.raises(ValueError):
        load_workload(tmp_path / "w.yaml")


@pytest.mark.parametrize(
    "entry",
    [
        '{"pid":"A","arrival_time":2.7,"burst_time":3}',
        '{"pid":"A","arrival_time":0,"burst_time":true}',
        '{"pid":"A","arrival_time":0,"burst_time":3,"priority":1.5}',
    ],
)
def test_json_times_must_be_whole_numbers(tmp_path: Path, entry):
    p = tmp_path / "w.json"
    p.write_text(f"[{entry}]")
    with pytest.raises(MalformedInputError):
        load_workload(p)


@pytest.mark.parametrize("arrival", ["2.7", "1e3", "true", "two"])
def test_csv_times_must_be_digit_strings(tmp_path: Path, arrival):
    p = tmp_path / "w.csv"
    p.write_text(f"pid,arrival_time,burst_time,priority\nA,{arrival},3,1\n")
    with pytest.raises(MalformedInputError):
        load_workload(p)


def test_csv_accepts_padded_and_signed_integers(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time,burst_time,priority\nA, 4 ,3,-1\n")
    procs = load_workload(p)
    assert procs == [Process("A", 4, 3, -1)]
