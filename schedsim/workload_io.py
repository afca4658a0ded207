from __future__ import annotations

import csv
import json
import re
from pathlib import Path
from typing import List, Mapping, Sequence

from .errors import MalformedInputError
from .models import Process

FIELDS = ["pid", "arrival_time", "burst_time", "priority"]

_INT_RE = re.compile(r"[+-]?\d+")


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise MalformedInputError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def save_workload(processes: Sequence[Process], path: str | Path) -> Path:
    """
    Write processes to a JSON or CSV file readable by load_workload.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    rows = [_process_to_mapping(p) for p in processes]

    if suffix == ".json":
        with path.open("w", encoding="utf-8") as f:
            json.dump(rows, f, indent=2)
            f.write("\n")
    elif suffix == ".csv":
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=FIELDS)
            writer.writeheader()
            for row in rows:
                writer.writerow({k: ("" if v is None else v) for k, v in row.items()})
    else:
        raise MalformedInputError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    return path


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise MalformedInputError(f"{path}: invalid JSON ({exc})") from exc

    if not isinstance(raw, list):
        raise MalformedInputError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _process_from_mapping(mapping: Mapping) -> Process:
    try:
        pid = str(mapping["pid"])
        arrival_time = _parse_int(mapping["arrival_time"])
        burst_time = _parse_int(mapping["burst_time"])
        priority_val = mapping.get("priority")
        priority = _parse_int(priority_val) if priority_val not in (None, "") else None
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise MalformedInputError(f"Invalid process entry: {mapping!r}") from exc

    return Process(
        pid=pid,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )


def _parse_int(value) -> int:
    # JSON gives real ints; CSV gives strings. Anything int() would have to
    # truncate or coerce (2.7, true, "3.0") is rejected.
    if isinstance(value, bool):
        raise TypeError(f"expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INT_RE.fullmatch(value.strip()):
        return int(value)
    raise ValueError(f"expected an integer, got {value!r}")


def _process_to_mapping(process: Process) -> dict:
    return {
        "pid": process.pid,
        "arrival_time": process.arrival_time,
        "burst_time": process.burst_time,
        "priority": process.priority,
    }
