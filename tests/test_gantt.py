import io

import pytest
from rich.console import Console
from rich.panel import Panel

from schedsim.gantt import GanttRecorder, build_rich_gantt, render_compact, render_gantt
from schedsim.models import GanttSlot


def test_recorder_merges_contiguous_same_pid():
    rec = GanttRecorder()
    rec.record("A", 0, 1)
    rec.record("A", 1, 2)
    rec.record("B", 2, 3)
    rec.record("A", 3, 5)
    assert rec.slots == [GanttSlot("A", 0, 2), GanttSlot("B", 2, 3), GanttSlot("A", 3, 5)]
    assert rec.busy_time() == 5


def test_recorder_keeps_gap_between_same_pid():
    rec = GanttRecorder()
    rec.record("A", 0, 1)
    rec.record("A", 4, 5)
    assert len(rec.slots) == 2


def test_recorder_rejects_overlap_and_empty_slices():
    rec = GanttRecorder()
    rec.record("A", 0, 3)
    with pytest.raises(ValueError):
        rec.record("B", 2, 4)
    with pytest.raises(ValueError):
        rec.record("B", 3, 3)


def test_render_gantt_plain():
    text = render_gantt([GanttSlot("P0", 0, 5), GanttSlot("P1", 5, 8)])
    lines = text.splitlines()
    assert lines[0] == "Gantt Chart:"
    assert lines[1] == "|=====|===|"
    assert lines[2] == " P0    P1"
    assert lines[3] == "0     5   8"


def test_render_gantt_shows_idle():
    text = render_gantt([GanttSlot("P0", 2, 4)])
    assert text.splitlines()[1] == "|..|==|"
    assert text.splitlines()[3] == "0  2  4"


def test_render_compact():
    assert render_compact([GanttSlot("P0", 0, 5), GanttSlot("P1", 5, 8)]) == "| P0 | P1 |\n0    5    8"


def test_render_empty():
    assert render_gantt([]) == "(no execution)"
    panel, marks = build_rich_gantt([])
    assert isinstance(panel, Panel)
    assert marks == ""


def test_build_rich_gantt_marks():
    panel, marks = build_rich_gantt([GanttSlot("P0", 0, 4), GanttSlot("P1", 6, 8)])
    assert isinstance(panel, Panel)
    assert marks.split() == ["0", "4", "6", "8"]


def test_rich_and_plain_charts_share_layout():
    slots = [GanttSlot("P0", 1, 4), GanttSlot("P1", 4, 5), GanttSlot("P0", 7, 9)]
    plain = render_gantt(slots).splitlines()
    panel, marks = build_rich_gantt(slots)
    console = Console(width=100, file=io.StringIO(), record=True)
    console.print(panel)
    assert marks == plain[3]
    assert plain[1].replace("=", " ") in console.export_text()
