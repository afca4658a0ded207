from __future__ import annotations

from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import GanttSlot


class GanttRecorder:
    """
    Collects execution intervals in time order.

    A slice that continues the previous slot of the same process without a
    gap extends that slot instead of opening a new one, so unit-by-unit
    policies still produce one slot per contiguous run.
    """

    def __init__(self) -> None:
        self._slots: List[GanttSlot] = []

    def record(self, pid: str, start_time: int, end_time: int) -> None:
        if end_time <= start_time:
            raise ValueError(f"Empty slice for {pid}: [{start_time}, {end_time})")

        if self._slots:
            last = self._slots[-1]
            if start_time < last.end_time:
                raise ValueError(f"Slice for {pid} at {start_time} overlaps {last.pid} ending at {last.end_time}")
            if last.pid == pid and last.end_time == start_time:
                self._slots[-1] = GanttSlot(pid=pid, start_time=last.start_time, end_time=end_time)
                return

        self._slots.append(GanttSlot(pid=pid, start_time=start_time, end_time=end_time))

    @property
    def slots(self) -> List[GanttSlot]:
        return list(self._slots)

    def busy_time(self) -> int:
        return sum(s.duration for s in self._slots)


class _Segment(NamedTuple):
    pid: Optional[str]  # None for an idle gap
    width: int
    end_time: int


def _layout(slots: Sequence[GanttSlot]) -> Tuple[List[_Segment], str]:
    """
    Shared geometry of the bar charts: slots in time order with idle gaps
    filled in from t=0, and the time-mark row. Each segment is drawn as
    ``width`` cells followed by a ``|``, so the mark for a segment's end sits
    under that bar.
    """
    segments: List[_Segment] = []
    last_time = 0
    for sl in sorted(slots, key=lambda s: (s.start_time, s.end_time)):
        if sl.start_time > last_time:
            segments.append(_Segment(None, sl.start_time - last_time, sl.start_time))
        segments.append(_Segment(sl.pid, sl.duration, sl.end_time))
        last_time = sl.end_time

    time_marks = "0"
    column = 0
    for seg in segments:
        column += seg.width + 1
        time_marks = _place_mark(time_marks, column, seg.end_time)
    return segments, time_marks


def _label(seg: _Segment) -> str:
    return (seg.pid or "")[: seg.width].ljust(seg.width)


def render_gantt(slots: Sequence[GanttSlot]) -> str:
    """
    Plain-text Gantt chart: one bar row, one label row and the time marks.
    Idle gaps are drawn with dots.
    """
    if not slots:
        return "(no execution)"

    segments, time_marks = _layout(slots)
    line = "|" + "".join(("." if seg.pid is None else "=") * seg.width + "|" for seg in segments)
    labels = " " + "".join(_label(seg) + " " for seg in segments)

    return "\n".join(["Gantt Chart:", line, labels.rstrip(), time_marks])


def render_compact(slots: Sequence[GanttSlot]) -> str:
    """
    Compact ``| P0 | P1 |`` style timeline with completion times aligned
    under each closing bar.
    """
    if not slots:
        return "(no execution)"

    bars = ""
    time_marks = "0"
    for sl in sorted(slots, key=lambda s: s.start_time):
        bars += f"| {sl.pid} "
        time_marks = _place_mark(time_marks, len(bars), sl.end_time)

    return bars + "|\n" + time_marks


def _place_mark(marks: str, column: int, value: int) -> str:
    # Right-align ``value`` so it ends on ``column``; never overwrite earlier marks.
    text = str(value)
    pad = column - len(marks) - len(text) + 1
    return marks + " " * max(1, pad) + text


PID_COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def build_rich_gantt(slots: Sequence[GanttSlot]) -> Tuple[Panel, str]:
    """
    Colored version of render_gantt: the same segments and bars, with each
    process's cells filled in its own color. Returns the panel and the
    time-mark row, which lines up with the bars.
    """
    if not slots:
        return Panel("No execution", title="Gantt Chart"), ""

    segments, time_marks = _layout(slots)
    colors: Dict[str, str] = {}

    bars = Text("|")
    labels = Text(" ")
    for seg in segments:
        if seg.pid is None:
            bars.append("." * seg.width, style="dim")
        else:
            color = colors.setdefault(seg.pid, PID_COLORS[len(colors) % len(PID_COLORS)])
            bars.append(" " * seg.width, style=f"on {color}")
        bars.append("|")
        labels.append(_label(seg), style="bold")
        labels.append(" ")

    table = Table.grid(padding=(0, 0))
    table.add_row(bars)
    table.add_row(labels)

    return Panel.fit(table, title="Gantt Chart"), time_marks
