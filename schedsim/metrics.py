"""
Whole-run figures derived from a finished schedule.

Busy time comes from the Gantt recorder that the run wrote into, so it is
the CPU time actually logged rather than a sum over the input bursts.
A process is *starved* when its waiting time exceeds the starvation bound:
by default the longest burst in the workload, i.e. it waited longer than
any single job could have held the CPU.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from .gantt import GanttRecorder
from .models import ScheduledProcess, ScheduleResult, SystemMetrics

AVERAGED_FIELDS = {
    "avg_waiting": "waiting_time",
    "avg_turnaround": "turnaround_time",
    "avg_response": "response_time",
}


def default_starvation_bound(processes: Sequence[ScheduledProcess]) -> int:
    return max((p.burst_time for p in processes), default=0)


def compute_system_metrics(
    result: ScheduleResult,
    recorder: Optional[GanttRecorder] = None,
    starvation_bound: Optional[int] = None,
) -> SystemMetrics:
    """
    Attach SystemMetrics to ``result`` and return them. Without a recorder
    the busy time is read back from ``result.timeline``.
    """
    processes = result.processes
    if recorder is not None:
        slots, busy = recorder.slots, recorder.busy_time()
    else:
        slots, busy = result.timeline, sum(s.duration for s in result.timeline)
    makespan = max([p.completion_time for p in processes] + [s.end_time for s in slots[-1:]], default=0)
    bound = default_starvation_bound(processes) if starvation_bound is None else starvation_bound

    result.system = SystemMetrics(
        cpu_busy_time=busy,
        makespan=makespan,
        idle_time=makespan - busy,
        throughput=len(processes) / makespan if makespan else 0.0,
        cpu_utilization=busy / makespan if makespan else 0.0,
        max_waiting=max((p.waiting_time for p in processes), default=0),
        starvation_bound=bound,
        starvation_count=sum(p.waiting_time > bound for p in processes),
    )
    return result.system


def summarize_process_metrics(processes: Sequence[ScheduledProcess]) -> Dict[str, float]:
    """
    Averages of waiting, turnaround and response time; all 0.0 when empty.
    """
    n = len(processes)
    return {
        label: (sum(getattr(p, attr) for p in processes) / n if n else 0.0)
        for label, attr in AVERAGED_FIELDS.items()
    }
