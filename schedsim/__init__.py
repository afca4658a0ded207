"""
Scheduling simulator package.

Simulates CPU scheduling policies over a fixed workload and reports
per-process waiting/turnaround times together with a coalesced Gantt
timeline. ``schedsim.cli`` wraps it in a command-line interface.
"""

from .algorithms import (
    ALGORITHMS,
    run_algorithm,
    schedule_fcfs,
    schedule_mlfq,
    schedule_priority,
    schedule_priority_preemptive,
    schedule_rr,
    schedule_sjf,
    schedule_srtf,
)
from .config import SimulationConfig
from .errors import InvalidParameterError, MalformedInputError, MissingFieldError, SchedulingError
from .models import GanttSlot, Process, ScheduledProcess, ScheduleResult

__all__ = [
    "ALGORITHMS",
    "GanttSlot",
    "InvalidParameterError",
    "MalformedInputError",
    "MissingFieldError",
    "Process",
    "ScheduleResult",
    "ScheduledProcess",
    "SchedulingError",
    "SimulationConfig",
    "run_algorithm",
    "schedule_fcfs",
    "schedule_mlfq",
    "schedule_priority",
    "schedule_priority_preemptive",
    "schedule_rr",
    "schedule_sjf",
    "schedule_srtf",
]
