from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Process:
    pid: str
    arrival_time: int
    burst_time: int
    priority: Optional[int] = None


@dataclass
class WorkingProcess:
    """
    Per-run mutable copy of a Process, owned by a single simulation.

    ``order`` is the position in the stable arrival-sorted input, so comparing
    it breaks ties by earliest arrival and then by original input order.
    """

    process: Process
    order: int
    remaining: int
    queue_level: int = 0
    last_executed: int = 0
    start_time: Optional[int] = None

    @classmethod
    def from_process(cls, process: Process, order: int) -> "WorkingProcess":
        return cls(
            process=process,
            order=order,
            remaining=process.burst_time,
            last_executed=process.arrival_time,
        )

    @property
    def pid(self) -> str:
        return self.process.pid

    @property
    def arrival_time(self) -> int:
        return self.process.arrival_time

    @property
    def burst_time(self) -> int:
        return self.process.burst_time

    @property
    def priority(self) -> Optional[int]:
        return self.process.priority

    @property
    def finished(self) -> bool:
        return self.remaining == 0


@dataclass(frozen=True)
class GanttSlot:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: str
    start_time: int
    end_time: int

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class ScheduledProcess:
    pid: str
    arrival_time: int
    burst_time: int
    start_time: int
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: int
    priority: Optional[int] = None


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    idle_time: int
    throughput: float
    cpu_utilization: float
    max_waiting: int = 0
    starvation_bound: int = 0
    starvation_count: int = 0


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Union[int, Tuple[int, ...], None]
    processes: List[ScheduledProcess] = field(default_factory=list)
    timeline: List[GanttSlot] = field(default_factory=list)
    system: Optional[SystemMetrics] = None

    def __iter__(self) -> Iterator[list]:
        # Allows ``processes, timeline = result``.
        yield self.processes
        yield self.timeline
