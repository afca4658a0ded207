"""
Discrete-time admission/selection loop shared by every scheduling policy.

A policy only decides *which* ready process runs next and for *how long*;
the slice length is what distinguishes whole-burst, fixed-quantum and
single-unit policies. Everything else (admission, idling, execution,
Gantt recording and completion metrics) lives here.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence, Tuple

from .errors import MalformedInputError, MissingFieldError
from .gantt import GanttRecorder
from .models import GanttSlot, Process, ScheduledProcess, WorkingProcess

logger = logging.getLogger(__name__)

SliceCallback = Callable[[WorkingProcess, int, int], None]


class Policy(ABC):
    """Ready-set ownership and selection rule for one scheduling algorithm."""

    name: str = ""
    requires_priority: bool = False

    @abstractmethod
    def admit(self, proc: WorkingProcess, now: int) -> None:
        """Accept a process whose arrival time has been reached."""

    @abstractmethod
    def has_ready(self) -> bool:
        """Whether any admitted process is waiting to run."""

    @abstractmethod
    def select(self, now: int) -> Tuple[WorkingProcess, int]:
        """Remove the next process from the ready set and return it with its slice length."""

    @abstractmethod
    def requeue(self, proc: WorkingProcess, now: int) -> None:
        """Return a process that still has burst left after its slice."""


def validate_processes(processes: Sequence[Process], *, require_priority: bool = False) -> None:
    """
    Reject input that would make a run loop forever or report negative times.
    Raises before any simulation work is done.
    """
    seen = set()
    for p in processes:
        if p.pid in seen:
            raise MalformedInputError(f"Duplicate process id {p.pid!r}")
        seen.add(p.pid)

        if not _is_int(p.arrival_time) or p.arrival_time < 0:
            raise MalformedInputError(f"Process {p.pid}: arrival_time must be an integer >= 0, got {p.arrival_time!r}")
        if not _is_int(p.burst_time) or p.burst_time <= 0:
            raise MalformedInputError(f"Process {p.pid}: burst_time must be an integer > 0, got {p.burst_time!r}")

        if p.priority is None:
            if require_priority:
                raise MissingFieldError(p.pid, "priority")
        elif not _is_int(p.priority):
            raise MalformedInputError(f"Process {p.pid}: priority must be an integer, got {p.priority!r}")


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class SimulationClock:
    """
    Integer time cursor plus the arrival-sorted list of processes that have
    not been handed to the policy yet.
    """

    def __init__(self, pending: List[WorkingProcess]) -> None:
        self.now = 0
        self._pending = pending
        self._next = 0

    @property
    def has_pending(self) -> bool:
        return self._next < len(self._pending)

    def admit(self, policy: Policy) -> int:
        admitted = 0
        while self._next < len(self._pending) and self._pending[self._next].arrival_time <= self.now:
            policy.admit(self._pending[self._next], self.now)
            self._next += 1
            admitted += 1
        return admitted

    def idle(self) -> None:
        # Nothing can run before the next arrival, so skipping straight to it
        # produces the same schedule as idling one unit at a time.
        target = self._pending[self._next].arrival_time
        logger.debug("CPU idle from %d to %d", self.now, target)
        self.now = max(self.now + 1, target)

    def advance(self, units: int) -> int:
        self.now += units
        return self.now


def prepare(processes: Sequence[Process]) -> List[WorkingProcess]:
    """
    Fresh working copies sorted by arrival; sorting is stable so equal
    arrivals keep their input order.
    """
    ordered = sorted(processes, key=lambda p: p.arrival_time)
    return [WorkingProcess.from_process(p, order=idx) for idx, p in enumerate(ordered)]


def _complete(proc: WorkingProcess, completion_time: int) -> ScheduledProcess:
    turnaround_time = completion_time - proc.arrival_time
    start_time = proc.start_time if proc.start_time is not None else completion_time
    return ScheduledProcess(
        pid=proc.pid,
        arrival_time=proc.arrival_time,
        burst_time=proc.burst_time,
        start_time=start_time,
        completion_time=completion_time,
        waiting_time=turnaround_time - proc.burst_time,
        turnaround_time=turnaround_time,
        response_time=start_time - proc.arrival_time,
        priority=proc.priority,
    )


def simulate(
    processes: Sequence[Process],
    policy: Policy,
    on_slice: Optional[SliceCallback] = None,
    recorder: Optional[GanttRecorder] = None,
) -> Tuple[List[ScheduledProcess], List[GanttSlot]]:
    """
    Run ``policy`` over ``processes`` to completion.

    Returns the scheduled processes in completion order and the coalesced
    Gantt slots. ``on_slice`` is called after every executed slice with the
    working process and the slice bounds, before the process is requeued.
    Pass a fresh ``recorder`` to keep it, e.g. for its busy time.
    """
    processes = list(processes)
    validate_processes(processes, require_priority=policy.requires_priority)

    clock = SimulationClock(prepare(processes))
    if recorder is None:
        recorder = GanttRecorder()
    completed: List[ScheduledProcess] = []

    logger.debug("Starting %s with %d processes", policy.name or type(policy).__name__, len(processes))

    while clock.has_pending or policy.has_ready():
        clock.admit(policy)

        if not policy.has_ready():
            clock.idle()
            continue

        proc, run_time = policy.select(clock.now)
        if run_time <= 0 or run_time > proc.remaining:
            raise RuntimeError(f"{type(policy).__name__} chose an invalid slice of {run_time} for {proc.pid}")

        if proc.start_time is None:
            proc.start_time = clock.now
        proc.last_executed = clock.now

        start = clock.now
        end = clock.advance(run_time)
        proc.remaining -= run_time
        recorder.record(proc.pid, start, end)
        logger.debug("t=%d..%d run %s (remaining %d)", start, end, proc.pid, proc.remaining)

        if on_slice is not None:
            on_slice(proc, start, end)

        # Arrivals during the slice enter the ready set before the
        # preempted process goes back.
        clock.admit(policy)

        if proc.finished:
            completed.append(_complete(proc, end))
        else:
            policy.requeue(proc, end)

    logger.debug("Finished at t=%d, %d slots", clock.now, len(recorder.slots))
    return completed, recorder.slots
