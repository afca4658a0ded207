from __future__ import annotations

import heapq
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Sequence, Tuple

from .config import DEFAULT_MLFQ_QUANTUMS, SimulationConfig, check_quantum, check_quantums
from .engine import Policy, SliceCallback, simulate
from .errors import InvalidParameterError
from .gantt import GanttRecorder
from .metrics import compute_system_metrics
from .models import Process, ScheduleResult, WorkingProcess


class FcfsPolicy(Policy):
    """First-Come First-Serve: FIFO in admission order, whole burst."""

    name = "FCFS"

    def __init__(self) -> None:
        self._queue: Deque[WorkingProcess] = deque()

    def admit(self, proc: WorkingProcess, now: int) -> None:
        self._queue.append(proc)

    def has_ready(self) -> bool:
        return bool(self._queue)

    def select(self, now: int) -> Tuple[WorkingProcess, int]:
        proc = self._queue.popleft()
        return proc, proc.remaining

    def requeue(self, proc: WorkingProcess, now: int) -> None:
        raise RuntimeError("FCFS never preempts")


class _KeyedPolicy(Policy):
    """
    Ready pool kept as a heap on ``(key, order)``, so ties go to the
    earliest arrival and then input order. A process is only ever in the
    heap while waiting, and its key cannot change while it waits, so no
    entry goes stale.

    ``preemptive`` policies run one unit per selection and put the running
    process back into the pool, which lets a better arrival take the next unit.
    """

    preemptive = False

    def __init__(self) -> None:
        self._ready: List[Tuple[tuple, int, WorkingProcess]] = []

    def key(self, proc: WorkingProcess) -> tuple:
        raise NotImplementedError

    def admit(self, proc: WorkingProcess, now: int) -> None:
        heapq.heappush(self._ready, (self.key(proc), proc.order, proc))

    def has_ready(self) -> bool:
        return bool(self._ready)

    def select(self, now: int) -> Tuple[WorkingProcess, int]:
        _, _, proc = heapq.heappop(self._ready)
        return proc, 1 if self.preemptive else proc.remaining

    def requeue(self, proc: WorkingProcess, now: int) -> None:
        if not self.preemptive:
            raise RuntimeError(f"{self.name} never preempts")
        self.admit(proc, now)


class SjfPolicy(_KeyedPolicy):
    """Shortest Job First (non-preemptive): smallest burst among ready."""

    name = "SJF (non-preemptive)"

    def key(self, proc: WorkingProcess) -> tuple:
        return (proc.burst_time,)


class SrtfPolicy(_KeyedPolicy):
    """Shortest Remaining Time First, reconsidered every time unit."""

    name = "SRTF"
    preemptive = True

    def key(self, proc: WorkingProcess) -> tuple:
        return (proc.remaining,)


class PriorityPolicy(_KeyedPolicy):
    """Lower numeric priority value means higher priority."""

    name = "Priority (non-preemptive)"
    requires_priority = True

    def key(self, proc: WorkingProcess) -> tuple:
        return (proc.priority,)


class PreemptivePriorityPolicy(PriorityPolicy):
    name = "Priority (preemptive)"
    preemptive = True


class RoundRobinPolicy(Policy):
    """
    FIFO queue with a fixed quantum. A preempted process goes to the tail,
    behind anything that arrived while it was running.
    """

    name = "Round Robin"

    def __init__(self, quantum: int) -> None:
        self.quantum = check_quantum(quantum)
        self._queue: Deque[WorkingProcess] = deque()

    def admit(self, proc: WorkingProcess, now: int) -> None:
        self._queue.append(proc)

    def has_ready(self) -> bool:
        return bool(self._queue)

    def select(self, now: int) -> Tuple[WorkingProcess, int]:
        proc = self._queue.popleft()
        return proc, min(self.quantum, proc.remaining)

    def requeue(self, proc: WorkingProcess, now: int) -> None:
        self._queue.append(proc)


class MlfqPolicy(Policy):
    """
    Multi-Level Feedback Queue.

    - New arrivals enter the highest-priority queue (level 0).
    - The lowest-index non-empty queue is always served first, each queue
      round-robin with its own quantum.
    - A process that still has burst left after its slice is demoted one
      level, staying on the last level once it gets there. There is no
      promotion or aging.
    """

    name = "MLFQ"

    def __init__(self, quantums: Sequence[int] = DEFAULT_MLFQ_QUANTUMS) -> None:
        self.quantums = check_quantums(quantums)
        self._queues: List[Deque[WorkingProcess]] = [deque() for _ in self.quantums]

    @property
    def levels(self) -> int:
        return len(self._queues)

    def admit(self, proc: WorkingProcess, now: int) -> None:
        proc.queue_level = 0
        self._queues[0].append(proc)

    def has_ready(self) -> bool:
        return any(self._queues)

    def select(self, now: int) -> Tuple[WorkingProcess, int]:
        level = next(i for i, q in enumerate(self._queues) if q)
        proc = self._queues[level].popleft()
        return proc, min(self.quantums[level], proc.remaining)

    def requeue(self, proc: WorkingProcess, now: int) -> None:
        proc.queue_level = min(proc.queue_level + 1, self.levels - 1)
        self._queues[proc.queue_level].append(proc)


def _run(
    policy: Policy,
    processes: Sequence[Process],
    quantum,
    on_slice: Optional[SliceCallback] = None,
    starvation_bound: Optional[int] = None,
) -> ScheduleResult:
    recorder = GanttRecorder()
    scheduled, timeline = simulate(processes, policy, on_slice=on_slice, recorder=recorder)
    result = ScheduleResult(algorithm=policy.name, quantum=quantum, processes=scheduled, timeline=timeline)
    compute_system_metrics(result, recorder, starvation_bound)
    return result


def schedule_fcfs(
    processes: Sequence[Process],
    on_slice: Optional[SliceCallback] = None,
    starvation_bound: Optional[int] = None,
) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.
    """
    return _run(FcfsPolicy(), processes, None, on_slice, starvation_bound)


def schedule_sjf(
    processes: Sequence[Process],
    on_slice: Optional[SliceCallback] = None,
    starvation_bound: Optional[int] = None,
) -> ScheduleResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst time. Once started a
    job always runs to completion.
    """
    return _run(SjfPolicy(), processes, None, on_slice, starvation_bound)


def schedule_srtf(
    processes: Sequence[Process],
    on_slice: Optional[SliceCallback] = None,
    starvation_bound: Optional[int] = None,
) -> ScheduleResult:
    """
    Shortest Remaining Time First (preemptive SJF).
    """
    return _run(SrtfPolicy(), processes, None, on_slice, starvation_bound)


def schedule_rr(
    processes: Sequence[Process],
    quantum: Optional[int] = None,
    on_slice: Optional[SliceCallback] = None,
    starvation_bound: Optional[int] = None,
) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.
    """
    policy = RoundRobinPolicy(quantum)
    return _run(policy, processes, policy.quantum, on_slice, starvation_bound)


def schedule_priority(
    processes: Sequence[Process],
    on_slice: Optional[SliceCallback] = None,
    starvation_bound: Optional[int] = None,
) -> ScheduleResult:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority. Among ready
    processes, choose the one with the smallest priority; break ties
    by earlier arrival time, then input order. Every process must have
    a priority.
    """
    return _run(PriorityPolicy(), processes, None, on_slice, starvation_bound)


def schedule_priority_preemptive(
    processes: Sequence[Process],
    on_slice: Optional[SliceCallback] = None,
    starvation_bound: Optional[int] = None,
) -> ScheduleResult:
    """
    Priority scheduling re-evaluated every time unit, so a newly arrived
    higher-priority process takes the CPU immediately.
    """
    return _run(PreemptivePriorityPolicy(), processes, None, on_slice, starvation_bound)


def schedule_mlfq(
    processes: Sequence[Process],
    quantums: Sequence[int] = DEFAULT_MLFQ_QUANTUMS,
    on_slice: Optional[SliceCallback] = None,
    starvation_bound: Optional[int] = None,
) -> ScheduleResult:
    policy = MlfqPolicy(quantums)
    return _run(policy, processes, policy.quantums, on_slice, starvation_bound)


Scheduler = Callable[[Sequence[Process], SimulationConfig], ScheduleResult]

ALGORITHMS: Dict[str, Scheduler] = {
    "fcfs": lambda procs, cfg: schedule_fcfs(procs, starvation_bound=cfg.starvation_bound),
    "sjf": lambda procs, cfg: schedule_sjf(procs, starvation_bound=cfg.starvation_bound),
    "srtf": lambda procs, cfg: schedule_srtf(procs, starvation_bound=cfg.starvation_bound),
    "rr": lambda procs, cfg: schedule_rr(procs, quantum=cfg.quantum, starvation_bound=cfg.starvation_bound),
    "priority": lambda procs, cfg: schedule_priority(procs, starvation_bound=cfg.starvation_bound),
    "priority-p": lambda procs, cfg: schedule_priority_preemptive(procs, starvation_bound=cfg.starvation_bound),
    "mlfq": lambda procs, cfg: schedule_mlfq(procs, quantums=cfg.quantums, starvation_bound=cfg.starvation_bound),
}

PRIORITY_ALGORITHMS = {"priority", "priority-p"}


def run_algorithm(
    name: str,
    processes: Sequence[Process],
    config: Optional[SimulationConfig] = None,
    *,
    quantum: Optional[int] = None,
    quantums: Optional[Sequence[int]] = None,
    starvation_bound: Optional[int] = None,
) -> ScheduleResult:
    """
    Dispatch to the requested algorithm. ``quantum``, ``quantums`` and
    ``starvation_bound`` are shortcuts for building a SimulationConfig;
    they are ignored when ``config`` is given.
    """
    key = name.lower()
    if key not in ALGORITHMS:
        raise InvalidParameterError(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})")

    if config is None:
        config = SimulationConfig(
            quantum=quantum,
            quantums=tuple(quantums) if quantums is not None else DEFAULT_MLFQ_QUANTUMS,
            starvation_bound=starvation_bound,
        )

    return ALGORITHMS[key](processes, config)
