from __future__ import annotations

from random import Random
from typing import List, Optional

from .errors import InvalidParameterError
from .models import Process


def generate_workload(
    count: int,
    *,
    seed: Optional[int] = None,
    max_arrival: int = 50,
    max_burst: int = 20,
    priority_levels: Optional[int] = 5,
    prefix: str = "P",
) -> List[Process]:
    """
    Random processes ``P0 .. P{count-1}`` with arrivals in ``[0, max_arrival)``,
    bursts in ``[1, max_burst]`` and priorities in ``[0, priority_levels)``.

    Pass ``priority_levels=None`` to leave priorities unset. The same seed
    always yields the same workload.
    """
    if count < 0:
        raise InvalidParameterError("count cannot be negative")
    if max_arrival <= 0:
        raise InvalidParameterError("max_arrival must be strictly positive")
    if max_burst <= 0:
        raise InvalidParameterError("max_burst must be strictly positive")
    if priority_levels is not None and priority_levels <= 0:
        raise InvalidParameterError("priority_levels must be strictly positive")

    rng = Random(seed)
    processes: List[Process] = []
    for i in range(count):
        arrival = rng.randrange(max_arrival)
        burst = rng.randint(1, max_burst)
        priority = rng.randrange(priority_levels) if priority_levels is not None else None
        processes.append(Process(pid=f"{prefix}{i}", arrival_time=arrival, burst_time=burst, priority=priority))
    return processes
