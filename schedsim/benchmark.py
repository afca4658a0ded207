from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .algorithms import run_algorithm
from .config import SimulationConfig
from .errors import InvalidParameterError
from .models import Process

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkResult:
    algorithm: str
    processes: int
    repeat: int
    best_seconds: float
    mean_seconds: float

    @property
    def best_ms(self) -> float:
        return self.best_seconds * 1000.0


def time_algorithm(
    name: str,
    processes: Sequence[Process],
    config: Optional[SimulationConfig] = None,
    repeat: int = 1,
) -> BenchmarkResult:
    """
    Wall-clock a whole-engine invocation ``repeat`` times. The engine copies
    its input, so every repetition sees the same workload.
    """
    if repeat <= 0:
        raise InvalidParameterError("repeat must be strictly positive")

    config = config or SimulationConfig(quantum=4)
    timings: List[float] = []
    for _ in range(repeat):
        start = time.perf_counter()
        run_algorithm(name, processes, config)
        timings.append(time.perf_counter() - start)

    result = BenchmarkResult(
        algorithm=name,
        processes=len(processes),
        repeat=repeat,
        best_seconds=min(timings),
        mean_seconds=sum(timings) / len(timings),
    )
    logger.info("%s: %.3f ms (best of %d, %d processes)", name, result.best_ms, repeat, len(processes))
    return result


def benchmark(
    algorithms: Iterable[str],
    processes: Sequence[Process],
    config: Optional[SimulationConfig] = None,
    repeat: int = 1,
) -> List[BenchmarkResult]:
    return [time_algorithm(name, processes, config, repeat) for name in algorithms]
