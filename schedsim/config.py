from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .errors import InvalidParameterError

DEFAULT_MLFQ_QUANTUMS: Tuple[int, ...] = (2, 4, 8)


def check_quantum(quantum: Optional[int]) -> int:
    if quantum is None or isinstance(quantum, bool) or not isinstance(quantum, int) or quantum <= 0:
        raise InvalidParameterError(f"Quantum must be a positive integer, got {quantum!r}")
    return quantum


def check_quantums(quantums: Sequence[int]) -> Tuple[int, ...]:
    values = tuple(quantums)
    if not values:
        raise InvalidParameterError("MLFQ needs at least one queue level")
    for q in values:
        check_quantum(q)
    return values


def parse_quantums(raw: str) -> Tuple[int, ...]:
    """
    Parse a comma-separated list such as ``"2,4,8"`` into MLFQ quanta.
    """
    try:
        values = [int(item.strip()) for item in raw.split(",") if item.strip()]
    except ValueError as exc:
        raise InvalidParameterError(f"Invalid quantum list: {raw!r}") from exc
    return check_quantums(values)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Policy parameters for a run. ``quantum`` is only checked by Round Robin,
    so it may stay None for the other policies. ``starvation_bound`` is the
    waiting time above which a process counts as starved; None means the
    longest burst in the workload.
    """

    quantum: Optional[int] = None
    quantums: Tuple[int, ...] = DEFAULT_MLFQ_QUANTUMS
    starvation_bound: Optional[int] = None

    def __post_init__(self) -> None:
        if self.quantum is not None:
            check_quantum(self.quantum)
        if self.starvation_bound is not None and (
            isinstance(self.starvation_bound, bool)
            or not isinstance(self.starvation_bound, int)
            or self.starvation_bound < 0
        ):
            raise InvalidParameterError(f"starvation_bound must be an integer >= 0, got {self.starvation_bound!r}")
        object.__setattr__(self, "quantums", check_quantums(self.quantums))
