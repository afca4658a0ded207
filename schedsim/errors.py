"""
Exceptions raised when a simulation cannot be started.

All of them derive from ValueError: they describe bad input, never a
transient failure, and nothing in the package retries them.
"""

from __future__ import annotations


class SchedulingError(ValueError):
    pass


class InvalidParameterError(SchedulingError):
    """A policy parameter (quantum, MLFQ quanta, algorithm name) is unusable."""


class MalformedInputError(SchedulingError):
    """A process record has a negative arrival, a non-positive burst, or a duplicate pid."""


class MissingFieldError(SchedulingError):
    def __init__(self, pid: str, field_name: str = "priority") -> None:
        self.pid = pid
        self.field_name = field_name
        super().__init__(f"Process {pid} is missing {field_name}")
