from __future__ import annotations


class SchedulerError(Exception):
    """Base class for errors raised by the scheduler engine."""


class InvalidConfiguration(SchedulerError, ValueError):
    """
    The process set or policy parameters cannot be simulated.

    Raised before any simulation work begins.
    """


class InternalInvariantViolation(SchedulerError, RuntimeError):
    """A scheduling invariant failed; this indicates a bug in the engine."""
