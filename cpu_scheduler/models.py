from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Union

from .errors import InvalidConfiguration

IDLE = "Idle"


class Policy(str, Enum):
    FCFS = "fcfs"
    SJF = "sjf"
    SJF_PREEMPTIVE = "sjf-p"
    PRIORITY = "priority"
    PRIORITY_PREEMPTIVE = "priority-p"
    ROUND_ROBIN = "rr"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def preemptive(self) -> bool:
        return self in (Policy.SJF_PREEMPTIVE, Policy.PRIORITY_PREEMPTIVE)

    @property
    def uses_quantum(self) -> bool:
        return self is Policy.ROUND_ROBIN

    @classmethod
    def parse(cls, value: Union["Policy", str]) -> "Policy":
        """
        Resolve a policy from a member, its value, its display label or a
        common alias (case-insensitive).
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for policy in cls:
            if key in (policy.value, policy.label.lower()):
                return policy
        if key in _ALIASES:
            return _ALIASES[key]
        raise InvalidConfiguration(f"Unknown scheduling policy '{value}'")


_LABELS = {
    Policy.FCFS: "FCFS",
    Policy.SJF: "SJF (Non-Preemptive)",
    Policy.SJF_PREEMPTIVE: "SJF (Preemptive)",
    Policy.PRIORITY: "Priority (Non-Preemptive)",
    Policy.PRIORITY_PREEMPTIVE: "Priority (Preemptive)",
    Policy.ROUND_ROBIN: "Round Robin",
}

_ALIASES = {
    "sjf-np": Policy.SJF,
    "srtf": Policy.SJF_PREEMPTIVE,
    "priority-np": Policy.PRIORITY,
    "round-robin": Policy.ROUND_ROBIN,
    "roundrobin": Policy.ROUND_ROBIN,
}


@dataclass(frozen=True)
class Process:
    name: str
    arrival_time: int
    burst_time: int
    priority: int = 0


@dataclass
class TimelineSegment:
    """
    One contiguous interval of CPU occupancy. ``process_name`` is the
    ``IDLE`` sentinel when no process holds the CPU.
    """

    process_name: str
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def is_idle(self) -> bool:
        return self.process_name == IDLE


@dataclass
class ProcessMetrics:
    name: str
    arrival_time: int
    burst_time: int
    priority: int
    start_time: int
    completion_time: int
    turnaround_time: int
    waiting_time: int
    response_time: int


@dataclass
class SystemMetrics:
    makespan: int
    cpu_busy_time: int
    idle_time: int
    throughput: float
    cpu_utilization: float
    context_switches: int = 0


@dataclass
class Metrics:
    processes: List[ProcessMetrics] = field(default_factory=list)
    average_waiting_time: float = 0.0
    average_turnaround_time: float = 0.0
    average_response_time: float = 0.0
    system: Optional[SystemMetrics] = None

    def for_process(self, name: str) -> ProcessMetrics:
        for pm in self.processes:
            if pm.name == name:
                return pm
        raise KeyError(name)


@dataclass
class ScheduleResult:
    policy: Policy
    quantum: Optional[int]
    timeline: List[TimelineSegment] = field(default_factory=list)
    metrics: Metrics = field(default_factory=Metrics)

    def __iter__(self) -> Iterator:
        # Allows ``timeline, metrics = simulate(...)``.
        return iter((self.timeline, self.metrics))
