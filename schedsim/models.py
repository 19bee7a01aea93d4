from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Process:
    """
    Immutable description of one process in a batch.

    ``pid`` is the 1-based position of the process in the input order.
    Lower ``priority`` values mean higher priority.
    """

    pid: int
    arrival_time: int
    burst_time: int
    priority: int = 0

    @property
    def label(self) -> str:
        return f"P{self.pid}"


@dataclass
class ProcessState:
    """
    Mutable per-run state of a process. Created fresh for every run.
    """

    pid: int
    remaining_time: int
    start_time: Optional[int] = None
    completion_time: Optional[int] = None

    @property
    def completed(self) -> bool:
        return self.remaining_time == 0


@dataclass(frozen=True)
class Decision:
    """
    What a policy wants the engine to do next: run ``pid`` for ``quantum``
    time units, or idle when ``pid`` is None.
    """

    pid: Optional[int]
    quantum: int = 1

    @property
    def idle(self) -> bool:
        return self.pid is None


@dataclass
class ExecutionSegment:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int

    @property
    def label(self) -> str:
        return f"P{self.pid}"

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass
class Timeline:
    segments: List[ExecutionSegment] = field(default_factory=list)
    end_time: int = 0

    def pairs(self) -> List[Tuple[int, int]]:
        """(pid, start time) pairs in execution order."""
        return [(s.pid, s.start_time) for s in self.segments]

    def idle_gaps(self) -> List[Tuple[int, int]]:
        gaps = []
        last = 0
        for seg in self.segments:
            if seg.start_time > last:
                gaps.append((last, seg.start_time))
            last = seg.end_time
        return gaps


@dataclass
class ProcessMetrics:
    pid: int
    arrival_time: int
    burst_time: int
    priority: int
    start_time: int
    completion_time: int
    turnaround_time: int
    waiting_time: int
    response_time: int

    @property
    def label(self) -> str:
        return f"P{self.pid}"


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    idle_time: int
    throughput: float
    cpu_utilization: float


@dataclass
class ScheduleReport:
    policy: str
    quantum: Optional[int]
    processes: List[ProcessMetrics] = field(default_factory=list)
    timeline: Timeline = field(default_factory=Timeline)
    avg_waiting: float = 0.0
    avg_turnaround: float = 0.0
    avg_response: float = 0.0
    system: Optional[SystemMetrics] = None
