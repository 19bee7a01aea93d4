from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import InvalidBatch
from .models import Process, ProcessState

DEFAULT_PRIORITY = 0

Record = Union[Mapping, Sequence[int]]


def build_batch(records: Iterable[Record]) -> List[Process]:
    """
    Turn raw input records into a validated batch.

    A record is either a mapping with ``arrival_time``, ``burst_time`` and an
    optional ``priority``, or an ``(arrival, burst[, priority])`` sequence.
    Process ids follow input order starting at 1.
    """
    batch: List[Process] = []
    for pid, record in enumerate(records, start=1):
        arrival, burst, priority = _fields(record)
        batch.append(Process(pid=pid, arrival_time=arrival, burst_time=burst, priority=priority))

    validate_batch(batch)
    return batch


def _fields(record: Record) -> Tuple[int, int, int]:
    try:
        if isinstance(record, Mapping):
            arrival = _as_int(record["arrival_time"])
            burst = _as_int(record["burst_time"])
            prio_val = record.get("priority")
        else:
            values = list(record)
            if len(values) not in (2, 3):
                raise ValueError("expected (arrival, burst[, priority])")
            arrival, burst = _as_int(values[0]), _as_int(values[1])
            prio_val = values[2] if len(values) == 3 else None
        priority = _as_int(prio_val) if prio_val not in (None, "") else DEFAULT_PRIORITY
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidBatch(f"Invalid process entry: {record!r}") from exc

    return arrival, burst, priority


def _as_int(value) -> int:
    """Integers and integral strings or floats; 1.9 or True is malformed."""
    if isinstance(value, bool):
        raise TypeError(f"expected an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"expected an integer, got {value!r}")
    return int(value)


def validate_batch(batch: Sequence[Process]) -> None:
    if not batch:
        raise InvalidBatch("Batch must contain at least one process")

    for p in batch:
        if p.burst_time <= 0:
            raise InvalidBatch(f"{p.label}: burst time must be positive (got {p.burst_time})")
        if p.arrival_time < 0:
            raise InvalidBatch(f"{p.label}: arrival time must not be negative (got {p.arrival_time})")

    pids = [p.pid for p in batch]
    if len(set(pids)) != len(pids):
        raise InvalidBatch("Process ids must be unique")


class ProcessRegistry:
    """
    Descriptors of one batch plus the mutable state of a single run.

    Every registry owns its own ``ProcessState`` objects, so creating a new
    registry for each run keeps runs isolated from each other.
    """

    def __init__(self, batch: Sequence[Process]):
        validate_batch(batch)
        self._processes: Dict[int, Process] = {p.pid: p for p in batch}
        self._states: Dict[int, ProcessState] = {
            p.pid: ProcessState(pid=p.pid, remaining_time=p.burst_time) for p in batch
        }

    def __len__(self) -> int:
        return len(self._processes)

    @property
    def processes(self) -> List[Process]:
        return list(self._processes.values())

    def process(self, pid: int) -> Process:
        return self._processes[pid]

    def state(self, pid: int) -> ProcessState:
        return self._states[pid]

    def remaining(self, pid: int) -> int:
        return self._states[pid].remaining_time

    def ready(self, time: int) -> List[Process]:
        """Processes that have arrived by ``time`` and still need CPU."""
        return [
            p
            for p in self._processes.values()
            if p.arrival_time <= time and self._states[p.pid].remaining_time > 0
        ]

    def next_arrival(self, time: int) -> int:
        """Earliest arrival after ``time`` among unfinished processes."""
        return min(
            p.arrival_time
            for p in self._processes.values()
            if p.arrival_time > time and self._states[p.pid].remaining_time > 0
        )

    def all_complete(self) -> bool:
        return all(s.completed for s in self._states.values())

    def execute(self, pid: int, start: int, duration: int) -> Optional[int]:
        """
        Charge ``duration`` units of CPU to ``pid`` starting at ``start``.

        Returns the completion time when this slice finishes the process.
        """
        state = self._states[pid]
        if duration <= 0 or duration > state.remaining_time:
            raise ValueError(
                f"P{pid}: cannot run {duration} units with {state.remaining_time} remaining"
            )

        if state.start_time is None:
            state.start_time = start
        state.remaining_time -= duration

        if state.remaining_time == 0:
            state.completion_time = start + duration
            return state.completion_time
        return None
