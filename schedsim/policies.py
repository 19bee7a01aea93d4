from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List, Optional, Set, Type

from .errors import InvalidQuantum, UnknownPolicy
from .models import Decision, Process
from .registry import ProcessRegistry

logger = logging.getLogger(__name__)

DEFAULT_QUANTUM = 2


class SchedulingPolicy:
    """
    Decision rule consulted by the engine at every decision point.

    ``select_next`` returns the process to run and for how long. Subclasses
    that keep per-run state (Round Robin's ready queue) reset it in ``start``.
    """

    name = "base"
    title = "Base policy"
    preemptive = False
    uses_priority = False

    def start(self, registry: ProcessRegistry) -> None:
        pass

    def select_next(self, time: int, registry: ProcessRegistry) -> Decision:
        raise NotImplementedError

    def on_slice_end(self, pid: int, time: int, registry: ProcessRegistry) -> None:
        pass

    @property
    def quantum(self) -> Optional[int]:
        return None


class _KeyedPolicy(SchedulingPolicy):
    """
    Picks the ready process with the smallest ``key``.

    Non-preemptive variants run the winner to completion; preemptive ones
    run it for a single unit and decide again.
    """

    def key(self, process: Process, registry: ProcessRegistry):
        raise NotImplementedError

    def select_next(self, time: int, registry: ProcessRegistry) -> Decision:
        ready = registry.ready(time)
        if not ready:
            return Decision(pid=None)

        chosen = min(ready, key=lambda p: self.key(p, registry))
        if self.preemptive:
            return Decision(pid=chosen.pid, quantum=1)
        return Decision(pid=chosen.pid, quantum=registry.remaining(chosen.pid))


class FCFSPolicy(_KeyedPolicy):
    name = "fcfs"
    title = "FCFS"

    def key(self, process, registry):
        return (process.arrival_time, process.pid)


class SJFPolicy(_KeyedPolicy):
    name = "sjf"
    title = "SJF (non-preemptive)"

    def key(self, process, registry):
        return (process.burst_time, process.arrival_time, process.pid)


class SRTFPolicy(_KeyedPolicy):
    name = "srtf"
    title = "SJF (preemptive / SRTF)"
    preemptive = True

    def key(self, process, registry):
        return (registry.remaining(process.pid), process.arrival_time, process.pid)


class PriorityPolicy(_KeyedPolicy):
    """
    Lower numeric priority value means higher priority. Ties go to the
    earlier arrival, then the lower pid.
    """

    name = "priority"
    title = "Priority (non-preemptive)"
    uses_priority = True

    def key(self, process, registry):
        return (process.priority, process.arrival_time, process.pid)


class PreemptivePriorityPolicy(PriorityPolicy):
    name = "priority-p"
    title = "Priority (preemptive)"
    preemptive = True


class RoundRobinPolicy(SchedulingPolicy):
    """
    FIFO ready queue with a fixed time quantum.

    Processes that arrive while a slice runs are queued before the process
    that was just preempted.
    """

    name = "rr"
    title = "Round Robin"

    def __init__(self, quantum: Optional[int] = None):
        if quantum is None or quantum <= 0:
            raise InvalidQuantum(f"Round Robin requires a positive quantum (got {quantum})")
        self._quantum = quantum
        self._queue: Deque[int] = deque()
        self._seen: Set[int] = set()

    @property
    def quantum(self) -> Optional[int]:
        return self._quantum

    def start(self, registry: ProcessRegistry) -> None:
        self._queue.clear()
        self._seen.clear()

    def _enqueue_arrivals(self, time: int, registry: ProcessRegistry) -> None:
        arrived = [p for p in registry.ready(time) if p.pid not in self._seen]
        for p in sorted(arrived, key=lambda x: (x.arrival_time, x.pid)):
            self._queue.append(p.pid)
            self._seen.add(p.pid)

    def select_next(self, time: int, registry: ProcessRegistry) -> Decision:
        self._enqueue_arrivals(time, registry)
        if not self._queue:
            return Decision(pid=None)

        pid = self._queue.popleft()
        return Decision(pid=pid, quantum=min(self._quantum, registry.remaining(pid)))

    def on_slice_end(self, pid: int, time: int, registry: ProcessRegistry) -> None:
        self._enqueue_arrivals(time, registry)
        if registry.remaining(pid) > 0:
            self._queue.append(pid)


POLICIES: Dict[str, Type[SchedulingPolicy]] = {
    "fcfs": FCFSPolicy,
    "sjf": SJFPolicy,
    "srtf": SRTFPolicy,
    "priority": PriorityPolicy,
    "priority-p": PreemptivePriorityPolicy,
    "rr": RoundRobinPolicy,
}

ALIASES = {
    "sjf-np": "sjf",
    "sjf-p": "srtf",
    "priority-np": "priority",
    "round-robin": "rr",
}


def policy_names() -> List[str]:
    return list(POLICIES.keys())


def get_policy(name: str, quantum: Optional[int] = None) -> SchedulingPolicy:
    """
    Build the policy registered under ``name``. ``quantum`` only matters for
    Round Robin and is ignored by every other policy.
    """
    key = str(name).strip().lower()
    key = ALIASES.get(key, key)
    if key not in POLICIES:
        raise UnknownPolicy(name, known=policy_names())

    cls = POLICIES[key]
    if cls is RoundRobinPolicy:
        return RoundRobinPolicy(quantum)

    if quantum is not None:
        logger.debug("Ignoring quantum %s for policy %s", quantum, key)
    return cls()
