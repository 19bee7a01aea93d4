from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Union

from .gantt import GanttRecorder
from .metrics import compute_process_metrics, compute_system_metrics, summarize_process_metrics
from .models import Process, ScheduleReport
from .policies import SchedulingPolicy, get_policy
from .registry import ProcessRegistry, validate_batch

logger = logging.getLogger(__name__)

PolicyLike = Union[str, SchedulingPolicy]


def simulate(
    batch: Sequence[Process],
    policy: PolicyLike,
    quantum: Optional[int] = None,
) -> ScheduleReport:
    """
    Run one batch under one policy and return the full report.

    ``policy`` is either a policy identifier (``"fcfs"``, ``"rr"``, ...) or a
    policy instance. The batch itself is never modified; each call works on
    a fresh registry. When nothing is ready the clock jumps straight to the
    next arrival, which yields the same timeline as idling one unit at a time.
    """
    validate_batch(batch)
    if not isinstance(policy, SchedulingPolicy):
        policy = get_policy(policy, quantum)
    elif quantum is not None:
        logger.debug("Ignoring quantum %s for policy instance %s", quantum, policy.name)

    registry = ProcessRegistry(batch)
    recorder = GanttRecorder()
    policy.start(registry)

    logger.info("Simulating %d processes with %s", len(registry), policy.title)

    time = 0
    while not registry.all_complete():
        decision = policy.select_next(time, registry)
        if decision.idle:
            nxt = registry.next_arrival(time)
            logger.debug("t=%d: CPU idle until %d", time, nxt)
            time = nxt
            continue

        pid = decision.pid
        run_time = min(decision.quantum, registry.remaining(pid))
        if recorder.record_execution(pid, time, run_time):
            logger.debug("t=%d: dispatch P%d for %d", time, pid, run_time)

        completion = registry.execute(pid, time, run_time)
        time += run_time
        if completion is not None:
            logger.debug("t=%d: P%d completed", time, pid)

        policy.on_slice_end(pid, time, registry)

    timeline = recorder.finalize(time)
    processes = compute_process_metrics(registry)
    summary = summarize_process_metrics(processes)

    report = ScheduleReport(
        policy=policy.title,
        quantum=policy.quantum,
        processes=processes,
        timeline=timeline,
        avg_waiting=summary["avg_waiting"],
        avg_turnaround=summary["avg_turnaround"],
        avg_response=summary["avg_response"],
    )
    compute_system_metrics(report)

    logger.info(
        "%s finished at t=%d (avg waiting %.2f, avg turnaround %.2f)",
        policy.title,
        time,
        report.avg_waiting,
        report.avg_turnaround,
    )
    return report


def simulate_all(
    batch: Sequence[Process],
    policies: Iterable[str],
    quantum: Optional[int] = None,
) -> List[ScheduleReport]:
    """
    Run the same batch under several policies. Every policy is resolved up
    front so an unknown name or bad quantum rejects the whole comparison.
    """
    resolved = [get_policy(name, quantum) for name in policies]
    return [simulate(batch, p) for p in resolved]
