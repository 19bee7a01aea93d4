from __future__ import annotations

from typing import List

from .models import ProcessMetrics, ScheduleReport, SystemMetrics, Timeline
from .registry import ProcessRegistry


def compute_process_metrics(registry: ProcessRegistry) -> List[ProcessMetrics]:
    """
    Per-process completion, turnaround, waiting and response times for a
    finished run, in pid order.
    """
    metrics: List[ProcessMetrics] = []
    for p in sorted(registry.processes, key=lambda x: x.pid):
        state = registry.state(p.pid)
        if state.completion_time is None or state.start_time is None:
            raise ValueError(f"{p.label} has not completed")

        turnaround_time = state.completion_time - p.arrival_time
        metrics.append(
            ProcessMetrics(
                pid=p.pid,
                arrival_time=p.arrival_time,
                burst_time=p.burst_time,
                priority=p.priority,
                start_time=state.start_time,
                completion_time=state.completion_time,
                turnaround_time=turnaround_time,
                waiting_time=turnaround_time - p.burst_time,
                response_time=state.start_time - p.arrival_time,
            )
        )
    return metrics


def summarize_process_metrics(processes: List[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(p.response_time for p in processes) / n,
    }


def compute_system_metrics(report: ScheduleReport) -> SystemMetrics:
    """
    Compute throughput and CPU utilization from the per-process metrics and
    the timeline of a report, and attach them to it.
    """
    timeline: Timeline = report.timeline
    makespan = timeline.end_time
    cpu_busy_time = sum(seg.duration for seg in timeline.segments)

    throughput = len(report.processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        idle_time=makespan - cpu_busy_time,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
    )
    report.system = system
    return system
