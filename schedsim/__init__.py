"""
CPU scheduling simulator.

Runs a batch of processes through FCFS, SJF, SRTF, priority (both
variants) or round-robin scheduling and reports the Gantt timeline
together with completion, turnaround and waiting times.
"""

from .engine import simulate, simulate_all
from .errors import InvalidBatch, InvalidQuantum, SchedulingError, UnknownPolicy
from .models import Process, ScheduleReport
from .policies import get_policy
from .registry import build_batch

__all__ = [
    "InvalidBatch",
    "InvalidQuantum",
    "Process",
    "ScheduleReport",
    "SchedulingError",
    "UnknownPolicy",
    "build_batch",
    "get_policy",
    "simulate",
    "simulate_all",
]
