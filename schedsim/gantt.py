from __future__ import annotations

from typing import Dict, List, Optional

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ExecutionSegment, Timeline


class GanttRecorder:
    """
    Collects execution segments during a run.

    Consecutive execution of the same process is merged into one segment;
    a different process, or the same one after an idle gap, opens a new one.
    """

    def __init__(self) -> None:
        self._segments: List[ExecutionSegment] = []
        self._end_time: Optional[int] = None

    def record_execution(self, pid: int, time: int, duration: int = 1) -> bool:
        """
        Record that ``pid`` ran for ``duration`` units from ``time``.

        Returns True when a new segment was opened.
        """
        if self._end_time is not None:
            raise RuntimeError("Timeline already finalized")

        last = self._segments[-1] if self._segments else None
        if last is not None and time < last.end_time:
            raise ValueError(f"Segment at {time} overlaps previous segment ending at {last.end_time}")

        if last is not None and last.pid == pid and last.end_time == time:
            last.end_time = time + duration
            return False

        self._segments.append(ExecutionSegment(pid=pid, start_time=time, end_time=time + duration))
        return True

    def finalize(self, end_time: int) -> Timeline:
        if self._segments and end_time < self._segments[-1].end_time:
            raise ValueError("End time precedes the last segment")
        self._end_time = end_time
        return Timeline(segments=list(self._segments), end_time=end_time)


def render_gantt(timeline: Timeline) -> str:
    """
    Plain-text Gantt chart: the process sequence and the start time of each
    segment followed by the closing time.
    """
    if not timeline.segments:
        return "No execution segments to display"

    sequence = " | ".join(seg.label for seg in timeline.segments)
    times = str(timeline.segments[0].start_time)
    for seg in timeline.segments[1:]:
        times += f"{seg.start_time:>6}"
    times += f"{timeline.end_time:>6}"

    return "\n".join([sequence, times])


def build_rich_gantt(timeline: Timeline) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not timeline.segments:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[int, str] = {}

    def pid_color(pid: int) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    bars = Text()
    labels = Text()
    time_marks = "0"
    last_time = 0

    for seg in timeline.segments:
        idle_gap = seg.start_time - last_time
        if idle_gap > 0:
            bars.append("." * idle_gap, style="dim")
            labels.append(" " * idle_gap)
            last_time = seg.start_time
            time_marks += f"{last_time:>3}"

        width = max(1, seg.duration)
        bars.append(" " * width, style=f"on {pid_color(seg.pid)}")
        labels.append(seg.label[:width].ljust(width), style="bold")

        last_time = seg.end_time
        time_marks += f"{last_time:>3}"

    table = Table.grid(padding=(0, 0))
    table.add_row(bars)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
