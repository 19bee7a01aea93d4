import pytest

from schedsim.gantt import GanttRecorder, build_rich_gantt, render_gantt
from schedsim.models import ExecutionSegment, Timeline


def test_recorder_merges_contiguous_runs():
    rec = GanttRecorder()
    assert rec.record_execution(1, 0) is True
    assert rec.record_execution(1, 1) is False
    assert rec.record_execution(2, 2, 3) is True
    assert rec.record_execution(1, 5) is True

    timeline = rec.finalize(6)
    assert timeline.pairs() == [(1, 0), (2, 2), (1, 5)]
    assert timeline.end_time == 6


def test_recorder_opens_segment_after_idle_gap():
    rec = GanttRecorder()
    rec.record_execution(1, 0, 2)
    assert rec.record_execution(1, 4, 1) is True
    timeline = rec.finalize(5)
    assert timeline.idle_gaps() == [(2, 4)]


def test_recorder_rejects_overlap_and_late_records():
    rec = GanttRecorder()
    rec.record_execution(1, 0, 3)
    with pytest.raises(ValueError):
        rec.record_execution(2, 2)
    rec.finalize(3)
    with pytest.raises(RuntimeError):
        rec.record_execution(2, 3)


def test_render_gantt_plain():
    timeline = Timeline(
        segments=[
            ExecutionSegment(pid=1, start_time=0, end_time=2),
            ExecutionSegment(pid=2, start_time=2, end_time=4),
            ExecutionSegment(pid=3, start_time=6, end_time=7),
        ],
        end_time=7,
    )
    out = render_gantt(timeline)
    assert out.splitlines() == ["P1 | P2 | P3", "0     2     6     7"]


def test_render_gantt_empty():
    assert render_gantt(Timeline()) == "No execution segments to display"


def test_rich_gantt_time_marks_include_idle():
    timeline = Timeline(
        segments=[
            ExecutionSegment(pid=1, start_time=0, end_time=2),
            ExecutionSegment(pid=2, start_time=5, end_time=8),
        ],
        end_time=8,
    )
    _, marks = build_rich_gantt(timeline)
    assert marks.split() == ["0", "2", "5", "8"]
