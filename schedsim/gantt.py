from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import TimelineSegment

COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def _time_marks(points: List[int], origin: int) -> str:
    """
    Write each time label starting at its own column (one column per time
    unit from ``origin``). A label that would touch the previous one is
    skipped so the remaining labels stay aligned with the bars.
    """
    line = ""
    for t in points:
        col = t - origin
        if line and col <= len(line):
            continue
        line = line.ljust(col) + str(t)
    return line


def build_rich_gantt(segments: List[TimelineSegment]) -> Tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.

    Idle gaps between segments are left blank. Each process keeps one color
    for the whole chart.
    """
    if not segments:
        return Panel("No execution", title="Gantt Chart"), ""

    segments = sorted(segments, key=lambda s: (s.start_time, s.end_time))

    pid_to_color: Dict[str, str] = {}

    def pid_color(pid: str) -> str:
        if pid not in pid_to_color:
            pid_to_color[pid] = COLORS[len(pid_to_color) % len(COLORS)]
        return pid_to_color[pid]

    bars = Text()
    labels = Text()
    origin = segments[0].start_time
    last_time = origin
    points = [origin]

    for seg in segments:
        idle_gap = seg.start_time - last_time
        if idle_gap > 0:
            bars.append("." * idle_gap, style="dim")
            labels.append(" " * idle_gap)
            points.append(seg.start_time)

        width = max(1, seg.duration)
        bars.append(" " * width, style=f"on {pid_color(seg.pid)}")
        labels.append(seg.pid[:width].ljust(width), style="bold")

        last_time = seg.end_time
        points.append(last_time)

    time_marks = _time_marks(points, origin)

    # Marks sit inside the panel so their columns line up with the bars.
    table = Table.grid(padding=(0, 0))
    table.add_row(bars)
    table.add_row(labels)
    table.add_row(Text(time_marks, style="dim"))

    return Panel.fit(table, title="Gantt Chart"), time_marks


def segment_at(segments: List[TimelineSegment], t: int) -> Optional[TimelineSegment]:
    """Segment occupying the processor during [t, t + 1), or None when idle."""
    for seg in segments:
        if seg.start_time <= t < seg.end_time:
            return seg
    return None
