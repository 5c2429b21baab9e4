from __future__ import annotations

import colorsys
from typing import List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import IDLE, TimelineSegment

PROCESS_COLORS = {
    "P1": "#3498db",
    "P2": "#2ecc71",
    "P3": "#e74c3c",
    "P4": "#9b59b6",
    "P5": "#f1c40f",
    "P6": "#1abc9c",
    "P7": "#e67e22",
    "P8": "#34495e",
    "P9": "#fd79a8",
    "P10": "#00cec9",
    IDLE: "#95a5a6",
}


def process_color(name: str) -> str:
    """
    Hex colour for a process. Names outside the fixed palette get a hue
    derived from the sum of their character codes.
    """
    if name in PROCESS_COLORS:
        return PROCESS_COLORS[name]

    hue = sum(ord(ch) for ch in name) % 360
    # hsl(hue, 70%, 60%)
    r, g, b = colorsys.hls_to_rgb(hue / 360, 0.6, 0.7)
    return "#{:02x}{:02x}{:02x}".format(round(r * 255), round(g * 255), round(b * 255))


def render_gantt(timeline: List[TimelineSegment]) -> str:
    """
    Plain-text Gantt chart. Idle time is drawn with dots.
    """
    if not timeline:
        return "(no execution)"

    line = "|"
    labels = ""
    time_marks = str(timeline[0].start)

    for seg in timeline:
        width = max(1, seg.duration)
        line += ("." if seg.is_idle else "=") * width
        labels += seg.process_name[:width].ljust(width)
        time_marks += f"{seg.end:>3}"

    line += "|"

    return "\n".join(
        [
            "Gantt Chart:",
            line,
            labels,
            time_marks,
        ]
    )


def build_rich_gantt(timeline: List[TimelineSegment]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not timeline:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    bars = Text()
    labels = Text()
    time_marks = str(timeline[0].start)

    for seg in timeline:
        width = max(1, seg.duration)
        bars.append(" " * width, style=f"on {process_color(seg.process_name)}")
        labels.append(seg.process_name[:width].ljust(width), style="dim" if seg.is_idle else "bold")
        time_marks += f"{seg.end:>3}"

    table = Table.grid(padding=(0, 0))
    table.add_row(bars)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
