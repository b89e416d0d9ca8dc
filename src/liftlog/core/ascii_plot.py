"""
ASCII plotting for progress visualization.

Creates terminal-friendly charts of max weight per session day and of
weekly training volume.
"""

from datetime import date
from typing import Sequence

from .analytics import ProgressionPoint, WeeklyVolume
from .metrics import format_weight


def _staircase(
    grid: list[list[str]],
    start: tuple[int, int],
    end: tuple[int, int],
) -> None:
    """Connect two grid cells with ─ and corner characters (╭─╯ style)."""
    col1, row1 = start
    col2, row2 = end
    width = len(grid[0])
    height = len(grid)

    def put(x: int, r: int, ch: str) -> None:
        if 0 <= x < width and 0 <= r < height and grid[r][x] == " ":
            grid[r][x] = ch

    if row1 == row2:
        for x in range(col1 + 1, col2):
            put(x, row1, "─")
        return
    if col1 == col2:
        for r in range(min(row1, row2) + 1, max(row1, row2)):
            put(col1, r, "│")
        return

    step_dir = -1 if row2 < row1 else 1
    exit_corner = "╯" if step_dir == -1 else "╮"
    entry_corner = "╭" if step_dir == -1 else "╰"
    segments = abs(row2 - row1) + 1

    for step in range(segments):
        row = row1 + step_dir * step
        pivot_in = col1 + (col2 - col1) * step // segments
        pivot_out = col1 + (col2 - col1) * (step + 1) // segments
        if step > 0:
            put(pivot_in, row, entry_corner)
        for x in range(pivot_in + 1, pivot_out if step < segments - 1 else col2):
            put(x, row, "─")
        if step < segments - 1:
            put(pivot_out, row, exit_corner)


def create_progression_plot(
    points: Sequence[ProgressionPoint],
    exercise_name: str,
    unit: str = "lbs",
    width: int = 60,
    height: int = 16,
) -> str:
    """
    Create an ASCII plot of max weight per session day.

    Args:
        points: Progression points, ascending by date
        exercise_name: Display name shown in the chart title
        unit: Weight unit for the axis label
        width: Plot width in characters
        height: Plot height in lines

    Returns:
        ASCII art string
    """
    if not points:
        return f"No completed sessions with {exercise_name} yet."

    first_day: date = points[0].date
    last_day: date = points[-1].date
    day_range = max((last_day - first_day).days, 1)

    low = min(p.max_weight for p in points)
    high = max(p.max_weight for p in points)
    y_min = max(0.0, low - (high - low) * 0.1 - 5)
    y_max = high + (high - low) * 0.1 + 5
    y_range = y_max - y_min

    plot_width = width - 8
    plot_height = height - 3
    grid = [[" " for _ in range(plot_width)] for _ in range(plot_height)]

    cells: list[tuple[int, int, float]] = []
    for p in points:
        x = int(((p.date - first_day).days / day_range) * (plot_width - 1))
        y = plot_height - 1 - int(((p.max_weight - y_min) / y_range) * (plot_height - 1))
        cells.append((x, y, p.max_weight))

    for (x1, y1, _), (x2, y2, _) in zip(cells, cells[1:]):
        _staircase(grid, (x1, y1), (x2, y2))
    for x, y, _ in cells:
        grid[y][x] = "●"

    lines = [f"Max Weight Progress ({exercise_name})", "─" * width]
    for i, row in enumerate(grid):
        y_val = y_max - (i / (plot_height - 1)) * y_range if plot_height > 1 else y_max
        lines.append(f"{y_val:6.0f} ┤" + "".join(row))
    lines.append("─" * width)

    label_line = [" "] * plot_width
    mid_day = first_day + (last_day - first_day) / 2
    for x_pos, day in ((0, first_day), (plot_width // 2, mid_day), (plot_width - 7, last_day)):
        for i, c in enumerate(day.strftime("%b %d")):
            if 0 <= x_pos + i < plot_width:
                label_line[x_pos + i] = c
    lines.append(" " * 8 + "".join(label_line))
    lines.append(
        f"● max {unit} per day   best: {format_weight(high)} {unit}   days: {len(points)}"
    )
    return "\n".join(lines)


def create_simple_bar_chart(
    labels: list[str],
    values: list[float],
    width: int = 40,
    title: str = "",
) -> str:
    """
    Create a simple horizontal bar chart.

    Args:
        labels: Labels for each bar
        values: Values for each bar
        width: Maximum bar width
        title: Chart title

    Returns:
        ASCII bar chart string
    """
    if not values:
        return "No data to display."

    max_val = max(values)
    max_label_len = max(len(label) for label in labels)

    lines = []
    if title:
        lines.append(title)
        lines.append("─" * (max_label_len + width + 10))

    for label, value in zip(labels, values):
        bar_len = int((value / max_val) * width) if max_val > 0 else 0
        lines.append(f"{label:>{max_label_len}} │{'█' * bar_len} {value:,.0f}")

    return "\n".join(lines)


def create_weekly_volume_chart(weeks: Sequence[WeeklyVolume], unit: str = "lbs") -> str:
    """
    Create a chart of total volume per week, oldest week first.

    Args:
        weeks: Weekly volume buckets
        unit: Weight unit for the title

    Returns:
        ASCII bar chart string
    """
    labels = [w.week_start.strftime("%b %d") for w in weeks]
    values = [w.total_volume for w in weeks]
    return create_simple_bar_chart(labels, values, title=f"Weekly Volume ({unit} × reps)")
