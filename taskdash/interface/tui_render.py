"""Frame rendering: one ``FormattedText`` per redraw, read-only over ``App``."""

import calendar
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple

from prompt_toolkit.formatted_text import FormattedText

from taskdash.application.modes import CommandKind, ModeKind
from taskdash.core import Task
from taskdash.interface.tui_columns import (
    DEFAULT_COLUMNS,
    default_label,
    display_width,
    format_cell,
    pad_display,
    trim_display,
)
from taskdash.interface.tui_status import build_status_text

Fragments = List[Tuple[str, str]]

MARKER_WIDTH = 3
GAP = 1

_PROMPTS = {
    ModeKind.FILTER: "PROMPT_FILTER",
    ModeKind.ANNOTATE: "PROMPT_ANNOTATE",
}
_COMMAND_PROMPTS = {
    CommandKind.ADD: "PROMPT_ADD",
    CommandKind.MODIFY: "PROMPT_MODIFY",
    CommandKind.LOG: "PROMPT_LOG",
    CommandKind.SHELL: "PROMPT_SHELL",
    CommandKind.JUMP: "PROMPT_JUMP",
}


# -------------------- table --------------------
def table_columns(app, t) -> List[Tuple[str, str]]:
    """(column, label) pairs of the report, or the built-in layout."""
    if app.columns:
        return [(column, label or default_label(column)) for column, label in app.columns]
    return [(column, t(key)) for column, key in DEFAULT_COLUMNS]


def _is_description(column: str) -> bool:
    return column.split(".", 1)[0] == "description"


def _layout(columns, cells: List[List[str]], width: int) -> List[Tuple[int, int]]:
    """(column index, width) of the columns to draw; description takes the rest.

    Columns that are empty for every row are dropped, except description.
    """
    kept: List[Tuple[int, int]] = []
    for index, (column, label) in enumerate(columns):
        values = [row[index] for row in cells]
        if cells and not _is_description(column) and not any(values):
            continue
        size = max([display_width(label)] + [display_width(v) for v in values])
        kept.append((index, size))
    fixed = sum(size + GAP for index, size in kept if not _is_description(columns[index][0]))
    rest = max(0, width - MARKER_WIDTH - fixed - GAP)
    return [(index, rest if _is_description(columns[index][0]) else size) for index, size in kept]


def _join(marker: str, texts: List[str], layout: List[Tuple[int, int]], width: int) -> str:
    parts = [pad_display(marker, MARKER_WIDTH)]
    for index, size in layout:
        parts.append(pad_display(texts[index], size) + " " * GAP)
    return pad_display("".join(parts), width)


def _row_style(app, task: Task, selected: bool, now: datetime) -> str:
    styles = ["class:text"]
    if task.active:
        styles.append("class:active")
    if task.priority is not None:
        styles.append(f"class:priority.{task.priority.value}")
    if task.due is not None and task.due < now:
        styles.append("class:overdue")
    if task.uuid in app.table.marked:
        styles.append("class:marked")
    if app.tracking.is_tracked(task.uuid):
        styles.append("class:tracked")
    if selected:
        styles.append("class:selected")
    return " ".join(styles)


def build_table_lines(app, t, now: Optional[datetime] = None) -> List[Fragments]:
    table = app.table
    width = app.width
    now = now or datetime.now(timezone.utc)
    columns = table_columns(app, t)
    labels = [label for _, label in columns]
    window = [table.tasks[uuid] for uuid in table.visible_window()]
    # Width-independent first pass decides which columns survive.
    cells = [[format_cell(column, task, table.tasks, now) for column, _ in columns] for task in window]
    layout = _layout(columns, cells, width)
    widths = dict(layout)
    for row, task in zip(cells, window):
        for index, (column, _) in enumerate(columns):
            if _is_description(column) and index in widths:
                row[index] = format_cell(column, task, table.tasks, now, width=widths[index])

    lines: List[Fragments] = [[("class:column", _join("", labels, layout, width))]]
    if not window:
        lines.append([("class:text.dim", pad_display(t("EMPTY", filter=table.filter_text or "-"), width))])
        return lines
    selected = table.selected_uuid()
    for row, task in zip(cells, window):
        marker = ("*" if task.uuid in table.marked else " ") + (">" if task.active else " ")
        lines.append([(_row_style(app, task, task.uuid == selected, now), _join(marker, row, layout, width))])
    return lines


# -------------------- overlays --------------------
def build_help_lines(app, t) -> List[Fragments]:
    lines: List[Fragments] = [[("class:header", t("HELP_TITLE"))]]
    for key, action in app.keymap.normal_bindings():
        lines.append([("class:prompt", f"  {pad_display(key, 8)}"), ("class:text", action.replace("_", " "))])
    start = min(app.help_scroll, max(0, len(lines) - 2))
    return lines[:1] + lines[1 + start:]


def build_menu_lines(app, t) -> List[Fragments]:
    lines: List[Fragments] = [[("class:header", t("CONTEXT_TITLE"))]]
    for index, name in enumerate(app.contexts):
        style = "class:menu.selected" if index == app.menu_index else "class:menu"
        lines.append([(style, f" {pad_display(name, 30)} ")])
    return lines


def build_calendar_lines(app, t, today: Optional[date] = None) -> List[Fragments]:
    """Twelve months of ``app.calendar_year``, three per row, due dates underlined."""
    today = today or date.today()
    year = app.calendar_year or today.year
    due_days = {
        task.due.astimezone().date()
        for task in app.visible_tasks()
        if task.due is not None
    }
    cal = calendar.Calendar(firstweekday=0)
    lines: List[Fragments] = [[("class:header", t("CALENDAR_TITLE", year=year))]]
    for first in range(1, 13, 3):
        months = range(first, first + 3)
        title: Fragments = []
        for month in months:
            title.append(("class:header", f"{calendar.month_name[month]:^21}  "))
        lines.append(title)
        lines.append([("class:text.dim", ("Mo Tu We Th Fr Sa Su   " * 3).rstrip())])
        weeks = [cal.monthdayscalendar(year, month) for month in months]
        for row in range(max(len(w) for w in weeks)):
            line: Fragments = []
            for month, month_weeks in zip(months, weeks):
                days = month_weeks[row] if row < len(month_weeks) else [0] * 7
                for day in days:
                    if not day:
                        line.append(("", "   "))
                        continue
                    current = date(year, month, day)
                    style = "class:text"
                    if current in due_days:
                        style = "class:calendar.due"
                    if current == today:
                        style = "class:calendar.today"
                    line.append((style, f"{day:>2}"))
                    line.append(("", " "))
                line.append(("", "  "))
            lines.append(line)
    return lines


# -------------------- bottom lines --------------------
def build_prompt_line(app, t) -> Fragments:
    mode = app.mode
    if mode.kind == ModeKind.CONFIRM and mode.pending is not None:
        pending = mode.pending
        key = f"CONFIRM_{pending.kind.upper()}"
        return [("class:prompt", t(key, count=len(pending.uuids), args=" ".join(pending.args)))]
    if not mode.is_line_mode:
        return [("", "")]
    if mode.kind == ModeKind.COMMAND:
        label = t(_COMMAND_PROMPTS.get(mode.command or CommandKind.ADD, "PROMPT_ADD"))
    else:
        label = t(_PROMPTS[mode.kind])
    text, pos = app.editor.text, app.editor.cursor
    under = text[pos] if pos < len(text) else " "
    return [
        ("class:prompt", label),
        ("class:text", text[:pos]),
        ("class:cursor", under),
        ("class:text", text[pos + 1:]),
    ]


def build_frame(app, t, now: Optional[datetime] = None, today: Optional[date] = None) -> FormattedText:
    """Compose a full screen of exactly ``app.height`` lines."""
    body_rows = max(1, app.height - 2)
    kind = app.mode.kind
    header: Fragments = [("class:header", pad_display(f" {t('TITLE')} ", app.width))]
    if kind == ModeKind.HELP:
        body = build_help_lines(app, t)
    elif kind == ModeKind.CALENDAR:
        body = build_calendar_lines(app, t, today)
    elif kind == ModeKind.CONTEXT_MENU:
        body = build_menu_lines(app, t)
    else:
        body = build_table_lines(app, t, now)
    body = [header] + body[: body_rows - 1]
    while len(body) < body_rows:
        body.append([("", "")])
    body.append(build_prompt_line(app, t))
    body.append(build_status_text(app, t, now))

    fragments: Fragments = []
    for index, line in enumerate(body):
        if index:
            fragments.append(("", "\n"))
        fragments.extend(line)
        # Pad so a shorter line overwrites the previous frame.
        used = display_width("".join(text for _, text in line))
        if used < app.width:
            fragments.append(("", " " * (app.width - used)))
    return FormattedText(fragments)


__all__ = [
    "build_frame",
    "build_table_lines",
    "build_calendar_lines",
    "build_help_lines",
    "build_menu_lines",
    "build_prompt_line",
    "table_columns",
    "display_width",
    "trim_display",
    "pad_display",
]
