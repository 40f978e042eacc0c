"""Report columns: Taskwarrior ``<attribute>.<style>`` names rendered as cell text."""

from datetime import datetime
from typing import Callable, Dict, Mapping, Optional, Tuple

from wcwidth import wcwidth

from taskdash.core import Task
from taskdash.core.task import EXPORT_TIMESTAMP_FORMAT
from taskdash.interface.constants import DATE_FORMAT

# (column, label key) used when the report layout can't be read.
DEFAULT_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("id", "COL_ID"),
    ("project", "COL_PROJECT"),
    ("priority", "COL_PRI"),
    ("due.relative", "COL_DUE"),
    ("urgency", "COL_URGENCY"),
    ("tags", "COL_TAGS"),
    ("description.count", "COL_DESCRIPTION"),
)

DATE_ATTRIBUTES = ("entry", "start", "end", "due", "scheduled", "until", "wait")
ELLIPSIS = "…"

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
WEEK = 7 * DAY
MONTH = 30 * DAY
YEAR = 365 * DAY

# (threshold, size, unit, smaller size, smaller unit)
_LADDER = (
    (YEAR, YEAR, "y", MONTH, "mo"),
    (3 * MONTH, MONTH, "mo", WEEK, "w"),
    (2 * WEEK, WEEK, "w", DAY, "d"),
    (DAY, DAY, "d", HOUR, "h"),
    (HOUR, HOUR, "h", MINUTE, "min"),
    (MINUTE, MINUTE, "min", 1, "s"),
)


# -------------------- width helpers --------------------
def display_width(text: str) -> int:
    width = 0
    for ch in text:
        w = wcwidth(ch)
        if w is None:
            w = 0
        width += max(0, w)
    return width


def trim_display(text: str, width: int) -> str:
    """Trim text so visible width doesn't exceed ``width``."""
    acc = []
    used = 0
    for ch in text:
        w = max(0, wcwidth(ch) or 0)
        if used + w > width:
            break
        acc.append(ch)
        used += w
    return "".join(acc)


def pad_display(text: str, width: int) -> str:
    trimmed = trim_display(text, width)
    gap = width - display_width(trimmed)
    return trimmed + " " * gap if gap > 0 else trimmed


def ellipsize(text: str, width: int) -> str:
    if display_width(text) <= width:
        return text
    if width <= 0:
        return ""
    return trim_display(text, width - 1) + ELLIPSIS


# -------------------- dates --------------------
def vague_delta(seconds: float, precise: bool = False) -> str:
    """Coarse duration such as ``3d`` or, with ``precise``, ``3d4h``."""
    seconds = int(seconds)
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)
    for threshold, size, unit, rest_size, rest_unit in _LADDER:
        if seconds >= threshold:
            text = f"{sign}{seconds // size}{unit}"
            if precise:
                text += f"{(seconds % size) // rest_size}{rest_unit}"
            return text
    return f"{sign}{seconds}s"


def _format_date(value: datetime, style: str, now: datetime) -> str:
    if style in ("relative", "countdown", "remaining"):
        return vague_delta((value - now).total_seconds())
    if style == "age":
        return vague_delta((now - value).total_seconds())
    if style == "iso":
        return value.strftime(EXPORT_TIMESTAMP_FORMAT)
    if style == "epoch":
        return str(int(value.timestamp()))
    return value.astimezone().strftime(DATE_FORMAT)


# -------------------- cells --------------------
def default_label(column: str) -> str:
    name = column.split(".", 1)[0]
    if name == "id":
        return "ID"
    return name[:1].upper() + name[1:]


def _description(task: Task, style: str, width: Optional[int]) -> str:
    count = f" [{len(task.annotations)}]" if task.annotations else ""
    text = task.description
    if style == "oneline" and task.annotations:
        return " ".join((text, *task.annotations))
    if style == "truncated" and width is not None:
        return ellipsize(text, width)
    if style == "truncated_count" and width is not None:
        return ellipsize(text, max(0, width - display_width(count))) + count
    if style in ("count", "truncated_count"):
        return text + count
    return text


def _count(values) -> str:
    return str(len(values)) if values else ""


def _depends(task: Task, style: str, lookup: Mapping[str, Task]) -> str:
    if style == "count":
        return f"[{len(task.depends)}]" if task.depends else ""
    if style == "indicator":
        return "D" if task.depends else ""
    ids = [str(lookup[uuid].id) for uuid in task.depends if uuid in lookup and lookup[uuid].id]
    return " ".join(ids)


_SIMPLE: Dict[str, Callable[[Task, str], str]] = {
    "id": lambda task, style: str(task.id) if task.id else "",
    "uuid": lambda task, style: task.uuid[:8] if style == "short" else task.uuid,
    "project": lambda task, style: (task.project or "").split(".", 1)[0] if style == "parent" else task.project or "",
    "priority": lambda task, style: task.priority.value if task.priority else "",
    "status": lambda task, style: task.status.value[:1].upper() if style == "short" else task.status.value.capitalize(),
    "urgency": lambda task, style: f"{task.urgency:.1f}",
    "recur": lambda task, style: ("R" if task.recur else "") if style == "indicator" else task.recur or "",
}


def format_cell(
    column: str,
    task: Task,
    lookup: Mapping[str, Task],
    now: datetime,
    width: Optional[int] = None,
) -> str:
    """Text of ``task`` in a report column; unknown columns render empty.

    ``lookup`` maps uuids to tasks and resolves dependencies to ids. ``width``
    only matters to the truncating description styles.
    """
    name, _, style = column.partition(".")
    if name == "description":
        return _description(task, style, width)
    if name == "tags":
        if style == "count":
            return _count(task.tags)
        if style == "indicator":
            return "+" if task.tags else ""
        return " ".join(task.tags)
    if name == "depends":
        return _depends(task, style, lookup)
    if name == "start" and style == "active":
        return "*" if task.active else ""
    if name in DATE_ATTRIBUTES:
        value = getattr(task, name)
        return _format_date(value, style, now) if value is not None else ""
    simple = _SIMPLE.get(name)
    return simple(task, style) if simple else ""


__all__ = [
    "DEFAULT_COLUMNS",
    "default_label",
    "display_width",
    "ellipsize",
    "format_cell",
    "pad_display",
    "trim_display",
    "vague_delta",
]
