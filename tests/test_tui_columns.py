from datetime import datetime, timedelta, timezone

import pytest

from taskdash.core import Priority, TaskStatus
from taskdash.interface.tui_columns import default_label, ellipsize, format_cell, vague_delta

from fakes import make_task

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "seconds, precise, expected",
    [
        (0, False, "0s"),
        (90, False, "1min"),
        (90, True, "1min30s"),
        (3661, True, "1h1min"),
        (1255, True, "20min55s"),
        (-300, False, "-5min"),
        (604800, False, "7d"),
        (1209600, False, "2w"),
        (2592000, False, "4w"),
        (7776000, False, "3mo"),
        (31536000, False, "1y"),
        (90061, True, "1d1h"),
    ],
)
def test_vague_delta(seconds, precise, expected):
    assert vague_delta(seconds, precise) == expected


def test_date_styles():
    task = make_task(1, due=NOW + timedelta(days=3), entry=NOW - timedelta(hours=5))
    assert format_cell("due.relative", task, {}, NOW) == "3d"
    assert format_cell("due.countdown", task, {}, NOW) == "3d"
    assert format_cell("entry.age", task, {}, NOW) == "5h"
    assert format_cell("due.iso", task, {}, NOW) == "20240604T120000Z"
    assert format_cell("due.epoch", task, {}, NOW) == str(int((NOW + timedelta(days=3)).timestamp()))
    assert format_cell("scheduled.relative", task, {}, NOW) == ""
    overdue = make_task(2, due=NOW - timedelta(days=20))
    assert format_cell("due.relative", overdue, {}, NOW) == "-2w"


def test_attribute_styles():
    other = make_task(7)
    task = make_task(
        1,
        project="work.infra",
        tags=("a", "b"),
        priority=Priority.MEDIUM,
        status=TaskStatus.WAITING,
        urgency=4.25,
        depends=("uuid-7", "gone"),
        recur="weekly",
        start=NOW,
        annotations=("note",),
    )
    lookup = {other.uuid: other}
    cells = {
        "id": "1",
        "uuid.short": "uuid-1",
        "project": "work.infra",
        "project.parent": "work",
        "tags": "a b",
        "tags.count": "2",
        "tags.indicator": "+",
        "priority": "M",
        "status": "Waiting",
        "status.short": "W",
        "urgency": "4.2",
        "depends": "7",
        "depends.count": "[2]",
        "depends.indicator": "D",
        "recur": "weekly",
        "recur.indicator": "R",
        "start.active": "*",
        "description": "task 1",
        "description.count": "task 1 [1]",
        "description.oneline": "task 1 note",
        "mystery_uda": "",
    }
    for column, expected in cells.items():
        assert format_cell(column, task, lookup, NOW) == expected, column


def test_empty_values_render_blank():
    task = make_task(0)
    for column in ("id", "project", "tags", "tags.count", "priority", "depends", "recur", "start.active"):
        assert format_cell(column, task, {}, NOW) == "", column


def test_truncated_descriptions():
    task = make_task(1, description="a long description", annotations=("x", "y"))
    assert format_cell("description.truncated", task, {}, NOW, width=6) == "a lon…"
    assert format_cell("description.truncated_count", task, {}, NOW, width=10) == "a lon… [2]"
    assert format_cell("description.truncated", task, {}, NOW) == "a long description"
    assert ellipsize("漢字漢字", 5) == "漢字…"
    assert ellipsize("short", 10) == "short"


def test_default_labels():
    assert default_label("id") == "ID"
    assert default_label("due.relative") == "Due"
    assert default_label("description.count") == "Description"
