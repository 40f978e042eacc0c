"""Table/report state: visible projection, cursor, marks and viewport."""

from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from taskdash.core import Priority, Task

SortSpec = Tuple[Tuple[str, bool], ...]

SORT_FIELDS = frozenset(
    {"id", "urgency", "due", "scheduled", "entry", "start", "end", "until", "wait", "project", "priority", "description", "status"}
)
_PRIORITY_RANK = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


def parse_sort(text: str) -> SortSpec:
    """Parse a Taskwarrior style sort, e.g. ``urgency-,project+``.

    Each item is ``(field, descending)``. Unknown fields are skipped and a
    trailing ``/`` (report break marker) is ignored.
    """
    spec = []
    for item in (text or "").split(","):
        item = item.strip().rstrip("/")
        descending = item.endswith("-")
        name = item.rstrip("+-")
        if name in SORT_FIELDS:
            spec.append((name, descending))
    return tuple(spec)


def _sort_value(task: Task, name: str):
    value = getattr(task, name)
    if name == "priority":
        return _PRIORITY_RANK.get(value, 0)
    if name == "status":
        return value.value
    return value


def _sort_key(task: Task, name: str, descending: bool):
    value = _sort_value(task, name)
    present = () if value is None else (value,)
    # Flip the presence flag for reverse sorts so missing values stay last.
    return (value is not None, present) if descending else (value is None, present)


def sort_uuids(order: List[str], tasks: Dict[str, Task], spec: SortSpec) -> List[str]:
    """Stable multi-key sort; missing values go last in either direction."""
    result = list(order)
    for name, descending in reversed(spec):
        result.sort(key=lambda u: _sort_key(tasks[u], name, descending), reverse=descending)
    return result


class TableState:
    """Projection of the last task snapshot shown as a table.

    ``cursor`` is an index into ``visible`` or ``None`` when ``visible`` is
    empty. ``marked`` only ever holds uuids present in ``tasks``.
    """

    def __init__(self, viewport_height: int = 20, looping: bool = False):
        self.tasks: Dict[str, Task] = {}
        self.visible: List[str] = []
        self.cursor: Optional[int] = None
        self.marked: Set[str] = set()
        self.viewport_offset: int = 0
        self.viewport_height: int = max(1, int(viewport_height))
        self.filter_text: str = ""
        self.looping: bool = looping
        self.sort_spec: SortSpec = ()

    # -------------------- snapshot --------------------
    def set_tasks(self, snapshot: Iterable[Task], visible: Optional[Sequence[str]] = None) -> None:
        """Install a new snapshot; ``visible`` defaults to every task in order."""
        previous = self.selected_uuid()
        previous_index = self.cursor
        tasks: Dict[str, Task] = {}
        for task in snapshot:
            tasks[task.uuid] = task
        order = list(tasks) if visible is None else [u for u in dict.fromkeys(visible) if u in tasks]
        if self.sort_spec:
            order = sort_uuids(order, tasks, self.sort_spec)
        self.tasks = tasks
        self.visible = order
        self.marked &= set(tasks)
        if not order:
            self.cursor = None
        elif previous is not None and previous in order:
            self.cursor = order.index(previous)
        elif previous_index is not None:
            self.cursor = min(previous_index, len(order) - 1)
        else:
            self.cursor = 0
        self._clamp_viewport()

    def apply_filter(self, text: str, backend) -> None:
        """Re-query the backend with ``text``; state is untouched if it raises."""
        text = (text or "").strip()
        snapshot = backend.export(text)
        self.filter_text = text
        self.set_tasks(snapshot)

    # -------------------- cursor --------------------
    def selected_uuid(self) -> Optional[str]:
        if self.cursor is None:
            return None
        return self.visible[self.cursor]

    def selected_task(self) -> Optional[Task]:
        uuid = self.selected_uuid()
        return self.tasks.get(uuid) if uuid else None

    def move_cursor(self, delta: int) -> None:
        if self.cursor is None:
            return
        total = len(self.visible)
        if self.looping:
            self.cursor = (self.cursor + delta) % total
        else:
            self.cursor = max(0, min(self.cursor + delta, total - 1))
        self._clamp_viewport()

    def jump_top(self) -> None:
        if self.cursor is not None:
            self.cursor = 0
            self._clamp_viewport()

    def jump_bottom(self) -> None:
        if self.cursor is not None:
            self.cursor = len(self.visible) - 1
            self._clamp_viewport()

    def select_uuid(self, uuid: str) -> bool:
        if uuid not in self.visible:
            return False
        self.cursor = self.visible.index(uuid)
        self.scroll_to(self.cursor)
        return True

    def select_task_id(self, task_id: int) -> bool:
        for uuid in self.visible:
            if self.tasks[uuid].id == task_id:
                return self.select_uuid(uuid)
        return False

    # -------------------- marks --------------------
    def toggle_mark(self, uuid: Optional[str] = None) -> None:
        target = uuid or self.selected_uuid()
        if not target or target not in self.tasks:
            return
        if target in self.marked:
            self.marked.discard(target)
        else:
            self.marked.add(target)

    def mark_all(self) -> None:
        visible = set(self.visible)
        if visible and visible <= self.marked:
            self.marked -= visible
        else:
            self.marked |= visible

    def clear_marks(self) -> None:
        self.marked.clear()

    def selected_uuids(self) -> List[str]:
        """Marked uuids in visible order, else the cursor row."""
        if self.marked:
            ordered = [u for u in self.visible if u in self.marked]
            ordered.extend(sorted(self.marked - set(ordered)))
            return ordered
        uuid = self.selected_uuid()
        return [uuid] if uuid else []

    # -------------------- viewport --------------------
    def set_viewport_height(self, height: int) -> None:
        self.viewport_height = max(1, int(height))
        self._clamp_viewport()

    def scroll_to(self, index: int) -> None:
        total = len(self.visible)
        if total == 0:
            self.viewport_offset = 0
            return
        index = max(0, min(index, total - 1))
        height = self.viewport_height
        if not (self.viewport_offset <= index < self.viewport_offset + height):
            self.viewport_offset = index - height // 2
        self.viewport_offset = max(0, min(self.viewport_offset, max(0, total - height)))

    def visible_window(self) -> List[str]:
        return self.visible[self.viewport_offset : self.viewport_offset + self.viewport_height]

    def _clamp_viewport(self) -> None:
        if self.cursor is None:
            self.viewport_offset = 0
            return
        self.scroll_to(self.cursor)


__all__ = ["TableState", "parse_sort", "sort_uuids", "SORT_FIELDS"]
