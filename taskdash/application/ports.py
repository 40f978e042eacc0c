from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from taskdash.application.tracking_cache import ActiveInterval
from taskdash.core import Task


class TaskBackend(Protocol):
    """Capability set the engine needs from the task store.

    Every method is synchronous and raises ``BackendError`` on failure.
    """

    def export(self, task_filter: str = "") -> List[Task]:
        ...

    def add(self, args: Sequence[str]) -> None:
        ...

    def log(self, args: Sequence[str]) -> None:
        ...

    def modify(self, uuids: Sequence[str], args: Sequence[str]) -> None:
        ...

    def annotate(self, uuid: str, text: str) -> None:
        ...

    def done(self, uuids: Sequence[str]) -> None:
        ...

    def delete(self, uuids: Sequence[str]) -> None:
        ...

    def start(self, uuid: str) -> None:
        ...

    def stop(self, uuid: str) -> None:
        ...

    def undo(self) -> None:
        ...

    def contexts(self) -> List[str]:
        ...

    def set_context(self, name: str) -> None:
        ...

    def edit_command(self, uuid: str) -> List[str]:
        ...

    def signature(self) -> int:
        ...

    def report_columns(self) -> List[Tuple[str, str]]:
        """(column, label) pairs of the configured report; labels may be empty."""
        ...


class TrackingQuery(Protocol):
    def active_interval(self) -> Optional[ActiveInterval]:
        """Batch query: the open interval with its tracked uuids, or None."""
        ...

    def start(self, uuid: str, tags: Iterable[str]) -> None:
        ...

    def stop(self) -> None:
        ...

    def tags_for(self, task: Task) -> List[str]:
        ...


__all__ = ["TaskBackend", "TrackingQuery"]
