"""Read-only task snapshots built from ``task export`` records."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

from .status import Priority, TaskStatus

EXPORT_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"


class MalformedTaskError(ValueError):
    """Raised when an export record lacks required fields or has bad values."""


def parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if not isinstance(value, str):
        raise MalformedTaskError(f"bad timestamp {value!r}")
    try:
        return datetime.strptime(value, EXPORT_TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError as exc:
        raise MalformedTaskError(f"bad timestamp {value!r}") from exc


def _unique(values) -> Tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str) or not isinstance(values, (list, tuple)):
        raise MalformedTaskError(f"expected a list, got {values!r}")
    seen: Dict[str, None] = {}
    for value in values:
        text = str(value)
        if text:
            seen.setdefault(text, None)
    return tuple(seen)


def _depends(value) -> Tuple[str, ...]:
    # Older exports join dependencies with commas.
    if isinstance(value, str):
        return tuple(part for part in (p.strip() for p in value.split(",")) if part)
    return _unique(value)


def _annotations(values) -> Tuple[str, ...]:
    if values is None:
        return ()
    if not isinstance(values, list):
        raise MalformedTaskError(f"annotations must be a list, got {values!r}")
    return tuple(str(a.get("description", "")) for a in values if isinstance(a, Mapping))


def _optional_text(value: Any) -> Optional[str]:
    if value in (None, ""):
        return None
    if not isinstance(value, str):
        raise MalformedTaskError(f"expected text, got {value!r}")
    return value


@dataclass(frozen=True)
class Task:
    uuid: str
    description: str
    status: TaskStatus = TaskStatus.PENDING
    id: int = 0
    project: Optional[str] = None
    tags: Tuple[str, ...] = ()
    priority: Optional[Priority] = None
    entry: Optional[datetime] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    due: Optional[datetime] = None
    scheduled: Optional[datetime] = None
    until: Optional[datetime] = None
    wait: Optional[datetime] = None
    recur: Optional[str] = None
    depends: Tuple[str, ...] = ()
    urgency: float = 0.0
    annotations: Tuple[str, ...] = field(default=())

    @property
    def active(self) -> bool:
        """True when the backend reports the task as started."""
        return self.start is not None

    @classmethod
    def from_export(cls, record: Mapping[str, Any]) -> "Task":
        """Build a task from one export record.

        Every wrongly typed field surfaces as :class:`MalformedTaskError`.
        """
        uuid = record.get("uuid")
        if not uuid or "description" not in record:
            raise MalformedTaskError(f"record without uuid/description: {record!r}")
        try:
            return cls(
                uuid=str(uuid),
                id=int(record.get("id", 0) or 0),
                description=str(record["description"]),
                status=TaskStatus.from_string(record.get("status", "pending")),
                project=_optional_text(record.get("project")),
                tags=_unique(record.get("tags")),
                priority=Priority.from_string(record.get("priority")),
                entry=parse_timestamp(record.get("entry")),
                start=parse_timestamp(record.get("start")),
                end=parse_timestamp(record.get("end")),
                due=parse_timestamp(record.get("due")),
                scheduled=parse_timestamp(record.get("scheduled")),
                until=parse_timestamp(record.get("until")),
                wait=parse_timestamp(record.get("wait")),
                recur=_optional_text(record.get("recur")),
                depends=_depends(record.get("depends")),
                urgency=float(record.get("urgency", 0.0) or 0.0),
                annotations=_annotations(record.get("annotations")),
            )
        except MalformedTaskError:
            raise
        except (TypeError, ValueError, AttributeError) as exc:
            raise MalformedTaskError(f"bad field in {uuid!r}: {exc}") from exc
