from enum import Enum
from typing import Optional


class TaskStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    DELETED = "deleted"
    WAITING = "waiting"
    RECURRING = "recurring"

    @classmethod
    def from_string(cls, value: str) -> "TaskStatus":
        if not isinstance(value, str):
            raise ValueError(f"Invalid task status: {value!r}")
        token = value.strip().lower()
        for status in cls:
            if status.value == token:
                return status
        raise ValueError(f"Invalid task status: {value!r}")


class Priority(Enum):
    HIGH = "H"
    MEDIUM = "M"
    LOW = "L"

    @classmethod
    def from_string(cls, value: Optional[str]) -> Optional["Priority"]:
        """Map a backend priority token to Priority; empty means unset."""
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError(f"Invalid priority: {value!r}")
        token = value.strip().upper()
        if not token:
            return None
        for prio in cls:
            if prio.value == token:
                return prio
        raise ValueError(f"Invalid priority: {value!r}")


STATUS_NAMES = tuple(s.value for s in TaskStatus)
PRIORITY_NAMES = tuple(p.value for p in Priority)
