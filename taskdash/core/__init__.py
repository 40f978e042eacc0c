from .status import Priority, TaskStatus, STATUS_NAMES, PRIORITY_NAMES
from .task import Task, MalformedTaskError, parse_timestamp

__all__ = [
    "Priority",
    "TaskStatus",
    "STATUS_NAMES",
    "PRIORITY_NAMES",
    "Task",
    "MalformedTaskError",
    "parse_timestamp",
]
