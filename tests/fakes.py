"""In-memory collaborators shared by the tests."""

import shlex
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Set

from taskdash.application.errors import BackendError, TrackingError
from taskdash.application.tracking_cache import ActiveInterval
from taskdash.core import Task


def make_task(n: int, **kwargs) -> Task:
    fields = {"uuid": f"uuid-{n}", "id": n, "description": f"task {n}"}
    fields.update(kwargs)
    return Task(**fields)


class FakeBackend:
    """Backend over a dict of tasks; ``fail`` makes every call raise."""

    def __init__(self, tasks: Sequence[Task] = (), contexts: Sequence[str] = ()):
        self.tasks: Dict[str, Task] = {t.uuid: t for t in tasks}
        self.context_names = list(contexts)
        self.calls: List[tuple] = []
        self.fail: Optional[str] = None
        self.exports: List[str] = []
        self.sig = 0
        self.columns: List[tuple] = []

    def _call(self, *call) -> None:
        self.calls.append(call)
        if self.fail:
            raise BackendError(self.fail)

    def export(self, task_filter: str = "") -> List[Task]:
        self._call("export", task_filter)
        self.exports.append(task_filter)
        tokens = shlex.split(task_filter)
        result = []
        for task in self.tasks.values():
            if all(self._matches(task, token) for token in tokens):
                result.append(task)
        return result

    @staticmethod
    def _matches(task: Task, token: str) -> bool:
        if token.startswith("project:"):
            return task.project == token[len("project:"):]
        if token.startswith("status:"):
            return task.status.value == token[len("status:"):]
        if token.startswith("+"):
            return token[1:] in task.tags
        return token in task.description

    def add(self, args):
        self._call("add", list(args))

    def log(self, args):
        self._call("log", list(args))

    def modify(self, uuids, args):
        self._call("modify", list(uuids), list(args))

    def annotate(self, uuid, text):
        self._call("annotate", uuid, text)

    def done(self, uuids):
        self._call("done", list(uuids))
        for uuid in uuids:
            self.tasks.pop(uuid, None)

    def delete(self, uuids):
        self._call("delete", list(uuids))
        for uuid in uuids:
            self.tasks.pop(uuid, None)

    def start(self, uuid):
        self._call("start", uuid)

    def stop(self, uuid):
        self._call("stop", uuid)

    def undo(self):
        self._call("undo")

    def contexts(self):
        self._call("contexts")
        return list(self.context_names)

    def set_context(self, name):
        self._call("set_context", name)

    def edit_command(self, uuid):
        return ["true", uuid]

    def signature(self):
        return self.sig

    def report_columns(self):
        return list(self.columns)


class FakeTracker:
    def __init__(self, tracked: Set[str] = frozenset(), since: Optional[datetime] = None):
        self.tracked = set(tracked)
        self.since = since
        self.queries = 0
        self.fail = False
        self.started: List[tuple] = []
        self.stopped = 0
        self.start_error: Optional[str] = None

    def active_interval(self) -> Optional[ActiveInterval]:
        self.queries += 1
        if self.fail:
            raise TrackingError("timew exploded")
        if not self.tracked:
            return None
        return ActiveInterval(uuids=frozenset(self.tracked), start=self.since)

    def tags_for(self, task):
        return list(task.tags)

    def start(self, uuid, tags=()):
        if self.start_error:
            raise TrackingError(self.start_error)
        self.started.append((uuid, list(tags)))
        self.tracked = {uuid}

    def stop(self):
        self.stopped += 1
        self.tracked = set()


class FakeShortcuts:
    def __init__(self, scripts=None, output="", error=None):
        self.scripts = scripts or {}
        self.output = output
        self.error = error
        self.runs: List[tuple] = []

    def script_for(self, number):
        return self.scripts.get(str(number))

    def run(self, number, uuids):
        self.runs.append((number, list(uuids)))
        if self.error:
            raise self.error
        return self.output
