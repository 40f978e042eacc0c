"""Backend that shells out to the Taskwarrior ``task`` executable."""

import json
import logging
import os
import re
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from taskdash.application.errors import BackendError, MalformedOutputError
from taskdash.core import MalformedTaskError, Task

logger = logging.getLogger("taskdash.backend")

EXPORT_OVERRIDES = (
    "rc.json.array=on",
    "rc.confirmation=off",
    "rc.json.depends.array=on",
    "rc.color=off",
    "rc._forcecolor=off",
)
MUTATION_OVERRIDES = (
    "rc.bulk=0",
    "rc.confirmation=off",
    "rc.dependency.confirmation=off",
    "rc.recurrence.confirmation=off",
)
REPORT_EXPORT_VERSION = (3, 0, 0)


def parse_version(text: str) -> Tuple[int, ...]:
    match = re.search(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?", text or "")
    if not match:
        return (0,)
    return tuple(int(part) for part in match.groups() if part is not None)


class TaskCliBackend:
    def __init__(
        self,
        executable: str = "task",
        timeout: float = 10.0,
        data_dir: Optional[Path] = None,
        report: str = "next",
    ):
        self.executable = executable
        self.timeout = float(timeout)
        self.report = report
        self._data_dir = data_dir
        self._version: Optional[Tuple[int, ...]] = None

    # -------------------- plumbing --------------------
    def _run(self, args: Sequence[str], *, what: str) -> str:
        cmd = [self.executable, *args]
        logger.debug("Running %s", shlex.join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                stdin=subprocess.DEVNULL,
            )
        except subprocess.TimeoutExpired as exc:
            raise BackendError(f"task {what} timed out after {self.timeout:g}s") from exc
        except OSError as exc:
            raise BackendError(f"task {what} failed: {exc}") from exc
        if result.returncode != 0:
            message = (result.stderr or result.stdout or "").strip()
            raise BackendError(f"task {what} failed: {message}")
        return result.stdout or ""

    def _mutate(self, uuids: Sequence[str], verb: str, extra: Sequence[str] = (), *, what: str = "") -> None:
        if not uuids:
            raise BackendError(f"task {what or verb}: nothing selected")
        self._run([*MUTATION_OVERRIDES, *uuids, verb, *extra], what=what or verb)

    # -------------------- queries --------------------
    def version(self) -> Tuple[int, ...]:
        """``task --version`` as an int tuple; ``(0,)`` when it can't be read."""
        if self._version is None:
            try:
                out = self._run(["--version"], what="version")
            except BackendError as exc:
                logger.warning("Could not read task version: %s", exc)
                out = ""
            self._version = parse_version(out)
            logger.debug("Taskwarrior version %s", self._version)
        return self._version

    def export(self, task_filter: str = "") -> List[Task]:
        """Export through the configured report, keeping its sort order.

        Taskwarrior 3 takes the report name after ``export``; the filter then
        replaces the report's own filter. Older versions get plain filter
        words and no report.
        """
        args = list(EXPORT_OVERRIDES)
        text = task_filter.strip()
        with_report = self.version() >= REPORT_EXPORT_VERSION
        if text and with_report:
            args.append(f"rc.report.{self.report}.filter={text}")
        elif text:
            try:
                args.extend(shlex.split(text))
            except ValueError as exc:
                raise BackendError(f"bad filter: {exc}") from exc
        args.append("export")
        if with_report:
            args.append(self.report)
        data = self._run(args, what="export")
        try:
            records = json.loads(data or "[]")
        except json.JSONDecodeError as exc:
            raise MalformedOutputError(f"task export returned invalid JSON: {exc}") from exc
        if not isinstance(records, list):
            raise MalformedOutputError("task export did not return a JSON array")
        try:
            return [Task.from_export(r) for r in records if isinstance(r, dict)]
        except MalformedTaskError as exc:
            raise MalformedOutputError(str(exc)) from exc

    def _show(self, key: str) -> List[str]:
        out = self._run(["rc.defaultwidth=0", "show", key], what="show")
        for line in out.splitlines():
            name, _, value = line.strip().partition(" ")
            if name == key:
                return [part.strip() for part in value.strip().split(",") if part.strip()]
        return []

    def report_columns(self) -> List[Tuple[str, str]]:
        """Columns of the report with their labels; a label is "" when unset."""
        columns = self._show(f"report.{self.report}.columns")
        labels = self._show(f"report.{self.report}.labels")
        if len(labels) != len(columns):
            if labels:
                logger.warning("report.%s has %d labels for %d columns", self.report, len(labels), len(columns))
            labels = [""] * len(columns)
        return list(zip(columns, labels))

    def contexts(self) -> List[str]:
        out = self._run(["_context"], what="context list")
        return [line.strip() for line in out.splitlines() if line.strip()]

    def data_dir(self) -> Optional[Path]:
        if self._data_dir is None:
            try:
                location = self._run(["_get", "rc.data.location"], what="config").strip()
            except BackendError:
                location = ""
            self._data_dir = Path(os.path.expanduser(location)) if location else Path.home() / ".task"
        return self._data_dir

    def signature(self) -> int:
        """Max mtime (ns) of the task data files; changes on any write."""
        folder = self.data_dir()
        if not folder or not folder.exists():
            return 0
        latest = 0
        for path in folder.iterdir():
            if path.suffix in (".data", ".sqlite3"):
                try:
                    latest = max(latest, path.stat().st_mtime_ns)
                except OSError:
                    continue
        return latest

    # -------------------- mutations --------------------
    def add(self, args: Sequence[str]) -> None:
        if not args:
            raise BackendError("task add: empty description")
        self._run(["add", *args], what="add")

    def log(self, args: Sequence[str]) -> None:
        if not args:
            raise BackendError("task log: empty description")
        self._run(["log", *args], what="log")

    def modify(self, uuids: Sequence[str], args: Sequence[str]) -> None:
        self._mutate(uuids, "modify", args)

    def annotate(self, uuid: str, text: str) -> None:
        self._mutate([uuid], "annotate", [text])

    def done(self, uuids: Sequence[str]) -> None:
        self._mutate(uuids, "done")

    def delete(self, uuids: Sequence[str]) -> None:
        self._mutate(uuids, "delete")

    def start(self, uuid: str) -> None:
        self._mutate([uuid], "start")

    def stop(self, uuid: str) -> None:
        self._mutate([uuid], "stop")

    def undo(self) -> None:
        self._run(["rc.confirmation=off", "undo"], what="undo")

    def set_context(self, name: str) -> None:
        self._run(["rc.confirmation=off", "context", name or "none"], what="context")

    def edit_command(self, uuid: str) -> List[str]:
        return [self.executable, uuid, "edit"]


__all__ = ["TaskCliBackend", "parse_version", "REPORT_EXPORT_VERSION"]
