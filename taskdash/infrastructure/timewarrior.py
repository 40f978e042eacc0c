"""Timewarrior (``timew``) tracking collaborator."""

import json
import logging
import shutil
import subprocess
from typing import Iterable, List, Optional

from taskdash.application.errors import TrackingError
from taskdash.application.tracking_cache import ActiveInterval
from taskdash.config import TimewarriorSettings
from taskdash.core import MalformedTaskError, Task, parse_timestamp

logger = logging.getLogger("taskdash.tracking")

UUID_TAG_PREFIX = "uuid:"


class TimewarriorTracker:
    def __init__(
        self,
        settings: TimewarriorSettings = TimewarriorSettings(),
        executable: str = "timew",
        timeout: float = 5.0,
    ):
        self.settings = settings
        self.executable = executable
        self.timeout = float(timeout)

    def available(self) -> bool:
        return bool(self.settings.enabled and shutil.which(self.executable))

    def _run(self, args: List[str]) -> str:
        try:
            result = subprocess.run(
                [self.executable, *args],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                stdin=subprocess.DEVNULL,
            )
        except subprocess.TimeoutExpired as exc:
            raise TrackingError(f"timew {args[0]} timed out") from exc
        except OSError as exc:
            raise TrackingError(f"timew {args[0]} failed: {exc}") from exc
        if result.returncode != 0:
            raise TrackingError(f"timew {' '.join(args)} failed: {(result.stderr or '').strip()}")
        return result.stdout or ""

    def active_interval(self) -> Optional[ActiveInterval]:
        """The open interval; tracked uuids come from its ``uuid:<id>`` tags."""
        if not self.available():
            return None
        if self._run(["get", "dom.active"]).strip() != "1":
            return None
        raw = self._run(["get", "dom.active.json"])
        try:
            interval = json.loads(raw or "{}")
        except json.JSONDecodeError as exc:
            raise TrackingError(f"timew returned invalid JSON: {exc}") from exc
        if not isinstance(interval, dict):
            raise TrackingError("timew returned an unexpected interval")
        raw_tags = interval.get("tags") or []
        if not isinstance(raw_tags, list):
            raise TrackingError("timew returned tags that are not a list")
        tags = tuple(tag for tag in raw_tags if isinstance(tag, str))
        try:
            start = parse_timestamp(interval.get("start"))
        except MalformedTaskError as exc:
            raise TrackingError(str(exc)) from exc
        uuids = frozenset(tag[len(UUID_TAG_PREFIX):] for tag in tags if tag.startswith(UUID_TAG_PREFIX))
        return ActiveInterval(uuids=uuids, tags=tags, start=start)

    def tags_for(self, task: Task) -> List[str]:
        prefix = self.settings.tag_prefix
        tags = [f"{prefix}{tag}" for tag in task.tags]
        if self.settings.include_project and task.project:
            tags.append(f"{prefix}{task.project}")
        if self.settings.include_description and task.description:
            tags.append(task.description)
        return tags

    def start(self, uuid: str, tags: Iterable[str] = ()) -> None:
        if not self.available():
            raise TrackingError("timewarrior is not available")
        self._run(["start", *tags, f"{UUID_TAG_PREFIX}{uuid}"])
        logger.info("Started tracking %s", uuid)

    def stop(self) -> None:
        if not self.available():
            raise TrackingError("timewarrior is not available")
        self._run(["stop"])
        logger.info("Stopped tracking")


__all__ = ["TimewarriorTracker", "UUID_TAG_PREFIX"]
