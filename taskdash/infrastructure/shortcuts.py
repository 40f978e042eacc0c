"""Runner for user shortcut scripts bound to the number keys."""

import logging
import os
import subprocess
from typing import Mapping, Optional, Sequence

from taskdash.application.errors import ShortcutError

logger = logging.getLogger("taskdash.shortcuts")


class ShortcutRunner:
    def __init__(self, scripts: Mapping[str, str], timeout: Optional[float] = None):
        self.scripts = {str(k): os.path.expanduser(v) for k, v in scripts.items()}
        self.timeout = timeout

    def script_for(self, number: int) -> Optional[str]:
        return self.scripts.get(str(number))

    def run(self, number: int, uuids: Sequence[str]) -> str:
        """Run shortcut ``number`` with the uuids as arguments; returns stdout."""
        script = self.script_for(number)
        if not script:
            raise ShortcutError(f"shortcut{number}", -1, "no script configured")
        logger.info("Running shortcut %s: %s %s", number, script, " ".join(uuids))
        try:
            result = subprocess.run(
                [script, *uuids],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise ShortcutError(script, -1, "timed out") from exc
        except OSError as exc:
            raise ShortcutError(script, -1, str(exc)) from exc
        if result.returncode != 0:
            raise ShortcutError(script, result.returncode, result.stderr or "")
        return result.stdout or ""


__all__ = ["ShortcutRunner"]
