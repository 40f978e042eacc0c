"""Optional periodic command (e.g. ``task sync``), disabled after one failure."""

import logging
import shlex
import subprocess
import threading
from typing import Callable, List, Optional

logger = logging.getLogger("taskdash.background")


class BackgroundProcess:
    def __init__(
        self,
        command: str,
        period: float,
        on_success: Optional[Callable[[], None]] = None,
        timeout: Optional[float] = None,
    ):
        self.argv: List[str] = shlex.split(command) if command else []
        self.period = float(period)
        self.timeout = timeout
        self._on_success = on_success
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.failed: bool = False
        self.last_error: str = ""

    @property
    def enabled(self) -> bool:
        return bool(self.argv) and not self.failed

    def run_once(self) -> bool:
        """Run the command once. After a failure it never runs again."""
        if not self.enabled:
            return False
        try:
            result = subprocess.run(
                self.argv,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                stdin=subprocess.DEVNULL,
            )
            ok = result.returncode == 0
            error = (result.stderr or "").strip() or f"exit {result.returncode}"
        except (OSError, subprocess.TimeoutExpired) as exc:
            ok = False
            error = str(exc)
        if not ok:
            self.failed = True
            self.last_error = error
            logger.error("Background process %r failed, disabling: %s", shlex.join(self.argv), error)
            return False
        if self._on_success:
            self._on_success()
        return True

    def start(self) -> None:
        if not self.enabled or self._thread is not None:
            return

        def worker():
            while not self._stop.wait(self.period):
                if not self.run_once():
                    return

        self._thread = threading.Thread(target=worker, name="taskdash-background", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()


__all__ = ["BackgroundProcess"]
