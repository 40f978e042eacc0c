"""Interactive dashboard: wiring plus the single-threaded main loop."""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Tuple

from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.output import Output, create_output
from prompt_toolkit.shortcuts import print_formatted_text

from taskdash.application import actions as A
from taskdash.application.engine import Engine, build_app
from taskdash.application.events import BackendChangedEvent
from taskdash.application.tracking_cache import TrackingCache
from taskdash.config import Settings
from taskdash.infrastructure.background_process import BackgroundProcess
from taskdash.infrastructure.history_store import HistoryStore
from taskdash.infrastructure.shortcuts import ShortcutRunner
from taskdash.infrastructure.task_cli_backend import TaskCliBackend
from taskdash.infrastructure.timewarrior import TimewarriorTracker
from taskdash.interface.event_source import EventSource
from taskdash.interface.i18n import translator
from taskdash.interface.tui_render import build_frame
from taskdash.interface.tui_themes import build_style

logger = logging.getLogger("taskdash.tui")


class Screen:
    """Alternate-screen output drawn one full frame at a time."""

    def __init__(self, style, output: Optional[Output] = None):
        self.output = output or create_output()
        self.style = style

    def size(self) -> Tuple[int, int]:
        size = self.output.get_size()
        return size.columns, size.rows

    def enter(self) -> None:
        self.output.enter_alternate_screen()
        self.output.hide_cursor()
        self.output.erase_screen()
        self.output.flush()

    def leave(self) -> None:
        self.output.show_cursor()
        self.output.quit_alternate_screen()
        self.output.flush()

    def draw(self, frame: FormattedText) -> None:
        self.output.cursor_goto(0, 0)
        print_formatted_text(frame, style=self.style, output=self.output, end="")
        self.output.erase_down()
        self.output.flush()


class DashboardTUI:
    def __init__(self, settings: Settings, task_filter: Optional[str] = None, backend=None, tracker=None):
        self.settings = settings
        self.task_filter = task_filter
        self._t = translator(settings.lang or None)
        self.backend = backend or TaskCliBackend(timeout=settings.command_timeout, report=settings.report)
        self.tracker = tracker or TimewarriorTracker(settings.timewarrior, timeout=settings.command_timeout)
        self.history_store = HistoryStore()
        tracking = TrackingCache(self.tracker.active_interval, ttl=settings.tracking_ttl)
        self.app = build_app(settings, tracking, self.history_store.load())
        self.screen = Screen(build_style(settings.theme))
        self.events = EventSource(
            tick_rate=settings.tick_rate_ms / 1000.0,
            signature=self.backend.signature,
            size=self.screen.size,
        )
        self.engine = Engine(
            self.app,
            self.backend,
            tracker=self.tracker,
            shortcuts=ShortcutRunner(settings.shortcuts, timeout=settings.command_timeout),
            history_store=self.history_store,
            suspend=self.suspend,
            translate=self._t,
        )
        self.background = BackgroundProcess(
            settings.background_process,
            settings.background_period,
            on_success=lambda: self.events.push(BackendChangedEvent("background process")),
            timeout=settings.command_timeout,
        )
        self._background_reported = False

    @contextmanager
    def suspend(self) -> Iterator[None]:
        """Give the real terminal to a child process (editor, shortcut script)."""
        self.screen.leave()
        try:
            with self.events.paused():
                yield
        finally:
            self.screen.enter()

    def report_binding_conflicts(self) -> None:
        keymap = self.app.keymap
        for conflict in keymap.conflicts:
            logger.warning("Key binding conflict: %s", conflict.describe())
        for name in keymap.unknown:
            logger.warning("Unknown action in keys config: %s", name)
        if keymap.conflicts:
            details = "; ".join(c.describe() for c in keymap.conflicts)
            self.engine.set_status_message(self._t("ERR_BINDING", detail=details), ttl=10.0, error=True)

    def _check_background(self) -> None:
        if self.background.failed and not self._background_reported:
            self._background_reported = True
            self.engine.set_status_message(self._t("ERR_BACKGROUND", error=self.background.last_error), error=True)

    def run(self) -> int:
        width, height = self.screen.size()
        self.engine.apply(A.ResizeAction(width, height))
        self.engine.load_initial(self.task_filter)
        self.report_binding_conflicts()
        self.events.start()
        self.screen.enter()
        self.background.start()
        logger.info("Dashboard started with filter %r", self.app.table.filter_text)
        try:
            while self.app.running:
                self.screen.draw(build_frame(self.app, self._t))
                event = self.events.next()
                if event is None:
                    continue
                self.engine.handle(event)
                self._check_background()
        finally:
            self.background.stop()
            self.events.stop()
            self.screen.leave()
        logger.info("Dashboard stopped")
        return 0


__all__ = ["DashboardTUI", "Screen"]
