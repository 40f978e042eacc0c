"""Application aggregate and the single place where actions take effect.

The main loop owns one :class:`App`. For every event it calls
``Engine.handle(event)``, which runs the pure dispatcher and then applies the
resulting actions in order. Backend, tracking and shortcut failures are
caught here, turned into a status message and leave the table untouched.
"""

import contextlib
import logging
import shlex
import subprocess
import time
from dataclasses import dataclass, field, replace
from typing import Callable, ContextManager, Dict, List, Optional, Tuple

from taskdash.application import actions as A
from taskdash.application.completion import CompletionEngine
from taskdash.application.dispatcher import DispatchPolicy, dispatch
from taskdash.application.errors import BackendError, ShortcutError, TrackingError
from taskdash.application.events import Event
from taskdash.application.keymap import Keymap
from taskdash.application.line_editor import LineEditor
from taskdash.application.modes import NORMAL, CommandKind, Mode, confirm
from taskdash.application.ports import TaskBackend, TrackingQuery
from taskdash.application.table_state import TableState, parse_sort
from taskdash.application.tracking_cache import TrackingCache
from taskdash.config import Settings
from taskdash.core import Task

logger = logging.getLogger("taskdash.engine")

# Header, column titles, status line and editor line.
CHROME_ROWS = 4
STATUS_TTL = 4.0
ERROR_TTL = 8.0
NO_CONTEXT = "none"


def _identity_translate(key: str, **kwargs) -> str:
    return key.format(**kwargs) if kwargs else key


@dataclass
class App:
    """Everything the renderer reads. Mutated only by :class:`Engine`."""

    settings: Settings
    keymap: Keymap
    table: TableState
    tracking: TrackingCache
    editor: LineEditor
    mode: Mode = NORMAL
    running: bool = True
    width: int = 80
    height: int = 24
    status_message: str = ""
    status_is_error: bool = False
    status_message_expires: float = 0.0
    contexts: List[str] = field(default_factory=list)
    menu_index: int = 0
    help_scroll: int = 0
    calendar_year: int = 0
    all_tasks: List[Task] = field(default_factory=list)
    history: Dict[str, List[str]] = field(default_factory=dict)
    line_key: str = ""
    # (column, label) of the report; empty means the built-in layout.
    columns: List[Tuple[str, str]] = field(default_factory=list)

    def visible_tasks(self) -> List[Task]:
        return [self.table.tasks[uuid] for uuid in self.table.visible]

    def completion_source(self) -> List[Task]:
        if self.settings.completion_scope == "all" and self.all_tasks:
            return list(self.all_tasks)
        return self.visible_tasks()


class Engine:
    def __init__(
        self,
        app: App,
        backend: TaskBackend,
        tracker: Optional[TrackingQuery] = None,
        shortcuts=None,
        history_store=None,
        suspend: Callable[[], ContextManager] = contextlib.nullcontext,
        translate: Callable[..., str] = _identity_translate,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.app = app
        self.backend = backend
        self.tracker = tracker
        self.shortcuts = shortcuts
        self.history_store = history_store
        self.suspend = suspend
        self.translate = translate
        self.clock = clock
        settings = app.settings
        self.policy = DispatchPolicy(
            confirm_delete=settings.confirm_delete,
            confirm_done=settings.confirm_done,
            confirm_undo=settings.confirm_undo,
            confirm_modify=settings.confirm_modify,
            reset_filter_on_esc=settings.reset_filter_on_esc,
        )
        self._handlers = {
            A.TickAction: self._tick,
            A.ResizeAction: self._resize,
            A.RefreshAction: lambda action: self.reload(),
            A.Navigate: lambda action: app.table.move_cursor(action.delta),
            A.PageMove: lambda action: app.table.move_cursor(action.pages * app.table.viewport_height),
            A.JumpTop: lambda action: app.table.jump_top(),
            A.JumpBottom: lambda action: app.table.jump_bottom(),
            A.ToggleMark: lambda action: app.table.toggle_mark(),
            A.MarkAll: lambda action: app.table.mark_all(),
            A.StartStopTracking: self._start_stop,
            A.Execute: self._execute,
            A.Edit: self._edit,
            A.RunShortcut: self._run_shortcut,
            A.SelectContext: self._select_context,
            A.EnterLine: self._enter_line,
            A.EditKey: lambda action: app.editor.handle_key(action.key),
            A.SubmitFilter: self._submit_filter,
            A.RunCommand: self._run_command,
            A.SubmitAnnotation: self._submit_annotation,
            A.StageModify: self._stage_modify,
            A.CancelLine: lambda action: app.editor.reset(),
            A.OpenContextMenu: self._open_context_menu,
            A.MenuMove: self._menu_move,
            A.ScrollHelp: lambda action: setattr(app, "help_scroll", max(0, app.help_scroll + action.delta)),
            A.CalendarMove: lambda action: setattr(app, "calendar_year", app.calendar_year + action.years),
            A.Quit: lambda action: setattr(app, "running", False),
        }

    # -------------------- entry points --------------------
    def handle(self, event: Event) -> None:
        app = self.app
        mode, actions = dispatch(app.mode, event, app.keymap, self.policy, app.table.selected_uuids())
        app.mode = mode
        for action in actions:
            self.apply(action)

    def apply(self, action: A.Action) -> None:
        handler = self._handlers.get(type(action))
        if handler is None:
            logger.debug("No handler for %r", action)
            return
        try:
            handler(action)
        except BackendError as exc:
            self._fail("backend", exc)
        except TrackingError as exc:
            self._fail("tracking", exc)
        except ShortcutError as exc:
            self._fail("shortcut", exc)

    def _fail(self, area: str, exc: Exception) -> None:
        logger.error("%s error: %s", area, exc)
        self.app.mode = NORMAL
        self.set_status_message(self.translate("ERR_ACTION_FAILED", area=area, error=exc), ERROR_TTL, error=True)

    def set_status_message(self, message: str, ttl: float = STATUS_TTL, *, error: bool = False) -> None:
        self.app.status_message = message
        self.app.status_is_error = error
        self.app.status_message_expires = self.clock() + ttl

    # -------------------- loading --------------------
    def reload(self) -> None:
        """Re-query with the active filter. The only path that replaces tasks."""
        app = self.app
        app.table.apply_filter(app.table.filter_text, self.backend)
        if app.settings.completion_scope == "all":
            app.all_tasks = self.backend.export("")

    def load_columns(self) -> None:
        try:
            self.app.columns = list(self.backend.report_columns())
        except BackendError as exc:
            logger.warning("Report layout unavailable, using built-in columns: %s", exc)
            self.app.columns = []

    def load_initial(self, task_filter: Optional[str] = None) -> None:
        self.load_columns()
        text = self.app.settings.default_filter if task_filter is None else task_filter
        self.app.table.filter_text = text
        self.apply(A.RefreshAction())

    # -------------------- structural --------------------
    def _tick(self, action: A.TickAction) -> None:
        app = self.app
        app.tracking.maybe_refresh(action.now)
        if app.status_message and self.clock() >= app.status_message_expires:
            app.status_message = ""
            app.status_is_error = False

    def _resize(self, action: A.ResizeAction) -> None:
        self.app.width = action.width
        self.app.height = action.height
        self.app.table.set_viewport_height(action.height - CHROME_ROWS)

    # -------------------- backend mutations --------------------
    def _execute(self, action: A.Execute) -> None:
        pending = action.pending
        uuids = list(pending.uuids)
        if pending.kind == "done":
            self.backend.done(uuids)
        elif pending.kind == "delete":
            self.backend.delete(uuids)
        elif pending.kind == "undo":
            self.backend.undo()
        elif pending.kind == "modify":
            self.backend.modify(uuids, list(pending.args))
        else:
            logger.warning("Unknown pending action %s", pending.kind)
            return
        logger.info("%s %s", pending.kind, " ".join(uuids))
        if pending.kind in ("done", "delete"):
            self.app.table.marked.difference_update(uuids)
        self.reload()
        key = "MSG_MODIFIED" if pending.kind == "modify" else f"MSG_{pending.kind.upper()}"
        self.set_status_message(self.translate(key, count=len(uuids)))

    def _stage_modify(self, action: A.StageModify) -> None:
        app = self.app
        pending = app.mode.pending
        text = self._take_line(None).strip()
        try:
            args = shlex.split(text)
        except ValueError as exc:
            app.mode = NORMAL
            self.set_status_message(self.translate("ERR_PARSE", error=exc), error=True)
            return
        if pending is None or not args:
            app.mode = NORMAL
            return
        app.mode = confirm(replace(pending, args=tuple(args)))

    def _start_stop(self, action: A.StartStopTracking) -> None:
        app = self.app
        task = app.table.selected_task()
        if task is None:
            return
        direct = self.tracker is not None and app.settings.timewarrior.manage_intervals
        try:
            if task.active:
                self.backend.stop(task.uuid)
                if direct and app.tracking.is_tracked(task.uuid):
                    self.tracker.stop()
                message = "MSG_STOPPED"
            else:
                self.backend.start(task.uuid)
                if direct:
                    self.tracker.start(task.uuid, self.tracker.tags_for(task))
                message = "MSG_STARTED"
        except TrackingError:
            # The task itself already started or stopped.
            app.tracking.invalidate()
            self.reload()
            raise
        app.tracking.invalidate()
        self.reload()
        self.set_status_message(self.translate(message, id=task.id or task.uuid[:8]))

    def _edit(self, action: A.Edit) -> None:
        uuid = self.app.table.selected_uuid()
        if not uuid:
            return
        argv = self.backend.edit_command(uuid)
        logger.info("Editing %s", uuid)
        with self.suspend():
            try:
                result = subprocess.run(argv)
            except OSError as exc:
                raise BackendError(f"{argv[0]} edit failed: {exc}") from exc
        if result.returncode != 0:
            raise BackendError(f"{argv[0]} edit exited with {result.returncode}")
        self.reload()

    def _run_shortcut(self, action: A.RunShortcut) -> None:
        app = self.app
        try:
            if self.shortcuts is None or not self.shortcuts.script_for(action.number):
                self.set_status_message(self.translate("ERR_NO_SHORTCUT", number=action.number), error=True)
                return
            uuids = app.table.selected_uuids()
            with self.suspend():
                output = self.shortcuts.run(action.number, uuids)
        finally:
            app.mode = NORMAL
        self.reload()
        first_line = output.strip().splitlines()[0] if output.strip() else ""
        self.set_status_message(first_line or self.translate("MSG_SHORTCUT_DONE", number=action.number))

    # -------------------- contexts --------------------
    def _open_context_menu(self, action: A.OpenContextMenu) -> None:
        app = self.app
        try:
            app.contexts = [NO_CONTEXT, *self.backend.contexts()]
        except BackendError:
            app.contexts = []
            raise
        app.menu_index = 0

    def _menu_move(self, action: A.MenuMove) -> None:
        app = self.app
        if not app.contexts:
            return
        app.menu_index = (app.menu_index + action.delta) % len(app.contexts)

    def _select_context(self, action: A.SelectContext) -> None:
        app = self.app
        name = action.name
        if name is None:
            if not app.contexts:
                return
            name = app.contexts[app.menu_index]
        self.backend.set_context(name)
        self.reload()
        self.set_status_message(self.translate("MSG_CONTEXT", name=name))

    # -------------------- line modes --------------------
    def _enter_line(self, action: A.EnterLine) -> None:
        app = self.app
        kind = action.command if action.mode == "command" else None
        app.line_key = kind.value if kind else action.mode
        editor = app.editor
        editor.history = list(app.history.get(app.line_key, []))
        if action.mode == "filter":
            editor.reset(app.table.filter_text)
        elif app.settings.auto_insert_quotes and (
            action.mode == "annotate" or kind in (CommandKind.ADD, CommandKind.LOG)
        ):
            editor.reset('""', 1)
        else:
            editor.reset()

    def _take_line(self, text: Optional[str]) -> str:
        app = self.app
        value = app.editor.text if text is None else text
        if text is None:
            app.editor.remember(value)
            if app.line_key:
                app.history[app.line_key] = list(app.editor.history)
                if self.history_store is not None:
                    self.history_store.save(app.history)
            app.editor.reset()
        return value

    def _submit_filter(self, action: A.SubmitFilter) -> None:
        text = self._take_line(action.text)
        self.app.table.apply_filter(text, self.backend)
        if self.app.settings.completion_scope == "all":
            self.app.all_tasks = self.backend.export("")

    def _submit_annotation(self, action: A.SubmitAnnotation) -> None:
        text = _strip_quotes(self._take_line(action.text))
        if not text:
            return
        uuids = self.app.table.selected_uuids()
        for uuid in uuids:
            self.backend.annotate(uuid, text)
        self.reload()
        self.set_status_message(self.translate("MSG_ANNOTATED", count=len(uuids)))

    def _run_command(self, action: A.RunCommand) -> None:
        text = self._take_line(action.text).strip()
        if not text or text == '""':
            return
        kind = action.kind
        if kind == CommandKind.JUMP:
            self._jump(text)
            return
        try:
            args = shlex.split(text)
        except ValueError as exc:
            self.set_status_message(self.translate("ERR_PARSE", error=exc), error=True)
            return
        if kind == CommandKind.SHELL:
            self._shell(args)
            return
        if kind == CommandKind.ADD:
            self.backend.add(args)
            message = "MSG_ADDED"
        elif kind == CommandKind.LOG:
            self.backend.log(args)
            message = "MSG_LOGGED"
        else:
            uuids = self.app.table.selected_uuids()
            if not uuids:
                return
            self.backend.modify(uuids, args)
            message = "MSG_MODIFIED"
        self.reload()
        self.set_status_message(self.translate(message))

    def _jump(self, text: str) -> None:
        try:
            task_id = int(text)
        except ValueError:
            self.set_status_message(self.translate("ERR_BAD_ID", value=text), error=True)
            return
        if not self.app.table.select_task_id(task_id):
            self.set_status_message(self.translate("ERR_NO_TASK", id=task_id), error=True)

    def _shell(self, args: List[str]) -> None:
        timeout = self.app.settings.command_timeout
        try:
            result = subprocess.run(args, capture_output=True, text=True, timeout=timeout)
        except subprocess.TimeoutExpired as exc:
            raise BackendError(f"{args[0]} timed out after {timeout}s") from exc
        except OSError as exc:
            raise BackendError(f"{args[0]} failed: {exc}") from exc
        if result.returncode != 0:
            raise BackendError((result.stderr or "").strip() or f"{args[0]} exited with {result.returncode}")
        self.reload()
        output = (result.stdout or "").strip()
        self.set_status_message(output.splitlines()[-1] if output else self.translate("MSG_SHELL_DONE"))


def _strip_quotes(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return text[1:-1]
    return text


def build_app(settings: Settings, tracking: TrackingCache, history: Optional[Dict[str, List[str]]] = None) -> App:
    """Wire the aggregate; completion reads tasks through the app it belongs to."""
    keymap = Keymap(settings.keys)
    table = TableState(looping=settings.looping)
    table.sort_spec = parse_sort(settings.sort)
    holder: List[App] = []
    completion = CompletionEngine(lambda: holder[0].completion_source())
    app = App(
        settings=settings,
        keymap=keymap,
        table=table,
        tracking=tracking,
        editor=LineEditor(completion),
        history=dict(history or {}),
        calendar_year=time.localtime().tm_year,
    )
    holder.append(app)
    return app


__all__ = ["App", "Engine", "build_app", "CHROME_ROWS"]
