from contextlib import contextmanager
from types import SimpleNamespace

import pytest

from taskdash.application import engine as engine_module
from taskdash.application.engine import CHROME_ROWS, Engine, build_app
from taskdash.application.errors import BackendError, ShortcutError
from taskdash.application.events import InputEvent, ResizeEvent, TickEvent
from taskdash.application.modes import ModeKind, PendingAction
from taskdash.application.tracking_cache import TrackingCache
from taskdash.config import Settings, TimewarriorSettings
from taskdash.core import TaskStatus

from fakes import FakeBackend, FakeShortcuts, FakeTracker, make_task


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def backend():
    return FakeBackend(
        [
            make_task(1, project="work"),
            make_task(2, project="home"),
            make_task(3, project="work"),
            make_task(4, status=TaskStatus.COMPLETED),
        ],
        contexts=["work", "home"],
    )


def _engine(backend, settings=None, **kwargs):
    settings = settings or Settings()
    tracker = kwargs.pop("tracker", FakeTracker())
    clock = kwargs.pop("clock", Clock())
    app = build_app(settings, TrackingCache(tracker.active_interval, ttl=settings.tracking_ttl, clock=clock))
    engine = Engine(app, backend, tracker=tracker, clock=clock, **kwargs)
    engine.load_initial()
    return engine


def _press(engine, *keys):
    for key in keys:
        engine.handle(InputEvent(key))


def _type(engine, text):
    _press(engine, *list(text))


def test_initial_load_uses_default_filter(backend):
    engine = _engine(backend)
    assert backend.exports[0] == "status:pending"
    assert engine.app.table.visible == ["uuid-1", "uuid-2", "uuid-3"]


def test_failed_delete_leaves_table_untouched(backend):
    engine = _engine(backend)
    app = engine.app
    _press(engine, "j", "v")
    visible, marked = list(app.table.visible), set(app.table.marked)
    _press(engine, "x")
    assert app.mode.kind == ModeKind.CONFIRM
    backend.fail = "database is locked"
    _press(engine, "y")
    assert app.mode.kind == ModeKind.NORMAL
    assert app.table.visible == visible
    assert app.table.marked == marked
    assert app.status_is_error
    assert app.status_message == "ERR_ACTION_FAILED"


def test_confirmed_delete_executes_captured_targets(backend):
    engine = _engine(backend)
    _press(engine, "v", "j", "v", "x")
    # other keys are ignored while the prompt is open
    _press(engine, "j")
    _press(engine, "y")
    assert ("delete", ["uuid-1", "uuid-2"]) in backend.calls
    assert engine.app.table.visible == ["uuid-3"]
    assert engine.app.table.marked == set()


def test_done_without_confirmation_requeries(backend):
    engine = _engine(backend)
    exports = len(backend.exports)
    _press(engine, "d")
    assert ("done", ["uuid-1"]) in backend.calls
    assert len(backend.exports) == exports + 1
    assert "uuid-1" not in engine.app.table.visible
    assert engine.app.status_message == "MSG_DONE"


def test_tick_refreshes_tracking_once_per_window(backend):
    tracker = FakeTracker({"uuid-2"})
    engine = _engine(backend, tracker=tracker)
    for now in (0.0, 2.0, 6.0):
        engine.handle(TickEvent(now))
    assert tracker.queries == 2
    assert engine.app.tracking.is_tracked("uuid-2")


def test_filter_submit_requeries_and_records_history(backend):
    saved = []
    store = SimpleNamespace(save=lambda history: saved.append(dict(history)))
    engine = _engine(backend, history_store=store)
    _press(engine, "/")
    assert engine.app.editor.text == "status:pending"
    _press(engine, "c-u")
    _type(engine, "project:work")
    _press(engine, "enter")
    assert engine.app.table.filter_text == "project:work"
    assert engine.app.table.visible == ["uuid-1", "uuid-3"]
    assert saved[-1]["filter"] == ["project:work"]


def test_d_typed_in_filter_never_completes_a_task(backend):
    engine = _engine(backend)
    _press(engine, "/", "d")
    assert not any(call[0] == "done" for call in backend.calls)
    assert engine.app.editor.text.endswith("d")


def test_escape_can_reset_filter(backend):
    engine = _engine(backend, Settings(reset_filter_on_esc=True))
    _press(engine, "/", "escape")
    assert engine.app.table.filter_text == ""
    assert "uuid-4" in engine.app.table.visible


def test_add_with_auto_quotes(backend):
    engine = _engine(backend)
    _press(engine, "a")
    assert (engine.app.editor.text, engine.app.editor.cursor) == ('""', 1)
    _type(engine, "buy milk")
    _press(engine, "right")
    _type(engine, " +shop")
    _press(engine, "enter")
    assert ("add", ["buy milk", "+shop"]) in backend.calls
    assert engine.app.mode.kind == ModeKind.NORMAL


def test_annotate_and_modify_target_selection(backend):
    engine = _engine(backend)
    _press(engine, "A")
    _type(engine, "call back")
    _press(engine, "enter")
    assert ("annotate", "uuid-1", "call back") in backend.calls
    _press(engine, "j", "m")
    assert engine.app.editor.text == ""
    _type(engine, "priority:H")
    _press(engine, "enter")
    assert ("modify", ["uuid-2"], ["priority:H"]) in backend.calls


def test_jump_selects_task_by_id(backend):
    engine = _engine(backend)
    _press(engine, ":")
    _type(engine, "3")
    _press(engine, "enter")
    assert engine.app.table.selected_uuid() == "uuid-3"
    _press(engine, ":")
    _type(engine, "42")
    _press(engine, "enter")
    assert engine.app.status_message == "ERR_NO_TASK"


def test_start_stop_uses_backend_and_invalidates_cache(backend):
    tracker = FakeTracker()
    engine = _engine(backend, tracker=tracker)
    engine.handle(TickEvent(0.0))
    _press(engine, "s")
    assert ("start", "uuid-1") in backend.calls
    assert tracker.started == []
    assert engine.app.tracking.is_expired(1.0)


def test_start_stop_can_manage_timewarrior_directly(backend):
    tracker = FakeTracker()
    settings = Settings(timewarrior=TimewarriorSettings(manage_intervals=True))
    backend.tasks["uuid-1"] = make_task(1, tags=("deep",))
    engine = _engine(backend, settings, tracker=tracker)
    _press(engine, "s")
    assert tracker.started == [("uuid-1", ["deep"])]


def test_shortcut_runs_with_selection_and_returns_to_normal(backend):
    shortcuts = FakeShortcuts({"1": "/bin/report"}, output="3 tasks exported\n")
    engine = _engine(backend, shortcuts=shortcuts)
    _press(engine, "v", "j", "v", "1")
    assert shortcuts.runs == [(1, ["uuid-1", "uuid-2"])]
    assert engine.app.mode.kind == ModeKind.NORMAL
    assert engine.app.status_message == "3 tasks exported"


def test_shortcut_failure_is_reported(backend):
    shortcuts = FakeShortcuts({"2": "/bin/x"}, error=ShortcutError("/bin/x", 3, "nope"))
    engine = _engine(backend, shortcuts=shortcuts)
    _press(engine, "2")
    assert engine.app.mode.kind == ModeKind.NORMAL
    assert engine.app.status_is_error


def test_missing_shortcut_script(backend):
    engine = _engine(backend, shortcuts=FakeShortcuts())
    _press(engine, "5")
    assert engine.app.mode.kind == ModeKind.NORMAL
    assert engine.app.status_message == "ERR_NO_SHORTCUT"


def test_context_menu_selects_context(backend):
    engine = _engine(backend)
    _press(engine, "c")
    assert engine.app.contexts == ["none", "work", "home"]
    _press(engine, "j", "enter")
    assert ("set_context", "work") in backend.calls
    assert engine.app.mode.kind == ModeKind.NORMAL


def test_edit_runs_inside_suspend(backend, monkeypatch):
    events = []

    @contextmanager
    def suspend():
        events.append("suspend")
        yield
        events.append("resume")

    def fake_run(argv, **kwargs):
        events.append(argv)
        return SimpleNamespace(returncode=0)

    monkeypatch.setattr(engine_module.subprocess, "run", fake_run)
    engine = _engine(backend, suspend=suspend)
    _press(engine, "e")
    assert events == ["suspend", ["true", "uuid-1"], "resume"]


def test_resize_sets_viewport(backend):
    engine = _engine(backend)
    engine.handle(ResizeEvent(120, 30))
    assert engine.app.table.viewport_height == 30 - CHROME_ROWS
    assert engine.app.width == 120


def test_status_message_expires_on_tick(backend):
    clock = Clock()
    engine = _engine(backend, clock=clock)
    engine.set_status_message("hello", ttl=2.0)
    clock.now = 1.0
    engine.handle(TickEvent(1.0))
    assert engine.app.status_message == "hello"
    clock.now = 2.5
    engine.handle(TickEvent(2.5))
    assert engine.app.status_message == ""


def test_quit(backend):
    engine = _engine(backend)
    _press(engine, "q")
    assert not engine.app.running


def test_bulk_modify_waits_for_confirmation(backend):
    engine = _engine(backend)
    _press(engine, "V", "m")
    _type(engine, "+x")
    _press(engine, "enter")
    mode = engine.app.mode
    assert mode.kind == ModeKind.CONFIRM
    assert mode.pending == PendingAction("modify", ("uuid-1", "uuid-2", "uuid-3"), ("+x",))
    assert not any(call[0] == "modify" for call in backend.calls)
    _press(engine, "y")
    assert ("modify", ["uuid-1", "uuid-2", "uuid-3"], ["+x"]) in backend.calls
    assert engine.app.mode.kind == ModeKind.NORMAL
    assert engine.app.status_message == "MSG_MODIFIED"


def test_bulk_modify_declined_changes_nothing(backend):
    engine = _engine(backend)
    _press(engine, "V", "m")
    _type(engine, "priority:L")
    _press(engine, "enter", "n")
    assert engine.app.mode.kind == ModeKind.NORMAL
    assert not any(call[0] == "modify" for call in backend.calls)


def test_bulk_modify_with_empty_line_is_dropped(backend):
    engine = _engine(backend)
    _press(engine, "V", "m", "enter")
    assert engine.app.mode.kind == ModeKind.NORMAL
    assert not any(call[0] == "modify" for call in backend.calls)


def test_bulk_modify_without_confirmation(backend):
    engine = _engine(backend, Settings(confirm_modify=False))
    _press(engine, "V", "m")
    _type(engine, "+x")
    _press(engine, "enter")
    assert ("modify", ["uuid-1", "uuid-2", "uuid-3"], ["+x"]) in backend.calls


def test_failed_tracker_start_still_reloads(backend):
    tracker = FakeTracker()
    tracker.start_error = "timew exploded"
    settings = Settings(timewarrior=TimewarriorSettings(manage_intervals=True))
    engine = _engine(backend, settings, tracker=tracker)
    engine.handle(TickEvent(0.0))
    exports = len(backend.exports)
    _press(engine, "s")
    assert ("start", "uuid-1") in backend.calls
    assert len(backend.exports) == exports + 1
    assert engine.app.tracking.is_expired(1.0)
    assert engine.app.status_is_error
    assert engine.app.status_message == "ERR_ACTION_FAILED"


def test_report_columns_loaded_on_start(backend):
    backend.columns = [("id", "ID"), ("description.count", "Description")]
    engine = _engine(backend)
    assert engine.app.columns == backend.columns


def test_unreadable_report_columns_fall_back(backend):
    def broken():
        raise BackendError("task show failed")

    backend.report_columns = broken
    engine = _engine(backend)
    assert engine.app.columns == []
    assert backend.exports[0] == "status:pending"


def test_sort_setting_orders_the_table(backend):
    engine = _engine(backend, Settings(sort="project+,id-"))
    assert engine.app.table.visible == ["uuid-2", "uuid-3", "uuid-1"]
