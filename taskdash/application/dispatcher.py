"""Mode state machine: ``dispatch(mode, event) -> (mode, actions)``.

``dispatch`` has no side effects. It only looks at the mode, the event, the
resolved keymap and the confirmation policy; the engine applies the result.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from taskdash.application import actions as A
from taskdash.application.events import BackendChangedEvent, Event, InputEvent, ResizeEvent, TickEvent
from taskdash.application.keymap import Keymap
from taskdash.application.modes import NORMAL, CommandKind, Mode, ModeKind, PendingAction, command, confirm

ENTER_KEYS = frozenset({"enter", "c-m", "c-j"})


@dataclass(frozen=True)
class DispatchPolicy:
    confirm_delete: bool = True
    confirm_done: bool = False
    confirm_undo: bool = True
    confirm_modify: bool = True
    reset_filter_on_esc: bool = False


_SIMPLE_NORMAL = {
    "down": A.Navigate(1),
    "up": A.Navigate(-1),
    "page_down": A.PageMove(1),
    "page_up": A.PageMove(-1),
    "go_to_top": A.JumpTop(),
    "go_to_bottom": A.JumpBottom(),
    "refresh": A.RefreshAction(),
    "select": A.ToggleMark(),
    "select_all": A.MarkAll(),
    "start_stop": A.StartStopTracking(),
    "edit": A.Edit(),
    "quit": A.Quit(),
}

_COMMAND_ACTIONS = {
    "add": CommandKind.ADD,
    "modify": CommandKind.MODIFY,
    "log": CommandKind.LOG,
    "shell": CommandKind.SHELL,
    "jump": CommandKind.JUMP,
}

_GATED = {"delete": "confirm_delete", "done": "confirm_done", "undo": "confirm_undo"}


Result = Tuple[Mode, List[A.Action]]


def dispatch(
    mode: Mode,
    event: Event,
    keymap: Keymap,
    policy: DispatchPolicy = DispatchPolicy(),
    targets: Sequence[str] = (),
) -> Result:
    """Map one event to the next mode and the actions to apply.

    ``targets`` are the uuids a backend action would act on right now (marked
    rows, else the cursor row); they are frozen into any pending action.
    """
    if isinstance(event, TickEvent):
        return mode, [A.TickAction(event.now)]
    if isinstance(event, ResizeEvent):
        return mode, [A.ResizeAction(event.width, event.height)]
    if isinstance(event, BackendChangedEvent):
        return mode, [A.RefreshAction()]
    if not isinstance(event, InputEvent):
        return mode, []

    key = event.key
    if mode.is_line_mode:
        return _dispatch_line(mode, key, policy, tuple(targets))
    if mode.kind == ModeKind.NORMAL:
        return _dispatch_normal(key, keymap, policy, tuple(targets))
    if mode.kind == ModeKind.CONFIRM:
        return _dispatch_confirm(mode, keymap.lookup(mode.kind, key))
    if mode.kind == ModeKind.CONTEXT_MENU:
        return _dispatch_menu(mode, keymap.lookup(mode.kind, key))
    if mode.kind == ModeKind.HELP:
        name = keymap.lookup(mode.kind, key)
        if name == "close":
            return NORMAL, []
        if name in ("down", "up"):
            return mode, [A.ScrollHelp(1 if name == "down" else -1)]
        return mode, []
    if mode.kind == ModeKind.CALENDAR:
        name = keymap.lookup(mode.kind, key)
        if name == "close":
            return NORMAL, []
        if name in ("next", "prev"):
            return mode, [A.CalendarMove(1 if name == "next" else -1)]
        return mode, []
    # Shortcut mode only exists while a script runs; input is dropped.
    return mode, []


def _dispatch_normal(key: str, keymap: Keymap, policy: DispatchPolicy, targets: Tuple[str, ...]) -> Result:
    name = keymap.lookup(ModeKind.NORMAL, key)
    if not name:
        return NORMAL, []
    if name in _SIMPLE_NORMAL:
        return NORMAL, [_SIMPLE_NORMAL[name]]
    if name in _GATED:
        pending = PendingAction(name, () if name == "undo" else targets)
        if name != "undo" and not targets:
            return NORMAL, []
        if getattr(policy, _GATED[name]):
            return confirm(pending), []
        return NORMAL, [A.Execute(pending)]
    if name == "filter":
        return Mode(ModeKind.FILTER), [A.EnterLine("filter")]
    if name == "annotate":
        if not targets:
            return NORMAL, []
        return Mode(ModeKind.ANNOTATE), [A.EnterLine("annotate")]
    if name in _COMMAND_ACTIONS:
        kind = _COMMAND_ACTIONS[name]
        return command(kind), [A.EnterLine("command", kind)]
    if name.startswith("shortcut"):
        return Mode(ModeKind.SHORTCUT), [A.RunShortcut(int(name[len("shortcut"):]))]
    if name == "context_menu":
        return Mode(ModeKind.CONTEXT_MENU), [A.OpenContextMenu()]
    if name == "calendar":
        return Mode(ModeKind.CALENDAR), []
    if name == "help":
        return Mode(ModeKind.HELP), []
    return NORMAL, []


def _dispatch_line(mode: Mode, key: str, policy: DispatchPolicy, targets: Tuple[str, ...] = ()) -> Result:
    if key in ENTER_KEYS:
        if mode.command == CommandKind.MODIFY and policy.confirm_modify and len(targets) > 1:
            return confirm(PendingAction("modify", targets)), [A.StageModify()]
        return NORMAL, [_submit(mode)]
    if key in ("escape", "c-c"):
        follow: List[A.Action] = [A.CancelLine()]
        if mode.kind == ModeKind.FILTER and policy.reset_filter_on_esc:
            follow.append(A.SubmitFilter(""))
        return NORMAL, follow
    return mode, [A.EditKey(key)]


def _submit(mode: Mode) -> A.Action:
    # No text: the engine reads the editor buffer.
    if mode.kind == ModeKind.FILTER:
        return A.SubmitFilter()
    if mode.kind == ModeKind.ANNOTATE:
        return A.SubmitAnnotation()
    return A.RunCommand(mode.command or CommandKind.ADD)


def _dispatch_confirm(mode: Mode, name) -> Result:
    if name == "confirm" and mode.pending is not None:
        return NORMAL, [A.Execute(mode.pending)]
    if name == "cancel":
        return NORMAL, []
    return mode, []


def _dispatch_menu(mode: Mode, name) -> Result:
    if name == "close":
        return NORMAL, []
    if name in ("down", "up"):
        return mode, [A.MenuMove(1 if name == "down" else -1)]
    if name == "select":
        return NORMAL, [A.SelectContext()]
    return mode, []


__all__ = ["dispatch", "DispatchPolicy", "ENTER_KEYS"]
