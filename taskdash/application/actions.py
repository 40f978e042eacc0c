"""Actions produced by the dispatcher and applied by the engine."""

from dataclasses import dataclass
from typing import Optional

from taskdash.application.modes import CommandKind, PendingAction


class Action:
    """Marker base class."""


# -------------------- structural --------------------
@dataclass(frozen=True)
class TickAction(Action):
    now: float


@dataclass(frozen=True)
class ResizeAction(Action):
    width: int
    height: int


@dataclass(frozen=True)
class RefreshAction(Action):
    pass


# -------------------- table --------------------
@dataclass(frozen=True)
class Navigate(Action):
    delta: int


@dataclass(frozen=True)
class PageMove(Action):
    pages: int


@dataclass(frozen=True)
class JumpTop(Action):
    pass


@dataclass(frozen=True)
class JumpBottom(Action):
    pass


@dataclass(frozen=True)
class ToggleMark(Action):
    pass


@dataclass(frozen=True)
class MarkAll(Action):
    pass


# -------------------- backend --------------------
@dataclass(frozen=True)
class StartStopTracking(Action):
    pass


@dataclass(frozen=True)
class Execute(Action):
    """Run a (possibly confirmed) done/delete/undo/modify."""

    pending: PendingAction


@dataclass(frozen=True)
class Edit(Action):
    pass


@dataclass(frozen=True)
class RunShortcut(Action):
    number: int


@dataclass(frozen=True)
class SelectContext(Action):
    name: Optional[str] = None


# -------------------- mode transitions --------------------
@dataclass(frozen=True)
class EnterLine(Action):
    """A line mode was entered; the engine seeds the editor buffer."""

    mode: str
    command: CommandKind = CommandKind.ADD


@dataclass(frozen=True)
class EditKey(Action):
    key: str


@dataclass(frozen=True)
class SubmitFilter(Action):
    """``text=None`` means: take the line editor buffer."""

    text: Optional[str] = None


@dataclass(frozen=True)
class RunCommand(Action):
    kind: CommandKind
    text: Optional[str] = None


@dataclass(frozen=True)
class StageModify(Action):
    """Copy the parsed command line into the pending bulk modify."""


@dataclass(frozen=True)
class SubmitAnnotation(Action):
    text: Optional[str] = None


@dataclass(frozen=True)
class CancelLine(Action):
    pass


@dataclass(frozen=True)
class OpenContextMenu(Action):
    pass


@dataclass(frozen=True)
class MenuMove(Action):
    delta: int


@dataclass(frozen=True)
class ScrollHelp(Action):
    delta: int


@dataclass(frozen=True)
class CalendarMove(Action):
    years: int


@dataclass(frozen=True)
class Quit(Action):
    pass


