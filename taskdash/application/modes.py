"""Application modes and the payloads they carry."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ModeKind(Enum):
    NORMAL = "normal"
    FILTER = "filter"
    COMMAND = "command"
    ANNOTATE = "annotate"
    SHORTCUT = "shortcut"
    CONTEXT_MENU = "context_menu"
    CALENDAR = "calendar"
    HELP = "help"
    CONFIRM = "confirm"


class CommandKind(Enum):
    ADD = "add"
    MODIFY = "modify"
    LOG = "log"
    SHELL = "shell"
    JUMP = "jump"


LINE_MODES = frozenset({ModeKind.FILTER, ModeKind.COMMAND, ModeKind.ANNOTATE})


@dataclass(frozen=True)
class PendingAction:
    """Backend mutation awaiting confirmation, with its targets captured."""

    kind: str  # delete | done | undo | modify
    uuids: Tuple[str, ...] = ()
    args: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Mode:
    kind: ModeKind = ModeKind.NORMAL
    pending: Optional[PendingAction] = None
    command: Optional[CommandKind] = None

    @property
    def is_line_mode(self) -> bool:
        return self.kind in LINE_MODES


NORMAL = Mode()


def confirm(pending: PendingAction) -> Mode:
    return Mode(ModeKind.CONFIRM, pending=pending)


def command(kind: CommandKind) -> Mode:
    return Mode(ModeKind.COMMAND, command=kind)


__all__ = ["ModeKind", "CommandKind", "PendingAction", "Mode", "NORMAL", "LINE_MODES", "confirm", "command"]
