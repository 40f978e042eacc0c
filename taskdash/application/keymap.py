"""Key-binding map: defaults, user overrides and conflict resolution."""

from typing import Dict, List, Mapping, Optional, Tuple

from taskdash.application.errors import BindingConflict
from taskdash.application.modes import ModeKind

# Precedence on conflicts follows this order: earlier actions keep the key.
ACTION_ORDER: Tuple[str, ...] = (
    "quit",
    "help",
    "down",
    "up",
    "page_down",
    "page_up",
    "go_to_top",
    "go_to_bottom",
    "refresh",
    "filter",
    "select",
    "select_all",
    "done",
    "delete",
    "undo",
    "start_stop",
    "edit",
    "add",
    "modify",
    "log",
    "annotate",
    "shell",
    "jump",
    "context_menu",
    "calendar",
) + tuple(f"shortcut{n}" for n in range(10))

DEFAULT_KEYS: Dict[str, str] = {
    "quit": "q",
    "help": "?",
    "down": "j",
    "up": "k",
    "page_down": "J",
    "page_up": "K",
    "go_to_top": "g",
    "go_to_bottom": "G",
    "refresh": "r",
    "filter": "/",
    "select": "v",
    "select_all": "V",
    "done": "d",
    "delete": "x",
    "undo": "u",
    "start_stop": "s",
    "edit": "e",
    "add": "a",
    "modify": "m",
    "log": "l",
    "annotate": "A",
    "shell": "!",
    "jump": ":",
    "context_menu": "c",
    "calendar": "C",
}
DEFAULT_KEYS.update({f"shortcut{n}": str(n) for n in range(10)})

# Fixed secondary keys; a user binding on the same key takes precedence.
ALIAS_KEYS: Dict[str, str] = {
    "down": "down",
    "up": "up",
    "pagedown": "page_down",
    "pageup": "page_up",
    "home": "go_to_top",
    "end": "go_to_bottom",
    "c-c": "quit",
}

# Keys handled by modes other than Normal; not configurable.
MODAL_KEYS: Dict[ModeKind, Dict[str, str]] = {
    ModeKind.CONFIRM: {"y": "confirm", "Y": "confirm", "enter": "confirm", "c-m": "confirm", "n": "cancel", "N": "cancel", "escape": "cancel"},
    ModeKind.CONTEXT_MENU: {"j": "down", "down": "down", "k": "up", "up": "up", "enter": "select", "c-m": "select", "escape": "close", "q": "close"},
    ModeKind.HELP: {"j": "down", "down": "down", "k": "up", "up": "up", "escape": "close", "q": "close", "?": "close"},
    ModeKind.CALENDAR: {"j": "next", "down": "next", "k": "prev", "up": "prev", "escape": "close", "q": "close"},
}


class Keymap:
    """Resolved ``(mode, key) -> action`` table, validated on construction."""

    def __init__(self, overrides: Optional[Mapping[str, str]] = None):
        self.conflicts: List[BindingConflict] = []
        self.unknown: List[str] = []
        self.keys: Dict[str, Optional[str]] = {}
        self._normal: Dict[str, str] = {}
        self._build(dict(overrides or {}))

    def _build(self, overrides: Dict[str, str]) -> None:
        wanted: Dict[str, str] = dict(DEFAULT_KEYS)
        for action, key in overrides.items():
            if action not in DEFAULT_KEYS:
                self.unknown.append(action)
                continue
            if isinstance(key, str) and key:
                wanted[action] = key
        owner: Dict[str, str] = {}
        deferred: List[Tuple[str, str]] = []
        for action in ACTION_ORDER:
            key = wanted[action]
            if key in owner:
                deferred.append((action, key))
                continue
            owner[key] = action
            self.keys[action] = key
        for action, key in deferred:
            fallback = DEFAULT_KEYS[action]
            if fallback != key and fallback not in owner:
                owner[fallback] = action
                self.keys[action] = fallback
                self.conflicts.append(BindingConflict(key, owner[key], action, fallback))
            else:
                self.keys[action] = None
                self.conflicts.append(BindingConflict(key, owner[key], action))
        table = {alias: action for alias, action in ALIAS_KEYS.items() if alias not in owner}
        table.update(owner)
        self._normal = table

    def lookup(self, mode: ModeKind, key: str) -> Optional[str]:
        if mode == ModeKind.NORMAL:
            return self._normal.get(key)
        return MODAL_KEYS.get(mode, {}).get(key)

    def normal_bindings(self) -> List[Tuple[str, str]]:
        """(key, action) pairs in action order, for the help screen."""
        return [(self.keys[a], a) for a in ACTION_ORDER if self.keys.get(a)]


__all__ = ["Keymap", "ACTION_ORDER", "DEFAULT_KEYS", "ALIAS_KEYS", "MODAL_KEYS"]
