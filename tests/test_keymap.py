from taskdash.application.keymap import ACTION_ORDER, DEFAULT_KEYS, Keymap
from taskdash.application.modes import ModeKind


def test_defaults_have_no_conflicts():
    keymap = Keymap()
    assert keymap.conflicts == []
    assert keymap.lookup(ModeKind.NORMAL, "q") == "quit"
    assert keymap.lookup(ModeKind.NORMAL, "c-c") == "quit"
    assert set(keymap.keys) == set(ACTION_ORDER)


def test_override_rebinds_action():
    keymap = Keymap({"done": "D"})
    assert keymap.lookup(ModeKind.NORMAL, "D") == "done"
    assert keymap.lookup(ModeKind.NORMAL, "d") is None
    assert keymap.keys["done"] == "D"


def test_conflict_earlier_action_wins_other_falls_back():
    keymap = Keymap({"delete": "d"})
    assert ACTION_ORDER.index("done") < ACTION_ORDER.index("delete")
    assert keymap.lookup(ModeKind.NORMAL, "d") == "done"
    assert keymap.keys["delete"] == DEFAULT_KEYS["delete"]
    [conflict] = keymap.conflicts
    assert (conflict.key, conflict.kept, conflict.dropped, conflict.fallback) == ("d", "done", "delete", "x")
    assert "falls back" in conflict.describe()


def test_conflict_without_free_default_unbinds():
    keymap = Keymap({"quit": "x", "delete": "q"})
    # quit takes x; delete wants q, which is free again since quit moved
    assert keymap.lookup(ModeKind.NORMAL, "x") == "quit"
    assert keymap.lookup(ModeKind.NORMAL, "q") == "delete"
    keymap = Keymap({"help": "j"})
    assert keymap.lookup(ModeKind.NORMAL, "j") == "help"
    assert keymap.keys["down"] is None
    [conflict] = keymap.conflicts
    assert conflict.dropped == "down"
    assert "unbound" in conflict.describe()


def test_user_binding_overrides_alias():
    keymap = Keymap({"refresh": "home"})
    assert keymap.lookup(ModeKind.NORMAL, "home") == "refresh"


def test_unknown_actions_are_reported_not_raised():
    keymap = Keymap({"launch_rockets": "!"})
    assert keymap.unknown == ["launch_rockets"]
    assert keymap.lookup(ModeKind.NORMAL, "!") == "shell"


def test_modal_keys_are_fixed():
    keymap = Keymap({"quit": "y"})
    assert keymap.lookup(ModeKind.CONFIRM, "y") == "confirm"
    assert keymap.lookup(ModeKind.HELP, "escape") == "close"
