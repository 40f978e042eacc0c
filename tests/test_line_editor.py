from taskdash.application.completion import CompletionEngine
from taskdash.application.line_editor import HISTORY_LIMIT, LineEditor

from fakes import make_task


def _type(editor, text):
    for ch in text:
        assert editor.handle_key(ch)


def test_insert_and_cursor_moves():
    editor = LineEditor()
    _type(editor, "abc")
    editor.handle_key("left")
    editor.handle_key("left")
    _type(editor, "X")
    assert editor.text == "aXbc"
    assert editor.cursor == 2
    editor.handle_key("home")
    assert editor.cursor == 0
    editor.handle_key("c-e")
    assert editor.cursor == 4


def test_deletion_keys():
    editor = LineEditor()
    editor.reset("hello world", 5)
    editor.handle_key("backspace")
    assert editor.text == "hell world"
    editor.handle_key("delete")
    assert editor.text == "hellworld"
    editor.handle_key("c-k")
    assert editor.text == "hell"
    editor.reset("one two three")
    editor.handle_key("c-w")
    assert editor.text == "one two "
    editor.reset("one two", 4)
    editor.handle_key("c-u")
    assert (editor.text, editor.cursor) == ("two", 0)


def test_undo_restores_previous_buffer():
    editor = LineEditor()
    _type(editor, "ab")
    editor.handle_key("backspace")
    editor.handle_key("c-_")
    assert editor.text == "ab"
    editor.handle_key("c-_")
    assert editor.text == "a"


def test_unknown_key_is_not_consumed():
    editor = LineEditor()
    assert not editor.handle_key("f5")
    assert editor.text == ""


def test_history_navigation_restores_draft():
    editor = LineEditor(history=["first", "second"])
    _type(editor, "dr")
    editor.handle_key("up")
    assert editor.text == "second"
    editor.handle_key("up")
    assert editor.text == "first"
    editor.handle_key("up")
    assert editor.text == "first"
    editor.handle_key("down")
    editor.handle_key("down")
    assert editor.text == "dr"


def test_remember_moves_duplicates_to_end_and_caps():
    editor = LineEditor(history=["a", "b"])
    editor.remember("a")
    assert editor.history == ["b", "a"]
    editor.remember("   ")
    assert editor.history == ["b", "a"]
    for n in range(HISTORY_LIMIT + 5):
        editor.remember(str(n))
    assert len(editor.history) == HISTORY_LIMIT


def test_tab_cycles_completion():
    engine = CompletionEngine(lambda: [make_task(1, project="work"), make_task(2, project="walk")])
    editor = LineEditor(engine)
    _type(editor, "project:w")
    editor.handle_key("tab")
    assert editor.text == "project:walk"
    editor.handle_key("tab")
    assert editor.text == "project:work"
    editor.handle_key("s-tab")
    assert editor.text == "project:walk"
