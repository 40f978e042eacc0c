"""Line-editing sub-state used by the Filter, Command and Annotate modes."""

from typing import List, Optional

from prompt_toolkit.document import Document

from taskdash.application.completion import CompletionCycle, CompletionEngine

UNDO_LIMIT = 100
HISTORY_LIMIT = 200


class LineEditor:
    """Single-line buffer with cursor, undo stack, history and completion."""

    def __init__(self, engine: Optional[CompletionEngine] = None, history: Optional[List[str]] = None):
        self.document = Document("", 0)
        self._undo: List[Document] = []
        self.history: List[str] = list(history or [])
        self._history_index: Optional[int] = None
        self._history_draft: str = ""
        self.cycle = CompletionCycle(engine) if engine else None

    @property
    def text(self) -> str:
        return self.document.text

    @property
    def cursor(self) -> int:
        return self.document.cursor_position

    def reset(self, text: str = "", cursor: Optional[int] = None) -> None:
        pos = len(text) if cursor is None else max(0, min(cursor, len(text)))
        self.document = Document(text, pos)
        self._undo.clear()
        self._history_index = None
        if self.cycle:
            self.cycle.reset()

    def _set(self, text: str, cursor: int, *, record: bool = True) -> None:
        if record and text != self.document.text:
            self._undo.append(self.document)
            del self._undo[:-UNDO_LIMIT]
        self.document = Document(text, max(0, min(cursor, len(text))))

    def undo(self) -> None:
        if self._undo:
            self.document = self._undo.pop()

    # -------------------- key handling --------------------
    def handle_key(self, key: str) -> bool:
        """Apply one key. Returns False when the key is not an editing key."""
        doc = self.document
        text, pos = doc.text, doc.cursor_position
        if key not in ("tab", "c-i", "s-tab") and self.cycle:
            self.cycle.reset()
        if key in ("backspace", "c-h"):
            if pos > 0:
                self._set(text[: pos - 1] + text[pos:], pos - 1)
        elif key in ("delete",):
            if pos < len(text):
                self._set(text[:pos] + text[pos + 1 :], pos)
        elif key == "left":
            self._set(text, pos - 1, record=False)
        elif key == "right":
            self._set(text, pos + 1, record=False)
        elif key in ("home", "c-a"):
            self._set(text, 0, record=False)
        elif key in ("end", "c-e"):
            self._set(text, len(text), record=False)
        elif key == "c-u":
            self._set(text[pos:], 0)
        elif key == "c-k":
            self._set(text[:pos], pos)
        elif key == "c-w":
            start = pos + (doc.find_start_of_previous_word(WORD=True) or 0)
            self._set(text[:start] + text[pos:], start)
        elif key == "c-_":
            self.undo()
        elif key in ("tab", "c-i", "s-tab"):
            if self.cycle:
                new_text, new_pos = self.cycle.step(text, pos, -1 if key == "s-tab" else 1)
                self._set(new_text, new_pos)
        elif key == "up":
            self._history_step(-1)
        elif key == "down":
            self._history_step(1)
        elif len(key) == 1 and key.isprintable():
            self._set(text[:pos] + key + text[pos:], pos + 1)
        else:
            return False
        return True

    def _history_step(self, direction: int) -> None:
        if not self.history:
            return
        if self._history_index is None:
            if direction > 0:
                return
            self._history_draft = self.text
            index = len(self.history) - 1
        else:
            index = self._history_index + direction
        if index >= len(self.history):
            self._history_index = None
            self._set(self._history_draft, len(self._history_draft), record=False)
            return
        index = max(0, index)
        self._history_index = index
        entry = self.history[index]
        self._set(entry, len(entry), record=False)

    def remember(self, text: str) -> None:
        text = text.strip()
        if not text:
            return
        if text in self.history:
            self.history.remove(text)
        self.history.append(text)
        del self.history[:-HISTORY_LIMIT]


__all__ = ["LineEditor"]
