"""Context-aware completion for the filter/command line.

``complete`` is stateless and re-run on every keystroke; ``CompletionCycle``
holds the little state needed to step through candidates on repeated Tab.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from taskdash.core import PRIORITY_NAMES, STATUS_NAMES, Task

CONTEXT_COMMAND = "command"
CONTEXT_PROJECT = "project"
CONTEXT_TAG = "tag"
CONTEXT_PRIORITY = "priority"
CONTEXT_STATUS = "status"
CONTEXT_ATTRIBUTE = "attribute"

COMMAND_NAMES: Tuple[str, ...] = (
    "add",
    "annotate",
    "append",
    "delete",
    "denotate",
    "done",
    "duplicate",
    "edit",
    "log",
    "modify",
    "prepend",
    "start",
    "stop",
)

ATTRIBUTE_NAMES: Tuple[str, ...] = (
    "depends",
    "description",
    "due",
    "end",
    "entry",
    "priority",
    "project",
    "recur",
    "scheduled",
    "status",
    "until",
    "wait",
)

# Checked longest first.
PREFIX_CONTEXTS: Tuple[Tuple[str, str], ...] = tuple(
    sorted(
        (
            ("project:", CONTEXT_PROJECT),
            ("proj:", CONTEXT_PROJECT),
            ("pro:", CONTEXT_PROJECT),
            ("priority:", CONTEXT_PRIORITY),
            ("pri:", CONTEXT_PRIORITY),
            ("status:", CONTEXT_STATUS),
            ("+", CONTEXT_TAG),
            ("-", CONTEXT_TAG),
        ),
        key=lambda item: -len(item[0]),
    )
)


@dataclass(frozen=True)
class CompletionContext:
    kind: str
    prefix: str
    fragment: str
    start: int
    end: int
    attribute: str = ""


def token_bounds(text: str, cursor: int) -> Tuple[int, int]:
    """Start/end of the whitespace-delimited token touching ``cursor``."""
    cursor = max(0, min(cursor, len(text)))
    start = cursor
    while start > 0 and not text[start - 1].isspace():
        start -= 1
    end = cursor
    while end < len(text) and not text[end].isspace():
        end += 1
    return start, end


def detect_context(text: str, cursor: int) -> CompletionContext:
    start, end = token_bounds(text, cursor)
    token = text[start:cursor]
    for prefix, kind in PREFIX_CONTEXTS:
        if token.startswith(prefix):
            return CompletionContext(kind, prefix, token[len(prefix):], start + len(prefix), end)
    if ":" in token:
        attribute, _, value = token.partition(":")
        if attribute:
            prefix = attribute + ":"
            return CompletionContext(CONTEXT_ATTRIBUTE, prefix, value, start + len(prefix), end, attribute=attribute)
    return CompletionContext(CONTEXT_COMMAND, "", token, start, end)


def rank_candidates(values: Iterable[str], fragment: str) -> List[str]:
    """Dedupe and keep prefix matches: exact-case first, then case-folded."""
    folded = fragment.casefold()
    exact: List[str] = []
    loose: List[str] = []
    for value in dict.fromkeys(v for v in values if v):
        if value.startswith(fragment):
            exact.append(value)
        elif value.casefold().startswith(folded):
            loose.append(value)
    return sorted(exact) + sorted(loose)


class CompletionEngine:
    """Produce ranked candidates for a buffer and cursor position."""

    def __init__(self, source: Callable[[], Sequence[Task]]):
        self._source = source

    def context(self, buffer: str, cursor: int) -> CompletionContext:
        return detect_context(buffer, cursor)

    def complete(self, buffer: str, cursor: int) -> List[str]:
        ctx = detect_context(buffer, cursor)
        return rank_candidates(self.values_for(ctx), ctx.fragment)

    def values_for(self, ctx: CompletionContext) -> List[str]:
        tasks = list(self._source())
        if ctx.kind == CONTEXT_PROJECT:
            return [t.project for t in tasks if t.project]
        if ctx.kind == CONTEXT_TAG:
            return [tag for t in tasks for tag in t.tags]
        if ctx.kind == CONTEXT_PRIORITY:
            return list(PRIORITY_NAMES)
        if ctx.kind == CONTEXT_STATUS:
            return list(STATUS_NAMES)
        if ctx.kind == CONTEXT_ATTRIBUTE:
            if ctx.attribute == "depends":
                return [str(t.id) for t in tasks if t.id]
            if ctx.attribute in ("description",):
                return [t.description for t in tasks if " " not in t.description]
            return []
        return list(COMMAND_NAMES) + [name + ":" for name in ATTRIBUTE_NAMES]


class CompletionCycle:
    """Tab-cycling over candidates for one buffer state."""

    def __init__(self, engine: CompletionEngine):
        self.engine = engine
        self.candidates: List[str] = []
        self.index: int = -1
        self._expected: Optional[Tuple[str, int]] = None
        self._start: int = 0
        self._end: int = 0

    @property
    def active(self) -> bool:
        return bool(self.candidates)

    def reset(self) -> None:
        self.candidates = []
        self.index = -1
        self._expected = None

    def step(self, text: str, cursor: int, direction: int = 1) -> Tuple[str, int]:
        """Replace the active token with the next candidate.

        Returns the new ``(text, cursor)``. Unchanged when nothing matches.
        """
        if self._expected != (text, cursor):
            ctx = detect_context(text, cursor)
            self.candidates = rank_candidates(self.engine.values_for(ctx), ctx.fragment)
            # A fresh backward step lands on the last candidate.
            self.index = 0 if direction < 0 else -1
            self._start, self._end = ctx.start, ctx.end
        if not self.candidates:
            self.reset()
            return text, cursor
        self.index = (self.index + direction) % len(self.candidates)
        choice = self.candidates[self.index]
        from_end = self._end - cursor
        new_text = text[: self._start] + choice + text[self._end :]
        new_end = self._start + len(choice)
        new_cursor = max(self._start, new_end - from_end)
        self._end = new_end
        self._expected = (new_text, new_cursor)
        return new_text, new_cursor


__all__ = [
    "CompletionEngine",
    "CompletionCycle",
    "CompletionContext",
    "detect_context",
    "rank_candidates",
    "token_bounds",
]
