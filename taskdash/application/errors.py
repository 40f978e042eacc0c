"""Recoverable error types raised by external collaborators."""

from dataclasses import dataclass


class BackendError(Exception):
    """A backend query or mutation failed (non-zero exit, timeout, bad output)."""


class MalformedOutputError(BackendError):
    pass


class TrackingError(Exception):
    """The time-tracking query collaborator failed."""


class ShortcutError(Exception):
    def __init__(self, script: str, returncode: int, stderr: str = ""):
        self.script = script
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"{script} exited with {returncode}: {stderr.strip()}")


@dataclass(frozen=True)
class BindingConflict:
    """Two actions resolved to the same key in overlapping modes."""

    key: str
    kept: str
    dropped: str
    fallback: str = ""

    def describe(self) -> str:
        tail = f"; '{self.dropped}' falls back to '{self.fallback}'" if self.fallback else f"; '{self.dropped}' is unbound"
        return f"key '{self.key}' bound to both '{self.kept}' and '{self.dropped}'{tail}"


__all__ = ["BackendError", "MalformedOutputError", "TrackingError", "ShortcutError", "BindingConflict"]
