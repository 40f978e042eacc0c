"""Events consumed by the main loop, in arrival order."""

from dataclasses import dataclass


class Event:
    pass


@dataclass(frozen=True)
class TickEvent(Event):
    now: float


@dataclass(frozen=True)
class ResizeEvent(Event):
    width: int
    height: int


@dataclass(frozen=True)
class InputEvent(Event):
    key: str


@dataclass(frozen=True)
class BackendChangedEvent(Event):
    reason: str = ""


__all__ = ["Event", "TickEvent", "ResizeEvent", "InputEvent", "BackendChangedEvent"]
