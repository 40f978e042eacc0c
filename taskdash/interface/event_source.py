"""Single ordered event queue fed by the input, tick and watcher threads."""

import logging
import queue
import select
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from prompt_toolkit.input import Input, create_input
from prompt_toolkit.key_binding import KeyPress
from prompt_toolkit.keys import Keys

from taskdash.application.events import BackendChangedEvent, Event, InputEvent, ResizeEvent, TickEvent

logger = logging.getLogger("taskdash.events")

KEY_ALIASES = {
    "c-m": "enter",
    "c-j": "enter",
    "c-i": "tab",
    "c-h": "backspace",
}
IGNORED_KEYS = frozenset({Keys.CPRResponse, Keys.Vt100MouseEvent, Keys.WindowsMouseEvent, Keys.Ignore})
SIGNATURE_INTERVAL = 1.0
READ_POLL = 0.05


def normalize_key_press(press: KeyPress) -> List[str]:
    """Turn a prompt_toolkit ``KeyPress`` into dispatcher key names."""
    key = press.key
    if key in IGNORED_KEYS:
        return []
    if key == Keys.BracketedPaste:
        return [ch for ch in press.data.replace("\r", "").replace("\n", " ") if ch.isprintable()]
    name = key.value if isinstance(key, Keys) else str(key)
    return [KEY_ALIASES.get(name, name)]


class EventSource:
    """Merges terminal input, ticks and backend change notices in arrival order.

    ``next()`` collapses a run of queued ticks into the newest one; other
    events are never dropped or reordered.
    """

    def __init__(
        self,
        tick_rate: float = 0.25,
        signature: Optional[Callable[[], int]] = None,
        size: Optional[Callable[[], Tuple[int, int]]] = None,
        input_factory: Callable[[], Input] = create_input,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.tick_rate = max(0.01, float(tick_rate))
        self._signature = signature
        self._size = size
        self._input_factory = input_factory
        self._clock = clock
        self._queue: "queue.Queue[Event]" = queue.Queue()
        self._held: Optional[Event] = None
        self._stop = threading.Event()
        self._pause = threading.Event()
        self._io_lock = threading.Lock()
        self._threads: List[threading.Thread] = []
        self._input: Optional[Input] = None
        self._raw = None

    # -------------------- producers --------------------
    def push(self, event: Event) -> None:
        self._queue.put(event)

    def push_keys(self, presses: Iterable[KeyPress]) -> None:
        for press in presses:
            for key in normalize_key_press(press):
                self.push(InputEvent(key))

    def _input_loop(self) -> None:
        inp = self._input
        while not self._stop.is_set():
            if self._pause.is_set():
                time.sleep(READ_POLL)
                continue
            with self._io_lock:
                if self._pause.is_set():
                    continue
                ready, _, _ = select.select([inp.fileno()], [], [], READ_POLL)
                # A lone escape is only emitted once the line goes quiet.
                presses = inp.read_keys() if ready else inp.flush_keys()
            self.push_keys(presses)

    def _tick_loop(self) -> None:
        last_size = self._size() if self._size else None
        last_signature = self._read_signature()
        next_check = self._clock() + SIGNATURE_INTERVAL
        while not self._stop.wait(self.tick_rate):
            now = self._clock()
            if self._size:
                size = self._size()
                if size != last_size:
                    last_size = size
                    self.push(ResizeEvent(size[0], size[1]))
            if self._signature and now >= next_check:
                next_check = now + SIGNATURE_INTERVAL
                current = self._read_signature()
                if current != last_signature:
                    last_signature = current
                    self.push(BackendChangedEvent("data files changed"))
            self.push(TickEvent(now))

    def _read_signature(self) -> Optional[int]:
        if not self._signature:
            return None
        try:
            return self._signature()
        except OSError as exc:
            logger.debug("Signature check failed: %s", exc)
            return None

    # -------------------- consumer --------------------
    def next(self, timeout: Optional[float] = None) -> Optional[Event]:
        """Next event, or ``None`` when ``timeout`` passes with nothing queued."""
        if self._held is not None:
            event, self._held = self._held, None
            return event
        try:
            event = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        while isinstance(event, TickEvent):
            try:
                following = self._queue.get_nowait()
            except queue.Empty:
                break
            if isinstance(following, TickEvent):
                event = following
            else:
                self._held = following
                break
        return event

    # -------------------- lifecycle --------------------
    def start(self, with_input: bool = True) -> None:
        if with_input:
            self._input = self._input_factory()
            self._raw = self._input.raw_mode()
            self._raw.__enter__()
            self._threads.append(threading.Thread(target=self._input_loop, name="taskdash-input", daemon=True))
        self._threads.append(threading.Thread(target=self._tick_loop, name="taskdash-tick", daemon=True))
        for thread in self._threads:
            thread.start()

    def stop(self) -> None:
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout=1.0)
        self._threads.clear()
        if self._raw is not None:
            self._raw.__exit__(None, None, None)
            self._raw = None
        if self._input is not None:
            self._input.close()
            self._input = None

    @contextmanager
    def paused(self) -> Iterator[None]:
        """Hand the terminal to a child process; input reading resumes after."""
        if self._input is None:
            yield
            return
        self._pause.set()
        with self._io_lock:
            self._raw.__exit__(None, None, None)
            try:
                yield
            finally:
                self._raw = self._input.raw_mode()
                self._raw.__enter__()
                self._input.flush_keys()
                self._pause.clear()


__all__ = ["EventSource", "normalize_key_press", "KEY_ALIASES"]
