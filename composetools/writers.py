"""Progress writers: silent, plain-text and live terminal output."""

from __future__ import annotations

import contextlib
import shutil
import sys
import threading
import time
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextvars import ContextVar
from dataclasses import replace
from typing import Any, Protocol, TextIO

from composetools.events import Event, EventStatus
from composetools.spinner import Spinner
from composetools.stringutils import string_contains

_WHITE = "\x1b[37m"
_BLUE = "\x1b[34m"
_RED = "\x1b[31m"
_RESET = "\x1b[0m"
_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_TICK = 0.1


class _Writer(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...

    def event(self, event: Event) -> None: ...

    def events(self, events: Iterable[Event]) -> None: ...

    def tail_msgf(self, msg: str, *args: Any) -> None: ...


def _colored(text: str, color: str) -> str:
    return f"{color}{text}{_RESET}"


class NoopWriter:
    """A writer that draws nothing and never waits; it only counts what it drops."""

    def __init__(self) -> None:
        self.running = False
        self.discarded = 0

    def start(self) -> None:
        """Mark the writer as running and return at once."""
        self.running = True

    def stop(self) -> None:
        """Mark the writer as stopped."""
        self.running = False

    def event(self, event: Event) -> None:
        """Drop the event."""
        self.discarded += 1

    def events(self, events: Iterable[Event]) -> None:
        """Drop the events."""
        for event in events:
            self.event(event)

    def tail_msgf(self, msg: str, *args: Any) -> None:
        """Drop the message."""
        self.discarded += 1

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NoopWriter)

    def __hash__(self) -> int:
        return hash(NoopWriter)

    def __repr__(self) -> str:
        return "NoopWriter()"


class PlainWriter:
    """Writes one line per event, for output that is not a terminal."""

    def __init__(self, out: TextIO) -> None:
        self.out = out
        self._done = threading.Event()

    def start(self) -> None:
        """Block until the writer is stopped."""
        self._done.wait()

    def stop(self) -> None:
        self._done.set()

    def event(self, event: Event) -> None:
        print(event.id, event.text, event.status_text, file=self.out)

    def events(self, events: Iterable[Event]) -> None:
        for event in events:
            self.event(event)

    def tail_msgf(self, msg: str, *args: Any) -> None:
        print(msg, *args, file=self.out)


class TtyWriter:
    """Redraws a block of progress lines on a terminal every 100 ms."""

    def __init__(self, out: TextIO) -> None:
        self.out = out
        self.event_map: dict[str, Event] = {}
        self.event_ids: list[str] = []
        self.tail_events: list[str] = []
        self._repeated = False
        self._num_lines = 0
        self._done = threading.Event()
        self._lock = threading.Lock()

    def start(self) -> None:
        """Redraw until stopped, then draw a last time and print tail messages."""
        while not self._done.wait(_TICK):
            self._print()
        self._print()
        self._print_tail_events()

    def stop(self) -> None:
        self._done.set()

    def event(self, event: Event) -> None:
        with self._lock:
            if not string_contains(self.event_ids, event.id):
                self.event_ids.append(event.id)
            last = self.event_map.get(event.id)
            if last is not None:
                if (
                    event.status in (EventStatus.DONE, EventStatus.ERROR)
                    and last.status != event.status
                ):
                    last.stop()
                last.status = event.status
                last.text = event.text
                last.status_text = event.status_text
                last.parent_id = event.parent_id
            else:
                stored = replace(event, start_time=time.monotonic(), spinner=Spinner())
                if stored.status in (EventStatus.DONE, EventStatus.ERROR):
                    stored.stop()
                self.event_map[event.id] = stored

    def events(self, events: Iterable[Event]) -> None:
        for event in events:
            self.event(event)

    def tail_msgf(self, msg: str, *args: Any) -> None:
        with self._lock:
            self.tail_events.append(msg % args if args else msg)

    def _print_tail_events(self) -> None:
        with self._lock:
            for msg in self.tail_events:
                print(msg, file=self.out)
            self._flush()

    def _flush(self) -> None:
        flush = getattr(self.out, "flush", None)
        if flush is not None:
            flush()

    def _print(self) -> None:
        with self._lock:
            if not self.event_ids:
                return
            terminal_width = shutil.get_terminal_size().columns
            move = "\x1b[1A" * (self._num_lines + 1)
            if not self._repeated:
                move += "\x1b[1B"
            self._repeated = True
            self.out.write(move + "\x1b[0G")
            self.out.write(_HIDE_CURSOR)
            try:
                done = num_done(self.event_map)
                first_line = f"[+] Running {done}/{self._num_lines}"
                if self._num_lines != 0 and done == self._num_lines:
                    first_line = _colored(first_line, _BLUE)
                print(first_line, file=self.out)

                status_padding = 0
                for event_id in self.event_ids:
                    event = self.event_map[event_id]
                    length = len(f"{event.id} {event.text}")
                    if status_padding < length:
                        status_padding = length
                    if event.parent_id != "":
                        status_padding -= 2

                color = sys.platform != "win32"
                num_lines = 0
                for event_id in self.event_ids:
                    event = self.event_map[event_id]
                    if event.parent_id != "":
                        continue
                    self.out.write(
                        line_text(event, "", terminal_width, status_padding, color)
                    )
                    num_lines += 1
                    for child_id in self.event_ids:
                        child = self.event_map[child_id]
                        if child.parent_id == event.id:
                            self.out.write(
                                line_text(child, "  ", terminal_width, status_padding, color)
                            )
                            num_lines += 1
                self._num_lines = num_lines
            finally:
                self.out.write(_SHOW_CURSOR)
                self._flush()


def line_text(
    event: Event, pad: str, terminal_width: int, status_padding: int, color: bool
) -> str:
    """Render one progress line, ending with the elapsed time."""
    now = time.monotonic()
    start = event.start_time if event.start_time is not None else now
    end = now
    if event.status != EventStatus.WORKING:
        end = start
        if event.end_time is not None:
            end = event.end_time
    elapsed = end - start

    text_len = len(f"{event.id} {event.text}")
    padding = max(status_padding - text_len, 0)
    # Long status texts (errors) would break the line layout.
    max_status_len = terminal_width - text_len - status_padding - 15
    status = event.status_text
    if max_status_len > 0 and len(status) > max_status_len:
        status = status[:max_status_len] + "..."
    spinner = event.spinner if event.spinner is not None else Spinner()
    text = f"{pad} {spinner} {event.id} {event.text}{' ' * padding} {status}"
    timer = f"{elapsed:.1f}s\n"
    line = align(text, timer, terminal_width)

    if color:
        shade = _WHITE
        if event.status == EventStatus.DONE:
            shade = _BLUE
        if event.status == EventStatus.ERROR:
            shade = _RED
        return _colored(line, shade)
    return line


def num_done(events: Mapping[str, Event]) -> int:
    """Count the events that are done."""
    return sum(1 for event in events.values() if event.status == EventStatus.DONE)


def align(left: str, right: str, width: int) -> str:
    """Pad ``left`` so that ``right`` ends at column ``width``."""
    field = abs(width - len(right) - 1)
    return f"{left:<{field}} {right}"


_current_writer: ContextVar[_Writer | None] = ContextVar("progress_writer", default=None)


def context_writer() -> _Writer:
    """Return the writer of the current context, or a writer that discards."""
    writer = _current_writer.get()
    if writer is None:
        return NoopWriter()
    return writer


@contextlib.contextmanager
def with_context_writer(writer: _Writer) -> Iterator[_Writer]:
    """Make ``writer`` the current context writer inside the block."""
    token = _current_writer.set(writer)
    try:
        yield writer
    finally:
        _current_writer.reset(token)


def new_writer(out: TextIO) -> _Writer:
    """Return a live writer for a terminal and a plain one otherwise."""
    isatty = getattr(out, "isatty", None)
    if isatty is not None and isatty():
        return TtyWriter(out)
    return PlainWriter(out)


def run_with_status(func: Callable[[], str], out: TextIO | None = None) -> str:
    """Run ``func`` while a progress writer draws; return what it returned."""
    writer = new_writer(out if out is not None else sys.stderr)
    drawer = threading.Thread(target=writer.start, daemon=True)
    drawer.start()
    try:
        with with_context_writer(writer):
            result = func()
    finally:
        writer.stop()
        drawer.join()
    return result


def run(func: Callable[[], object], out: TextIO | None = None) -> None:
    """Run ``func`` while a progress writer draws."""

    def _call() -> str:
        func()
        return ""

    run_with_status(_call, out)