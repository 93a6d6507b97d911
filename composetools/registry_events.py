"""Decode image pull and push progress streams into progress events."""

from __future__ import annotations

import codecs
import io
import json
import time
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from composetools.events import Event, EventStatus

_CHUNK = 4096
_SIZE_UNITS = ("B", "kB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB")
_PROGRESS_WIDTH = 200
_SECOND_NS = 1_000_000_000


class _EventWriter(Protocol):
    def event(self, event: Event) -> None: ...


class PullFailure(Exception):
    """An image could not be pulled."""


def _human_size(size: float) -> str:
    index = 0
    while size >= 1000.0 and index < len(_SIZE_UNITS) - 1:
        size /= 1000.0
        index += 1
    return "%.4g%s" % (size, _SIZE_UNITS[index])


def _format_duration(seconds: int) -> str:
    if seconds <= 0:
        return "0s"
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


@dataclass
class _Progress:
    current: int = 0
    total: int = 0
    start: int = 0
    hide_counts: bool = False
    units: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> _Progress:
        return cls(
            current=int(data.get("current") or 0),
            total=int(data.get("total") or 0),
            start=int(data.get("start") or 0),
            hide_counts=bool(data.get("hidecounts") or False),
            units=str(data.get("units") or ""),
        )

    def __str__(self) -> str:
        if self.current <= 0 and self.total <= 0:
            return ""
        if self.total <= 0:
            if self.units == "":
                return "%8s" % _human_size(self.current)
            return f"{self.current} {self.units}"

        percentage = min(int(self.current / self.total * 100) // 2, 50)
        bar = ""
        if _PROGRESS_WIDTH > 110:
            spaces = max(50 - percentage, 0)
            bar = "[%s>%s] " % ("=" * percentage, " " * spaces)

        numbers = ""
        if self.hide_counts:
            pass
        elif self.units == "":
            current = _human_size(self.current)
            numbers = "%8s/%s" % (current, _human_size(self.total))
            if self.current > self.total:
                numbers = "%8s" % current
        else:
            numbers = f"{self.current}/{self.total} {self.units}"
            if self.current > self.total:
                numbers = f"{self.current} {self.units}"

        time_left = ""
        if self.current > 0 and self.start > 0 and percentage < 50:
            from_start = time.time_ns() - self.start * _SECOND_NS
            per_entry = from_start // self.current
            left = (self.total - self.current) * per_entry
            if _PROGRESS_WIDTH > 50:
                time_left = " " + _format_duration(left // _SECOND_NS)
        return bar + numbers + time_left


@dataclass
class JSONMessage:
    """One message of an engine progress stream."""

    id: str = ""
    status: str = ""
    progress: _Progress | None = None
    progress_message: str = ""
    error: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> JSONMessage:
        """Build a message from its decoded JSON object."""
        detail = data.get("progressDetail")
        progress = _Progress.from_dict(detail) if isinstance(detail, Mapping) else None
        error = None
        error_detail = data.get("errorDetail")
        if isinstance(error_detail, Mapping):
            error = str(error_detail.get("message") or "")
        return cls(
            id=str(data.get("id") or ""),
            status=str(data.get("status") or ""),
            progress=progress,
            progress_message=str(data.get("progress") or ""),
            error=error,
        )


def decode_messages(stream: Any) -> Iterator[JSONMessage]:
    """Yield the JSON messages of a stream of concatenated JSON objects.

    ``stream`` is bytes, text, or a binary or text file-like object.
    Malformed input raises ``ValueError``.
    """
    if isinstance(stream, (bytes, bytearray)):
        stream = io.BytesIO(bytes(stream))
    elif isinstance(stream, str):
        stream = io.StringIO(stream)
    decoder = json.JSONDecoder()
    utf8 = codecs.getincrementaldecoder("utf-8")()
    buffer = ""
    eof = False
    while True:
        buffer = buffer.lstrip()
        if buffer:
            try:
                value, end = decoder.raw_decode(buffer)
            except json.JSONDecodeError:
                if eof:
                    raise
            else:
                buffer = buffer[end:]
                if not isinstance(value, dict):
                    raise ValueError("expected a JSON object in progress stream")
                yield JSONMessage.from_dict(value)
                continue
        elif eof:
            return
        chunk = stream.read(_CHUNK)
        if not chunk:
            eof = True
            buffer += utf8.decode(b"", final=True)
            continue
        buffer += chunk if isinstance(chunk, str) else utf8.decode(chunk)


def to_pull_progress_event(parent: str, jm: JSONMessage, writer: _EventWriter) -> None:
    """Report a layer's pull progress as a child event of ``parent``."""
    if jm.id == "" or jm.progress is None:
        return
    status = EventStatus.WORKING
    text = str(jm.progress)
    if (
        jm.status in ("Pull complete", "Already exists")
        or "Image is up to date" in jm.status
        or "Downloaded newer image" in jm.status
    ):
        status = EventStatus.DONE
    if jm.error is not None:
        status = EventStatus.ERROR
        text = jm.error
    writer.event(
        Event(id=jm.id, parent_id=parent, text=jm.status, status=status, status_text=text)
    )


def to_push_progress_event(prefix: str, jm: JSONMessage, writer: _EventWriter) -> None:
    """Report a layer's push progress."""
    if jm.id == "":
        return
    status = EventStatus.WORKING
    text = ""
    if jm.status in ("Pull complete", "Already exists"):
        status = EventStatus.DONE
    if jm.error is not None:
        status = EventStatus.ERROR
        text = jm.error
    if jm.progress is not None:
        text = str(jm.progress)
    writer.event(
        Event(
            id=f"Pushing {prefix}: {jm.id}",
            text=jm.status,
            status=status,
            status_text=text,
        )
    )


def consume_pull_stream(
    service_name: str, stream: Any, writer: _EventWriter, quiet: bool = False
) -> None:
    """Follow a pull stream, reporting progress; raise PullFailure on errors."""
    writer.event(Event(id=service_name, status=EventStatus.WORKING, text="Pulling"))
    messages = decode_messages(stream)
    while True:
        try:
            jm = next(messages)
        except StopIteration:
            break
        except ValueError as exc:
            raise PullFailure(str(exc)) from exc
        if jm.error is not None:
            raise PullFailure(jm.error)
        if not quiet:
            to_pull_progress_event(service_name, jm, writer)
    writer.event(Event(id=service_name, status=EventStatus.DONE, text="Pulled"))


def consume_push_stream(service_name: str, stream: Any, writer: _EventWriter) -> None:
    """Follow a push stream, reporting progress; raise on errors."""
    for jm in decode_messages(stream):
        if jm.error is not None:
            raise RuntimeError(jm.error)
        to_push_progress_event(service_name, jm, writer)