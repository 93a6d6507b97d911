"""A writer that joins incoming chunks and hands out complete lines."""

from __future__ import annotations

from collections.abc import Callable


class LineWriter:
    """Buffers written data and calls ``consumer`` once per complete line.

    The trailing newline is stripped from each line. Whatever is left in the
    buffer when the writer is closed is handed to the consumer as a last line.
    """

    def __init__(self, consumer: Callable[[str], None]) -> None:
        self._consumer = consumer
        self._buffer = bytearray()

    def write(self, data: bytes | bytearray | memoryview | str) -> int:
        """Append ``data`` and emit every complete line; return its length."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._buffer.extend(data)
        while True:
            index = self._buffer.find(b"\n")
            if index < 0:
                break
            line = bytes(self._buffer[:index])
            del self._buffer[: index + 1]
            self._consumer(line.decode("utf-8", errors="replace"))
        return len(data)

    def close(self) -> None:
        """Emit any incomplete last line."""
        if not self._buffer:
            return
        rest = bytes(self._buffer)
        self._buffer.clear()
        self._consumer(rest.decode("utf-8", errors="replace"))

    def __enter__(self) -> LineWriter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def get_writer(consumer: Callable[[str], None]) -> LineWriter:
    """Create a writer that splits its input by line and feeds ``consumer``."""
    return LineWriter(consumer)