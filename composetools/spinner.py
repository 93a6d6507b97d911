"""A text spinner for progress lines."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass, field

_CHARS = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]
_DONE = "⠿"


def _default_chars() -> list[str]:
    return ["-"] if sys.platform == "win32" else list(_CHARS)


def _default_done() -> str:
    return "-" if sys.platform == "win32" else _DONE


@dataclass
class Spinner:
    """Cycles through its characters once it has run for over 100 ms."""

    chars: list[str] = field(default_factory=_default_chars)
    done: str = field(default_factory=_default_done)
    started: float = field(default_factory=time.monotonic)
    index: int = 0
    stopped: bool = False

    def __str__(self) -> str:
        if self.stopped:
            return self.done
        if time.monotonic() - self.started > 0.1:
            self.index = (self.index + 1) % len(self.chars)
        return self.chars[self.index]

    def stop(self) -> None:
        """Freeze the spinner on its done character."""
        self.stopped = True