"""Interactive prompts for user input."""

from __future__ import annotations

import getpass
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TextIO


@dataclass
class User:
    """Asks the user questions on a terminal or on the given streams."""

    stdin: TextIO | None = None
    stdout: TextIO | None = None

    @property
    def _in(self) -> TextIO:
        return self.stdin if self.stdin is not None else sys.stdin

    @property
    def _out(self) -> TextIO:
        return self.stdout if self.stdout is not None else sys.stdout

    def _ask(self, text: str) -> str:
        self._out.write(text)
        self._out.flush()
        line = self._in.readline()
        if not line:
            raise EOFError("no input")
        return line.rstrip("\r\n")

    def select(self, message: str, options: Sequence[str]) -> int:
        """Show ``options`` and return the index of the chosen one."""
        if not options:
            raise ValueError("no options to select from")
        self._out.write(f"? {message}\n")
        for number, option in enumerate(options, start=1):
            self._out.write(f"  {number}) {option}\n")
        while True:
            answer = self._ask("Answer: ").strip()
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return int(answer) - 1
            if answer in options:
                return list(options).index(answer)
            self._out.write("Invalid choice\n")

    def input(self, message: str, default_value: str = "") -> str:
        """Read a line of text, falling back to ``default_value`` when empty."""
        suffix = f" ({default_value})" if default_value else ""
        answer = self._ask(f"? {message}{suffix} ").strip()
        return answer or default_value

    def confirm(self, message: str, default_value: bool = False) -> bool:
        """Ask a yes or no question."""
        hint = "(Y/n)" if default_value else "(y/N)"
        while True:
            answer = self._ask(f"? {message} {hint} ").strip().lower()
            if not answer:
                return default_value
            if answer in ("y", "yes"):
                return True
            if answer in ("n", "no"):
                return False
            self._out.write("Please answer yes or no\n")

    def password(self, message: str) -> str:
        """Read a secret without echoing it on a terminal."""
        text = f"? {message} "
        if self.stdin is None and sys.stdin.isatty():
            return getpass.getpass(text, stream=self._out)
        return self._ask(text)