"""Colored status lines for hook output."""

from __future__ import annotations

import os
import sys
from typing import Optional, TextIO

from .models import CheckResult, CheckStatus

RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
DIM = "\033[2m"
RESET = "\033[0m"

_MARKERS = {
    CheckStatus.PASS: ("✔", GREEN),
    CheckStatus.FAIL: ("✘", RED),
    CheckStatus.WARN: ("⚠", YELLOW),
    CheckStatus.SKIP: ("-", DIM),
}


class Reporter:
    """Prints one marker line per check result, plus an indented diagnostic."""

    def __init__(self, stream: Optional[TextIO] = None, *, color: Optional[bool] = None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.color = _color_enabled(self.stream) if color is None else color

    def report(self, result: CheckResult) -> None:
        marker, color = _MARKERS[result.status]
        self._write(self._paint(f"{marker} {result.message}", color))
        if result.diagnostic:
            self._write(_indent(result.diagnostic))

    def info(self, message: str) -> None:
        self._write(message)

    def _paint(self, text: str, color: str) -> str:
        if not self.color:
            return text
        return f"{color}{text}{RESET}"

    def _write(self, text: str) -> None:
        print(text, file=self.stream)
        self.stream.flush()


def _color_enabled(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _indent(text: str, prefix: str = "    ") -> str:
    return "\n".join(prefix + line if line else line for line in text.rstrip("\n").splitlines())


__all__ = ["Reporter"]
