"""The pre-push hook: confirm pushes to protected branches."""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatch
from typing import Callable, List, Sequence

from .console import Reporter
from .logging import get_logger
from .models import CheckResult

_LOGGER = get_logger("push")

Prompt = Callable[[str], str]


class PushInputError(ValueError):
    """Raised when git's pre-push input cannot be parsed."""


@dataclass(frozen=True)
class PushRef:
    """One ``<local ref> <local sha> <remote ref> <remote sha>`` line."""

    local_ref: str
    local_sha: str
    remote_ref: str
    remote_sha: str


def parse_push_lines(text: str) -> List[PushRef]:
    refs: List[PushRef] = []
    for line in text.splitlines():
        fields = line.split()
        if not fields:
            continue
        if len(fields) == 4:
            refs.append(PushRef(*fields))
        elif len(fields) == 2:
            # Bare ``<local ref> <remote ref>`` pair.
            refs.append(PushRef(local_ref=fields[0], local_sha="", remote_ref=fields[1], remote_sha=""))
        else:
            raise PushInputError(f"malformed pre-push line: {line!r}")
    return refs


def is_protected(remote_ref: str, branches: Sequence[str]) -> bool:
    """Match ``refs/heads/<branch>`` against names or glob patterns such as ``release/*``."""
    prefix = "refs/heads/"
    if not remote_ref.startswith(prefix):
        return False
    branch = remote_ref[len(prefix) :]
    return any(fnmatch(branch, pattern) for pattern in branches)


def read_keystroke(prompt: str) -> str:
    """Show the prompt on the controlling terminal and read a single key.

    Git hands the ref list to the hook on stdin, so the answer has to come
    from ``/dev/tty``. Returns an empty string when no terminal is available.
    """
    import termios
    import tty

    try:
        terminal = open("/dev/tty", "r+", encoding="utf-8", errors="replace")
    except OSError:
        return ""
    with terminal:
        terminal.write(prompt)
        terminal.flush()
        descriptor = terminal.fileno()
        saved = termios.tcgetattr(descriptor)
        try:
            tty.setcbreak(descriptor)
            answer = terminal.read(1)
        finally:
            termios.tcsetattr(descriptor, termios.TCSADRAIN, saved)
        terminal.write("\n")
    return answer


class PushGate:
    """Asks once before pushing to a protected branch; anything but ``y`` aborts."""

    def __init__(self, protected_branches: Sequence[str], reporter: Reporter, prompt: Prompt | None = None) -> None:
        self.protected_branches = list(protected_branches)
        self.reporter = reporter
        self._prompt = prompt or read_keystroke

    def check(self, refs: Sequence[PushRef]) -> int:
        targets = [ref.remote_ref for ref in refs if is_protected(ref.remote_ref, self.protected_branches)]
        if not targets:
            self.reporter.report(CheckResult.passed("pre-push", "no protected branches targeted"))
            return 0
        names = ", ".join(dict.fromkeys(targets))
        _LOGGER.debug("Push targets protected ref(s): %s", names)
        answer = self._prompt(f"You are about to push to {names}. Continue? [y/N] ")
        if answer.strip().lower() == "y":
            self.reporter.report(CheckResult.passed("pre-push", f"push to {names} confirmed"))
            return 0
        self.reporter.report(CheckResult.failure("pre-push", f"push to {names} aborted"))
        return 1


__all__ = ["PushGate", "PushInputError", "PushRef", "is_protected", "parse_push_lines", "read_keystroke"]
