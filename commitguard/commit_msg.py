"""Conventional Commits validation for the commit-msg hook."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .logging import get_logger
from .models import CheckResult, CommitHeader

ALLOWED_TYPES = ("fix", "feat", "build", "docs", "style", "test", "refactor", "perf", "clean")

HEADER_PATTERN = re.compile(
    r"^(?P<type>[A-Za-z0-9]+)"
    r"(?:\((?P<scope>[^()]+)\))?"
    r"(?P<breaking>!)?"
    r": (?P<subject>\S.*)$"
)
BREAKING_FOOTER_PATTERN = re.compile(r"^BREAKING CHANGE:")
SCISSORS_LINE = "# ------------------------ >8 ------------------------"

_LOGGER = get_logger("commit_msg")


class CommitMessageError(ValueError):
    """Raised when a commit message violates the header or footer rules."""


@dataclass(frozen=True)
class CommitMessageResult:
    """Validation outcome for one commit message."""

    ok: bool
    reason: str
    header: Optional[CommitHeader] = None

    def to_check(self) -> CheckResult:
        if self.ok:
            return CheckResult.passed("commit-msg", self.reason)
        return CheckResult.failure("commit-msg", self.reason)


def strip_comments(message: str) -> List[str]:
    """Return message lines without git comments or anything below the scissors line."""
    lines: List[str] = []
    for line in message.splitlines():
        if line.rstrip() == SCISSORS_LINE:
            break
        if line.startswith("#"):
            continue
        lines.append(line.rstrip("\r"))
    return lines


def parse_header(line: str) -> CommitHeader:
    """Parse a ``type(scope)!: subject`` header, raising on any deviation."""
    match = HEADER_PATTERN.match(line)
    if not match:
        raise CommitMessageError(
            f"header does not match 'type(scope)!: subject': {line!r}"
        )
    commit_type = match.group("type")
    if commit_type not in ALLOWED_TYPES:
        raise CommitMessageError(
            f"invalid type '{commit_type}' (allowed: {', '.join(ALLOWED_TYPES)})"
        )
    return CommitHeader(
        type=commit_type,
        scope=match.group("scope"),
        breaking=match.group("breaking") is not None,
        subject=match.group("subject"),
    )


def has_breaking_footer(lines: List[str]) -> bool:
    return any(BREAKING_FOOTER_PATTERN.match(line) for line in lines[1:])


def validate_message(message: str) -> CommitMessageResult:
    """Validate commit message text, stopping at the first failure."""
    lines = strip_comments(message)
    while lines and not lines[0].strip():
        lines.pop(0)
    if not lines:
        return CommitMessageResult(ok=False, reason="commit message is empty")

    try:
        header = parse_header(lines[0])
    except CommitMessageError as exc:
        return CommitMessageResult(ok=False, reason=str(exc))

    footer = has_breaking_footer(lines)
    _LOGGER.debug(
        "Parsed header type=%s scope=%s breaking=%s footer=%s",
        header.type,
        header.scope,
        header.breaking,
        footer,
    )
    if header.breaking and not footer:
        return CommitMessageResult(
            ok=False,
            reason="breaking change marked with '!' but 'BREAKING CHANGE:' footer missing",
            header=header,
        )
    if footer and not header.breaking:
        return CommitMessageResult(
            ok=False,
            reason="'BREAKING CHANGE:' footer present but header lacks the '!' marker",
            header=header,
        )
    return CommitMessageResult(ok=True, reason="commit message format valid", header=header)


def validate_file(path: Path) -> CommitMessageResult:
    """Read a commit message file as passed to the commit-msg hook and validate it."""
    text = path.read_text(encoding="utf-8", errors="replace")
    return validate_message(text)


__all__ = [
    "ALLOWED_TYPES",
    "CommitMessageError",
    "CommitMessageResult",
    "parse_header",
    "strip_comments",
    "validate_file",
    "validate_message",
]
