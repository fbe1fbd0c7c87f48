"""Core data models shared across commitguard hooks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class ChangeStatus(str, Enum):
    """Status letters reported by ``git diff --name-status``."""

    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"
    TYPE_CHANGED = "T"

    @classmethod
    def from_letter(cls, letter: str) -> "ChangeStatus":
        # Renames and copies carry a similarity score (R086).
        return cls(letter[:1].upper())


@dataclass
class StagedFile:
    """A file in the index, with its content extracted to a scratch location."""

    path: str
    object_id: str
    status: ChangeStatus
    mode: str = "100644"
    scratch_path: Optional[Path] = None

    @property
    def is_deleted(self) -> bool:
        return self.status is ChangeStatus.DELETED

    @property
    def is_submodule(self) -> bool:
        """Gitlink entries point at a commit, not a blob."""
        return self.mode == "160000"

    @property
    def is_executable(self) -> bool:
        return self.mode == "100755"

    @property
    def suffix(self) -> str:
        return Path(self.path).suffix


@dataclass(frozen=True)
class CommitHeader:
    """Parsed first line of a Conventional Commits message."""

    type: str
    scope: Optional[str]
    breaking: bool
    subject: str


class FragmentKind(str, Enum):
    """Classification of a run of lines inside a source file."""

    CODE = "code"
    DIRECTIVE = "directive"
    PROSE = "prose"
    LATEX = "latex-comment"


@dataclass(frozen=True)
class Fragment:
    """A contiguous run of lines extracted from a source file."""

    kind: FragmentKind
    path: str
    start_line: int
    end_line: int
    start_byte: int
    end_byte: int
    raw: str
    text: str
    root: Optional[str] = None


class CheckStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"
    SKIP = "skip"


@dataclass
class CheckResult:
    """Outcome of a single hook check."""

    name: str
    status: CheckStatus
    message: str
    diagnostic: str = ""

    @property
    def failed(self) -> bool:
        return self.status is CheckStatus.FAIL

    @classmethod
    def passed(cls, name: str, message: str) -> "CheckResult":
        return cls(name=name, status=CheckStatus.PASS, message=message)

    @classmethod
    def failure(cls, name: str, message: str, diagnostic: str = "") -> "CheckResult":
        return cls(name=name, status=CheckStatus.FAIL, message=message, diagnostic=diagnostic)

    @classmethod
    def warning(cls, name: str, message: str, diagnostic: str = "") -> "CheckResult":
        return cls(name=name, status=CheckStatus.WARN, message=message, diagnostic=diagnostic)

    @classmethod
    def skipped(cls, name: str, message: str) -> "CheckResult":
        return cls(name=name, status=CheckStatus.SKIP, message=message)
