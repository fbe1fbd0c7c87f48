"""Checks over raw file content: ASCII-only text and leftover debug markers."""

from __future__ import annotations

from fnmatch import fnmatch
from pathlib import PurePosixPath
from typing import List, Sequence

from ..models import CheckResult, StagedFile
from .base import FileCheck


class AsciiCheck(FileCheck):
    """Fails on the first non-ASCII byte, except in exempt file patterns."""

    name = "ascii"

    def __init__(self, exempt: Sequence[str] = ()) -> None:
        self.exempt = list(exempt)

    def applies(self, staged: StagedFile) -> bool:
        basename = PurePosixPath(staged.path).name
        return not any(fnmatch(staged.path, pattern) or fnmatch(basename, pattern) for pattern in self.exempt)

    def run(self, staged: StagedFile) -> List[CheckResult]:
        content = self.read_bytes(staged)
        for line_number, line in enumerate(content.splitlines(), start=1):
            for column, byte in enumerate(line, start=1):
                if byte > 0x7F:
                    return [
                        CheckResult.failure(
                            self.name,
                            f"{staged.path}:{line_number}:{column}: non-ASCII character",
                            diagnostic=line.decode("utf-8", errors="replace"),
                        )
                    ]
        return [CheckResult.passed(self.name, f"{staged.path}: ASCII only")]


class DebugMarkerCheck(FileCheck):
    """Fails when a configured debug marker is left in a staged file."""

    name = "debug-marker"

    def __init__(self, markers: Sequence[str]) -> None:
        self.markers = [marker for marker in markers if marker]

    def applies(self, staged: StagedFile) -> bool:
        return bool(self.markers)

    def run(self, staged: StagedFile) -> List[CheckResult]:
        text = self.read_text(staged)
        for line_number, line in enumerate(text.splitlines(), start=1):
            for marker in self.markers:
                if marker in line:
                    return [
                        CheckResult.failure(
                            self.name,
                            f"{staged.path}:{line_number}: debug marker '{marker}' left in file",
                            diagnostic=line.strip(),
                        )
                    ]
        return [CheckResult.passed(self.name, f"{staged.path}: no debug markers")]
