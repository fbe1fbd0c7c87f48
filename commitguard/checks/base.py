"""Contract for per-file pre-commit checks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from ..models import CheckResult, StagedFile


class FileCheck(ABC):
    """A check run over one staged file's extracted content."""

    name = "check"

    @abstractmethod
    def applies(self, staged: StagedFile) -> bool:
        """Return True when this check should run for the file."""

    @abstractmethod
    def run(self, staged: StagedFile) -> List[CheckResult]:
        """Check the file, returning failures, warnings or a pass."""

    @staticmethod
    def content_path(staged: StagedFile) -> Path:
        if staged.scratch_path is None:
            raise ValueError(f"{staged.path} has not been extracted from the index")
        return staged.scratch_path

    @classmethod
    def read_bytes(cls, staged: StagedFile) -> bytes:
        return cls.content_path(staged).read_bytes()

    @classmethod
    def read_text(cls, staged: StagedFile) -> str:
        return cls.content_path(staged).read_text(encoding="utf-8", errors="replace")

    @staticmethod
    def relabel(output: str, staged: StagedFile) -> str:
        """Replace scratch paths in tool output with the repository path."""
        if staged.scratch_path is None:
            return output
        return output.replace(str(staged.scratch_path), staged.path)
