"""Checks over Fortran sources: heuristics and embedded fragments."""

from __future__ import annotations

from typing import List

from ..fortran import FortranLinter, is_fortran
from ..fragments import FragmentExtractor, FragmentValidator
from ..models import CheckResult, StagedFile
from .base import FileCheck


class FortranHeuristicsCheck(FileCheck):
    """Null-pointer and duplicate-assignment heuristics; findings are warnings only."""

    name = "fortran"

    def __init__(self, linter: FortranLinter | None = None, extractor: FragmentExtractor | None = None) -> None:
        self.linter = linter or FortranLinter()
        self.extractor = extractor or FragmentExtractor()

    def applies(self, staged: StagedFile) -> bool:
        return is_fortran(staged.path)

    def run(self, staged: StagedFile) -> List[CheckResult]:
        source = self.read_bytes(staged)
        extraction = self.extractor.extract(source.decode("utf-8", errors="replace"), staged.path)
        warnings = self.linter.lint(source, staged.path, extraction.directives)
        if not warnings:
            return [CheckResult.passed(self.name, f"{staged.path}: no heuristic findings")]
        return [CheckResult.warning(self.name, str(warning)) for warning in warnings]


class FragmentCheck(FileCheck):
    """Extracts directives and LaTeX blocks from a file and validates each one."""

    name = "fragments"

    def __init__(self, validator: FragmentValidator, extractor: FragmentExtractor | None = None) -> None:
        self.validator = validator
        self.extractor = extractor or FragmentExtractor()

    def applies(self, staged: StagedFile) -> bool:
        return is_fortran(staged.path)

    def run(self, staged: StagedFile) -> List[CheckResult]:
        extraction = self.extractor.extract_file(self.content_path(staged), staged.path)
        results = self.validator.validate(extraction)
        if not results:
            return [CheckResult.passed(self.name, f"{staged.path}: no embedded fragments")]
        return results
