"""Checks delegating to external syntax validators."""

from __future__ import annotations

from typing import List

from ..models import CheckResult, StagedFile
from ..tools import PerlSyntaxChecker, ToolError, XmlLinter, YamlLinter
from .base import FileCheck

PERL_SUFFIXES = (".pl", ".pm")


class PerlCheck(FileCheck):
    """Perl scripts must be executable in the index and compile under ``perl -c``."""

    name = "perl"

    def __init__(self, checker: PerlSyntaxChecker) -> None:
        self.checker = checker

    def applies(self, staged: StagedFile) -> bool:
        return staged.path.endswith(PERL_SUFFIXES) or self._has_perl_shebang(staged)

    def run(self, staged: StagedFile) -> List[CheckResult]:
        is_script = not staged.path.endswith(".pm")
        if is_script and not staged.is_executable:
            return [CheckResult.failure(self.name, f"{staged.path}: script is not executable (mode {staged.mode})")]
        try:
            report = self.checker.run(self.content_path(staged))
        except ToolError as exc:
            return [CheckResult.failure(self.name, f"{staged.path}: {exc}")]
        if not report.ok:
            return [
                CheckResult.failure(
                    self.name,
                    f"{staged.path}: does not compile",
                    diagnostic=self.relabel(report.output, staged),
                )
            ]
        return [CheckResult.passed(self.name, f"{staged.path}: perl syntax OK")]

    def _has_perl_shebang(self, staged: StagedFile) -> bool:
        if staged.scratch_path is None:
            return False
        with staged.scratch_path.open("rb") as handle:
            first_line = handle.readline(256)
        return first_line.startswith(b"#!") and b"perl" in first_line


class XmlCheck(FileCheck):
    name = "xml"

    def __init__(self, linter: XmlLinter) -> None:
        self.linter = linter

    def applies(self, staged: StagedFile) -> bool:
        return staged.path.endswith(".xml")

    def run(self, staged: StagedFile) -> List[CheckResult]:
        try:
            report = self.linter.run(self.content_path(staged))
        except ToolError as exc:
            return [CheckResult.failure(self.name, f"{staged.path}: {exc}")]
        if not report.ok:
            return [
                CheckResult.failure(
                    self.name,
                    f"{staged.path}: invalid XML",
                    diagnostic=self.relabel(report.output, staged),
                )
            ]
        return [CheckResult.passed(self.name, f"{staged.path}: valid XML")]


class YamlCheck(FileCheck):
    name = "yaml"

    def __init__(self, linter: YamlLinter) -> None:
        self.linter = linter

    def applies(self, staged: StagedFile) -> bool:
        return staged.path.endswith((".yml", ".yaml"))

    def run(self, staged: StagedFile) -> List[CheckResult]:
        try:
            report = self.linter.run(self.content_path(staged))
        except ToolError as exc:
            return [CheckResult.failure(self.name, f"{staged.path}: {exc}")]
        if not report.ok:
            return [
                CheckResult.failure(
                    self.name,
                    f"{staged.path}: invalid YAML",
                    diagnostic=self.relabel(report.output, staged),
                )
            ]
        return [CheckResult.passed(self.name, f"{staged.path}: valid YAML")]
