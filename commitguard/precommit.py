"""The pre-commit hook: run every file check over the staged snapshot."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence

from .checks import (
    AsciiCheck,
    DebugMarkerCheck,
    FileCheck,
    FortranHeuristicsCheck,
    FragmentCheck,
    PerlCheck,
    XmlCheck,
    YamlCheck,
)
from .config import HookConfig
from .console import Reporter
from .fragments import FragmentValidator
from .git import StagedSnapshot
from .git.staged import GitRunner
from .logging import get_logger
from .models import CheckResult, CheckStatus, StagedFile
from .tools import LatexCompiler, PerlSyntaxChecker, SpellChecker, XmlLinter, YamlLinter
from .tools.base import ProcessRunner
from .vocabulary import Vocabulary

_LOGGER = get_logger("precommit")


class PreCommitPipeline:
    """Runs checks in order over staged files, stopping at the first hard failure.

    Each check covers every applicable file before the next check starts.
    In the extended variant the fragment check fans out over a thread pool,
    one file per task; results are still reported in staged order.
    """

    def __init__(
        self,
        checks: Sequence[FileCheck],
        fragment_check: Optional[FileCheck],
        reporter: Reporter,
        *,
        extended: bool = False,
        jobs: Optional[int] = None,
    ) -> None:
        self.checks = list(checks)
        self.fragment_check = fragment_check
        self.reporter = reporter
        self.extended = extended
        self.jobs = jobs if jobs and jobs > 0 else (os.cpu_count() or 1)

    def run(self, files: Sequence[StagedFile]) -> int:
        for check in self.checks:
            if not self._run_sequential(check, files):
                return 1
        if self.fragment_check is None:
            return 0
        if self.extended:
            ok = self._run_parallel(self.fragment_check, files)
        else:
            ok = self._run_sequential(self.fragment_check, files)
        return 0 if ok else 1

    def _run_sequential(self, check: FileCheck, files: Sequence[StagedFile]) -> bool:
        applicable = [staged for staged in files if check.applies(staged)]
        passed = 0
        for staged in applicable:
            results = check.run(staged)
            if not self._report(results):
                return False
            passed += 1
        self._summarize(check, passed)
        return True

    def _run_parallel(self, check: FileCheck, files: Sequence[StagedFile]) -> bool:
        applicable = [staged for staged in files if check.applies(staged)]
        if not applicable:
            return True
        workers = min(self.jobs, len(applicable))
        _LOGGER.debug("Validating fragments in %d file(s) with %d worker(s)", len(applicable), workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="commitguard") as pool:
            outcomes: List[List[CheckResult]] = list(pool.map(check.run, applicable))
        for results in outcomes:
            if not self._report(results):
                return False
        self._summarize(check, len(applicable))
        return True

    def _report(self, results: Sequence[CheckResult]) -> bool:
        """Print non-passing results; return False on a hard failure."""
        for result in results:
            if result.status is CheckStatus.PASS:
                _LOGGER.debug("%s: %s", result.name, result.message)
                continue
            self.reporter.report(result)
            if result.failed:
                return False
        return True

    def _summarize(self, check: FileCheck, count: int) -> None:
        if count:
            self.reporter.report(CheckResult.passed(check.name, f"{check.name}: {count} file(s) checked"))


def build_pipeline(
    config: HookConfig,
    reporter: Reporter,
    *,
    extended: bool = False,
    jobs: Optional[int] = None,
    runner: ProcessRunner | None = None,
) -> PreCommitPipeline:
    """Wire tools and checks from configuration."""
    spell_checker: Optional[SpellChecker] = SpellChecker(runner, dictionary=config.hunspell_dictionary)
    if not spell_checker.available():
        reporter.report(CheckResult.skipped("spelling", "spell-check skipped: hunspell not found"))
        spell_checker = None

    vocabulary = Vocabulary.load(config.vocabulary_file, config.class_manifest)
    validator = FragmentValidator(
        compiler=LatexCompiler(
            runner,
            document_class=config.latex.document_class,
            packages=config.latex.packages,
            include_dir=config.doc_dir,
            preamble=config.latex.preamble,
        ),
        xml_linter=XmlLinter(runner),
        spell_checker=spell_checker,
        schema_dir=config.schema_dir,
        vocabulary=vocabulary,
    )
    perl_dirs = [directory for directory in (config.root / "perl", config.base_path / "perl") if directory.is_dir()]
    checks: List[FileCheck] = [
        AsciiCheck(config.ascii_exempt),
        DebugMarkerCheck(config.debug_markers),
        PerlCheck(PerlSyntaxChecker(runner, include_dirs=perl_dirs)),
        XmlCheck(XmlLinter(runner)),
        YamlCheck(YamlLinter(runner)),
        FortranHeuristicsCheck(),
    ]
    return PreCommitPipeline(
        checks,
        FragmentCheck(validator),
        reporter,
        extended=extended,
        jobs=jobs,
    )


def run_pre_commit(
    repo: Path,
    config: HookConfig,
    reporter: Reporter,
    *,
    extended: bool = False,
    jobs: Optional[int] = None,
    git_runner: GitRunner | None = None,
    runner: ProcessRunner | None = None,
) -> int:
    """Snapshot the index, run the pipeline, and remove scratch files."""
    with StagedSnapshot(repo, runner=git_runner) as snapshot:
        files = snapshot.checkable()
        if not files:
            reporter.report(CheckResult.passed("pre-commit", "no staged files to check"))
            return 0
        pipeline = build_pipeline(config, reporter, extended=extended, jobs=jobs, runner=runner)
        return pipeline.run(files)


__all__ = ["PreCommitPipeline", "build_pipeline", "run_pre_commit"]
