"""Validate extracted directives and LaTeX blocks."""

from __future__ import annotations

import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional

from ..logging import get_logger
from ..models import CheckResult, Fragment, FragmentKind
from ..tools import LatexCompiler, SpellChecker, ToolError, XmlLinter
from ..vocabulary import Vocabulary
from .extractor import ExtractionResult

_LOGGER = get_logger("fragments.validation")
CHECK_NAME = "fragments"


class FragmentValidator:
    """Parses directives, validates them against schemas, and checks embedded LaTeX.

    ``validate`` stops at the first hard failure; spelling problems are
    returned as warnings and never stop the run.
    """

    def __init__(
        self,
        *,
        compiler: LatexCompiler,
        xml_linter: XmlLinter,
        spell_checker: Optional[SpellChecker] = None,
        schema_dir: Optional[Path] = None,
        vocabulary: Vocabulary = Vocabulary(),
    ) -> None:
        self.compiler = compiler
        self.xml_linter = xml_linter
        self.spell_checker = spell_checker
        self.schema_dir = schema_dir
        self.vocabulary = vocabulary

    def validate(self, extraction: ExtractionResult) -> List[CheckResult]:
        results: List[CheckResult] = []
        path = extraction.path
        if extraction.problems:
            problem = extraction.problems[0]
            return [CheckResult.failure(CHECK_NAME, f"{path}:{problem.line}: {problem.message}")]

        directives = 0
        latex_blocks = 0
        for fragment in extraction.fragments:
            if fragment.kind is FragmentKind.DIRECTIVE:
                directives += 1
                outcome = self._validate_directive(fragment)
            elif fragment.kind is FragmentKind.LATEX:
                latex_blocks += 1
                outcome = self._validate_latex(fragment, fragment.text, "LaTeX block")
            else:
                continue
            results.extend(outcome)
            if any(result.failed for result in outcome):
                return results

        if directives or latex_blocks:
            results.append(
                CheckResult.passed(
                    CHECK_NAME,
                    f"{path}: {directives} directive(s) and {latex_blocks} LaTeX block(s) valid",
                )
            )
        return results

    def _validate_directive(self, fragment: Fragment) -> List[CheckResult]:
        try:
            element = ET.fromstring(fragment.text.lstrip(" \t"))
        except ET.ParseError as exc:
            line = fragment.start_line + exc.position[0] - 1
            return [
                CheckResult.failure(
                    CHECK_NAME,
                    f"{fragment.path}:{line}: XML parse error in <{fragment.root}> directive",
                    diagnostic=str(exc),
                )
            ]

        schema_result = self._validate_schema(fragment, element.tag)
        if schema_result is not None:
            return [schema_result]

        description = element.find("description")
        if description is None:
            return []
        text = "".join(description.itertext()).strip()
        if not text:
            return []
        return self._validate_latex(fragment, text, f"<{element.tag}> description")

    def _validate_schema(self, fragment: Fragment, root: str) -> Optional[CheckResult]:
        if self.schema_dir is None:
            return None
        schema = self.schema_dir / f"{root}.xsd"
        if not schema.exists():
            return None
        scratch = tempfile.NamedTemporaryFile(
            "w", prefix=f"commitguard-{root}-", suffix=".xml", encoding="utf-8", delete=False
        )
        scratch_path = Path(scratch.name)
        try:
            with scratch:
                scratch.write(fragment.text)
            report = self.xml_linter.run(scratch_path, schema=schema)
        except ToolError as exc:
            return CheckResult.failure(CHECK_NAME, f"{fragment.path}:{fragment.start_line}: {exc}")
        finally:
            scratch_path.unlink(missing_ok=True)
        if report.ok:
            return None
        return CheckResult.failure(
            CHECK_NAME,
            f"{fragment.path}:{fragment.start_line}: <{root}> directive does not match {schema.name}",
            diagnostic=report.output.replace(str(scratch_path), fragment.path),
        )

    def _validate_latex(self, fragment: Fragment, text: str, label: str) -> List[CheckResult]:
        location = f"{fragment.path}:{fragment.start_line}"
        try:
            report = self.compiler.run(text)
        except ToolError as exc:
            return [CheckResult.failure(CHECK_NAME, f"{location}: {exc}")]
        if not report.ok:
            return [
                CheckResult.failure(
                    CHECK_NAME,
                    f"{location}: {label} failed to compile",
                    diagnostic=report.output,
                )
            ]
        if self.spell_checker is None:
            return []
        try:
            spelling = self.spell_checker.run(text, vocabulary=self.vocabulary)
        except ToolError as exc:
            _LOGGER.warning("Spell-check skipped for %s: %s", location, exc)
            return []
        if spelling.ok:
            return []
        return [
            CheckResult.warning(
                "spelling",
                f"{location}: possible misspellings in {label}",
                diagnostic=spelling.output,
            )
        ]


__all__ = ["FragmentValidator"]
