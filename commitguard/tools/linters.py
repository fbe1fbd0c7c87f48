"""Adapters for xmllint, yamllint and perl syntax checking."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from .base import ProcessRunner, SubprocessTool, ToolReport, combined_output


class XmlLinter(SubprocessTool):
    """Checks well-formedness, and optionally schema validity, with xmllint."""

    name = "xmllint"
    executable = "xmllint"

    def run(self, path: Path, *, schema: Optional[Path] = None) -> ToolReport:
        args = ["--noout"]
        if schema is not None:
            args.extend(["--schema", str(schema)])
        args.append(str(path))
        completed = self._invoke(args)
        return ToolReport(tool=self.name, ok=completed.returncode == 0, output=combined_output(completed))


class YamlLinter(SubprocessTool):
    name = "yamllint"
    executable = "yamllint"

    def run(self, path: Path) -> ToolReport:
        completed = self._invoke(["-f", "parsable", str(path)])
        return ToolReport(tool=self.name, ok=completed.returncode == 0, output=combined_output(completed))


class PerlSyntaxChecker(SubprocessTool):
    """Runs ``perl -c`` over a script, with project library directories on @INC."""

    name = "perl"
    executable = "perl"

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        *,
        executable: str | None = None,
        include_dirs: Sequence[Path] = (),
    ) -> None:
        super().__init__(runner, executable=executable)
        self.include_dirs = list(include_dirs)

    def run(self, path: Path) -> ToolReport:
        args = [f"-I{directory}" for directory in self.include_dirs]
        args.extend(["-c", str(path)])
        completed = self._invoke(args)
        # perl -c reports "syntax OK" on stderr even on success.
        return ToolReport(tool=self.name, ok=completed.returncode == 0, output=combined_output(completed))


__all__ = ["PerlSyntaxChecker", "XmlLinter", "YamlLinter"]
