"""Compile embedded LaTeX fragments with pdflatex."""

from __future__ import annotations

import os
import tempfile
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from ..logging import get_logger
from .base import ProcessRunner, SubprocessTool, ToolReport, combined_output

_LOGGER = get_logger("tools.latex")
_TEMPLATE_NAME = "fragment.tex.j2"
_ERROR_CONTEXT_LINES = 3


class LatexCompiler(SubprocessTool):
    """Wraps a fragment in a minimal document and checks that it compiles."""

    name = "pdflatex"
    executable = "pdflatex"

    def __init__(
        self,
        runner: ProcessRunner | None = None,
        *,
        executable: str | None = None,
        document_class: str = "article",
        packages: Sequence[str] = (),
        include_dir: Optional[Path] = None,
        preamble: Optional[str] = None,
    ) -> None:
        super().__init__(runner, executable=executable)
        self.document_class = document_class
        self.packages = list(packages)
        self.include_dir = include_dir
        self.preamble = preamble if preamble and self._preamble_exists(preamble) else None
        self._env = _create_env()

    def render(self, body: str) -> str:
        template = self._env.get_template(_TEMPLATE_NAME)
        return template.render(
            document_class=self.document_class,
            packages=self.packages,
            preamble=self.preamble,
            body=body.strip(),
        )

    def run(self, body: str) -> ToolReport:
        source = self.render(body)
        jobname = f"fragment-{uuid.uuid4().hex[:12]}"
        with tempfile.TemporaryDirectory(prefix="commitguard-tex-") as workdir:
            work_path = Path(workdir)
            tex_path = work_path / f"{jobname}.tex"
            tex_path.write_text(source, encoding="utf-8")
            completed = self._invoke(
                [
                    "-interaction=nonstopmode",
                    "-halt-on-error",
                    "-output-directory",
                    str(work_path),
                    "-jobname",
                    jobname,
                    str(tex_path),
                ],
                cwd=work_path,
                env=self._environment(),
            )
            if completed.returncode == 0:
                return ToolReport(tool=self.name, ok=True)
            log_path = work_path / f"{jobname}.log"
            if log_path.exists():
                log = log_path.read_text(encoding="utf-8", errors="replace")
            else:
                log = combined_output(completed)
        _LOGGER.debug("pdflatex failed for %s", jobname)
        return ToolReport(tool=self.name, ok=False, output=summarize_log(log))

    def _environment(self) -> Dict[str, str]:
        env = dict(os.environ)
        if self.include_dir is not None:
            # Trailing separator keeps the default search path.
            existing = env.get("TEXINPUTS", "")
            env["TEXINPUTS"] = f"{self.include_dir}{os.pathsep}{existing}"
            if not env["TEXINPUTS"].endswith(os.pathsep):
                env["TEXINPUTS"] += os.pathsep
        return env

    def _preamble_exists(self, preamble: str) -> bool:
        if self.include_dir is None:
            return False
        candidate = self.include_dir / preamble
        return candidate.exists() or candidate.with_suffix(".tex").exists()


def summarize_log(log: str) -> str:
    """Return the error lines of a LaTeX log, or its tail when none are marked."""
    lines = log.splitlines()
    selected: List[str] = []
    for index, line in enumerate(lines):
        if line.startswith("!"):
            selected.extend(lines[index : index + _ERROR_CONTEXT_LINES])
    if selected:
        return "\n".join(selected)
    return "\n".join(lines[-20:])


def _create_env() -> Environment:
    loader = FileSystemLoader(str(Path(__file__).resolve().parent.parent / "templates"))
    return Environment(
        loader=loader,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        block_start_string="((*",
        block_end_string="*))",
        variable_start_string="(((",
        variable_end_string=")))",
        comment_start_string="((=",
        comment_end_string="=))",
        keep_trailing_newline=True,
    )


__all__ = ["LatexCompiler", "summarize_log"]
