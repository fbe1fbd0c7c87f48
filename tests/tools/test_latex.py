"""Tests for the pdflatex adapter."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

import pytest

from commitguard.tools import LatexCompiler, ToolError
from commitguard.tools.latex import summarize_log
from tests._fixtures.fakes import FakeProcessRunner

FAILING_LOG = """\
This is pdfTeX, Version 3.141592653
(./fragment.tex
LaTeX2e <2023-11-01>
! Undefined control sequence.
l.4 \\massUnits
               of the halo.
Here is how much of TeX's memory you used:
"""


def test_render_wraps_body_in_document() -> None:
    compiler = LatexCompiler(document_class="report", packages=["amsmath", "amssymb"])

    source = compiler.render("  The halo mass $M$.\n")

    assert source.splitlines() == [
        "\\documentclass{report}",
        "\\usepackage{amsmath}",
        "\\usepackage{amssymb}",
        "\\begin{document}",
        "The halo mass $M$.",
        "\\end{document}",
    ]


def test_preamble_included_only_when_present(tmp_path: Path) -> None:
    missing = LatexCompiler(include_dir=tmp_path, preamble="commonPreamble")
    assert "\\input" not in missing.render("x")

    (tmp_path / "commonPreamble.tex").write_text("\\newcommand{\\mass}{M}\n", encoding="utf-8")
    present = LatexCompiler(include_dir=tmp_path, preamble="commonPreamble")
    assert "\\input{commonPreamble}" in present.render("x")


def test_successful_compile(fake_runner: FakeProcessRunner) -> None:
    report = LatexCompiler(fake_runner).run("Hello.")

    assert report.ok
    [call] = fake_runner.calls
    args = call["args"]
    assert args[:3] == ["pdflatex", "-interaction=nonstopmode", "-halt-on-error"]
    assert args[args.index("-jobname") + 1].startswith("fragment-")


def test_failure_summarizes_log_and_removes_workdir(fake_runner: FakeProcessRunner) -> None:
    workdirs: List[Path] = []

    def pdflatex(args, **_):  # type: ignore[no-untyped-def]
        workdir = Path(args[args.index("-output-directory") + 1])
        jobname = args[args.index("-jobname") + 1]
        (workdir / f"{jobname}.log").write_text(FAILING_LOG, encoding="utf-8")
        workdirs.append(workdir)
        return 1, "", ""

    fake_runner.responses["pdflatex"] = pdflatex

    report = LatexCompiler(fake_runner).run("The \\massUnits of the halo.")

    assert not report.ok
    assert report.output.splitlines()[0] == "! Undefined control sequence."
    assert "l.4 \\massUnits" in report.output
    assert "pdfTeX" not in report.output
    assert not workdirs[0].exists()


def test_texinputs_includes_document_directory(fake_runner: FakeProcessRunner, tmp_path: Path) -> None:
    LatexCompiler(fake_runner, include_dir=tmp_path).run("x")

    env = fake_runner.calls[0]["env"]
    assert env["TEXINPUTS"].startswith(f"{tmp_path}{os.pathsep}")  # type: ignore[index]
    assert env["TEXINPUTS"].endswith(os.pathsep)  # type: ignore[index]


def test_missing_binary_raises_tool_error() -> None:
    def missing(args, **_):  # type: ignore[no-untyped-def]
        raise FileNotFoundError(args[0])

    with pytest.raises(ToolError) as excinfo:
        LatexCompiler(missing).run("x")
    assert excinfo.value.tool == "pdflatex"


def test_summarize_log_falls_back_to_tail() -> None:
    log = "\n".join(f"line {index}" for index in range(30))

    summary = summarize_log(log)

    assert summary.splitlines() == [f"line {index}" for index in range(10, 30)]
