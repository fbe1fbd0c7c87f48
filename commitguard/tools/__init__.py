"""Adapters around external validation programs."""

from .base import SubprocessTool, Tool, ToolError, ToolReport, run_process
from .latex import LatexCompiler
from .linters import PerlSyntaxChecker, XmlLinter, YamlLinter
from .spelling import SpellChecker

__all__ = [
    "LatexCompiler",
    "PerlSyntaxChecker",
    "SpellChecker",
    "SubprocessTool",
    "Tool",
    "ToolError",
    "ToolReport",
    "XmlLinter",
    "YamlLinter",
    "run_process",
]
