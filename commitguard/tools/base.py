"""Shared contract for external validation tools."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional, Protocol, Sequence

from ..logging import get_logger

_LOGGER = get_logger("tools")

ProcessRunner = Callable[..., "subprocess.CompletedProcess[str]"]


@dataclass(frozen=True)
class ToolReport:
    """Result of running one external tool over one input."""

    tool: str
    ok: bool
    output: str = ""


class ToolError(RuntimeError):
    """Raised when an external tool cannot be launched at all."""

    def __init__(self, tool: str, message: str) -> None:
        super().__init__(f"{tool}: {message}")
        self.tool = tool


class Tool(Protocol):
    """Capability implemented by every external validator adapter."""

    name: str

    def run(self, payload):  # type: ignore[no-untyped-def]
        """Validate the payload and return a report, raising ToolError if the tool is unusable."""


def run_process(
    args: Sequence[str],
    *,
    input: Optional[str] = None,
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> "subprocess.CompletedProcess[str]":
    """Run a command to completion, capturing text output without raising on failure."""
    _LOGGER.debug("Running %s", " ".join(str(arg) for arg in args))
    return subprocess.run(
        [str(arg) for arg in args],
        input=input,
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else None,
        capture_output=True,
        text=True,
        errors="replace",
        check=False,
    )


class SubprocessTool:
    """Base class wiring an executable name to an injectable process runner."""

    name = "tool"
    executable = ""

    def __init__(self, runner: ProcessRunner | None = None, *, executable: str | None = None) -> None:
        self._runner = runner or run_process
        if executable is not None:
            self.executable = executable

    def available(self) -> bool:
        return shutil.which(self.executable) is not None

    def _invoke(self, args: Sequence[str], **kwargs) -> "subprocess.CompletedProcess[str]":  # type: ignore[no-untyped-def]
        try:
            return self._runner([self.executable, *args], **kwargs)
        except FileNotFoundError as exc:
            raise ToolError(self.name, f"unable to locate '{self.executable}' on PATH") from exc
        except OSError as exc:
            raise ToolError(self.name, f"failed to launch '{self.executable}': {exc}") from exc


def combined_output(completed: "subprocess.CompletedProcess[str]") -> str:
    parts = [completed.stdout or "", completed.stderr or ""]
    return "\n".join(part.strip() for part in parts if part and part.strip())


__all__ = [
    "ProcessRunner",
    "SubprocessTool",
    "Tool",
    "ToolError",
    "ToolReport",
    "combined_output",
    "run_process",
]
