"""Install hook shims that dispatch to the commitguard CLI."""

from __future__ import annotations

import shlex
import stat
import subprocess
import sys
from pathlib import Path
from typing import Callable, Iterable, List

from .logging import get_logger

_LOGGER = get_logger("install")

HOOKS = ("commit-msg", "pre-commit", "pre-push")
MARKER = "# managed by commitguard"


class HookInstaller:
    """Writes one small shell script per hook into the repository's hooks directory."""

    def __init__(self, runner: Callable[..., str] | None = None, *, python: str | None = None) -> None:
        self._runner = runner or self._default_runner
        self.python = python or sys.executable

    def hooks_dir(self, repo: Path) -> Path:
        """Resolve the hooks directory, honouring ``core.hooksPath``."""
        output = self._runner(["git", "rev-parse", "--git-path", "hooks"], cwd=repo).strip()
        path = Path(output)
        return path if path.is_absolute() else (repo / path)

    def install(self, repo: Path, *, extended: bool = False, force: bool = False) -> List[Path]:
        target_dir = self.hooks_dir(repo)
        target_dir.mkdir(parents=True, exist_ok=True)
        written: List[Path] = []
        for hook in HOOKS:
            target = target_dir / hook
            if target.exists() and MARKER not in target.read_text(encoding="utf-8", errors="replace") and not force:
                raise FileExistsError(f"{target} exists and is not managed by commitguard (use --force)")
            target.write_text(self.render(hook, extended=extended), encoding="utf-8")
            mode = target.stat().st_mode
            target.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            _LOGGER.debug("Installed %s", target)
            written.append(target)
        return written

    def render(self, hook: str, *, extended: bool = False) -> str:
        args = [self.python, "-m", "commitguard", hook]
        if hook == "pre-commit" and extended:
            args.append("--extended")
        command = " ".join(shlex.quote(arg) for arg in args)
        return f'#!/bin/sh\n{MARKER}\nexec {command} "$@"\n'

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=True,
        )
        return completed.stdout


__all__ = ["HOOKS", "HookInstaller"]
