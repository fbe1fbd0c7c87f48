"""Enumerate staged files and extract their index content to scratch files."""

from __future__ import annotations

import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from ..logging import get_logger
from ..models import ChangeStatus, StagedFile

_LOGGER = get_logger("git")

GitRunner = Callable[..., bytes]


class GitError(RuntimeError):
    """Raised when a git plumbing command fails."""


class StagedSnapshot:
    """Staged files of one hook invocation, with content written to scratch files.

    Use as a context manager: scratch files are removed on exit whether or not
    the checks succeeded.
    """

    _DIFF_ARGS = (
        "git",
        "diff",
        "--cached",
        "--raw",
        "-z",
        "--no-abbrev",
        "--diff-filter=ACDMRT",
    )

    def __init__(self, repo: Path, runner: GitRunner | None = None) -> None:
        self.repo = Path(repo)
        self._runner = runner or self._default_runner
        self._scratch_dir: Optional[Path] = None
        self.files: List[StagedFile] = []

    def __enter__(self) -> "StagedSnapshot":
        try:
            self.files = self.collect()
            self.extract()
        except BaseException:
            # __exit__ is not called when __enter__ raises.
            self.cleanup()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[no-untyped-def]
        self.cleanup()

    def collect(self) -> List[StagedFile]:
        """Return staged files parsed from ``git diff --cached --raw``."""
        output = self._run(self._DIFF_ARGS).decode("utf-8", errors="surrogateescape")
        return parse_raw_diff(output)

    def extract(self) -> None:
        """Write each staged blob to a uniquely named scratch file.

        Deleted paths and submodule pointers have no blob and are skipped.
        """
        self._scratch_dir = Path(tempfile.mkdtemp(prefix="commitguard-"))
        for index, staged in enumerate(self.files):
            if staged.is_deleted or staged.is_submodule:
                continue
            content = self._run(("git", "cat-file", "blob", staged.object_id))
            target = self._scratch_dir / f"{index:04d}-{Path(staged.path).name}"
            target.write_bytes(content)
            staged.scratch_path = target
            _LOGGER.debug("Extracted %s (%s) to %s", staged.path, staged.object_id[:10], target)

    def cleanup(self) -> None:
        for staged in self.files:
            if staged.scratch_path is not None:
                staged.scratch_path.unlink(missing_ok=True)
                staged.scratch_path = None
        if self._scratch_dir is not None:
            shutil.rmtree(self._scratch_dir, ignore_errors=True)
            self._scratch_dir = None

    def checkable(self) -> List[StagedFile]:
        return [staged for staged in self.files if not (staged.is_deleted or staged.is_submodule)]

    def _run(self, args: Iterable[str]) -> bytes:
        return self._runner(list(args), cwd=self.repo)

    @staticmethod
    def _default_runner(args: Sequence[str], *, cwd: Path) -> bytes:
        try:
            completed = subprocess.run(
                list(args),
                cwd=str(cwd),
                check=True,
                capture_output=True,
            )
        except FileNotFoundError as exc:
            raise GitError("Unable to locate 'git' on PATH.") from exc
        except subprocess.CalledProcessError as exc:
            detail = exc.stderr.decode("utf-8", errors="replace").strip()
            raise GitError(f"{' '.join(args)} failed with exit code {exc.returncode}: {detail}") from exc
        return completed.stdout


def parse_raw_diff(output: str) -> List[StagedFile]:
    """Parse NUL-separated ``git diff --raw -z`` output."""
    tokens = output.split("\0")
    files: List[StagedFile] = []
    index = 0
    while index < len(tokens):
        meta = tokens[index]
        if not meta:
            index += 1
            continue
        if not meta.startswith(":"):
            raise GitError(f"Unexpected diff record: {meta!r}")
        _old_mode, new_mode, _old_id, new_id, letter = meta[1:].split()
        status = ChangeStatus.from_letter(letter)
        index += 1
        if status in (ChangeStatus.RENAMED, ChangeStatus.COPIED):
            # Source path first, destination second.
            index += 1
        path = tokens[index]
        index += 1
        files.append(
            StagedFile(
                path=path,
                object_id=new_id,
                status=status,
                mode=new_mode,
            )
        )
    return files


__all__ = ["GitError", "StagedSnapshot", "parse_raw_diff"]
