"""Git plumbing used by the hooks."""

from .staged import GitError, StagedSnapshot, parse_raw_diff

__all__ = ["GitError", "StagedSnapshot", "parse_raw_diff"]
