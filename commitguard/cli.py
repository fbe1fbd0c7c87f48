"""CLI entrypoints for the commitguard hooks."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .commit_msg import validate_file
from .config import ConfigError, HookConfig, load_config, skip_requested
from .console import Reporter
from .git import GitError
from .install import HookInstaller
from .logging import configure_logging
from .precommit import run_pre_commit
from .push import PushGate, PushInputError, parse_push_lines
from .tools import ToolError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="commitguard",
        description="Git hooks enforcing commit conventions and embedded documentation checks.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .commitguard.yml or the repository root (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Append log records to this file in addition to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    commit_msg_parser = subparsers.add_parser(
        "commit-msg",
        help="Validate a commit message file against the Conventional Commits header rules.",
    )
    _add_verbose_option(commit_msg_parser, suppress_default=True)
    commit_msg_parser.add_argument("message_file", help="Path to the commit message file git passes to the hook.")

    pre_commit_parser = subparsers.add_parser(
        "pre-commit",
        help="Check staged files and their embedded directives and LaTeX blocks.",
    )
    _add_verbose_option(pre_commit_parser, suppress_default=True)
    pre_commit_parser.add_argument(
        "--extended",
        action="store_true",
        help="Validate embedded fragments in parallel across staged files.",
    )
    pre_commit_parser.add_argument(
        "--jobs",
        type=int,
        default=None,
        help="Worker count for --extended (defaults to the number of CPUs).",
    )

    pre_push_parser = subparsers.add_parser(
        "pre-push",
        help="Ask for confirmation before pushing to a protected branch.",
    )
    _add_verbose_option(pre_push_parser, suppress_default=True)
    pre_push_parser.add_argument("remote", nargs="?", help="Remote name (passed by git).")
    pre_push_parser.add_argument("url", nargs="?", help="Remote URL (passed by git).")

    install_parser = subparsers.add_parser(
        "install",
        help="Install hook scripts into the current repository.",
    )
    _add_verbose_option(install_parser, suppress_default=True)
    install_parser.add_argument(
        "--extended",
        action="store_true",
        help="Install the pre-commit hook in its parallel variant.",
    )
    install_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite existing hooks not managed by commitguard.",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for commitguard hooks; returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    reporter = Reporter()

    if args.command != "install" and skip_requested():
        reporter.info(f"commitguard: {args.command} skipped (COMMITGUARD_SKIP_HOOKS set)")
        return 0

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "commit-msg":
        try:
            result = validate_file(Path(args.message_file))
        except OSError as exc:
            parser.exit(1, f"Unable to read commit message: {exc}\n")
        reporter.report(result.to_check())
        return 0 if result.ok else 1
    if args.command == "pre-commit":
        return _run_pre_commit(parser, args, config, reporter)
    if args.command == "pre-push":
        try:
            refs = parse_push_lines(sys.stdin.read())
        except PushInputError as exc:
            parser.exit(1, f"{exc}\n")
        return PushGate(config.protected_branches, reporter).check(refs)
    if args.command == "install":
        try:
            written = HookInstaller().install(
                config.root, extended=bool(args.extended), force=bool(args.force)
            )
        except FileExistsError as exc:
            parser.exit(1, f"{exc}\n")
        for path in written:
            reporter.info(f"Installed {_relativize(path)}")
        return 0
    parser.exit(1, "Unknown command\n")  # pragma: no cover - argparse enforces choices
    return 1  # pragma: no cover


def _run_pre_commit(
    parser: argparse.ArgumentParser,
    args: argparse.Namespace,
    config: HookConfig,
    reporter: Reporter,
) -> int:
    try:
        return run_pre_commit(
            config.root,
            config,
            reporter,
            extended=bool(args.extended),
            jobs=args.jobs,
        )
    except GitError as exc:
        parser.exit(1, f"commitguard pre-commit failed: {exc}\n")
    except ToolError as exc:
        parser.exit(1, f"commitguard pre-commit failed: {exc}\nRun with --verbose for more details.\n")
    return 1  # pragma: no cover - parser.exit raises


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
