"""CLI parser behaviour tests."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from commitguard.cli import _build_parser, main
from commitguard.logging import configure_logging


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "pre-commit"])
    assert args.verbose is True
    assert args.command == "pre-commit"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["pre-commit", "--verbose"])
    assert args.verbose is True
    assert args.command == "pre-commit"


def test_cli_accepts_extended_pre_commit() -> None:
    parser = _build_parser()
    args = parser.parse_args(["pre-commit", "--extended", "--jobs", "4"])
    assert args.extended is True
    assert args.jobs == 4


def test_cli_pre_push_accepts_git_arguments() -> None:
    parser = _build_parser()
    args = parser.parse_args(["pre-push", "origin", "git@example.org:repo.git"])
    assert args.remote == "origin"
    assert args.url == "git@example.org:repo.git"


def test_cli_requires_message_file_for_commit_msg() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["commit-msg"])


@pytest.fixture
def quiet_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("COMMITGUARD_SKIP_HOOKS", raising=False)
    monkeypatch.delenv("COMMITGUARD_BASE_PATH", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")


@pytest.mark.usefixtures("quiet_env")
def test_commit_msg_valid(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    message = tmp_path / "COMMIT_EDITMSG"
    message.write_text("feat(parser): add support for X\n", encoding="utf-8")

    code = main(["--config", str(tmp_path), "commit-msg", str(message)])

    assert code == 0
    assert "✔ commit message format valid" in capsys.readouterr().out


@pytest.mark.usefixtures("quiet_env")
def test_commit_msg_missing_footer(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    message = tmp_path / "COMMIT_EDITMSG"
    message.write_text("feat!: change API\n", encoding="utf-8")

    code = main(["--config", str(tmp_path), "commit-msg", str(message)])

    assert code == 1
    out = capsys.readouterr().out
    assert out.startswith("✘ ")
    assert "footer missing" in out


@pytest.mark.usefixtures("quiet_env")
def test_skip_env_bypasses_hooks(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("COMMITGUARD_SKIP_HOOKS", "1")
    message = tmp_path / "COMMIT_EDITMSG"
    message.write_text("not a conventional header\n", encoding="utf-8")

    code = main(["--config", str(tmp_path), "commit-msg", str(message)])

    assert code == 0
    assert "skipped" in capsys.readouterr().out


@pytest.mark.usefixtures("quiet_env")
@pytest.mark.parametrize(("answer", "expected"), [("n", 1), ("y", 0), ("", 1)])
def test_pre_push_prompts_for_protected_branch(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    answer: str,
    expected: int,
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("refs/heads/feature refs/heads/master\n"))
    prompts = []
    monkeypatch.setattr("commitguard.push.read_keystroke", lambda prompt: prompts.append(prompt) or answer)

    code = main(["--config", str(tmp_path), "pre-push", "origin"])

    assert code == expected
    assert prompts == ["You are about to push to refs/heads/master. Continue? [y/N] "]


@pytest.mark.usefixtures("quiet_env")
def test_pre_push_rejects_malformed_input(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("refs/heads/main abc def\n"))

    with pytest.raises(SystemExit) as excinfo:
        main(["--config", str(tmp_path), "pre-push"])
    assert excinfo.value.code == 1


@pytest.mark.usefixtures("quiet_env")
def test_invalid_config_exits(tmp_path: Path) -> None:
    (tmp_path / ".commitguard.yml").write_text("- just\n- a list\n", encoding="utf-8")
    message = tmp_path / "COMMIT_EDITMSG"
    message.write_text("fix: x\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["--config", str(tmp_path), "commit-msg", str(message)])
    assert excinfo.value.code == 1


@pytest.mark.usefixtures("quiet_env")
def test_log_file_receives_debug_records(tmp_path: Path) -> None:
    message = tmp_path / "COMMIT_EDITMSG"
    message.write_text("fix(io): close handles\n", encoding="utf-8")
    log_file = tmp_path / "hooks.log"

    try:
        code = main(
            ["--verbose", "--log-file", str(log_file), "--config", str(tmp_path), "commit-msg", str(message)]
        )
    finally:
        # Release the file handler.
        configure_logging()

    assert code == 0
    assert "DEBUG commitguard.commit_msg: Parsed header type=fix scope=io" in log_file.read_text(encoding="utf-8")
