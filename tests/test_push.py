"""Tests for the pre-push confirmation gate."""

from __future__ import annotations

import io
from typing import List

import pytest

from commitguard.console import Reporter
from commitguard.push import PushGate, PushInputError, PushRef, is_protected, parse_push_lines

SHA = "a" * 40
ZERO = "0" * 40


class ScriptedPrompt:
    def __init__(self, answer: str) -> None:
        self.answer = answer
        self.prompts: List[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answer


def test_parse_full_push_lines() -> None:
    refs = parse_push_lines(f"refs/heads/feature {SHA} refs/heads/master {ZERO}\n\n")

    assert refs == [PushRef("refs/heads/feature", SHA, "refs/heads/master", ZERO)]


def test_parse_bare_ref_pairs() -> None:
    [ref] = parse_push_lines("refs/heads/feature refs/heads/master")

    assert ref.local_ref == "refs/heads/feature"
    assert ref.remote_ref == "refs/heads/master"


def test_parse_rejects_malformed_lines() -> None:
    with pytest.raises(PushInputError):
        parse_push_lines("refs/heads/feature")


@pytest.mark.parametrize(
    ("remote_ref", "expected"),
    [
        ("refs/heads/master", True),
        ("refs/heads/main", True),
        ("refs/heads/release/1.0", True),
        ("refs/heads/feature", False),
        ("refs/heads/master-old", False),
        ("refs/tags/master", False),
    ],
)
def test_is_protected(remote_ref: str, expected: bool) -> None:
    assert is_protected(remote_ref, ["master", "main", "release/*"]) is expected


@pytest.mark.parametrize(("answer", "expected"), [("n", 1), ("y", 0), ("Y", 0), ("\n", 1), ("", 1)])
def test_protected_push_requires_y(reporter: Reporter, answer: str, expected: int) -> None:
    prompt = ScriptedPrompt(answer)
    gate = PushGate(["master"], reporter, prompt=prompt)

    code = gate.check(parse_push_lines("refs/heads/feature refs/heads/master\n"))

    assert code == expected
    assert prompt.prompts == ["You are about to push to refs/heads/master. Continue? [y/N] "]


def test_abort_is_reported(reporter: Reporter, output: io.StringIO) -> None:
    gate = PushGate(["master"], reporter, prompt=ScriptedPrompt("n"))

    gate.check([PushRef("refs/heads/feature", SHA, "refs/heads/master", ZERO)])

    assert output.getvalue() == "✘ push to refs/heads/master aborted\n"


def test_unprotected_push_never_prompts(reporter: Reporter, output: io.StringIO) -> None:
    prompt = ScriptedPrompt("n")
    gate = PushGate(["master"], reporter, prompt=prompt)

    code = gate.check(parse_push_lines(f"refs/heads/feature {SHA} refs/heads/feature {ZERO}\n"))

    assert code == 0
    assert prompt.prompts == []
    assert "no protected branches targeted" in output.getvalue()


def test_several_protected_refs_share_one_prompt(reporter: Reporter) -> None:
    prompt = ScriptedPrompt("y")
    gate = PushGate(["master", "main"], reporter, prompt=prompt)

    code = gate.check(
        parse_push_lines(
            "refs/heads/a refs/heads/master\nrefs/heads/b refs/heads/main\nrefs/heads/c refs/heads/master\n"
        )
    )

    assert code == 0
    assert prompt.prompts == ["You are about to push to refs/heads/master, refs/heads/main. Continue? [y/N] "]
