from __future__ import annotations

import io
from pathlib import Path

import pytest

from commitguard.console import Reporter
from tests._fixtures.fakes import FakeProcessRunner, StagedFactory


@pytest.fixture
def fake_runner() -> FakeProcessRunner:
    """Provide a process runner that never launches real binaries."""
    return FakeProcessRunner()


@pytest.fixture
def staged(tmp_path: Path) -> StagedFactory:
    """Provide a factory for staged files backed by scratch content under tmp_path."""
    return StagedFactory(tmp_path)


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def reporter(output: io.StringIO) -> Reporter:
    """Reporter writing uncolored lines into an in-memory buffer."""
    return Reporter(output, color=False)
