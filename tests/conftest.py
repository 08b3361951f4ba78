from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from funkrunner.context import Context


@pytest.fixture
def buf() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def make_ctx(tmp_path: Path, buf: io.StringIO):
    def _make(**kwargs) -> Context:
        kwargs.setdefault("base_dir", tmp_path)
        kwargs.setdefault("console", Console(file=buf, width=200, color_system=None))
        kwargs.setdefault("sdk_name", "test")
        return Context(**kwargs)

    return _make


@pytest.fixture
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    slept: list[float] = []
    monkeypatch.setattr("funkrunner.poll.sleep", slept.append)
    return slept
