"""Shared pytest fixtures for multi tests."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any

import pytest

from multi.bootstrap import init_multi


@pytest.fixture(autouse=True)
def isolate_stateful(tmp_path: Path, monkeypatch):
    """Redirect SAF stateful root to temp dir for test isolation.

    Prevents tests from reading the real ~/.config/multi/.
    Also resets the bootstrap singleton between tests.
    """
    monkeypatch.setenv("STATEFUL_ROOT", str(tmp_path / "stateful"))
    import multi.bootstrap
    multi.bootstrap._variables = None
    yield
    multi.bootstrap._variables = None


@pytest.fixture
def hosts_file(tmp_path: Path) -> Path:
    """Create a temporary hosts file with sample hosts."""
    f = tmp_path / "hosts.txt"
    f.write_text("10.0.0.1\n10.0.0.2:2222\n10.0.0.3\n")
    return f


@pytest.fixture
def identity_file(tmp_path: Path) -> Path:
    """Create a readable placeholder identity file."""
    f = tmp_path / "id_test"
    f.write_text("not a real key\n")
    return f


@pytest.fixture
def v(tmp_path: Path) -> Any:
    """Initialize multi and return the Variables instance.

    Uses WARNING log level to reduce test output noise.
    """
    import multi.bootstrap
    multi.bootstrap._variables = None

    return init_multi(log_level="WARNING")


class BinaryCapture(io.TextIOWrapper):
    """Text stream over a BytesIO, like sys.stdout with a ``buffer``."""

    def __init__(self):
        super().__init__(io.BytesIO(), encoding="utf-8", write_through=True)

    def getvalue(self) -> str:
        self.flush()
        return self.buffer.getvalue().decode("utf-8")


@pytest.fixture
def out() -> BinaryCapture:
    return BinaryCapture()


@pytest.fixture
def err() -> BinaryCapture:
    return BinaryCapture()
