import os
from pathlib import Path

import pytest

from loganon.engine.stats import Stats
from loganon.rules.state import MappingState


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep developer LOGANON_* variables and stray .env files out of the tests."""
    for key in list(os.environ):
        if key.startswith("LOGANON_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def state() -> MappingState:
    return MappingState()


@pytest.fixture()
def stats() -> Stats:
    return Stats()
