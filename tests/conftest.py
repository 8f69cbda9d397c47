from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from todotui.app import AppState
from todotui.models import Task
from todotui.store import TaskStore


@pytest.fixture
def data_path(tmp_path: Path) -> str:
    return str(tmp_path / "data.json")


@pytest.fixture
def make_task() -> Callable[..., Task]:
    def _make(name: str, progress: str = "Waiting", description: str = "") -> Task:
        return Task(
            name=name,
            description=description or f"{name} description",
            progress=progress,
            created="2024-05-01 09:30:00",
        )

    return _make


@pytest.fixture
def make_state(data_path: str) -> Callable[..., AppState]:
    def _make(*tasks: Task, **kwargs) -> AppState:
        return AppState(TaskStore(data_path, tasks), **kwargs)

    return _make


FIXED_CREATED = "2024-06-15 12:00:00"


@pytest.fixture
def fixed_clock(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setattr("todotui.app.timestamp", lambda: FIXED_CREATED)
    return FIXED_CREATED
