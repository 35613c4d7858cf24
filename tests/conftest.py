from __future__ import annotations

from datetime import datetime, timedelta
from typing import Sequence
from zoneinfo import ZoneInfo

import pytest

from taskbot.core.models import COLUMNS, FIRST_DATA_ROW, Task, task_from_row
from taskbot.core.operations import TaskOperations
from taskbot.core.people import DefaultPolicy, PersonResolver
from taskbot.core.undo import UndoLedger

BERLIN = ZoneInfo("Europe/Berlin")


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current = self.current + timedelta(seconds=seconds)


class InMemoryTaskStore:
    """Row store with the same addressing rules as the sheet."""

    def __init__(self, rows: dict[int, list[str]] | None = None) -> None:
        self.rows: dict[int, list[str]] = {row: list(values) for row, values in (rows or {}).items()}
        self.calls: list[tuple] = []

    async def list_active(self) -> list[Task]:
        tasks = []
        for row in sorted(self.rows):
            task = task_from_row(row, self.rows[row])
            if task is not None:
                tasks.append(task)
        return tasks

    async def append_or_insert(self, rows: Sequence[Sequence[str]]) -> None:
        occupied = [row for row, values in self.rows.items() if any(str(v).strip() for v in values)]
        start = max(occupied, default=FIRST_DATA_ROW - 1) + 1
        for offset, values in enumerate(rows):
            self.rows[start + offset] = list(values)
        self.calls.append(("append", start, len(rows)))

    async def update_fields(self, row: int, fields: dict[str, str]) -> None:
        values = list(self.rows.get(row, []))
        values += [""] * (len(COLUMNS) - len(values))
        for name, value in fields.items():
            values[COLUMNS.index(name)] = value
        self.rows[row] = values
        self.calls.append(("update", row, tuple(sorted(fields))))

    async def clear(self, row: int) -> None:
        self.rows[row] = [""] * len(COLUMNS)
        self.calls.append(("clear", row))

    def active(self) -> list[Task]:
        tasks = []
        for row in sorted(self.rows):
            task = task_from_row(row, self.rows[row])
            if task is not None and task.is_active:
                tasks.append(task)
        return tasks


@pytest.fixture()
def clock() -> FakeClock:
    # Monday
    return FakeClock(datetime(2026, 10, 19, 10, 0, tzinfo=BERLIN))


@pytest.fixture()
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture()
def people() -> PersonResolver:
    return PersonResolver(["Jeremy", "Julia"], DefaultPolicy.SHARED)


@pytest.fixture()
def ledger(clock: FakeClock) -> UndoLedger:
    return UndoLedger(window_sec=300, clock=clock)


@pytest.fixture()
def ops(store: InMemoryTaskStore, people: PersonResolver, ledger: UndoLedger, clock: FakeClock) -> TaskOperations:
    return TaskOperations(store, people, ledger, clock=clock)
