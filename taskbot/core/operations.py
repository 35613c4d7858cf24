from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional
from zoneinfo import ZoneInfo

from loguru import logger

from taskbot.core.dates import normalize_date
from taskbot.core.models import (
    COLUMNS,
    SHARED,
    AddResult,
    Category,
    ListFilters,
    ListResult,
    Status,
    Task,
    TaskCandidate,
    TaskUpdate,
    identity_key,
    task_to_row,
)
from taskbot.core.people import SELF, DefaultPolicy, PersonResolver
from taskbot.core.undo import UndoLedger
from taskbot.store.task_store import TaskStore


@dataclass(slots=True)
class UndoOutcome:
    status: str  # "empty" | "expired" | "not_reversible" | "undone"
    action: Optional[str] = None
    count: int = 0


def _clean(value: Optional[str]) -> str:
    return " ".join(str(value or "").split())


def find_by_name(tasks: Iterable[Task], name: str) -> Optional[Task]:
    """First active task whose text contains `name` (case-insensitive), in row order."""
    needle = _clean(name).lower()
    if not needle:
        return None
    for task in tasks:
        if task.is_active and needle in task.text.lower():
            return task
    return None


def _with_default_category(task: Task) -> Task:
    if task.is_shared and task.category == Category.GENERAL:
        task.category = Category.BOTH
    elif not task.is_shared and task.category == Category.BOTH:
        task.category = Category.GENERAL
    return task


class TaskOperations:
    def __init__(
        self,
        store: TaskStore,
        people: PersonResolver,
        undo: UndoLedger,
        *,
        timezone: str = "Europe/Berlin",
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.people = people
        self.undo_ledger = undo
        self._tz = ZoneInfo(timezone)
        self._clock = clock

    def now(self) -> datetime:
        if self._clock is not None:
            return self._clock()
        return datetime.now(self._tz)

    async def active_tasks(self) -> list[Task]:
        return [task for task in await self.store.list_active() if task.is_active]

    async def add(
        self,
        candidates: Iterable[TaskCandidate],
        requester: str,
        policy: Optional[DefaultPolicy] = None,
    ) -> AddResult:
        now = self.now()
        result = AddResult()
        seen = {identity_key(task) for task in await self.active_tasks()}

        for candidate in candidates:
            text = _clean(candidate.text)
            if not text:
                result.invalid += 1
                continue
            task = Task(
                text=text,
                person=self.people.resolve(candidate.person, requester, policy),
                location=_clean(candidate.location),
                when=normalize_date(candidate.when, now),
                category=Category.parse(candidate.category),
                created=now.date().isoformat(),
            )
            _with_default_category(task)
            key = identity_key(task)
            if key in seen:
                result.duplicates.append(text)
                continue
            seen.add(key)
            result.added.append(task)

        if result.added:
            await self.store.append_or_insert([task_to_row(task) for task in result.added])
            self.undo_ledger.record(
                "add",
                [task.text for task in result.added],
                [identity_key(task) for task in result.added],
            )
        logger.info(
            "OPS add added={} shared={} duplicates={} invalid={}",
            len(result.added),
            result.shared_count,
            len(result.duplicates),
            result.invalid,
        )
        return result

    async def complete_one(self, name: str) -> Optional[str]:
        task = find_by_name(await self.active_tasks(), name)
        if task is None or task.row is None:
            return None
        await self.store.update_fields(task.row, {"status": Status.DONE.value})
        self.undo_ledger.record("complete", [task.text])
        logger.info("OPS complete row={} text={!r}", task.row, task.text)
        return task.text

    async def complete_all(self) -> int:
        tasks = await self.active_tasks()
        for task in tasks:
            if task.row is not None:
                await self.store.update_fields(task.row, {"status": Status.DONE.value})
        logger.info("OPS complete_all count={}", len(tasks))
        return len(tasks)

    async def delete_one(self, name: str) -> Optional[str]:
        task = find_by_name(await self.active_tasks(), name)
        if task is None or task.row is None:
            return None
        await self.store.clear(task.row)
        self.undo_ledger.record("delete", [task.text])
        logger.info("OPS delete row={} text={!r}", task.row, task.text)
        return task.text

    async def delete_all(self) -> int:
        rows = sorted((t.row for t in await self.active_tasks() if t.row is not None), reverse=True)
        for row in rows:
            await self.store.clear(row)
        logger.info("OPS delete_all count={}", len(rows))
        return len(rows)

    async def update(self, name: str, changes: TaskUpdate, requester: str) -> bool:
        task = find_by_name(await self.active_tasks(), name)
        if task is None or task.row is None:
            return False

        if _clean(changes.text):
            task.text = _clean(changes.text)
        if _clean(changes.person):
            task.person = self.people.resolve(changes.person, requester)
        if changes.location is not None:
            task.location = _clean(changes.location)
        if changes.when is not None:
            task.when = normalize_date(changes.when, self.now())
        if _clean(changes.category):
            task.category = Category.parse(changes.category)
        else:
            _with_default_category(task)

        await self.store.update_fields(task.row, dict(zip(COLUMNS, task_to_row(task))))
        logger.info("OPS update row={} text={!r}", task.row, task.text)
        return True

    def _person_filter(self, filters: ListFilters, requester: str) -> Optional[str]:
        person = self.people.canonical(filters.person)
        if person == SELF:
            return requester
        return person

    async def list_filtered(self, filters: ListFilters, requester: str) -> ListResult:
        active = await self.active_tasks()
        person = self._person_filter(filters, requester)
        location = _clean(filters.location).lower()

        def by_person(task: Task) -> bool:
            if person is None:
                return True
            if person == SHARED:
                return task.is_shared
            if task.person.lower() == person.lower():
                return True
            return task.is_shared and not filters.exclude_shared

        def by_location(task: Task) -> bool:
            return not location or location in task.location.lower()

        tasks = [t for t in active if by_person(t) and by_location(t)]
        empty_filter = None
        if not tasks and active and (person or location):
            if person and not any(by_person(t) for t in active):
                empty_filter = "person"
            elif location and not any(by_location(t) for t in active):
                empty_filter = "location"
            else:
                empty_filter = "person+location"
        resolved = ListFilters(person=person, location=location or None, exclude_shared=filters.exclude_shared)
        return ListResult(tasks=tasks, filters=resolved, total_active=len(active), empty_filter=empty_filter)

    async def undo(self) -> UndoOutcome:
        if self.undo_ledger.is_expired():
            return UndoOutcome(status="expired")
        record = self.undo_ledger.current()
        if record is None:
            return UndoOutcome(status="empty")
        if record.action != "add":
            return UndoOutcome(status="not_reversible", action=record.action)

        wanted = set(record.keys)
        rows = sorted(
            (t.row for t in await self.active_tasks() if t.row is not None and identity_key(t) in wanted),
            reverse=True,
        )
        for row in rows:
            await self.store.clear(row)
        count = len(rows)
        self.undo_ledger.clear()
        logger.info("OPS undo action=add reverted={}", count)
        return UndoOutcome(status="undone", action="add", count=count)
