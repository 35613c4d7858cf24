from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

SHARED = "Beide"

# Sheet layout: A..G, header in row 1.
COLUMNS = ("created", "person", "text", "location", "when", "category", "status")
FIRST_DATA_ROW = 2


class Category(str, Enum):
    SHOPPING = "shopping"
    HOUSEHOLD = "household"
    PERSONAL = "personal"
    WORK = "work"
    GENERAL = "general"
    BOTH = "both"

    @classmethod
    def parse(cls, value: Any) -> "Category":
        raw = str(value or "").strip().lower()
        for item in cls:
            if item.value == raw:
                return item
        return cls.GENERAL


class Status(str, Enum):
    PENDING = "pending"
    DONE = "done"

    @classmethod
    def parse(cls, value: Any) -> "Status":
        if str(value or "").strip().lower() == cls.DONE.value:
            return cls.DONE
        return cls.PENDING


@dataclass(slots=True)
class Task:
    text: str
    person: str = SHARED
    location: str = ""
    when: str = ""
    category: Category = Category.GENERAL
    status: Status = Status.PENDING
    created: str = ""
    row: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status != Status.DONE

    @property
    def is_shared(self) -> bool:
        return self.person == SHARED


@dataclass(slots=True)
class TaskCandidate:
    """Unvalidated add request, as extracted from a message."""

    text: str
    person: Optional[str] = None
    location: str = ""
    when: str = ""
    category: Optional[str] = None


@dataclass(slots=True)
class TaskUpdate:
    text: Optional[str] = None
    person: Optional[str] = None
    location: Optional[str] = None
    when: Optional[str] = None
    category: Optional[str] = None

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (self.text, self.person, self.location, self.when, self.category)
        )


@dataclass(slots=True)
class ListFilters:
    person: Optional[str] = None
    location: Optional[str] = None
    exclude_shared: bool = False

    @property
    def applied(self) -> bool:
        return bool(self.person or self.location)


@dataclass(slots=True)
class AddResult:
    added: list[Task] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)
    invalid: int = 0

    @property
    def shared_count(self) -> int:
        return sum(1 for task in self.added if task.is_shared)

    @property
    def personal_count(self) -> int:
        return sum(1 for task in self.added if not task.is_shared)


@dataclass(slots=True)
class ListResult:
    tasks: list[Task]
    filters: ListFilters
    total_active: int
    empty_filter: Optional[str] = None  # "person" | "location" | "person+location"


def _cell(values: list[Any], idx: int) -> str:
    if idx >= len(values):
        return ""
    value = values[idx]
    return "" if value is None else str(value).strip()


def task_from_row(row: int, values: list[Any]) -> Task | None:
    text = _cell(values, 2)
    if not text:
        return None
    return Task(
        text=text,
        person=_cell(values, 1) or SHARED,
        location=_cell(values, 3),
        when=_cell(values, 4),
        category=Category.parse(_cell(values, 5)),
        status=Status.parse(_cell(values, 6)),
        created=_cell(values, 0),
        row=row,
    )


def task_to_row(task: Task) -> list[str]:
    return [
        task.created,
        task.person,
        task.text,
        task.location,
        task.when,
        task.category.value,
        task.status.value,
    ]


def _norm(value: str) -> str:
    return " ".join(str(value or "").lower().split())


def identity_key(task: Task) -> tuple[str, str, str, str]:
    return (_norm(task.text), _norm(task.person), _norm(task.location), _norm(task.when))
