from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

UNDOABLE_ACTIONS = {"add", "complete", "delete"}


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class UndoRecord:
    action: str
    texts: list[str] = field(default_factory=list)
    # identity keys of the rows an add inserted
    keys: list[tuple[str, str, str, str]] = field(default_factory=list)
    created_at: datetime = field(default_factory=_now_utc)


class UndoLedger:
    """Single slot holding the most recent mutating action.

    One instance per running bot; it is not shared between processes.
    """

    def __init__(self, window_sec: int = 300, clock: Callable[[], datetime] = _now_utc) -> None:
        self.window = timedelta(seconds=window_sec)
        self._clock = clock
        self._record: Optional[UndoRecord] = None

    def record(
        self,
        action: str,
        texts: list[str],
        keys: Optional[list[tuple[str, str, str, str]]] = None,
    ) -> None:
        if action not in UNDOABLE_ACTIONS:
            raise ValueError(f"unknown undo action: {action}")
        self._record = UndoRecord(
            action=action,
            texts=list(texts),
            keys=list(keys or []),
            created_at=self._clock(),
        )

    def current(self) -> Optional[UndoRecord]:
        """The live record, or None when empty or older than the window."""
        record = self._record
        if record is None:
            return None
        if self._clock() - record.created_at > self.window:
            return None
        return record

    def is_expired(self) -> bool:
        return self._record is not None and self.current() is None

    def clear(self) -> None:
        self._record = None
