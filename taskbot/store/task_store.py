from __future__ import annotations

import asyncio
from typing import Any, Optional, Protocol, Sequence

import httpx
from loguru import logger

from taskbot.core.errors import StoreUnavailable
from taskbot.core.models import COLUMNS, FIRST_DATA_ROW, Task, task_from_row
from taskbot.store.sheets_client import SheetsClient, _col_to_a1, a1_range

_LAST_COL = len(COLUMNS) - 1


class TaskStore(Protocol):
    async def list_active(self) -> list[Task]:
        """Every row that still has task text, in row order (done rows included)."""
        ...

    async def append_or_insert(self, rows: Sequence[Sequence[str]]) -> None: ...

    async def update_fields(self, row: int, fields: dict[str, str]) -> None: ...

    async def clear(self, row: int) -> None: ...


class SheetsTaskStore:
    """TaskStore backed by one Google sheet, columns A..G."""

    def __init__(
        self,
        spreadsheet_id: str,
        *,
        sheet_name: str = "",
        client: Optional[SheetsClient] = None,
    ) -> None:
        self.spreadsheet_id = (spreadsheet_id or "").strip()
        self.sheet_name = sheet_name
        self.client = client or SheetsClient()

    async def _call(self, op: str, func, *args: Any) -> Any:
        if not self.spreadsheet_id:
            raise StoreUnavailable("GOOGLE_SHEET_ID is not configured")
        try:
            return await asyncio.to_thread(func, self.spreadsheet_id, *args)
        except StoreUnavailable:
            raise
        except httpx.HTTPError as exc:
            logger.warning("STORE {} failed err={}", op, exc)
            raise StoreUnavailable(f"sheet {op} failed: {exc}") from exc

    async def _read_rows(self) -> list[list[Any]]:
        target = a1_range(self.sheet_name, 0, FIRST_DATA_ROW, _LAST_COL, None)
        return await self._call("read", self.client.read_range, target)

    async def list_active(self) -> list[Task]:
        tasks: list[Task] = []
        for offset, values in enumerate(await self._read_rows()):
            task = task_from_row(FIRST_DATA_ROW + offset, values)
            if task is not None:
                tasks.append(task)
        return tasks

    async def _next_free_row(self) -> int:
        last = FIRST_DATA_ROW - 1
        for offset, values in enumerate(await self._read_rows()):
            if any(str(cell or "").strip() for cell in values):
                last = FIRST_DATA_ROW + offset
        return last + 1

    async def append_or_insert(self, rows: Sequence[Sequence[str]]) -> None:
        if not rows:
            return
        start = await self._next_free_row()
        end = start + len(rows) - 1
        target = a1_range(self.sheet_name, 0, start, _LAST_COL, end)
        await self._call("append", self.client.write_range, target, [list(r) for r in rows])
        logger.info("STORE append rows={} at={}", len(rows), start)

    async def update_fields(self, row: int, fields: dict[str, str]) -> None:
        unknown = set(fields) - set(COLUMNS)
        if unknown:
            raise ValueError(f"unknown task fields: {sorted(unknown)}")
        if len(fields) == len(COLUMNS):
            target = a1_range(self.sheet_name, 0, row, _LAST_COL, row)
            values = [[fields[name] for name in COLUMNS]]
            await self._call("update", self.client.write_range, target, values)
        else:
            for name, value in fields.items():
                col = _col_to_a1(COLUMNS.index(name))
                cell = f"'{self.sheet_name}'!{col}{row}" if self.sheet_name else f"{col}{row}"
                await self._call("update", self.client.write_range, cell, [[value]])
        logger.info("STORE update row={} fields={}", row, sorted(fields))

    async def clear(self, row: int) -> None:
        target = a1_range(self.sheet_name, 0, row, _LAST_COL, row)
        await self._call("clear", self.client.clear_range, target)
        logger.info("STORE clear row={}", row)
