from __future__ import annotations

from loguru import logger

from taskbot.core.models import identity_key
from taskbot.store.task_store import TaskStore


async def reconcile(store: TaskStore) -> int:
    """Clear later copies of active tasks sharing text/person/location/when.

    The first row of each group survives. Returns the number of rows cleared.
    """
    seen: set[tuple[str, str, str, str]] = set()
    doomed: list[int] = []
    for task in await store.list_active():
        if not task.is_active or task.row is None:
            continue
        key = identity_key(task)
        if key in seen:
            doomed.append(task.row)
            continue
        seen.add(key)

    for row in sorted(doomed, reverse=True):
        await store.clear(row)
    if doomed:
        logger.info("DEDUP removed={} rows={}", len(doomed), sorted(doomed))
    return len(doomed)
