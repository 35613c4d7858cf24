from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from loguru import logger


async def run_heartbeat(interval_sec: int) -> None:
    """Logs a liveness line every `interval_sec` seconds until cancelled."""
    logger.info("heartbeat started interval={}s", interval_sec)
    started = datetime.now(timezone.utc)
    try:
        while True:
            await asyncio.sleep(interval_sec)
            uptime = int((datetime.now(timezone.utc) - started).total_seconds())
            logger.info("heartbeat alive uptime={}s", uptime)
    except asyncio.CancelledError:
        logger.info("heartbeat stopped")
        raise
