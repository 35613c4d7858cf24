import asyncio

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from taskbot.config import settings
from taskbot.heartbeat import run_heartbeat
from taskbot.telegram.webhook import register_webhook
from taskbot.telegram.webhook import router as telegram_router

app = FastAPI(title="haushalt-taskbot")

app.include_router(telegram_router)

_heartbeat_task: asyncio.Task | None = None


@app.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "Bot is running!"


@app.get("/health")
async def health() -> dict:
    return {"ok": True}


@app.on_event("startup")
async def on_startup() -> None:
    if settings.base_url:
        await register_webhook()
    if settings.heartbeat_interval_sec > 0:
        global _heartbeat_task
        if _heartbeat_task is None or _heartbeat_task.done():
            _heartbeat_task = asyncio.create_task(run_heartbeat(settings.heartbeat_interval_sec))


@app.on_event("shutdown")
async def on_shutdown() -> None:
    if _heartbeat_task and not _heartbeat_task.done():
        _heartbeat_task.cancel()
