import asyncio
import os
from pathlib import Path

import uvicorn
from dotenv import find_dotenv, load_dotenv
from loguru import logger

from taskbot.logging_setup import setup_logging


def _is_true(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _load_env() -> None:
    env_path = find_dotenv(usecwd=True)
    if not env_path:
        candidate = Path(__file__).resolve().parents[1] / ".env"
        if candidate.exists():
            env_path = str(candidate)
    if env_path:
        logger.info("Loaded .env from {}", env_path)
        load_dotenv(env_path, override=True)
    else:
        logger.warning("No .env found")


def _log_config(settings) -> None:
    logger.info(
        "Config: telegram_set={} sheet_set={} credentials_set={} llm_set={} model={} debug={}",
        bool(settings.telegram_bot_token),
        bool(settings.google_sheet_id),
        bool(settings.google_credentials or settings.google_credentials_file),
        bool(settings.openrouter_api_key),
        settings.openrouter_model,
        settings.debug,
    )


async def _run_dev_polling() -> None:
    from taskbot.config import settings
    from taskbot.heartbeat import run_heartbeat
    from taskbot.telegram.webhook import start_polling

    polling_task = asyncio.create_task(start_polling())
    heartbeat_task = None
    if settings.heartbeat_interval_sec > 0:
        heartbeat_task = asyncio.create_task(run_heartbeat(settings.heartbeat_interval_sec))
    try:
        await polling_task
    finally:
        if heartbeat_task is not None:
            heartbeat_task.cancel()
            await asyncio.gather(heartbeat_task, return_exceptions=True)


def main() -> None:
    _load_env()
    setup_logging()

    from taskbot.config import settings

    _log_config(settings)
    if not settings.telegram_bot_token:
        logger.error("TELEGRAM_BOT_TOKEN is not set")
        raise SystemExit(1)

    dev_polling = settings.dev_polling or _is_true(os.getenv("DEV_POLLING"))
    if dev_polling:
        try:
            asyncio.run(_run_dev_polling())
        except KeyboardInterrupt:
            return
        return

    uvicorn.run("taskbot.api.app:app", host="0.0.0.0", port=settings.port, reload=False)


if __name__ == "__main__":
    main()
