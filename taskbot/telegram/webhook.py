from aiogram.types import Update
from fastapi import APIRouter
from loguru import logger

from taskbot.config import settings
from taskbot.telegram.bot import dp, get_bot

router = APIRouter()


@router.post(settings.webhook_path)
async def telegram_webhook(update: Update) -> dict:
    await dp.feed_update(get_bot(), update)
    return {"ok": True}


async def register_webhook() -> None:
    url = f"{settings.base_url.rstrip('/')}{settings.webhook_path}"
    try:
        await get_bot().set_webhook(url, drop_pending_updates=True)
        logger.info("Webhook set to {}", url)
    except Exception:
        logger.exception("Webhook registration failed url={}", url)


async def start_polling() -> None:
    bot = get_bot()
    await bot.delete_webhook(drop_pending_updates=True)
    await dp.start_polling(bot)
