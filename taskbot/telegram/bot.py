from __future__ import annotations

from functools import lru_cache

from aiogram import Bot, Dispatcher, F, types
from loguru import logger

from taskbot.assistant import Assistant, InboundMessage

GROUP_CHAT_TYPES = {"group", "supergroup"}
_MAX_MESSAGE_LEN = 4096

dp = Dispatcher()


@lru_cache(maxsize=1)
def get_bot() -> Bot:
    from taskbot.config import settings

    return Bot(token=settings.telegram_bot_token)


@lru_cache(maxsize=1)
def get_assistant() -> Assistant:
    return Assistant.from_settings()


def build_event(message: types.Message) -> InboundMessage:
    sender = message.from_user
    name = ""
    if sender is not None:
        name = sender.first_name or sender.username or ""
    return InboundMessage(
        text=message.text or "",
        sender_id=sender.id if sender is not None else 0,
        sender_name=name,
        chat_id=message.chat.id,
        is_group=message.chat.type in GROUP_CHAT_TYPES,
    )


def split_message(text: str, limit: int = _MAX_MESSAGE_LEN) -> list[str]:
    if len(text) <= limit:
        return [text]
    chunks: list[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        if len(current) + len(line) > limit and current:
            chunks.append(current)
            current = ""
        while len(line) > limit:
            chunks.append(line[:limit])
            line = line[limit:]
        current += line
    if current:
        chunks.append(current)
    return chunks


async def send_message(chat_id: int, text: str) -> None:
    bot = get_bot()
    for chunk in split_message(text):
        await bot.send_message(chat_id, chunk)


async def on_text(message: types.Message) -> None:
    event = build_event(message)
    reply = await get_assistant().handle(event)
    if not reply:
        return
    try:
        await send_message(event.chat_id, reply)
    except Exception:
        logger.exception("TELEGRAM send failed chat={}", event.chat_id)


def setup_handlers(dispatcher: Dispatcher) -> None:
    dispatcher.message.register(on_text, F.text)


setup_handlers(dp)
