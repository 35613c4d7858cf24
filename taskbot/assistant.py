from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from taskbot.core.dedup import reconcile
from taskbot.core.errors import StoreUnavailable
from taskbot.core.fallback import STORE_UNAVAILABLE_TEXT
from taskbot.core.formatter import format_list
from taskbot.core.models import ListFilters
from taskbot.core.operations import TaskOperations
from taskbot.core.people import DefaultPolicy, PersonResolver
from taskbot.core.undo import UndoLedger
from taskbot.llm.client import OpenRouterReasoner
from taskbot.llm.pipeline import Evaluator, Planner
from taskbot.llm.router import IntentResolver
from taskbot.store.task_store import SheetsTaskStore

ERROR_TEXT = "❌ Da ist etwas schiefgelaufen. Versuch es bitte noch einmal."
TEST_TEXT = "✅ Bot läuft!"
HELP_TEXT = (
    "Hallo! Ich verwalte eure gemeinsame Aufgabenliste.\n\n"
    "Schreib einfach, was du willst, z. B.:\n"
    " • zeige aufgaben\n"
    " • was muss ich bei Rewe holen?\n"
    " • Milch und Brot kaufen bei Rewe\n"
    " • ich muss morgen zum Arzt\n"
    " • Müll rausbringen erledigt\n"
    " • lösche Fenster putzen\n"
    " • rückgängig\n\n"
    "Befehle: /liste /help /test"
)


@dataclass(slots=True)
class InboundMessage:
    text: str
    sender_id: int
    sender_name: str
    chat_id: int
    is_group: bool = False


def strip_mention(text: str, bot_username: str = "") -> str:
    """Drops a leading "@bot" token as used in group chats."""
    name = bot_username.lstrip("@").strip()
    pattern = rf"^\s*@{re.escape(name)}\b[\s,:]*" if name else r"^\s*@\w+[\s,:]*"
    return re.sub(pattern, "", text or "", count=1, flags=re.IGNORECASE)


def _command_name(text: str) -> Optional[str]:
    if not text.startswith("/"):
        return None
    head = text.split(maxsplit=1)[0]
    return head[1:].split("@", 1)[0].lower()


class Assistant:
    """Request boundary: one inbound chat message in, one reply text out."""

    def __init__(
        self,
        ops: TaskOperations,
        resolver: IntentResolver,
        *,
        sheet_url: str = "",
        bot_username: str = "",
    ) -> None:
        self.ops = ops
        self.resolver = resolver
        self.sheet_url = sheet_url
        self.bot_username = bot_username

    @classmethod
    def from_settings(cls) -> "Assistant":
        from taskbot.config import settings

        policy = DefaultPolicy.parse(settings.default_assignee)
        ops = TaskOperations(
            SheetsTaskStore(settings.google_sheet_id, sheet_name=settings.google_sheet_name),
            PersonResolver(settings.known_people, policy),
            UndoLedger(window_sec=settings.undo_window_sec),
            timezone=settings.timezone,
        )
        reasoner = OpenRouterReasoner.from_settings()
        resolver = IntentResolver(
            ops,
            reasoner=reasoner,
            planner=Planner(reasoner, settings.llm_tool_temperature) if settings.llm_plan_enabled else None,
            evaluator=Evaluator(reasoner, settings.llm_chat_temperature) if settings.llm_evaluate_enabled else None,
            policy=policy,
            context_mode=settings.llm_context_mode,
            tool_temperature=settings.llm_tool_temperature,
            sheet_url=settings.sheet_url,
        )
        logger.info(
            "Assistant configured: sheet_set={} llm_set={} policy={} people={}",
            bool(settings.google_sheet_id),
            reasoner.enabled,
            policy.value,
            settings.known_people,
        )
        return cls(ops, resolver, sheet_url=settings.sheet_url, bot_username=settings.telegram_bot_username)

    def help_text(self) -> str:
        if self.sheet_url:
            return f"{HELP_TEXT}\n\n📊 Tabelle: {self.sheet_url}"
        return HELP_TEXT

    async def handle(self, event: InboundMessage) -> str:
        text = event.text or ""
        if event.is_group:
            text = strip_mention(text, self.bot_username)
        text = text.strip()
        if not text:
            return ""

        command = _command_name(text)
        if command in {"start", "help", "hilfe"}:
            return self.help_text()
        if command == "test":
            return TEST_TEXT

        requester = self.ops.people.requester_name(event.sender_name, event.sender_id)
        logger.info(
            "HANDLE chat={} sender={} group={} text_len={} preview={!r}",
            event.chat_id,
            requester,
            event.is_group,
            len(text),
            text[:80],
        )
        try:
            await reconcile(self.ops.store)
            if command in {"liste", "list", "aufgaben"}:
                return format_list(await self.ops.list_filtered(ListFilters(), requester))
            snapshot = await self.ops.active_tasks()
            resolution = await self.resolver.resolve(text, snapshot, requester)
        except StoreUnavailable as exc:
            logger.warning("HANDLE store unavailable chat={} err={}", event.chat_id, exc)
            return STORE_UNAVAILABLE_TEXT
        except Exception:
            logger.exception("HANDLE failed chat={}", event.chat_id)
            return ERROR_TEXT

        logger.info("HANDLE done chat={} source={} tool={}", event.chat_id, resolution.source, resolution.tool)
        return resolution.reply
