"""Keyword rules used when the language model is unavailable.

Rules are tried in the order of FALLBACK_RULES; the first matching predicate
wins and nothing here touches the network except the task store.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Awaitable, Callable

from loguru import logger

from taskbot.core.errors import StoreUnavailable
from taskbot.core.formatter import format_complete, format_list
from taskbot.core.models import ListFilters
from taskbot.core.operations import TaskOperations

NOT_UNDERSTOOD_TEXT = (
    "Das habe ich nicht verstanden.\n\n"
    "Beispiele:\n"
    " zeige aufgaben\n"
    " Milch kaufen erledigt\n"
    " /help"
)
STORE_UNAVAILABLE_TEXT = (
    "❌ Ich komme gerade nicht an die Aufgabenliste. "
    "Ist das Google Sheet eingerichtet (GOOGLE_SHEET_ID, GOOGLE_CREDENTIALS)?"
)

_SHOW_RE = re.compile(r"\b(aufgaben?|liste|zeig\w*|show|list|todos?)\b", flags=re.IGNORECASE)
_MINE_RE = re.compile(r"\b(meine|mein|my|mine)\b", flags=re.IGNORECASE)
_COMPLETE_RE = re.compile(
    r"\b(erledigt|fertig|geschafft|abgehakt|done|finished|completed)\b",
    flags=re.IGNORECASE,
)
_COMPLETE_FILLER_RE = re.compile(r"\b(ist|sind|habe|hab|ich|wurde|is|i|have)\b", flags=re.IGNORECASE)
_UPDATE_RE = re.compile(
    r"\b(änder\w*|aender\w*|umbenenn\w*|benenn\w*|verschieb\w*|rename|change|update|edit)\b",
    flags=re.IGNORECASE,
)


def _clean(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip(" \t,.;:!?-\"'„“")


def extract_completion_target(text: str) -> str:
    cleaned = _COMPLETE_RE.sub(" ", text or "")
    cleaned = _COMPLETE_FILLER_RE.sub(" ", cleaned)
    return _clean(cleaned)


@dataclass(slots=True)
class FallbackContext:
    ops: TaskOperations
    requester: str
    sheet_url: str = ""


Handler = Callable[[str, FallbackContext], Awaitable[str]]


@dataclass(frozen=True)
class FallbackRule:
    name: str
    predicate: Callable[[str], bool]
    handler: Handler


def _is_show(text: str) -> bool:
    return bool(_SHOW_RE.search(text))


async def _handle_show(text: str, ctx: FallbackContext) -> str:
    filters = ListFilters(person=ctx.requester if _MINE_RE.search(text) else None)
    return format_list(await ctx.ops.list_filtered(filters, ctx.requester))


def _is_complete(text: str) -> bool:
    return bool(_COMPLETE_RE.search(text))


async def _handle_complete(text: str, ctx: FallbackContext) -> str:
    target = extract_completion_target(text)
    if not target:
        return "Welche Aufgabe ist erledigt? Schreib z. B. „Milch erledigt“."
    return format_complete(await ctx.ops.complete_one(target), target)


def _is_update(text: str) -> bool:
    return bool(_UPDATE_RE.search(text))


async def _handle_update(text: str, ctx: FallbackContext) -> str:
    message = (
        "Ändern kann ich Aufgaben gerade nur mit KI-Unterstützung. "
        "Lösch die Aufgabe und leg sie neu an"
    )
    if ctx.sheet_url:
        return f"{message}, oder bearbeite sie direkt im Sheet:\n{ctx.sheet_url}"
    return f"{message}, oder bearbeite sie direkt im Sheet."


FALLBACK_RULES: tuple[FallbackRule, ...] = (
    FallbackRule("show", _is_show, _handle_show),
    FallbackRule("complete", _is_complete, _handle_complete),
    FallbackRule("update", _is_update, _handle_update),
)


def match_rule(text: str) -> FallbackRule | None:
    for rule in FALLBACK_RULES:
        if rule.predicate(text or ""):
            return rule
    return None


async def run_fallback(text: str, ctx: FallbackContext) -> str:
    rule = match_rule(text)
    if rule is None:
        logger.info("FALLBACK rule=none text_len={}", len(text or ""))
        return NOT_UNDERSTOOD_TEXT
    logger.info("FALLBACK rule={}", rule.name)
    try:
        return await rule.handler(text, ctx)
    except StoreUnavailable as exc:
        logger.warning("FALLBACK store unavailable rule={} err={}", rule.name, exc)
        return STORE_UNAVAILABLE_TEXT
    except Exception:
        logger.exception("FALLBACK rule={} failed", rule.name)
        return NOT_UNDERSTOOD_TEXT
