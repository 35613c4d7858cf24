"""Optional passes around the main tool-selection call.

Both are advisory: a failure returns None and the caller keeps its
single-pass result.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from loguru import logger

from taskbot.llm.client import Reasoner
from taskbot.llm.prompts import EVALUATOR_PROMPT, PLANNER_PROMPT


def _parse_json(text: str) -> tuple[Optional[dict[str, Any]], Optional[str]]:
    raw = (text or "").strip()
    if raw.startswith("```"):
        raw = raw.strip("`")
        if raw.lower().startswith("json"):
            raw = raw[4:]
    try:
        parsed = json.loads(raw)
        if isinstance(parsed, dict):
            return parsed, None
        return None, "Response JSON must be an object"
    except json.JSONDecodeError as exc:
        return None, str(exc)


class Planner:
    def __init__(self, reasoner: Reasoner, temperature: float = 0.2) -> None:
        self.reasoner = reasoner
        self.temperature = temperature

    async def plan(self, text: str, context: str) -> Optional[str]:
        messages = [
            {"role": "system", "content": PLANNER_PROMPT},
            {"role": "user", "content": f"{context}\n\nNachricht:\n{text}"},
        ]
        try:
            reply = await self.reasoner.chat(messages, temperature=self.temperature)
        except Exception as exc:
            logger.warning("LLM plan skipped err={}", exc)
            return None
        payload, error = _parse_json(reply.text or "")
        if payload is None:
            logger.info("LLM plan ignored reason={}", error)
            return None
        return json.dumps(payload, ensure_ascii=False)


class Evaluator:
    def __init__(self, reasoner: Reasoner, temperature: float = 0.7) -> None:
        self.reasoner = reasoner
        self.temperature = temperature

    async def evaluate(self, text: str, reply_text: str) -> Optional[str]:
        messages = [
            {"role": "system", "content": EVALUATOR_PROMPT},
            {"role": "user", "content": f"Nachricht:\n{text}\n\nAntwort:\n{reply_text}"},
        ]
        try:
            reply = await self.reasoner.chat(messages, temperature=self.temperature)
        except Exception as exc:
            logger.warning("LLM evaluate skipped err={}", exc)
            return None
        rewritten = (reply.text or "").strip()
        return rewritten or None
