from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from loguru import logger

from taskbot.core.aliases import category_from_word
from taskbot.core.errors import ReasoningUnavailable
from taskbot.core.fallback import FallbackContext, run_fallback
from taskbot.core.formatter import (
    format_add,
    format_complete,
    format_complete_all,
    format_delete,
    format_delete_all,
    format_list,
    format_suggestions,
    format_undo,
    format_update,
)
from taskbot.core.models import SHARED, ListFilters, Task, TaskCandidate, TaskUpdate
from taskbot.core.operations import TaskOperations
from taskbot.core.people import DefaultPolicy
from taskbot.llm.catalog import tool_definitions, validate_arguments
from taskbot.llm.client import Reasoner, ToolCall
from taskbot.llm.pipeline import Evaluator, Planner
from taskbot.llm.prompts import (
    DEFAULT_RULE_REQUESTER,
    DEFAULT_RULE_SHARED,
    PLAN_HINT_PREFIX,
    SYSTEM_PROMPT,
    build_context,
    weekday_de,
)


@dataclass(slots=True)
class Resolution:
    reply: str
    source: str  # "llm_tool" | "llm_text" | "fallback"
    tool: Optional[str] = None


def _opt(args: dict[str, Any], key: str) -> Optional[str]:
    value = args.get(key)
    if value is None:
        return None
    return str(value)


class IntentResolver:
    def __init__(
        self,
        ops: TaskOperations,
        *,
        reasoner: Optional[Reasoner] = None,
        planner: Optional[Planner] = None,
        evaluator: Optional[Evaluator] = None,
        policy: DefaultPolicy = DefaultPolicy.SHARED,
        context_mode: str = "full",
        tool_temperature: float = 0.2,
        sheet_url: str = "",
    ) -> None:
        self.ops = ops
        self.reasoner = reasoner
        self.planner = planner
        self.evaluator = evaluator
        self.policy = policy
        self.context_mode = context_mode
        self.tool_temperature = tool_temperature
        self.sheet_url = sheet_url
        self._handlers: dict[str, Callable[[dict[str, Any], str], Awaitable[str]]] = {
            "show_tasks": self._show,
            "add_tasks": self._add,
            "complete_task": self._complete,
            "delete_task": self._delete,
            "update_task": self._update,
            "undo_last": self._undo,
            "suggest_tasks": self._suggest,
        }

    def build_system_prompt(self, requester: str) -> str:
        now = self.ops.now()
        if self.policy == DefaultPolicy.REQUESTER:
            default_rule = DEFAULT_RULE_REQUESTER.format(requester=requester)
        else:
            default_rule = DEFAULT_RULE_SHARED
        people = " und ".join(self.ops.people.roster.values()) or "zwei Personen"
        return SYSTEM_PROMPT.format(
            people=people,
            today=now.date().isoformat(),
            weekday=weekday_de(now.weekday()),
            requester=requester,
            shared=SHARED,
            default_rule=default_rule,
        )

    def build_messages(
        self,
        text: str,
        snapshot: list[Task],
        requester: str,
        hint: Optional[str] = None,
    ) -> list[dict[str, str]]:
        system = self.build_system_prompt(requester)
        if hint:
            system += f"\n{PLAN_HINT_PREFIX} {hint}\n"
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": "AKTUELLE LISTE:\n" + build_context(snapshot, self.context_mode)},
            {"role": "user", "content": text},
        ]

    async def resolve(self, text: str, snapshot: list[Task], requester: str) -> Resolution:
        if self.reasoner is None:
            return await self._fallback(text, requester, "no_reasoner")

        hint = None
        if self.planner is not None:
            hint = await self.planner.plan(text, build_context(snapshot, "minimal"))

        messages = self.build_messages(text, snapshot, requester, hint)
        try:
            reply = await self.reasoner.chat(
                messages,
                tools=tool_definitions(),
                temperature=self.tool_temperature,
            )
        except ReasoningUnavailable as exc:
            logger.warning("LLM unavailable err={}", exc)
            return await self._fallback(text, requester, "llm_unavailable")

        if reply.tool_call is None:
            logger.info("LLM text reply len={}", len(reply.text or ""))
            return Resolution(reply=reply.text or "", source="llm_text")

        call = reply.tool_call
        error = validate_arguments(call.name, call.arguments)
        if error:
            logger.warning("LLM tool={} rejected err={}", call.name, error)
            return await self._fallback(text, requester, "invalid_arguments")

        logger.info("LLM tool={} args={}", call.name, call.arguments)
        out = await self.dispatch(call, requester)
        if self.evaluator is not None:
            rewritten = await self.evaluator.evaluate(text, out)
            if rewritten:
                out = rewritten
        return Resolution(reply=out, source="llm_tool", tool=call.name)

    async def dispatch(self, call: ToolCall, requester: str) -> str:
        handler = self._handlers[call.name]
        return await handler(call.arguments, requester)

    async def _fallback(self, text: str, requester: str, reason: str) -> Resolution:
        logger.info("FALLBACK triggered reason={}", reason)
        ctx = FallbackContext(ops=self.ops, requester=requester, sheet_url=self.sheet_url)
        return Resolution(reply=await run_fallback(text, ctx), source="fallback")

    async def _show(self, args: dict[str, Any], requester: str) -> str:
        filters = ListFilters(
            person=_opt(args, "person"),
            location=_opt(args, "location"),
            exclude_shared=bool(args.get("exclude_shared")),
        )
        return format_list(await self.ops.list_filtered(filters, requester))

    async def _add(self, args: dict[str, Any], requester: str) -> str:
        candidates = [
            TaskCandidate(
                text=str(item.get("text") or ""),
                person=_opt(item, "person"),
                location=str(item.get("location") or ""),
                when=str(item.get("when") or ""),
                category=category_from_word(item.get("category")),
            )
            for item in args.get("tasks") or []
        ]
        return format_add(await self.ops.add(candidates, requester, self.policy))

    async def _complete(self, args: dict[str, Any], requester: str) -> str:
        if args.get("all"):
            return format_complete_all(await self.ops.complete_all())
        name = str(args.get("task") or "").strip()
        return format_complete(await self.ops.complete_one(name), name)

    async def _delete(self, args: dict[str, Any], requester: str) -> str:
        if args.get("all"):
            return format_delete_all(await self.ops.delete_all())
        name = str(args.get("task") or "").strip()
        return format_delete(await self.ops.delete_one(name), name)

    async def _update(self, args: dict[str, Any], requester: str) -> str:
        name = str(args.get("task") or "").strip()
        changes = TaskUpdate(
            text=_opt(args, "text"),
            person=_opt(args, "person"),
            location=_opt(args, "location"),
            when=_opt(args, "when"),
            category=category_from_word(args.get("category")),
        )
        if changes.is_empty():
            return f"Was soll ich an „{name}“ ändern?"
        return format_update(await self.ops.update(name, changes, requester), name)

    async def _undo(self, args: dict[str, Any], requester: str) -> str:
        outcome = await self.ops.undo()
        return format_undo(outcome.status, outcome.action, outcome.count)

    async def _suggest(self, args: dict[str, Any], requester: str) -> str:
        suggestions = [str(item) for item in args.get("suggestions") or []]
        return format_suggestions(suggestions, str(args.get("reason") or "").strip())
