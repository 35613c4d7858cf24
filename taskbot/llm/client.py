from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx
from loguru import logger

from taskbot.core.errors import ReasoningUnavailable


@dataclass(slots=True)
class ToolCall:
    name: str
    arguments: dict[str, Any]


@dataclass(slots=True)
class ReasonerReply:
    text: Optional[str] = None
    tool_call: Optional[ToolCall] = None


class Reasoner(Protocol):
    async def chat(
        self,
        messages: list[dict[str, str]],
        *,
        tools: Optional[list[dict[str, Any]]] = None,
        temperature: float = 0.2,
    ) -> ReasonerReply: ...


def parse_reply(data: Any) -> ReasonerReply:
    try:
        message = data["choices"][0]["message"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ReasoningUnavailable(f"unexpected response shape: {exc}") from exc
    if not isinstance(message, dict):
        raise ReasoningUnavailable("completion message is not an object")

    tool_calls = message.get("tool_calls") or []
    if tool_calls:
        call = tool_calls[0] if isinstance(tool_calls, list) else None
        if not isinstance(call, dict):
            raise ReasoningUnavailable("tool call is not an object")
        function = call.get("function") or {}
        if not isinstance(function, dict):
            raise ReasoningUnavailable("tool call function is not an object")
        name = str(function.get("name") or "").strip()
        raw_args = function.get("arguments") or "{}"
        try:
            arguments = json.loads(raw_args) if isinstance(raw_args, str) else raw_args
        except json.JSONDecodeError as exc:
            raise ReasoningUnavailable(f"tool arguments are not JSON: {exc}") from exc
        if not name or not isinstance(arguments, dict):
            raise ReasoningUnavailable("tool call without name or object arguments")
        return ReasonerReply(tool_call=ToolCall(name=name, arguments=arguments))

    content = str(message.get("content") or "").strip()
    if not content:
        raise ReasoningUnavailable("empty completion")
    return ReasonerReply(text=content)


class OpenRouterReasoner:
    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        model: str = "openai/gpt-4o-mini",
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = (api_key or "").strip()
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "OpenRouterReasoner":
        from taskbot.config import settings

        return cls(
            api_key=settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            model=settings.openrouter_model,
            timeout=settings.llm_timeout_seconds,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _post(self, payload: dict[str, Any]) -> Any:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(f"{self.base_url}/chat/completions", headers=headers, json=payload)
            response.raise_for_status()
            return response.json()

    async def chat(
        self,
        messages: list[dict[str, str]],
        *,
        tools: Optional[list[dict[str, Any]]] = None,
        temperature: float = 0.2,
    ) -> ReasonerReply:
        if not self.enabled:
            raise ReasoningUnavailable("OPENROUTER_API_KEY is not set")

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": 800,
        }
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"

        try:
            data = await asyncio.wait_for(self._post(payload), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("LLM timeout after {}s", self.timeout)
            raise ReasoningUnavailable("LLM request timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("LLM http error err={}", exc)
            raise ReasoningUnavailable(f"LLM request failed: {exc}") from exc
        except ValueError as exc:
            raise ReasoningUnavailable(f"LLM response is not JSON: {exc}") from exc
        return parse_reply(data)
