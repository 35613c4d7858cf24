import asyncio
import json

import httpx
import pytest

from taskbot.core.errors import ReasoningUnavailable
from taskbot.llm.client import OpenRouterReasoner, parse_reply


def _completion(message: dict) -> dict:
    return {"choices": [{"message": message}]}


def test_parse_reply_prefers_tool_call() -> None:
    data = _completion(
        {
            "content": "",
            "tool_calls": [
                {"function": {"name": "add_tasks", "arguments": json.dumps({"tasks": [{"text": "Milch"}]})}}
            ],
        }
    )

    reply = parse_reply(data)

    assert reply.text is None
    assert reply.tool_call.name == "add_tasks"
    assert reply.tool_call.arguments == {"tasks": [{"text": "Milch"}]}


def test_parse_reply_text() -> None:
    assert parse_reply(_completion({"content": " Hallo! "})).text == "Hallo!"


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"choices": []},
        _completion({"content": ""}),
        _completion({"tool_calls": [{"function": {"name": "x", "arguments": "{nope"}}]}),
        {"choices": [{"message": None}]},
        _completion({"tool_calls": ["oops"]}),
        _completion({"tool_calls": [{"function": "add_tasks"}]}),
    ],
)
def test_parse_reply_rejects_broken_payloads(data) -> None:
    with pytest.raises(ReasoningUnavailable):
        parse_reply(data)


def test_chat_without_key_is_unavailable() -> None:
    reasoner = OpenRouterReasoner(api_key="")

    assert reasoner.enabled is False
    with pytest.raises(ReasoningUnavailable):
        asyncio.run(reasoner.chat([{"role": "user", "content": "hi"}]))


def test_chat_sends_tools_and_parses_answer() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion({"content": "ok"}))

    reasoner = OpenRouterReasoner(api_key="k", base_url="https://llm.test/v1/", transport=httpx.MockTransport(handler))
    tools = [{"type": "function", "function": {"name": "undo_last", "parameters": {}}}]

    reply = asyncio.run(reasoner.chat([{"role": "user", "content": "hi"}], tools=tools, temperature=0.1))

    assert reply.text == "ok"
    assert seen["url"] == "https://llm.test/v1/chat/completions"
    assert seen["auth"] == "Bearer k"
    assert seen["body"]["tools"] == tools
    assert seen["body"]["tool_choice"] == "auto"
    assert seen["body"]["temperature"] == 0.1


def test_chat_http_error_is_unavailable() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"error": "boom"}))
    reasoner = OpenRouterReasoner(api_key="k", transport=transport)

    with pytest.raises(ReasoningUnavailable):
        asyncio.run(reasoner.chat([{"role": "user", "content": "hi"}]))
