from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import jsonschema
import yaml
from jsonschema import ValidationError

TOOL_NAMES = (
    "show_tasks",
    "add_tasks",
    "complete_task",
    "delete_task",
    "update_task",
    "undo_last",
    "suggest_tasks",
)


def _catalog_path() -> Path:
    return Path(__file__).resolve().parent / "catalog.yml"


@lru_cache(maxsize=1)
def load_catalog() -> dict[str, dict[str, Any]]:
    with _catalog_path().open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    tools = data.get("tools") if isinstance(data, dict) else None
    if not isinstance(tools, dict):
        raise ValueError("catalog.yml must contain a 'tools' mapping")
    missing = [name for name in TOOL_NAMES if name not in tools]
    if missing:
        raise ValueError(f"catalog.yml is missing tools: {missing}")
    return {name: tools[name] for name in TOOL_NAMES}


def tool_definitions() -> list[dict[str, Any]]:
    """Catalog in the chat/completions `tools` format."""
    out = []
    for name, entry in load_catalog().items():
        out.append(
            {
                "type": "function",
                "function": {
                    "name": name,
                    "description": " ".join(str(entry.get("description") or "").split()),
                    "parameters": entry.get("parameters") or {"type": "object", "properties": {}},
                },
            }
        )
    return out


def validate_arguments(name: str, arguments: dict[str, Any]) -> Optional[str]:
    """Returns an error message, or None when the call can be executed."""
    catalog = load_catalog()
    if name not in catalog:
        return f"unknown tool: {name}"
    schema = catalog[name].get("parameters") or {}
    try:
        jsonschema.validate(instance=arguments, schema=schema)
    except ValidationError as exc:
        return exc.message

    if name == "add_tasks":
        texts = [str(item.get("text") or "").strip() for item in arguments.get("tasks") or []]
        if not any(texts):
            return "add_tasks needs at least one non-empty text"
    if name in {"complete_task", "delete_task"}:
        if not arguments.get("all") and not str(arguments.get("task") or "").strip():
            return f"{name} needs task or all=true"
    if name == "update_task" and not str(arguments.get("task") or "").strip():
        return "update_task needs task"
    return None
