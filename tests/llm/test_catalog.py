from taskbot.llm.catalog import TOOL_NAMES, tool_definitions, validate_arguments


def test_definitions_cover_every_tool() -> None:
    defs = tool_definitions()

    assert [d["function"]["name"] for d in defs] == list(TOOL_NAMES)
    assert all(d["type"] == "function" for d in defs)
    assert "\n" not in defs[0]["function"]["description"]


def test_add_tasks_validation() -> None:
    assert validate_arguments("add_tasks", {"tasks": [{"text": "Milch"}]}) is None
    assert validate_arguments("add_tasks", {"tasks": []}) is not None
    assert validate_arguments("add_tasks", {"tasks": [{"text": "  "}]}) is not None
    assert validate_arguments("add_tasks", {"tasks": [{"person": "Julia"}]}) is not None
    assert validate_arguments("add_tasks", {"tasks": [{"text": "A", "category": "garden"}]}) is not None


def test_complete_and_delete_need_target_or_all() -> None:
    assert validate_arguments("complete_task", {"task": "Müll"}) is None
    assert validate_arguments("delete_task", {"all": True}) is None
    assert validate_arguments("complete_task", {}) is not None
    assert validate_arguments("delete_task", {"task": " "}) is not None


def test_update_requires_task_and_unknown_tool_rejected() -> None:
    assert validate_arguments("update_task", {"task": "Milch", "when": "morgen"}) is None
    assert validate_arguments("update_task", {"text": "Hafermilch"}) is not None
    assert validate_arguments("water_plants", {}) == "unknown tool: water_plants"
