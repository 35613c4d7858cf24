import asyncio
import json

import httpx
import pytest

from taskbot.core.errors import StoreUnavailable
from taskbot.core.models import SHARED
from taskbot.store.sheets_client import SheetsClient, a1_range
from taskbot.store.task_store import SheetsTaskStore

VALUES_PREFIX = "/v4/spreadsheets/sheet-1/values/"


class FakeSheet:
    def __init__(self, values=None, status=200) -> None:
        self.values = values or []
        self.status = status
        self.requests: list[tuple[str, str, dict]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        target = request.url.path[len(VALUES_PREFIX):]
        body = json.loads(request.content) if request.content else {}
        self.requests.append((request.method, target, body))
        assert request.headers["Authorization"] == "Bearer t"
        if self.status != 200:
            return httpx.Response(self.status, json={"error": "nope"})
        if request.method == "GET":
            return httpx.Response(200, json={"values": self.values})
        return httpx.Response(200, json={})


def _store(sheet: FakeSheet, sheet_name: str = "") -> SheetsTaskStore:
    client = SheetsClient(token_provider=lambda: "t", transport=httpx.MockTransport(sheet))
    return SheetsTaskStore("sheet-1", sheet_name=sheet_name, client=client)


def test_a1_range() -> None:
    assert a1_range("Tasks", 0, 2, 6, None) == "'Tasks'!A2:G"
    assert a1_range("", 0, 5, 6, 7) == "A5:G7"
    assert a1_range("", 26, 1, 27, 1) == "AA1:AB1"


def test_list_active_maps_rows_and_skips_blank_text() -> None:
    sheet = FakeSheet(
        [
            ["2026-10-18", "", "Müll", "", "", "both", "pending"],
            ["", "", "", "", "", "", ""],
            ["2026-10-18", "Julia", "Yoga", "Studio", "", "personal", "done"],
        ]
    )

    tasks = asyncio.run(_store(sheet, "Tasks").list_active())

    assert [(t.row, t.text) for t in tasks] == [(2, "Müll"), (4, "Yoga")]
    assert tasks[0].person == SHARED
    assert tasks[1].is_active is False
    assert sheet.requests[0][:2] == ("GET", "'Tasks'!A2:G")


def test_append_writes_after_last_occupied_row() -> None:
    sheet = FakeSheet([["x", "", "A"], [], ["x", "", "B"]])

    asyncio.run(_store(sheet).append_or_insert([["d", SHARED, "C", "", "", "both", "pending"]]))

    method, target, body = sheet.requests[-1]
    assert (method, target) == ("PUT", "A5:G5")
    assert body["values"] == [["d", SHARED, "C", "", "", "both", "pending"]]


def test_update_partial_fields_writes_single_cells() -> None:
    sheet = FakeSheet()

    asyncio.run(_store(sheet).update_fields(3, {"status": "done"}))

    assert sheet.requests == [("PUT", "G3", {"range": "G3", "majorDimension": "ROWS", "values": [["done"]]})]


def test_update_rejects_unknown_field() -> None:
    with pytest.raises(ValueError):
        asyncio.run(_store(FakeSheet()).update_fields(3, {"priority": "high"}))


def test_clear_blanks_the_row() -> None:
    sheet = FakeSheet()

    asyncio.run(_store(sheet).clear(6))

    assert sheet.requests[-1][:2] == ("POST", "A6:G6:clear")


def test_http_error_becomes_store_unavailable() -> None:
    with pytest.raises(StoreUnavailable):
        asyncio.run(_store(FakeSheet(status=500)).list_active())


def test_missing_sheet_id_is_unavailable() -> None:
    store = SheetsTaskStore("", client=SheetsClient(token_provider=lambda: "t"))
    with pytest.raises(StoreUnavailable):
        asyncio.run(store.list_active())
