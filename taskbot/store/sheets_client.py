from __future__ import annotations

from typing import Any, Callable, Optional
from urllib.parse import quote

import httpx

from taskbot.store.auth import get_access_token

GOOGLE_SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"


def _col_to_a1(col_index: int) -> str:
    n = col_index + 1
    out = ""
    while n > 0:
        n, rem = divmod(n - 1, 26)
        out = chr(65 + rem) + out
    return out


def a1_range(sheet_name: str, start_col: int, start_row: int, end_col: int, end_row: int | None) -> str:
    """a1_range("Tasks", 0, 2, 6, None) -> "'Tasks'!A2:G"."""
    end = f"{_col_to_a1(end_col)}{end_row if end_row is not None else ''}"
    target = f"{_col_to_a1(start_col)}{start_row}:{end}"
    if sheet_name:
        return f"'{sheet_name}'!{target}"
    return target


class SheetsClient:
    def __init__(
        self,
        *,
        token_provider: Callable[[], str] = get_access_token,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 15.0,
    ) -> None:
        self._token_provider = token_provider
        self._transport = transport
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        token = self._token_provider()
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self._timeout, transport=self._transport)

    def _url(self, spreadsheet_id: str, a1: str, suffix: str = "") -> str:
        return f"{GOOGLE_SHEETS_API}/{spreadsheet_id}/values/{quote(a1, safe=chr(39) + '!:')}{suffix}"

    def read_range(self, spreadsheet_id: str, a1: str) -> list[list[Any]]:
        with self._client() as client:
            resp = client.get(self._url(spreadsheet_id, a1), headers=self._headers())
            resp.raise_for_status()
            data = resp.json()
        return data.get("values") or []

    def write_range(self, spreadsheet_id: str, a1: str, rows: list[list[Any]]) -> None:
        with self._client() as client:
            resp = client.put(
                self._url(spreadsheet_id, a1),
                headers=self._headers(),
                params={"valueInputOption": "RAW"},
                json={"range": a1, "majorDimension": "ROWS", "values": rows},
            )
            resp.raise_for_status()

    def clear_range(self, spreadsheet_id: str, a1: str) -> None:
        with self._client() as client:
            resp = client.post(
                self._url(spreadsheet_id, a1, ":clear"),
                headers=self._headers(),
                json={},
            )
            resp.raise_for_status()
