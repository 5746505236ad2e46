"""Shared pytest fixtures for gsheets-mcp tests.

This module provides in-memory stand-ins for the Drive and Sheets REST
clients, servers wired to them, and request metadata fixtures.
"""

import asyncio
import re
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from gsheets_mcp.errors import RemoteApiFailure
from gsheets_mcp.server.drive_server import DriveServer
from gsheets_mcp.server.sheets_server import SheetsServer

ACCESS_TOKEN = "test_access_token_abc123"
SPREADSHEET_ID = "spreadsheet_123"

# =============================================================================
# In-memory Sheets backend
# =============================================================================

_CELL_RE = re.compile(r"^([A-Z]+)(\d*)$")


def _parse_cell(ref: str) -> tuple[int, int | None]:
    letters, digits = _CELL_RE.match(ref).groups()
    column = 0
    for ch in letters:
        column = column * 26 + (ord(ch) - ord("A") + 1)
    return column, int(digits) if digits else None


def _parse_range(a1: str) -> tuple[str, int, int, int | None, int]:
    """Split 'Sheet!A1:B2' into (sheet, start_row, start_col, end_row, end_col)."""
    sheet, _, cells = a1.partition("!")
    start, _, end = cells.partition(":")
    start_col, start_row = _parse_cell(start)
    if end:
        end_col, end_row = _parse_cell(end)
    else:
        end_col, end_row = start_col, start_row
    return sheet, start_row or 1, start_col, end_row, end_col


class FakeSheetsBackend:
    """Spreadsheet store shared by every FakeSheetsClient it creates.

    Values written are read back, so write-then-read round trips hold.
    """

    def __init__(self) -> None:
        self.cells: dict[tuple[str, str, int, int], Any] = {}
        self.grids: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.clients: list["FakeSheetsClient"] = []
        self.delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0
        self.fail_with: Exception | None = None

    def client(self, access_token: str) -> "FakeSheetsClient":
        client = FakeSheetsClient(self, access_token)
        self.clients.append(client)
        return client

    def add_sheet(self, spreadsheet_id: str, title: str, rows: int, columns: int) -> None:
        sheets = self.grids.setdefault(spreadsheet_id, [])
        sheets.append(
            {
                "properties": {
                    "sheetId": len(sheets),
                    "title": title,
                    "index": len(sheets),
                    "gridProperties": {"rowCount": rows, "columnCount": columns},
                }
            }
        )

    async def enter(self, name: str, **kwargs: Any) -> None:
        self.calls.append((name, kwargs))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail_with is not None:
                raise self.fail_with
        finally:
            self.in_flight -= 1

    def _in_range(self, spreadsheet_id: str, a1: str):
        sheet, start_row, start_col, end_row, end_col = _parse_range(a1)
        for key in list(self.cells):
            sid, title, row, col = key
            if sid != spreadsheet_id or title != sheet:
                continue
            if row < start_row or (end_row is not None and row > end_row):
                continue
            if col < start_col or col > end_col:
                continue
            yield key


class FakeSheetsClient:
    """Drop-in for SheetsClient backed by FakeSheetsBackend."""

    def __init__(self, backend: FakeSheetsBackend, access_token: str) -> None:
        self.backend = backend
        self.access_token = access_token
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True

    async def read_values(
        self, spreadsheet_id: str, cell_range: str, major_dimension: str
    ) -> dict[str, Any]:
        await self.backend.enter(
            "read_values",
            spreadsheet_id=spreadsheet_id,
            cell_range=cell_range,
            major_dimension=major_dimension,
        )
        _, start_row, start_col, _, _ = _parse_range(cell_range)
        keys = list(self.backend._in_range(spreadsheet_id, cell_range))
        result: dict[str, Any] = {"range": cell_range, "majorDimension": major_dimension}
        if not keys:
            return result

        last_row = max(k[2] for k in keys)
        last_col = max(k[3] for k in keys)
        values = []
        for row in range(start_row, last_row + 1):
            cells = [
                self.backend.cells.get((spreadsheet_id, keys[0][1], row, col), "")
                for col in range(start_col, last_col + 1)
            ]
            while cells and cells[-1] == "":
                cells.pop()
            values.append(cells)
        result["values"] = values
        return result

    async def write_values(
        self,
        spreadsheet_id: str,
        cell_range: str,
        values: list[list[Any]],
        major_dimension: str,
        value_input_mode: str = "RAW",
    ) -> dict[str, Any]:
        await self.backend.enter(
            "write_values",
            spreadsheet_id=spreadsheet_id,
            cell_range=cell_range,
            values=values,
            major_dimension=major_dimension,
            value_input_mode=value_input_mode,
        )
        sheet, start_row, start_col, _, _ = _parse_range(cell_range)
        updated = 0
        for r, row in enumerate(values):
            for c, value in enumerate(row):
                self.backend.cells[(spreadsheet_id, sheet, start_row + r, start_col + c)] = value
                updated += 1
        return {
            "spreadsheetId": spreadsheet_id,
            "updatedRange": cell_range,
            "updatedRows": len(values),
            "updatedCells": updated,
        }

    async def create_spreadsheet(self, title: str, sheet_titles: list[str]) -> dict[str, Any]:
        await self.backend.enter("create_spreadsheet", title=title, sheet_titles=sheet_titles)
        new_id = f"new_{len(self.backend.grids)}"
        for name in sheet_titles or ["Sheet1"]:
            self.backend.add_sheet(new_id, name, 1000, 26)
        return {
            "spreadsheetId": new_id,
            "properties": {"title": title},
            "sheets": self.backend.grids[new_id],
        }

    async def clear_values(self, spreadsheet_id: str, cell_range: str) -> dict[str, Any]:
        await self.backend.enter(
            "clear_values", spreadsheet_id=spreadsheet_id, cell_range=cell_range
        )
        for key in list(self.backend._in_range(spreadsheet_id, cell_range)):
            del self.backend.cells[key]
        return {"spreadsheetId": spreadsheet_id, "clearedRange": cell_range}

    async def get_spreadsheet(self, spreadsheet_id: str) -> dict[str, Any]:
        await self.backend.enter("get_spreadsheet", spreadsheet_id=spreadsheet_id)
        if spreadsheet_id not in self.backend.grids:
            raise RemoteApiFailure(
                "Google API error (404): Requested entity was not found.", status_code=404
            )
        return {
            "spreadsheetId": spreadsheet_id,
            "properties": {"title": "Test Spreadsheet"},
            "sheets": self.backend.grids[spreadsheet_id],
        }


class FakeDriveClient:
    """Drop-in for DriveClient that records calls."""

    def __init__(self, calls: list[dict[str, Any]], access_token: str) -> None:
        self.calls = calls
        self.access_token = access_token
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True

    async def list_files(self, query: str, page_size: int, order_by: str) -> dict[str, Any]:
        self.calls.append(
            {
                "query": query,
                "page_size": page_size,
                "order_by": order_by,
                "access_token": self.access_token,
            }
        )
        return {
            "kind": "drive#fileList",
            "files": [
                {
                    "id": "file_001",
                    "name": "Budget",
                    "mimeType": "application/vnd.google-apps.spreadsheet",
                }
            ],
        }


# =============================================================================
# Request metadata
# =============================================================================


@pytest.fixture
def meta() -> dict[str, Any]:
    """Request _meta carrying a token and a target spreadsheet."""
    return {"access_token": ACCESS_TOKEN, "spreadsheet_id": SPREADSHEET_ID}


# =============================================================================
# Servers
# =============================================================================


@pytest.fixture
def sheets_backend() -> FakeSheetsBackend:
    return FakeSheetsBackend()


@pytest.fixture
def sheets_server(sheets_backend: FakeSheetsBackend) -> SheetsServer:
    """Sheets server in per-request token mode backed by the fake store."""
    return SheetsServer(client_factory=sheets_backend.client)


@pytest.fixture
def session_sheets_server(sheets_backend: FakeSheetsBackend) -> SheetsServer:
    """Sheets server with a session-bound token and one shared client."""
    return SheetsServer(access_token="session_token", client_factory=sheets_backend.client)


@pytest.fixture
def drive_calls() -> list[dict[str, Any]]:
    return []


@pytest.fixture
def drive_factory(drive_calls: list[dict[str, Any]]) -> Callable[[str], FakeDriveClient]:
    """Client factory producing FakeDriveClients that share one call log."""
    return lambda token: FakeDriveClient(drive_calls, token)


@pytest.fixture
def drive_server(drive_factory: Callable[[str], FakeDriveClient]) -> DriveServer:
    """Drive server in per-request token mode recording list_files calls."""
    return DriveServer(client_factory=drive_factory)


# =============================================================================
# httpx helpers
# =============================================================================


@pytest.fixture
def mock_http() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build an httpx.AsyncClient whose requests are answered by a handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory

