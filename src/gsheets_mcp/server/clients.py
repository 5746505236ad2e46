"""Google Drive and Sheets REST clients and their per-call lifecycle.

Every client method performs exactly one HTTP round-trip. There is no retry
and no pagination beyond the single page the API returns.

Two providers decide how a tool call obtains its client:

- PerRequestClientProvider builds a fresh client from the call's token and
  closes it afterwards. Nothing is shared, so calls run fully in parallel.
- SharedClientProvider holds one client bound to the session token and hands
  it out under an asyncio.Lock, so at most one remote call is in flight per
  session.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any, Generic, Protocol, TypeVar
from urllib.parse import quote

import httpx

from gsheets_mcp.errors import RemoteApiFailure, SerializationFailure

logger = logging.getLogger(__name__)

DRIVE_API_BASE = "https://www.googleapis.com/drive/v3"
SHEETS_API_BASE = "https://sheets.googleapis.com/v4"

# No internal deadline: the caller's transport owns request timeouts.
DEFAULT_TIMEOUT = httpx.Timeout(None)


class GoogleApiClient:
    """Authenticated JSON client for one Google API.

    Attributes:
        base_url: API root the request paths are appended to.
    """

    base_url = ""

    def __init__(
        self,
        access_token: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the client.

        Args:
            access_token: OAuth bearer token sent with every request.
            http_client: Optional preconfigured httpx client. One is created
                (and owned) by this instance when omitted.
            timeout: Timeout for the owned client.
        """
        self._access_token = access_token
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated request and decode the JSON body.

        Raises:
            RemoteApiFailure: On transport errors and non-2xx responses.
            SerializationFailure: If the body is not a JSON object.
        """
        url = f"{self.base_url}{path}"
        try:
            response = await self._http.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                headers={
                    "Authorization": f"Bearer {self._access_token}",
                    "Accept": "application/json",
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise RemoteApiFailure(
                f"Google API error ({status}): {e.response.text}", status_code=status
            ) from e
        except httpx.HTTPError as e:
            raise RemoteApiFailure(f"Google API request failed: {e}") from e

        if not response.content:
            return {}

        try:
            result = response.json()
        except ValueError as e:
            raise SerializationFailure(f"Invalid JSON from {method} {path}: {e}") from e

        if not isinstance(result, dict):
            raise SerializationFailure(f"Unexpected JSON payload from {method} {path}")
        return result


class DriveClient(GoogleApiClient):
    """Google Drive v3 client."""

    base_url = DRIVE_API_BASE

    async def list_files(self, query: str, page_size: int, order_by: str) -> dict[str, Any]:
        params: dict[str, Any] = {"pageSize": page_size, "orderBy": order_by}
        if query:
            params["q"] = query
        return await self._request("GET", "/files", params=params)


def _segment(value: str) -> str:
    # Sheet names may contain "#", "?" or "/", which must not end the path.
    return quote(value, safe="")


def _values_path(spreadsheet_id: str, cell_range: str) -> str:
    return f"/spreadsheets/{_segment(spreadsheet_id)}/values/{_segment(cell_range)}"


class SheetsClient(GoogleApiClient):
    """Google Sheets v4 client."""

    base_url = SHEETS_API_BASE

    async def read_values(
        self, spreadsheet_id: str, cell_range: str, major_dimension: str
    ) -> dict[str, Any]:
        return await self._request(
            "GET",
            _values_path(spreadsheet_id, cell_range),
            params={"majorDimension": major_dimension},
        )

    async def write_values(
        self,
        spreadsheet_id: str,
        cell_range: str,
        values: list[list[Any]],
        major_dimension: str,
        value_input_mode: str = "RAW",
    ) -> dict[str, Any]:
        return await self._request(
            "PUT",
            _values_path(spreadsheet_id, cell_range),
            params={"valueInputOption": value_input_mode},
            json_data={"range": cell_range, "majorDimension": major_dimension, "values": values},
        )

    async def create_spreadsheet(self, title: str, sheet_titles: list[str]) -> dict[str, Any]:
        body: dict[str, Any] = {"properties": {"title": title}}
        if sheet_titles:
            body["sheets"] = [{"properties": {"title": name}} for name in sheet_titles]
        return await self._request("POST", "/spreadsheets", json_data=body)

    async def clear_values(self, spreadsheet_id: str, cell_range: str) -> dict[str, Any]:
        return await self._request(
            "POST", f"{_values_path(spreadsheet_id, cell_range)}:clear", json_data={}
        )

    async def get_spreadsheet(self, spreadsheet_id: str) -> dict[str, Any]:
        return await self._request(
            "GET",
            f"/spreadsheets/{_segment(spreadsheet_id)}",
            params={"fields": "spreadsheetId,properties.title,sheets.properties"},
        )


class ClosableClient(Protocol):
    async def aclose(self) -> None: ...


ClientT = TypeVar("ClientT", bound=ClosableClient)


class ClientProvider(ABC, Generic[ClientT]):
    """Hands out an API client for the duration of one tool call."""

    @abstractmethod
    def acquire(self, access_token: str) -> Any:
        """Return an async context manager yielding the client."""

    async def close(self) -> None:
        """Release any long-lived resources."""


class PerRequestClientProvider(ClientProvider[ClientT]):
    """Fresh client per invocation, built from that invocation's token."""

    def __init__(self, factory: Callable[[str], ClientT]) -> None:
        self._factory = factory

    @asynccontextmanager
    async def acquire(self, access_token: str) -> AsyncIterator[ClientT]:
        client = self._factory(access_token)
        try:
            yield client
        finally:
            await client.aclose()


class SharedClientProvider(ClientProvider[ClientT]):
    """One client per session, used by one invocation at a time."""

    def __init__(self, client: ClientT) -> None:
        self._client = client
        self._lock = asyncio.Lock()

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def acquire(self, access_token: str) -> AsyncIterator[ClientT]:
        async with self._lock:
            yield self._client

    async def close(self) -> None:
        await self._client.aclose()
