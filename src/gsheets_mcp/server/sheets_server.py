"""Google Sheets MCP server.

Tools:
- read_values: Read a range
- write_values: Overwrite a range (RAW input)
- create_spreadsheet: Create a spreadsheet with optional sheet titles
- clear_values: Clear a range
- get_sheet_info: List sheets with their maximum A1 range

The target spreadsheet is session state: ``spreadsheet_id`` is read from the
request ``_meta`` only. ``sheet`` and ``range`` may come from the arguments
or from ``_meta``, with arguments taking precedence.
"""

import asyncio
import logging
from typing import Any

from mcp.types import Tool

from gsheets_mcp.server.arguments import (
    DEFAULT_MAJOR_DIMENSION,
    DEFAULT_RANGE,
    DEFAULT_SHEET,
    MAJOR_DIMENSION,
    SPREADSHEET_ID,
    ParamSpec,
    Source,
    a1_range,
    as_list,
    coerce_values,
)
from gsheets_mcp.server.base import ToolServer, ToolSpec
from gsheets_mcp.server.clients import SHEETS_API_BASE, SheetsClient

logger = logging.getLogger(__name__)

VALUE_INPUT_MODE = "RAW"
MAX_COLUMNS = 26

_ARGS_THEN_CONTEXT = (Source.ARGUMENTS, Source.CONTEXT)

_MAJOR_DIMENSION_SCHEMA = {
    "type": "string",
    "enum": ["ROWS", "COLUMNS"],
    "description": "Whether values are indexed by row or by column (default: ROWS)",
    "default": DEFAULT_MAJOR_DIMENSION,
}


def column_letter(column_count: int) -> str:
    """Return the letter of the last column for a sheet with ``column_count`` columns.

    Only single-letter columns are produced: counts above 26 are capped at
    ``Z`` and counts below 1 at ``A``.
    """
    count = min(max(column_count, 1), MAX_COLUMNS)
    return chr(ord("A") + count - 1)


def max_range(row_count: int, column_count: int) -> str:
    """A1 range covering a whole grid, e.g. ``A1:D100``."""
    return f"A1:{column_letter(column_count)}{max(row_count, 1)}"


def sheet_titles(sheets: list[Any] | None) -> list[str]:
    """Extract sheet titles from ``create_spreadsheet``'s ``sheets`` argument."""
    titles = []
    for config in sheets or []:
        title = config.get("title") if isinstance(config, dict) else None
        titles.append(title if isinstance(title, str) else DEFAULT_SHEET)
    return titles


class SheetsServer(ToolServer):
    """MCP server exposing Google Sheets range operations."""

    server_name = "gsheets-mcp-sheets"
    client_class = SheetsClient
    resource_name = "sheets"
    resource_uri = f"{SHEETS_API_BASE}/"
    resource_description = "Google Sheets API"
    capabilities = {
        "sheets": {
            "version": "v4",
            "description": "Google Sheets API operations",
        }
    }

    def _build_tools(self) -> list[ToolSpec]:
        return [
            ToolSpec(
                tool=Tool(
                    name="read_values",
                    description="Read values from a Google Sheet",
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "sheet": {
                                "type": "string",
                                "description": "Name of the sheet/tab to read (e.g., 'Sheet1')",
                            },
                            "range": {
                                "type": "string",
                                "description": "Cell range in A1 notation without the sheet name (default: 'A1:ZZ')",
                                "default": DEFAULT_RANGE,
                            },
                            "major_dimension": _MAJOR_DIMENSION_SCHEMA,
                        },
                        "required": ["sheet"],
                    },
                ),
                params=(
                    SPREADSHEET_ID,
                    ParamSpec("sheet", sources=_ARGS_THEN_CONTEXT, required=True),
                    ParamSpec("range", sources=_ARGS_THEN_CONTEXT, default=DEFAULT_RANGE),
                    MAJOR_DIMENSION,
                ),
                handler=self._read_values,
            ),
            ToolSpec(
                tool=Tool(
                    name="write_values",
                    description="Write values to a Google Sheet",
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "values": {
                                "type": "array",
                                "items": {"type": "array", "items": {"type": "string"}},
                                "description": "Rows of cell values to write",
                            },
                            "range": {
                                "type": "string",
                                "description": "Cell range in A1 notation without the sheet name (e.g., 'A1:B2')",
                            },
                            "sheet": {
                                "type": "string",
                                "description": "Name of the sheet/tab to write to",
                            },
                            "major_dimension": _MAJOR_DIMENSION_SCHEMA,
                        },
                        "required": ["values", "range", "sheet"],
                    },
                ),
                params=(
                    SPREADSHEET_ID,
                    ParamSpec("values", required=True, coerce=as_list),
                    ParamSpec("range", sources=_ARGS_THEN_CONTEXT, required=True),
                    ParamSpec("sheet", sources=_ARGS_THEN_CONTEXT, required=True),
                    MAJOR_DIMENSION,
                ),
                handler=self._write_values,
            ),
            ToolSpec(
                tool=Tool(
                    name="create_spreadsheet",
                    description="Create a new Google Sheet",
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "title": {
                                "type": "string",
                                "description": "Title of the new spreadsheet",
                            },
                            "sheets": {
                                "type": "array",
                                "description": "Optional sheets to create",
                                "items": {
                                    "type": "object",
                                    "properties": {"title": {"type": "string"}},
                                },
                            },
                        },
                        "required": ["title"],
                    },
                ),
                params=(
                    ParamSpec("title", required=True),
                    ParamSpec("sheets", coerce=as_list),
                ),
                handler=self._create_spreadsheet,
            ),
            ToolSpec(
                tool=Tool(
                    name="clear_values",
                    description="Clear values from a range in a Google Sheet",
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "sheet": {
                                "type": "string",
                                "description": "Name of the sheet/tab to clear (default: 'Sheet1')",
                                "default": DEFAULT_SHEET,
                            },
                            "range": {
                                "type": "string",
                                "description": "Cell range in A1 notation without the sheet name (default: 'A1:ZZ')",
                                "default": DEFAULT_RANGE,
                            },
                        },
                        "required": [],
                    },
                ),
                params=(
                    SPREADSHEET_ID,
                    ParamSpec("sheet", sources=_ARGS_THEN_CONTEXT, default=DEFAULT_SHEET),
                    ParamSpec("range", sources=_ARGS_THEN_CONTEXT, default=DEFAULT_RANGE),
                ),
                handler=self._clear_values,
            ),
            ToolSpec(
                tool=Tool(
                    name="get_sheet_info",
                    description="List the sheets of the current spreadsheet with their maximum ranges",
                    inputSchema={
                        "type": "object",
                        "properties": {},
                        "required": [],
                    },
                ),
                params=(SPREADSHEET_ID,),
                handler=self._get_sheet_info,
            ),
        ]

    async def _read_values(self, sheets: SheetsClient, params: dict[str, Any]) -> dict[str, Any]:
        """Read a range.

        Returns:
            The Sheets ``ValueRange`` for the range.
        """
        cell_range = a1_range(params["sheet"], params["range"])
        return await sheets.read_values(
            params["spreadsheet_id"], cell_range, params["major_dimension"]
        )

    async def _write_values(self, sheets: SheetsClient, params: dict[str, Any]) -> dict[str, Any]:
        """Overwrite a range with the given rows.

        Returns:
            The Sheets ``UpdateValuesResponse``.
        """
        cell_range = a1_range(params["sheet"], params["range"])
        return await sheets.write_values(
            params["spreadsheet_id"],
            cell_range,
            coerce_values(params["values"]),
            params["major_dimension"],
            value_input_mode=VALUE_INPUT_MODE,
        )

    async def _create_spreadsheet(
        self, sheets: SheetsClient, params: dict[str, Any]
    ) -> dict[str, Any]:
        return await sheets.create_spreadsheet(params["title"], sheet_titles(params["sheets"]))

    async def _clear_values(self, sheets: SheetsClient, params: dict[str, Any]) -> dict[str, Any]:
        cell_range = a1_range(params["sheet"], params["range"])
        return await sheets.clear_values(params["spreadsheet_id"], cell_range)

    async def _get_sheet_info(self, sheets: SheetsClient, params: dict[str, Any]) -> dict[str, Any]:
        """Describe every sheet of the spreadsheet.

        Returns:
            Spreadsheet id and title, and per sheet its title, id, grid size
            and ``maxRange`` (e.g. ``A1:D100``). Grids wider than 26 columns
            report ``Z`` as their last column.
        """
        response = await sheets.get_spreadsheet(params["spreadsheet_id"])
        logger.debug(
            "Spreadsheet %s has %d sheets",
            params["spreadsheet_id"],
            len(response.get("sheets", [])),
        )

        info = []
        for sheet in response.get("sheets", []):
            props = sheet.get("properties", {})
            grid = props.get("gridProperties", {})
            row_count = grid.get("rowCount", 0)
            column_count = grid.get("columnCount", 0)
            info.append(
                {
                    "title": props.get("title", ""),
                    "sheetId": props.get("sheetId"),
                    "rowCount": row_count,
                    "columnCount": column_count,
                    "maxRange": max_range(row_count, column_count),
                }
            )

        return {
            "spreadsheetId": response.get("spreadsheetId", params["spreadsheet_id"]),
            "title": response.get("properties", {}).get("title", ""),
            "sheets": info,
        }


def main(access_token: str | None = None) -> None:
    """Entry point for the Sheets MCP server."""
    server = SheetsServer(access_token=access_token)
    asyncio.run(server.serve())
