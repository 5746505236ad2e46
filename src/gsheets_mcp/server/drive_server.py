"""Google Drive MCP server.

Tools:
- list_files: List files with an optional MIME-type filter and raw Drive query
"""

import asyncio
import logging
from typing import Any

from mcp.types import Tool

from gsheets_mcp.server.arguments import ParamSpec, as_int
from gsheets_mcp.server.base import ToolServer, ToolSpec
from gsheets_mcp.server.clients import DRIVE_API_BASE, DriveClient

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
DEFAULT_ORDER_BY = "modifiedTime desc"


def build_files_query(mime_type: str | None, query: str | None) -> str:
    """Build a Drive ``q`` expression.

    The MIME type is interpolated as-is; quotes inside it are not escaped.
    """
    clauses = []
    if mime_type:
        clauses.append(f"mimeType='{mime_type}'")
    if query:
        clauses.append(query)
    return " and ".join(clauses)


class DriveServer(ToolServer):
    """MCP server exposing Google Drive file listing."""

    server_name = "gsheets-mcp-drive"
    client_class = DriveClient
    resource_name = "drive"
    resource_uri = f"{DRIVE_API_BASE}/"
    resource_description = "Google Drive API"
    capabilities = {
        "drive": {
            "version": "v3",
            "description": "Google Drive API operations",
        }
    }

    def _build_tools(self) -> list[ToolSpec]:
        return [
            ToolSpec(
                tool=Tool(
                    name="list_files",
                    description="List files in Google Drive with filters",
                    inputSchema={
                        "type": "object",
                        "properties": {
                            "mime_type": {
                                "type": "string",
                                "description": "Only return files of this MIME type (e.g., 'application/vnd.google-apps.spreadsheet')",
                            },
                            "query": {
                                "type": "string",
                                "description": "Additional Drive API query (e.g., \"name contains 'report'\")",
                            },
                            "page_size": {
                                "type": "integer",
                                "description": "Maximum number of files to return (default: 10)",
                                "default": DEFAULT_PAGE_SIZE,
                            },
                            "order_by": {
                                "type": "string",
                                "description": "Sort order (default: 'modifiedTime desc')",
                                "default": DEFAULT_ORDER_BY,
                            },
                        },
                        "required": [],
                    },
                ),
                params=(
                    ParamSpec("mime_type"),
                    ParamSpec("query"),
                    ParamSpec("page_size", default=DEFAULT_PAGE_SIZE, coerce=as_int),
                    ParamSpec("order_by", default=DEFAULT_ORDER_BY),
                ),
                handler=self._list_files,
            ),
        ]

    async def _list_files(self, drive: DriveClient, params: dict[str, Any]) -> dict[str, Any]:
        """List Drive files.

        Args:
            drive: Drive client for this call.
            params: Resolved mime_type, query, page_size and order_by.

        Returns:
            The Drive ``files.list`` response.
        """
        query = build_files_query(params["mime_type"], params["query"])
        logger.debug("Listing Drive files q=%r", query)
        return await drive.list_files(
            query=query,
            page_size=params["page_size"],
            order_by=params["order_by"],
        )


def main(access_token: str | None = None) -> None:
    """Entry point for the Drive MCP server."""
    server = DriveServer(access_token=access_token)
    asyncio.run(server.serve())
