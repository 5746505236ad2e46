"""MCP servers for Google Drive and Google Sheets.

Drive Tools (1):
- list_files

Sheets Tools (5):
- read_values, write_values, clear_values
- create_spreadsheet
- get_sheet_info

Transport: Stdio
Authentication: OAuth 2.0 bearer token, per request (``_meta.access_token``)
or bound to the server session
"""

from gsheets_mcp.server.base import ToolServer, ToolSpec
from gsheets_mcp.server.drive_server import DriveServer
from gsheets_mcp.server.sheets_server import SheetsServer


def create_server(kind: str, access_token: str | None = None) -> ToolServer:
    """Create a Drive or Sheets MCP server.

    Args:
        kind: ``"drive"`` or ``"sheets"``.
        access_token: Optional session-wide token; see ToolServer.

    Returns:
        Configured server instance ready to run.

    Example:
        >>> server = create_server("sheets")
        >>> asyncio.run(server.serve())
    """
    servers: dict[str, type[ToolServer]] = {"drive": DriveServer, "sheets": SheetsServer}
    server_class = servers.get(kind)
    if server_class is None:
        raise ValueError(f"Unknown server kind: {kind}")
    return server_class(access_token=access_token)


__all__ = ["create_server", "DriveServer", "SheetsServer", "ToolServer", "ToolSpec"]
