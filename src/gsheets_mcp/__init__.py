"""Google Drive and Google Sheets MCP servers.

Exposes Drive file listing and Sheets range operations as MCP tools,
authenticated with OAuth2 bearer tokens.
"""

from gsheets_mcp.__version__ import __version__

__all__ = ["__version__"]
