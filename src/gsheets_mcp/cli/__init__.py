"""Command-line entry points for gsheets-mcp."""
