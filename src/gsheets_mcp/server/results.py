"""Conversion of tool outcomes into uniform CallToolResult envelopes.

Success and failure share one shape: a single text block. Callers tell them
apart only through ``isError``; the error text is free-form.
"""

import json
from typing import Any

from mcp.types import CallToolResult, TextContent

from gsheets_mcp.errors import SerializationFailure


def success_result(payload: Any) -> CallToolResult:
    """Wrap a JSON-serializable payload as a successful tool result.

    Raises:
        SerializationFailure: If the payload cannot be encoded as JSON.
    """
    try:
        text = json.dumps(payload, indent=2)
    except (TypeError, ValueError) as e:
        raise SerializationFailure(f"Could not serialize result: {e}") from e
    return CallToolResult(content=[TextContent(type="text", text=text)])


def error_result(error: BaseException) -> CallToolResult:
    """Wrap an exception's message as a failed tool result."""
    return CallToolResult(
        content=[TextContent(type="text", text=f"Error: {error}")],
        isError=True,
    )
