"""Error types raised while handling tool calls.

Business failures derive from ToolError and are turned into ``isError``
tool results by the result normalizer. UnknownToolError is a protocol-level
fault and travels back to the caller as a JSON-RPC error instead.
"""

from mcp.shared.exceptions import McpError
from mcp.types import METHOD_NOT_FOUND, ErrorData


class ToolError(Exception):
    """Base class for failures reported inside a tool result."""


class MissingCredential(ToolError):
    """No usable access token was supplied."""

    def __init__(self, message: str = "Missing or invalid access_token") -> None:
        super().__init__(message)


class MissingParameter(ToolError):
    """A required parameter is absent from every permitted source."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name} required")


class RemoteApiFailure(ToolError):
    """The Google API returned a non-2xx status or the request never completed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class SerializationFailure(ToolError):
    """A payload could not be encoded to or decoded from JSON."""


class UnknownToolError(McpError):
    """Dispatch received a tool name that is not registered."""

    def __init__(self, name: str) -> None:
        self.tool_name = name
        super().__init__(ErrorData(code=METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))
