"""Shared MCP server plumbing for the Drive and Sheets tool servers.

A ToolServer owns a fixed registry of tools built at construction. Each call
runs the same pipeline:

    request _meta -> access context -> parameter resolution
        -> one remote call -> normalized CallToolResult

Business failures never leave the pipeline as protocol errors; only an
unknown tool name does.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from mcp.server import Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.types import (
    CallToolRequest,
    CallToolResult,
    Resource,
    ServerResult,
    Tool,
)

from gsheets_mcp.errors import ToolError, UnknownToolError
from gsheets_mcp.server.arguments import ParamSpec, resolve_params
from gsheets_mcp.server.clients import (
    ClientProvider,
    GoogleApiClient,
    PerRequestClientProvider,
    SharedClientProvider,
)
from gsheets_mcp.server.context import meta_to_dict, resolve_access
from gsheets_mcp.server.results import error_result, success_result

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Any, dict[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class ToolSpec:
    """Registry entry: advertised definition, parameter table and handler."""

    tool: Tool
    params: tuple[ParamSpec, ...]
    handler: ToolHandler


class ToolServer(ABC):
    """Base class for an MCP server backed by one Google API.

    Subclasses set the class attributes and implement ``_build_tools``.

    Attributes:
        server: Low-level MCP Server instance.
        provider: Hands out API clients per call.
        registry: Read-only mapping of tool name to ToolSpec.
    """

    server_name = ""
    client_class: type[GoogleApiClient] = GoogleApiClient
    resource_name = ""
    resource_uri = ""
    resource_description = ""
    capabilities: dict[str, dict[str, Any]] = {}

    def __init__(
        self,
        access_token: str | None = None,
        client_factory: Callable[[str], Any] | None = None,
    ) -> None:
        """Initialize the server.

        Args:
            access_token: Session-wide token. When given, one client is shared
                by every call and calls are serialized. When omitted, each
                request must carry ``_meta.access_token`` and gets its own
                client.
            client_factory: Builds an API client from a token. Defaults to
                ``client_class``.
        """
        self.server = Server(self.server_name)
        self._session_token = access_token or None
        factory = client_factory or self.client_class

        self.provider: ClientProvider[Any]
        if self._session_token is not None:
            self.provider = SharedClientProvider(factory(self._session_token))
        else:
            self.provider = PerRequestClientProvider(factory)

        self.registry: Mapping[str, ToolSpec] = MappingProxyType(
            {spec.tool.name: spec for spec in self._build_tools()}
        )
        self._setup_handlers()

    @property
    def shares_client(self) -> bool:
        return self._session_token is not None

    @abstractmethod
    def _build_tools(self) -> list[ToolSpec]:
        """Return the tool definitions this server registers."""

    def resource(self) -> Resource:
        """Static descriptor of the backing API surface."""
        return Resource(
            uri=self.resource_uri,
            name=self.resource_name,
            description=self.resource_description,
            mimeType="application/json",
        )

    def _setup_handlers(self) -> None:
        """Register MCP protocol handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            """Return list of available tools."""
            return [spec.tool for spec in self.registry.values()]

        @self.server.list_resources()
        async def list_resources() -> list[Resource]:
            """Return the API descriptor for this server."""
            return [self.resource()]

        # Registered directly so that UnknownToolError reaches the protocol
        # layer as a JSON-RPC error instead of being folded into a result.
        self.server.request_handlers[CallToolRequest] = self._handle_call_tool

    async def _handle_call_tool(self, req: CallToolRequest) -> ServerResult:
        result = await self.call_tool(
            req.params.name,
            req.params.arguments,
            meta_to_dict(req.params.meta),
        )
        return ServerResult(result)

    async def call_tool(
        self,
        name: str,
        arguments: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> CallToolResult:
        """Dispatch one tool invocation.

        Args:
            name: Registered tool name.
            arguments: Per-call arguments.
            meta: Session-scoped request metadata.

        Returns:
            Normalized result; ``isError`` is set on any failure.

        Raises:
            UnknownToolError: If ``name`` is not registered.
        """
        spec = self.registry.get(name)
        if spec is None:
            raise UnknownToolError(name)

        logger.info("Calling tool %s", name)
        try:
            access = resolve_access(meta, self._session_token)
            params = resolve_params(spec.params, arguments or {}, access.context)
            async with self.provider.acquire(access.access_token) as client:
                payload = await spec.handler(client, params)
            return success_result(payload)
        except ToolError as e:
            logger.warning("Tool %s failed: %s", name, e)
            return error_result(e)
        except Exception as e:
            logger.exception(f"Error calling tool {name}")
            return error_result(e)

    def initialization_options(self) -> InitializationOptions:
        """Handshake options advertising tools, resources and the API capability."""
        return self.server.create_initialization_options(
            experimental_capabilities=self.capabilities,
        )

    async def run(self) -> None:
        """Run the MCP server using stdio transport."""
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.initialization_options(),
            )

    async def close(self) -> None:
        """Release the shared client, if any."""
        await self.provider.close()

    async def serve(self) -> None:
        """Run until the transport closes, then release resources."""
        try:
            await self.run()
        finally:
            await self.close()

