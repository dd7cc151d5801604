# =============================================================================
# GitHub MCP SSE Gateway - Protocol Dispatcher
# =============================================================================
"""
JSON-RPC request handling for MCP sessions.

The dispatcher answers `initialize`, `ping`, `tools/list` and `tools/call`.
It is the single error boundary for tool execution: unknown tools, invalid
arguments and anything a handler raises (including GitHub API failures)
come back as error-flagged `CallToolResult`s rather than protocol errors,
so one failed invocation never ends a session.
"""

import logging
from typing import Any, Mapping, Optional

from mcp import types
from mcp.shared.version import SUPPORTED_PROTOCOL_VERSIONS
from pydantic import ValidationError

from .client import GitHubApiError
from .config import SERVICE_NAME, SERVICE_VERSION
from .tools import ToolRegistry, error_result
from .transport import TransportChannel

logger = logging.getLogger(__name__)


class ProtocolError(Exception):
    """
    A request that cannot be answered with a result.

    Attributes:
        code: JSON-RPC error code.
        message: Human-readable description.
    """

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def describe_error(error: Exception) -> str:
    """Render a handler failure as a one-line message for the client."""
    if isinstance(error, GitHubApiError):
        return error.message
    if isinstance(error, ValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}"
            for err in error.errors()
        )
        return f"Invalid arguments: {problems}"
    return str(error) or type(error).__name__


class ProtocolDispatcher:
    """
    Route MCP requests to the tool registry.

    Attributes:
        registry: Tools available to every session.
        server_info: Name and version reported by `initialize`.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        server_name: str = SERVICE_NAME,
        server_version: str = SERVICE_VERSION,
    ) -> None:
        self.registry = registry
        self.server_info = types.Implementation(name=server_name, version=server_version)

    # -------------------------------------------------------------------------
    # Tool Operations
    # -------------------------------------------------------------------------

    def handle_list(self) -> list[types.Tool]:
        """Return every tool descriptor in registration order."""
        return self.registry.descriptors()

    async def handle_invoke(
        self,
        name: str,
        arguments: Optional[Mapping[str, Any]] = None,
    ) -> types.CallToolResult:
        """
        Invoke a tool by exact name.

        Never raises for tool-level problems; they are returned as
        error-flagged results.
        """
        tool = self.registry.get(name)
        if tool is None:
            logger.warning(f"Unknown tool requested: {name}")
            return error_result(f"Unknown tool: {name}")

        try:
            args = tool.bind(arguments)
            return await tool.invoke(args)
        except (GitHubApiError, ValidationError) as e:
            logger.warning(f"Tool {name} failed: {describe_error(e)}")
            return error_result(describe_error(e))
        except Exception as e:
            logger.exception(f"Unexpected error in tool {name}")
            return error_result(describe_error(e))

    # -------------------------------------------------------------------------
    # JSON-RPC
    # -------------------------------------------------------------------------

    def _initialize(self, params: Mapping[str, Any]) -> types.InitializeResult:
        requested = params.get("protocolVersion")
        if requested in SUPPORTED_PROTOCOL_VERSIONS:
            version = requested
        else:
            version = types.LATEST_PROTOCOL_VERSION

        return types.InitializeResult(
            protocolVersion=version,
            capabilities=types.ServerCapabilities(
                tools=types.ToolsCapability(listChanged=False),
            ),
            serverInfo=self.server_info,
        )

    async def _handle_request(
        self, method: str, params: Mapping[str, Any]
    ) -> types.Result:
        if method == "initialize":
            return self._initialize(params)

        if method == "ping":
            return types.EmptyResult()

        if method == "tools/list":
            return types.ListToolsResult(tools=self.handle_list())

        if method == "tools/call":
            try:
                call = types.CallToolRequestParams.model_validate(params)
            except ValidationError as e:
                raise ProtocolError(types.INVALID_PARAMS, describe_error(e))
            return await self.handle_invoke(call.name, call.arguments)

        raise ProtocolError(types.METHOD_NOT_FOUND, f"Method not found: {method}")

    @staticmethod
    def _error(request_id: types.RequestId, code: int, message: str) -> types.JSONRPCMessage:
        return types.JSONRPCMessage(
            types.JSONRPCError(
                jsonrpc="2.0",
                id=request_id,
                error=types.ErrorData(code=code, message=message),
            )
        )

    async def handle_message(
        self, message: types.JSONRPCMessage
    ) -> Optional[types.JSONRPCMessage]:
        """
        Answer one inbound JSON-RPC message.

        Returns:
            The response to send back, or None for notifications and for
            responses the client sends to the server.
        """
        request = message.root
        if isinstance(request, types.JSONRPCNotification):
            logger.debug(f"Notification received: {request.method}")
            return None
        if not isinstance(request, types.JSONRPCRequest):
            return None

        try:
            result = await self._handle_request(request.method, request.params or {})
        except ProtocolError as e:
            return self._error(request.id, e.code, e.message)
        except Exception as e:
            logger.exception(f"Failed to handle {request.method}")
            return self._error(request.id, types.INTERNAL_ERROR, describe_error(e))

        return types.JSONRPCMessage(
            types.JSONRPCResponse(
                jsonrpc="2.0",
                id=request.id,
                result=result.model_dump(by_alias=True, mode="json", exclude_none=True),
            )
        )

    async def dispatch(
        self, message: types.JSONRPCMessage, channel: TransportChannel
    ) -> None:
        """Answer `message` and push the response on `channel`."""
        response = await self.handle_message(message)
        if response is not None and not channel.send(response):
            logger.info(
                f"Session {channel.session_id} closed before its response was sent"
            )
