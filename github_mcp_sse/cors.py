# =============================================================================
# GitHub MCP SSE Gateway - CORS Middleware
# =============================================================================
"""
Permissive CORS as plain ASGI middleware.

Every response gets `Access-Control-Allow-Origin: *` whether or not the
request carried an Origin header, and any OPTIONS request is answered
with an empty 204 preflight. Written against raw ASGI messages so it does
not buffer the long-lived SSE response.
"""

from typing import Sequence

from starlette.datastructures import MutableHeaders
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send


class PermissiveCORSMiddleware:
    """
    Allow any origin.

    Args:
        app: The wrapped ASGI application.
        allow_methods: Methods advertised in preflight responses.
        allow_headers: Request headers advertised in preflight responses.
    """

    def __init__(
        self,
        app: ASGIApp,
        allow_methods: Sequence[str] = ("GET", "POST", "OPTIONS"),
        allow_headers: Sequence[str] = ("Content-Type",),
    ) -> None:
        self.app = app
        self.preflight_headers = {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": ", ".join(allow_methods),
            "Access-Control-Allow-Headers": ", ".join(allow_headers),
        }

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        if scope["method"] == "OPTIONS":
            response = Response(status_code=204, headers=self.preflight_headers)
            await response(scope, receive, send)
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers["Access-Control-Allow-Origin"] = "*"
            await send(message)

        await self.app(scope, receive, send_with_cors)
