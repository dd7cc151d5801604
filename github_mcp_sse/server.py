# =============================================================================
# GitHub MCP SSE Gateway - HTTP Server
# =============================================================================
"""
FastAPI front door for the MCP SSE transport.

Routes:
- GET  /health                  service status
- GET  /sse                     open an event stream (one session per stream)
- POST /message?sessionId=<id>  deliver one JSON-RPC message to a session

Responses to POSTed messages are not returned in the POST's body; they are
pushed on the session's event stream once the handler completes. The POST
only reports whether the message was accepted.
"""

import json
import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Literal, Optional

from fastapi import APIRouter, FastAPI, Query, Request, status
from fastapi.responses import JSONResponse
from mcp import types
from pydantic import BaseModel, Field, ValidationError
from sse_starlette import EventSourceResponse

from .client import GitHubClient
from .config import (
    SERVICE_NAME,
    SERVICE_VERSION,
    MissingCredentialError,
    Settings,
    load_settings,
)
from .cors import PermissiveCORSMiddleware
from .dispatcher import ProtocolDispatcher
from .session import SessionManager
from .tools import build_registry
from .transport import SEPARATOR

# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

MESSAGE_PATH = "/message"

SSE_HEADERS = {"Cache-Control": "no-cache"}


# -----------------------------------------------------------------------------
# Response Models
# -----------------------------------------------------------------------------
class HealthStatus(BaseModel):
    """
    Health check response model.

    Attributes:
        status: Current health status.
        service: Service name.
        version: Service version.
        timestamp: Time of the health check (UTC).
        sessions: Number of live SSE sessions.
    """

    status: Literal["healthy"] = Field(description="Current health status")
    service: str = Field(description="Service name")
    version: str = Field(description="Service version")
    timestamp: datetime = Field(description="Time of the health check")
    sessions: int = Field(description="Live SSE sessions")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------
router = APIRouter()


@router.get("/health", response_model=HealthStatus)
async def health_check(request: Request) -> HealthStatus:
    """Report that the service is up."""
    return HealthStatus(
        status="healthy",
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        timestamp=datetime.now(timezone.utc),
        sessions=len(request.app.state.sessions),
    )


@router.get("/sse")
async def open_stream(request: Request) -> EventSourceResponse:
    """
    Open an MCP event stream.

    The first event is `endpoint`, carrying the URL (with the new session
    identifier) that the client must POST its messages to. The stream ends,
    closing the session, when the client disconnects or uvicorn begins
    shutting down. Heartbeats come from the channel, so the response's own
    ping is disabled.
    """
    sessions: SessionManager = request.app.state.sessions
    session = sessions.create()
    return EventSourceResponse(
        session.channel.events(),
        headers=SSE_HEADERS,
        ping=0,
        sep=SEPARATOR,
    )


@router.post(MESSAGE_PATH)
async def post_message(
    request: Request,
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
) -> JSONResponse:
    """
    Accept one JSON-RPC message for a session.

    Returns 202 once the message is queued for dispatch, 400 for a missing
    session id or a malformed body, and 404 for an unknown session.
    """
    if not session_id:
        return _error(status.HTTP_400_BAD_REQUEST, "Missing sessionId")

    sessions: SessionManager = request.app.state.sessions
    session = sessions.lookup(session_id)
    if session is None:
        logger.warning(f"Message for unknown session {session_id}")
        return _error(status.HTTP_404_NOT_FOUND, "No active session")

    try:
        payload = json.loads(await request.body())
    except ValueError as e:
        return _error(status.HTTP_400_BAD_REQUEST, f"Invalid JSON: {e}")

    try:
        message = types.JSONRPCMessage.model_validate(payload)
    except ValidationError:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid JSON-RPC message")

    dispatcher: ProtocolDispatcher = request.app.state.dispatcher
    if session.channel.spawn(dispatcher.dispatch(message, session.channel)) is None:
        return _error(status.HTTP_404_NOT_FOUND, "No active session")

    return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content={"status": "accepted"})


# -----------------------------------------------------------------------------
# Application Factory
# -----------------------------------------------------------------------------
def create_app(settings: Settings, client: Optional[GitHubClient] = None) -> FastAPI:
    """
    Build the gateway application.

    All shared state (client, tool registry, dispatcher, sessions) is created
    here and attached to `app.state`.

    Args:
        settings: Validated server settings.
        client: GitHub client to use. Built from `settings` when omitted.

    Returns:
        The FastAPI application.
    """
    if client is None:
        client = GitHubClient(
            token=settings.github_token,
            base_url=settings.github_api_base_url,
            timeout=settings.github_request_timeout,
            max_retries=settings.github_max_retries,
        )

    registry = build_registry(client)
    dispatcher = ProtocolDispatcher(registry)
    sessions = SessionManager(
        endpoint=MESSAGE_PATH,
        keepalive_interval=settings.keepalive_interval,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(f"{SERVICE_NAME} starting with {len(registry)} tools")
        yield
        sessions.close_all()
        await client.close()
        logger.info(f"{SERVICE_NAME} shutdown complete")

    app = FastAPI(
        title=SERVICE_NAME,
        description="MCP over SSE gateway exposing GitHub REST API tools",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.client = client
    app.state.registry = registry
    app.state.dispatcher = dispatcher
    app.state.sessions = sessions

    app.add_middleware(PermissiveCORSMiddleware)
    app.include_router(router)
    return app


# -----------------------------------------------------------------------------
# Main Entry Point
# -----------------------------------------------------------------------------
def main() -> None:
    """Run the server."""
    import uvicorn

    try:
        settings = load_settings()
    except MissingCredentialError as e:
        logger.error(str(e))
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level.upper())

    app = create_app(settings)

    logger.info(f"{SERVICE_NAME} running on port {settings.port}")
    logger.info(f"Health check: http://localhost:{settings.port}/health")
    logger.info(f"SSE endpoint: http://localhost:{settings.port}/sse")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
