# =============================================================================
# GitHub MCP SSE Gateway - Test Fixtures
# =============================================================================
"""
Shared fixtures.

GitHub is replaced by `GitHubStub`, an `httpx.MockTransport` handler that
serves canned responses by (method, path) and records every request.
Unrouted requests get GitHub's 404 body.
"""

import json
from typing import Any, Optional

import httpx
import pytest

from github_mcp_sse.client import GitHubClient
from github_mcp_sse.config import Settings
from github_mcp_sse.dispatcher import ProtocolDispatcher
from github_mcp_sse.server import create_app
from github_mcp_sse.tools import ToolRegistry, build_registry


class GitHubStub:
    """Canned GitHub REST API."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[tuple[int, Any, dict]]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        json: Any = None,
        status_code: int = 200,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """Queue a response; the last one queued for a route repeats."""
        self.routes.setdefault((method, path), []).append(
            (status_code, json, headers or {})
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responses = self.routes.get((request.method, request.url.path))
        if not responses:
            return httpx.Response(404, json={"message": "Not Found"})
        status_code, body, headers = responses.pop(0) if len(responses) > 1 else responses[0]
        if status_code == 204:
            return httpx.Response(204, headers=headers)
        return httpx.Response(status_code, json=body, headers=headers)

    def calls(self, method: Optional[str] = None) -> list[tuple[str, str]]:
        """(method, path) of recorded requests, optionally for one method."""
        return [
            (r.method, r.url.path)
            for r in self.requests
            if method is None or r.method == method
        ]

    def body(self, index: int = -1) -> dict[str, Any]:
        """Decoded JSON body of a recorded request."""
        return json.loads(self.requests[index].content)


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def github() -> GitHubStub:
    return GitHubStub()


@pytest.fixture
def client(github: GitHubStub) -> GitHubClient:
    return GitHubClient(
        token="test-token",
        transport=httpx.MockTransport(github),
        max_retry_wait=0,
    )


@pytest.fixture
def registry(client: GitHubClient) -> ToolRegistry:
    return build_registry(client)


@pytest.fixture
def dispatcher(registry: ToolRegistry) -> ProtocolDispatcher:
    return ProtocolDispatcher(registry)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, github_token="test-token", keepalive_interval=60.0)


@pytest.fixture
def app(settings: Settings, client: GitHubClient):
    return create_app(settings, client=client)
