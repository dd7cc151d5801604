# =============================================================================
# GitHub MCP SSE Gateway - Package
# =============================================================================
"""
MCP server exposing GitHub REST API tools over Server-Sent Events.

Clients open an event stream on `/sse`, POST JSON-RPC requests to the
endpoint announced on that stream, and receive responses on the stream:
- Repository, branch, commit and search tools
- File read, create/update and delete tools
- Issue and pull request tools
- GitHub Actions workflow tools
"""

__version__ = "1.0.0"
