# =============================================================================
# GitHub MCP SSE Gateway - Tools Package
# =============================================================================
"""
GitHub tools exposed over MCP.

`build_registry` instantiates every tool against one shared client, in the
order they are advertised by `tools/list`.
"""

from ..client import GitHubClient
from .base import Tool, ToolArguments, error_result, input_schema, render, text_result
from .files import CreateOrUpdateFile, DeleteFile, GetFileContents
from .issues import CreateIssue, CreatePullRequest, ListIssues, ListPullRequests
from .registry import DuplicateToolError, ToolRegistry
from .repositories import (
    CreateRepository,
    GetAuthenticatedUser,
    GetRepository,
    ListBranches,
    ListCommits,
    ListRepositories,
    SearchRepositories,
)
from .workflows import ListWorkflowRuns, ListWorkflows

TOOL_CLASSES: tuple[type[Tool], ...] = (
    ListRepositories,
    GetRepository,
    CreateRepository,
    ListBranches,
    GetFileContents,
    CreateOrUpdateFile,
    DeleteFile,
    ListIssues,
    CreateIssue,
    ListPullRequests,
    CreatePullRequest,
    ListCommits,
    ListWorkflows,
    ListWorkflowRuns,
    GetAuthenticatedUser,
    SearchRepositories,
)


def build_registry(client: GitHubClient) -> ToolRegistry:
    """Instantiate every tool against `client` and freeze them in a registry."""
    return ToolRegistry(tool_class(client) for tool_class in TOOL_CLASSES)


__all__ = [
    "TOOL_CLASSES",
    "DuplicateToolError",
    "Tool",
    "ToolArguments",
    "ToolRegistry",
    "build_registry",
    "error_result",
    "input_schema",
    "render",
    "text_result",
]
