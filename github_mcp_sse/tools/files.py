# =============================================================================
# GitHub MCP SSE Gateway - File Tools
# =============================================================================
"""
Repository content tools.

GitHub only accepts an overwrite or delete of an existing file when the
request carries the file's current blob SHA. When the caller does not
supply one, the write tools read the file first to obtain it:

- update: a 404 on that read means the file does not exist yet, and the
  write goes ahead as a create without a SHA. Any other read error fails
  the invocation.
- delete: without a SHA there is nothing to delete, so a 404 (or a path
  that is not a file) fails the invocation and no DELETE is sent.
"""

import logging
from typing import Any, Optional

from mcp import types
from pydantic import Field

from ..client import GitHubClient, GitHubNotFoundError
from ..models import FileContent
from .base import RepositoryArguments, Tool, error_result, text_result

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Argument Models
# -----------------------------------------------------------------------------
class GetFileContentsArguments(RepositoryArguments):
    path: str = Field(..., description="Path to file")
    ref: Optional[str] = Field(default=None, description="Branch or commit SHA")


class CreateOrUpdateFileArguments(RepositoryArguments):
    path: str = Field(..., description="Path to file")
    message: str = Field(..., description="Commit message")
    content: str = Field(..., description="File content (will be base64 encoded)")
    branch: Optional[str] = Field(default=None, description="Branch name")
    sha: Optional[str] = Field(
        default=None, description="SHA of file being replaced (for updates)"
    )


class DeleteFileArguments(RepositoryArguments):
    path: str = Field(..., description="Path to file")
    message: str = Field(..., description="Commit message")
    branch: Optional[str] = Field(default=None, description="Branch name")
    sha: Optional[str] = Field(
        default=None, description="SHA of file being deleted (fetched if omitted)"
    )


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
async def fetch_file_sha(
    client: GitHubClient,
    owner: str,
    repo: str,
    path: str,
    ref: Optional[str] = None,
) -> Optional[str]:
    """
    Read a file and return its blob SHA.

    Returns:
        The SHA, or None when `path` resolves to something other than a file.

    Raises:
        GitHubNotFoundError: If the path does not exist.
    """
    data: Any = await client.get_file_content(owner, repo, path, ref=ref)
    if isinstance(data, dict) and data.get("type", "file") == "file":
        return data.get("sha")
    return None


# -----------------------------------------------------------------------------
# Tools
# -----------------------------------------------------------------------------
class GetFileContents(Tool):
    name = "get_file_contents"
    description = "Get contents of a file from a repository"
    arguments = GetFileContentsArguments

    async def invoke(self, args: GetFileContentsArguments) -> types.CallToolResult:
        data = await self.client.get_file_content(
            args.owner, args.repo, args.path, ref=args.ref
        )
        if isinstance(data, dict) and data.get("content"):
            return text_result(FileContent.from_api(data).model_dump())
        return text_result(data)


class CreateOrUpdateFile(Tool):
    name = "create_or_update_file"
    description = "Create or update a file in a repository"
    arguments = CreateOrUpdateFileArguments

    async def invoke(self, args: CreateOrUpdateFileArguments) -> types.CallToolResult:
        sha = args.sha
        if not sha:
            try:
                sha = await fetch_file_sha(
                    self.client, args.owner, args.repo, args.path, ref=args.branch
                )
            except GitHubNotFoundError:
                logger.info(
                    f"{args.owner}/{args.repo}:{args.path} not found, creating it"
                )
                sha = None

        result = await self.client.create_or_update_file(
            args.owner,
            args.repo,
            args.path,
            message=args.message,
            content=args.content,
            branch=args.branch,
            sha=sha,
        )
        return text_result(result)


class DeleteFile(Tool):
    name = "delete_file"
    description = "Delete a file from a repository"
    arguments = DeleteFileArguments

    async def invoke(self, args: DeleteFileArguments) -> types.CallToolResult:
        sha = args.sha
        if not sha:
            try:
                sha = await fetch_file_sha(
                    self.client, args.owner, args.repo, args.path, ref=args.branch
                )
            except GitHubNotFoundError as e:
                return error_result(f"Cannot delete {args.path}: {e.message}")
            if not sha:
                return error_result(f"Cannot delete {args.path}: not a file")

        result = await self.client.delete_file(
            args.owner,
            args.repo,
            args.path,
            message=args.message,
            sha=sha,
            branch=args.branch,
        )
        return text_result(result)
