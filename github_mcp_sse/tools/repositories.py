# =============================================================================
# GitHub MCP SSE Gateway - Repository Tools
# =============================================================================
"""
Repository, branch, commit, search and user tools.
"""

from typing import Literal, Optional

from mcp import types
from pydantic import Field

from ..models import CommitSummary, RepositorySummary
from .base import RepositoryArguments, Tool, ToolArguments, text_result


# -----------------------------------------------------------------------------
# Argument Models
# -----------------------------------------------------------------------------
class ListRepositoriesArguments(ToolArguments):
    type: Literal["all", "owner", "public", "private", "member"] = Field(
        default="all", description="Type of repositories to list"
    )
    sort: Literal["created", "updated", "pushed", "full_name"] = Field(
        default="updated", description="Sort field"
    )
    per_page: int = Field(default=30, ge=1, description="Results per page (max 100)")


class CreateRepositoryArguments(ToolArguments):
    name: str = Field(..., description="Repository name")
    description: Optional[str] = Field(default=None, description="Repository description")
    private: Optional[bool] = Field(default=None, description="Whether the repo is private")
    auto_init: Optional[bool] = Field(default=None, description="Initialize with README")


class ListCommitsArguments(RepositoryArguments):
    sha: Optional[str] = Field(default=None, description="Branch or commit SHA")
    per_page: int = Field(default=30, ge=1, description="Results per page")


class SearchRepositoriesArguments(ToolArguments):
    query: str = Field(..., description="Search query")
    sort: Optional[Literal["stars", "forks", "updated"]] = Field(
        default=None, description="Sort field"
    )
    per_page: int = Field(default=30, ge=1, description="Results per page")


# -----------------------------------------------------------------------------
# Tools
# -----------------------------------------------------------------------------
class ListRepositories(Tool):
    name = "list_repositories"
    description = "List repositories for the authenticated user"
    arguments = ListRepositoriesArguments

    async def invoke(self, args: ListRepositoriesArguments) -> types.CallToolResult:
        repos = await self.client.list_repositories(
            type=args.type, sort=args.sort, per_page=args.per_page
        )
        return text_result(
            [RepositorySummary.model_validate(r).model_dump() for r in repos]
        )


class GetRepository(Tool):
    name = "get_repository"
    description = "Get details of a specific repository"
    arguments = RepositoryArguments

    async def invoke(self, args: RepositoryArguments) -> types.CallToolResult:
        return text_result(await self.client.get_repository(args.owner, args.repo))


class CreateRepository(Tool):
    name = "create_repository"
    description = "Create a new repository"
    arguments = CreateRepositoryArguments

    async def invoke(self, args: CreateRepositoryArguments) -> types.CallToolResult:
        repo = await self.client.create_repository(
            name=args.name,
            description=args.description,
            private=args.private,
            auto_init=args.auto_init,
        )
        return text_result(repo)


class ListBranches(Tool):
    name = "list_branches"
    description = "List branches in a repository"
    arguments = RepositoryArguments

    async def invoke(self, args: RepositoryArguments) -> types.CallToolResult:
        return text_result(await self.client.list_branches(args.owner, args.repo))


class ListCommits(Tool):
    name = "list_commits"
    description = "List commits in a repository"
    arguments = ListCommitsArguments

    async def invoke(self, args: ListCommitsArguments) -> types.CallToolResult:
        commits = await self.client.list_commits(
            args.owner, args.repo, sha=args.sha, per_page=args.per_page
        )
        return text_result([CommitSummary.from_api(c).model_dump() for c in commits])


class GetAuthenticatedUser(Tool):
    name = "get_authenticated_user"
    description = "Get information about the authenticated user"
    arguments = ToolArguments

    async def invoke(self, args: ToolArguments) -> types.CallToolResult:
        return text_result(await self.client.get_authenticated_user())


class SearchRepositories(Tool):
    name = "search_repositories"
    description = "Search for repositories"
    arguments = SearchRepositoriesArguments

    async def invoke(self, args: SearchRepositoriesArguments) -> types.CallToolResult:
        found = await self.client.search_repositories(
            args.query, sort=args.sort, per_page=args.per_page
        )
        return text_result(found.get("items", []))
