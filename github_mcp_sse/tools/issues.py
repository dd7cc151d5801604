# =============================================================================
# GitHub MCP SSE Gateway - Issue and Pull Request Tools
# =============================================================================

from typing import Literal, Optional

from mcp import types
from pydantic import Field

from .base import RepositoryArguments, Tool, text_result


class ListIssuesArguments(RepositoryArguments):
    state: Literal["open", "closed", "all"] = Field(
        default="open", description="Issue state"
    )
    per_page: int = Field(default=30, ge=1, description="Results per page")


class CreateIssueArguments(RepositoryArguments):
    title: str = Field(..., description="Issue title")
    body: Optional[str] = Field(default=None, description="Issue body")
    labels: Optional[list[str]] = Field(default=None, description="Labels")


class ListPullRequestsArguments(RepositoryArguments):
    state: Literal["open", "closed", "all"] = Field(
        default="open", description="PR state"
    )
    per_page: int = Field(default=30, ge=1, description="Results per page")


class CreatePullRequestArguments(RepositoryArguments):
    title: str = Field(..., description="PR title")
    head: str = Field(..., description="Head branch")
    base: str = Field(..., description="Base branch")
    body: Optional[str] = Field(default=None, description="PR description")


class ListIssues(Tool):
    name = "list_issues"
    description = "List issues in a repository"
    arguments = ListIssuesArguments

    async def invoke(self, args: ListIssuesArguments) -> types.CallToolResult:
        issues = await self.client.list_issues(
            args.owner, args.repo, state=args.state, per_page=args.per_page
        )
        return text_result(issues)


class CreateIssue(Tool):
    name = "create_issue"
    description = "Create an issue in a repository"
    arguments = CreateIssueArguments

    async def invoke(self, args: CreateIssueArguments) -> types.CallToolResult:
        issue = await self.client.create_issue(
            args.owner, args.repo, args.title, body=args.body, labels=args.labels
        )
        return text_result(issue)


class ListPullRequests(Tool):
    name = "list_pull_requests"
    description = "List pull requests in a repository"
    arguments = ListPullRequestsArguments

    async def invoke(self, args: ListPullRequestsArguments) -> types.CallToolResult:
        pulls = await self.client.list_pull_requests(
            args.owner, args.repo, state=args.state, per_page=args.per_page
        )
        return text_result(pulls)


class CreatePullRequest(Tool):
    name = "create_pull_request"
    description = "Create a pull request"
    arguments = CreatePullRequestArguments

    async def invoke(self, args: CreatePullRequestArguments) -> types.CallToolResult:
        pull = await self.client.create_pull_request(
            args.owner,
            args.repo,
            title=args.title,
            head=args.head,
            base=args.base,
            body=args.body,
        )
        return text_result(pull)
