# =============================================================================
# GitHub MCP SSE Gateway - Actions Tools
# =============================================================================

from typing import Optional

from mcp import types
from pydantic import Field

from .base import RepositoryArguments, Tool, text_result


class ListWorkflowRunsArguments(RepositoryArguments):
    workflow_id: Optional[str] = Field(
        default=None, description="Workflow ID or filename"
    )
    per_page: int = Field(default=10, ge=1, description="Results per page")


class ListWorkflows(Tool):
    name = "list_workflows"
    description = "List GitHub Actions workflows"
    arguments = RepositoryArguments

    async def invoke(self, args: RepositoryArguments) -> types.CallToolResult:
        data = await self.client.list_workflows(args.owner, args.repo)
        return text_result(data.get("workflows", []))


class ListWorkflowRuns(Tool):
    name = "list_workflow_runs"
    description = "List workflow runs for a repository"
    arguments = ListWorkflowRunsArguments

    async def invoke(self, args: ListWorkflowRunsArguments) -> types.CallToolResult:
        data = await self.client.list_workflow_runs(
            args.owner,
            args.repo,
            workflow_id=args.workflow_id,
            per_page=args.per_page,
        )
        return text_result(data.get("workflow_runs", []))
