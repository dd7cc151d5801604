# =============================================================================
# GitHub MCP SSE Gateway - Tool Base
# =============================================================================
"""
Base class and helpers shared by every GitHub tool.

A tool is an object bound to the shared `GitHubClient`. It declares its
arguments as a pydantic model, from which the advertised JSON input schema
is generated, and implements `invoke` to return an MCP `CallToolResult`.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Mapping, Optional

from mcp import types
from pydantic import BaseModel, ConfigDict, Field

from ..client import GitHubClient


# -----------------------------------------------------------------------------
# Argument Models
# -----------------------------------------------------------------------------
class ToolArguments(BaseModel):
    """Base for tool argument models. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")


class RepositoryArguments(ToolArguments):
    """Arguments addressing a single repository."""

    owner: str = Field(..., description="Repository owner")
    repo: str = Field(..., description="Repository name")


# -----------------------------------------------------------------------------
# Schema and Result Helpers
# -----------------------------------------------------------------------------
def input_schema(model: type[BaseModel]) -> dict[str, Any]:
    """
    Build a flat JSON object schema from an argument model.

    Optional fields are advertised with their non-null type and pydantic's
    generated titles are dropped.
    """
    schema = model.model_json_schema()
    properties: dict[str, Any] = {}

    for name, prop in schema.get("properties", {}).items():
        prop = dict(prop)
        prop.pop("title", None)
        variants = [v for v in prop.pop("anyOf", []) if v.get("type") != "null"]
        if len(variants) == 1:
            prop = {**variants[0], **prop}
        if prop.get("default", 0) is None:
            prop.pop("default")
        properties[name] = prop

    return {
        "type": "object",
        "properties": properties,
        "required": list(schema.get("required", [])),
    }


def render(data: Any) -> str:
    """Serialize a tool payload as indented JSON, keeping key order."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def text_result(data: Any) -> types.CallToolResult:
    """Wrap a JSON payload in a successful single-block result."""
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=render(data))],
        isError=False,
    )


def error_result(message: str) -> types.CallToolResult:
    """Build an error-flagged single-block result."""
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=f"Error: {message}")],
        isError=True,
    )


# -----------------------------------------------------------------------------
# Tool
# -----------------------------------------------------------------------------
class Tool(ABC):
    """
    A named, schema-described GitHub operation.

    Subclasses set `name`, `description` and `arguments`, and implement
    `invoke`. Upstream errors are left to propagate; the dispatcher turns
    them into error results.

    Attributes:
        client: Shared GitHub API client.
        descriptor: MCP tool descriptor advertised by `tools/list`.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    arguments: ClassVar[type[ToolArguments]]

    def __init__(self, client: GitHubClient) -> None:
        self.client = client
        self.descriptor = types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=input_schema(self.arguments),
        )

    def bind(self, arguments: Optional[Mapping[str, Any]]) -> ToolArguments:
        """
        Validate a raw argument bag against the argument model.

        Raises:
            pydantic.ValidationError: If required arguments are missing or
                have the wrong type.
        """
        return self.arguments.model_validate(dict(arguments or {}))

    @abstractmethod
    async def invoke(self, args: Any) -> types.CallToolResult:
        """Run the tool with bound arguments."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
