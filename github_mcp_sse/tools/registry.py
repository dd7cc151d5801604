# =============================================================================
# GitHub MCP SSE Gateway - Tool Registry
# =============================================================================
"""
Ordered, read-only mapping from tool name to tool.

The registry is filled once at startup and shared by every session without
locking; nothing can be added or removed afterwards.
"""

from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from mcp import types

from .base import Tool


class DuplicateToolError(ValueError):
    """Raised when two tools are registered under the same name."""


class ToolRegistry(Mapping[str, Tool]):
    """
    Immutable registry of tools in registration order.

    Args:
        tools: Tools to register. Names must be unique.

    Raises:
        DuplicateToolError: If a name is registered twice.
    """

    def __init__(self, tools: Iterable[Tool]) -> None:
        entries: dict[str, Tool] = {}
        for tool in tools:
            if tool.name in entries:
                raise DuplicateToolError(f"Duplicate tool name: {tool.name}")
            entries[tool.name] = tool
        self._tools = MappingProxyType(entries)

    def __getitem__(self, name: str) -> Tool:
        return self._tools[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def descriptors(self) -> list[types.Tool]:
        """Return copies of every tool descriptor, in registration order."""
        return [tool.descriptor.model_copy(deep=True) for tool in self._tools.values()]
