# =============================================================================
# GitHub MCP SSE Gateway - Tool Tests
# =============================================================================
"""
Unit tests for the tool registry and tool handlers.

These tests verify that:
- Every tool is registered once, in order, with a well-formed schema
- The registry cannot be modified or hold duplicates
- Responses are reshaped where the tool trims GitHub's payload
- File writes fetch the blob SHA first when none is given
"""

import base64
import json

import pytest

from github_mcp_sse.client import GitHubApiError, GitHubClient
from github_mcp_sse.tools import (
    TOOL_CLASSES,
    DuplicateToolError,
    ToolRegistry,
    build_registry,
    input_schema,
)
from github_mcp_sse.tools.files import CreateOrUpdateFileArguments
from github_mcp_sse.tools.repositories import SearchRepositoriesArguments

CONTENTS = "/repos/acme/widgets/contents/src/app.py"


def payload(result) -> object:
    assert len(result.content) == 1
    return json.loads(result.content[0].text)


async def call(registry: ToolRegistry, name: str, **arguments):
    tool = registry[name]
    return await tool.invoke(tool.bind(arguments))


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------
class TestRegistry:
    """Tests for tool registration."""

    def test_every_tool_registered_once_in_order(self, registry: ToolRegistry) -> None:
        names = [tool_class.name for tool_class in TOOL_CLASSES]

        assert list(registry) == names
        assert len(set(names)) == len(names)
        assert [d.name for d in registry.descriptors()] == names

    def test_includes_catalog(self, registry: ToolRegistry) -> None:
        for name in (
            "get_repository",
            "create_or_update_file",
            "delete_file",
            "list_workflow_runs",
            "search_repositories",
        ):
            assert name in registry

    def test_schemas_are_object_schemas(self, registry: ToolRegistry) -> None:
        for descriptor in registry.descriptors():
            schema = descriptor.inputSchema
            assert schema["type"] == "object"
            assert isinstance(schema["properties"], dict)
            assert set(schema["required"]) <= set(schema["properties"])
            for prop in schema["properties"].values():
                assert "type" in prop
                assert "title" not in prop
                assert "anyOf" not in prop

    def test_duplicate_names_rejected(self, client: GitHubClient) -> None:
        tool_class = TOOL_CLASSES[0]

        with pytest.raises(DuplicateToolError):
            ToolRegistry([tool_class(client), tool_class(client)])

    def test_registry_is_read_only(self, registry: ToolRegistry) -> None:
        with pytest.raises(TypeError):
            registry["extra"] = registry["get_repository"]  # type: ignore[index]

    def test_descriptors_are_copies(self, registry: ToolRegistry) -> None:
        registry.descriptors()[0].inputSchema["properties"].clear()

        assert registry.descriptors()[0].inputSchema["properties"]


class TestInputSchema:
    """Tests for schema generation from argument models."""

    def test_required_and_optional_fields(self) -> None:
        schema = input_schema(CreateOrUpdateFileArguments)

        assert schema["required"] == ["owner", "repo", "path", "message", "content"]
        assert schema["properties"]["sha"] == {
            "type": "string",
            "description": "SHA of file being replaced (for updates)",
        }

    def test_optional_enum_is_flattened(self) -> None:
        schema = input_schema(SearchRepositoriesArguments)

        sort = schema["properties"]["sort"]
        assert sort["type"] == "string"
        assert sort["enum"] == ["stars", "forks", "updated"]
        assert schema["required"] == ["query"]

    def test_array_field(self, registry: ToolRegistry) -> None:
        labels = registry["create_issue"].descriptor.inputSchema["properties"]["labels"]

        assert labels["type"] == "array"
        assert labels["items"] == {"type": "string"}


# -----------------------------------------------------------------------------
# Reshaping
# -----------------------------------------------------------------------------
class TestReshaping:
    """Tests for tools that trim GitHub responses."""

    @pytest.mark.asyncio
    async def test_list_repositories_summary(self, github, registry) -> None:
        github.add(
            "GET",
            "/user/repos",
            json=[
                {
                    "id": 1,
                    "name": "widgets",
                    "full_name": "acme/widgets",
                    "description": None,
                    "private": True,
                    "html_url": "https://github.com/acme/widgets",
                    "default_branch": "main",
                    "updated_at": "2026-01-01T00:00:00Z",
                    "stargazers_count": 3,
                }
            ],
        )

        result = await call(registry, "list_repositories")

        assert payload(result) == [
            {
                "name": "widgets",
                "full_name": "acme/widgets",
                "description": None,
                "private": True,
                "html_url": "https://github.com/acme/widgets",
                "default_branch": "main",
                "updated_at": "2026-01-01T00:00:00Z",
            }
        ]
        params = github.requests[0].url.params
        assert params["type"] == "all"
        assert params["sort"] == "updated"

    @pytest.mark.asyncio
    async def test_list_commits_summary(self, github, registry) -> None:
        author = {"name": "Ada", "email": "ada@example.com", "date": "2026-02-03T04:05:06Z"}
        github.add(
            "GET",
            "/repos/acme/widgets/commits",
            json=[{"sha": "abc", "commit": {"message": "Fix", "author": author}}],
        )

        result = await call(registry, "list_commits", owner="acme", repo="widgets")

        assert payload(result) == [
            {"sha": "abc", "message": "Fix", "author": author, "date": author["date"]}
        ]

    @pytest.mark.asyncio
    async def test_get_file_contents_decodes(self, github, registry) -> None:
        github.add(
            "GET",
            CONTENTS,
            json={
                "type": "file",
                "name": "app.py",
                "path": "src/app.py",
                "sha": "blob1",
                "size": 12,
                "encoding": "base64",
                "content": base64.b64encode(b"print('hi')\n").decode() + "\n",
            },
        )

        result = await call(
            registry, "get_file_contents", owner="acme", repo="widgets", path="src/app.py"
        )

        assert payload(result) == {
            "name": "app.py",
            "path": "src/app.py",
            "sha": "blob1",
            "size": 12,
            "content": "print('hi')\n",
        }

    @pytest.mark.asyncio
    async def test_get_file_contents_binary_is_decoded_lossily(
        self, github, registry
    ) -> None:
        github.add(
            "GET",
            "/repos/acme/widgets/contents/logo.png",
            json={
                "type": "file",
                "name": "logo.png",
                "path": "logo.png",
                "sha": "blob2",
                "size": 4,
                "content": base64.b64encode(b"\x89PNG").decode(),
            },
        )

        result = await call(
            registry, "get_file_contents", owner="acme", repo="widgets", path="logo.png"
        )

        assert result.isError is False
        assert payload(result)["content"] == "\ufffdPNG"

    @pytest.mark.asyncio
    async def test_search_returns_items(self, github, registry) -> None:
        github.add(
            "GET", "/search/repositories", json={"total_count": 1, "items": [{"id": 7}]}
        )

        result = await call(registry, "search_repositories", query="widgets")

        assert payload(result) == [{"id": 7}]
        assert "sort" not in github.requests[0].url.params


# -----------------------------------------------------------------------------
# Auto-fetch before write
# -----------------------------------------------------------------------------
class TestAutoFetchBeforeUpdate:
    """Tests for create_or_update_file without a SHA."""

    @pytest.mark.asyncio
    async def test_missing_file_is_created_without_sha(self, github, registry) -> None:
        github.add("PUT", CONTENTS, json={"content": {"sha": "new"}}, status_code=201)

        result = await call(
            registry,
            "create_or_update_file",
            owner="acme",
            repo="widgets",
            path="src/app.py",
            message="add app",
            content="print('hi')\n",
        )

        assert result.isError is False
        assert github.calls() == [("GET", CONTENTS), ("PUT", CONTENTS)]
        assert "sha" not in github.body()

    @pytest.mark.asyncio
    async def test_existing_file_is_updated_with_fetched_sha(
        self, github, registry
    ) -> None:
        github.add("GET", CONTENTS, json={"type": "file", "sha": "blob1", "content": ""})
        github.add("PUT", CONTENTS, json={"content": {"sha": "blob2"}})

        result = await call(
            registry,
            "create_or_update_file",
            owner="acme",
            repo="widgets",
            path="src/app.py",
            message="update app",
            content="print('bye')\n",
            branch="dev",
        )

        assert result.isError is False
        assert github.calls() == [("GET", CONTENTS), ("PUT", CONTENTS)]
        assert github.requests[0].url.params["ref"] == "dev"
        assert github.body()["sha"] == "blob1"
        assert github.body()["branch"] == "dev"

    @pytest.mark.asyncio
    async def test_explicit_sha_skips_read(self, github, registry) -> None:
        github.add("PUT", CONTENTS, json={})

        await call(
            registry,
            "create_or_update_file",
            owner="acme",
            repo="widgets",
            path="src/app.py",
            message="m",
            content="c",
            sha="given",
        )

        assert github.calls() == [("PUT", CONTENTS)]
        assert github.body()["sha"] == "given"

    @pytest.mark.asyncio
    async def test_other_read_failure_propagates(self, github, registry) -> None:
        github.add("GET", CONTENTS, json={"message": "Server Error"}, status_code=500)

        with pytest.raises(GitHubApiError):
            await call(
                registry,
                "create_or_update_file",
                owner="acme",
                repo="widgets",
                path="src/app.py",
                message="m",
                content="c",
            )

        assert github.calls("PUT") == []


class TestAutoFetchBeforeDelete:
    """Tests for delete_file without a SHA."""

    @pytest.mark.asyncio
    async def test_missing_file_fails_without_delete(self, github, registry) -> None:
        result = await call(
            registry,
            "delete_file",
            owner="acme",
            repo="widgets",
            path="src/app.py",
            message="rm",
        )

        assert result.isError is True
        assert "src/app.py" in result.content[0].text
        assert github.calls("DELETE") == []

    @pytest.mark.asyncio
    async def test_directory_fails_without_delete(self, github, registry) -> None:
        github.add("GET", CONTENTS, json=[{"type": "file", "sha": "x"}])

        result = await call(
            registry,
            "delete_file",
            owner="acme",
            repo="widgets",
            path="src/app.py",
            message="rm",
        )

        assert result.isError is True
        assert github.calls("DELETE") == []

    @pytest.mark.asyncio
    async def test_existing_file_deleted_with_fetched_sha(self, github, registry) -> None:
        github.add("GET", CONTENTS, json={"type": "file", "sha": "blob1"})
        github.add("DELETE", CONTENTS, json={"commit": {"sha": "c1"}})

        result = await call(
            registry,
            "delete_file",
            owner="acme",
            repo="widgets",
            path="src/app.py",
            message="rm",
        )

        assert result.isError is False
        assert github.calls() == [("GET", CONTENTS), ("DELETE", CONTENTS)]
        assert github.body() == {"message": "rm", "sha": "blob1"}


def test_build_registry_binds_shared_client(client: GitHubClient) -> None:
    registry = build_registry(client)

    assert all(tool.client is client for tool in registry.values())
