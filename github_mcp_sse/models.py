# =============================================================================
# GitHub MCP SSE Gateway - Response Models
# =============================================================================
"""
Pydantic models for the reshaped GitHub responses returned by tools.

Most tools pass GitHub's JSON through untouched. The few that trim it down
validate the raw payload into one of these models and dump it back out, so
the field order of the rendered result is fixed by the model.
"""

import base64
import binascii
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RepositorySummary(BaseModel):
    """
    Compact repository listing entry.

    Attributes:
        name: Repository name (without owner).
        full_name: Full repository name (owner/repo).
        description: Optional repository description.
        private: Whether the repository is private.
        html_url: URL to the repository page.
        default_branch: Name of the default branch.
        updated_at: Last update timestamp as sent by GitHub.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., description="Repository name")
    full_name: str = Field(..., description="Full name (owner/repo)")
    description: Optional[str] = Field(default=None, description="Description")
    private: bool = Field(default=False, description="Is private")
    html_url: Optional[str] = Field(default=None, description="Repository URL")
    default_branch: Optional[str] = Field(default=None, description="Default branch")
    updated_at: Optional[str] = Field(default=None, description="Last update")


class CommitSummary(BaseModel):
    """
    Compact commit listing entry.

    Attributes:
        sha: Commit SHA.
        message: Commit message.
        author: Git author block (name, email, date).
        date: Author date, lifted out of `author` for convenience.
    """

    sha: str = Field(..., description="Commit SHA")
    message: str = Field(default="", description="Commit message")
    author: Optional[dict[str, Any]] = Field(default=None, description="Git author")
    date: Optional[str] = Field(default=None, description="Author date")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "CommitSummary":
        """Build a summary from a `GET /repos/{o}/{r}/commits` entry."""
        commit = data.get("commit") or {}
        author = commit.get("author")
        return cls(
            sha=data["sha"],
            message=commit.get("message", ""),
            author=author,
            date=author.get("date") if author else None,
        )


class FileContent(BaseModel):
    """
    Decoded file content.

    Attributes:
        name: File name.
        path: Path within the repository.
        sha: Blob SHA, needed to update or delete the file.
        size: Size in bytes.
        content: File content decoded as UTF-8 text.
    """

    name: str = Field(..., description="File name")
    path: str = Field(..., description="File path")
    sha: str = Field(..., description="Blob SHA")
    size: int = Field(default=0, description="Size in bytes")
    content: str = Field(default="", description="Decoded content")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "FileContent":
        """
        Decode a contents API file object.

        Binary files are decoded lossily: bytes that are not valid UTF-8
        become U+FFFD.

        Raises:
            ValueError: If the content is not valid base64.
        """
        try:
            raw = base64.b64decode(data.get("content") or "")
        except binascii.Error as e:
            raise ValueError(f"Could not decode content of {data.get('path')}: {e}")
        return cls(
            name=data["name"],
            path=data["path"],
            sha=data["sha"],
            size=data.get("size", 0),
            content=raw.decode("utf-8", errors="replace"),
        )
