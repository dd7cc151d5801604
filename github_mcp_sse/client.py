# =============================================================================
# GitHub MCP SSE Gateway - API Client
# =============================================================================
"""
Async HTTP client for GitHub REST API.

Every tool handler talks to GitHub through one shared `GitHubClient` built
from the bearer credential at startup. Responses are returned as the raw
decoded JSON so tools can pass them through unchanged or reshape them.
Error responses are mapped onto a small exception hierarchy; the 404 class
is what the file tools key their auto-fetch behaviour on.
"""

import asyncio
import base64
import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

JsonData = dict[str, Any] | list[Any] | None


# =============================================================================
# Custom Exceptions
# =============================================================================


class GitHubApiError(Exception):
    """
    Base exception for GitHub API errors.

    Attributes:
        message: Error description.
        status_code: HTTP status code (0 for transport failures).
        response_data: Raw response data from GitHub.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        response_data: Optional[dict] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}


class GitHubAuthenticationError(GitHubApiError):
    """Raised when authentication fails (401)."""


class GitHubForbiddenError(GitHubApiError):
    """Raised when access is forbidden (403)."""


class GitHubNotFoundError(GitHubApiError):
    """Raised when a resource is not found (404)."""


class GitHubValidationError(GitHubApiError):
    """Raised when request validation fails (422)."""


class GitHubRateLimitError(GitHubApiError):
    """
    Raised when the rate limit is exhausted and retries are used up.

    Attributes:
        reset_at: Unix timestamp when rate limit resets.
        retry_after: Seconds to wait before retrying.
    """

    def __init__(
        self,
        message: str,
        reset_at: int = 0,
        retry_after: int = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.reset_at = reset_at
        self.retry_after = retry_after


def _header_int(response: httpx.Response, name: str, default: int) -> int:
    try:
        return int(response.headers.get(name, default))
    except ValueError:
        return default


# =============================================================================
# GitHub Client
# =============================================================================


class GitHubClient:
    """
    Async client for GitHub REST API.

    Attributes:
        base_url: GitHub API base URL.
        timeout: Request timeout in seconds.
        max_retries: Maximum retry attempts for rate limited requests.
        max_retry_wait: Upper bound in seconds for a single rate limit wait.
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        max_retries: int = 3,
        max_retry_wait: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the GitHub client.

        Args:
            token: GitHub bearer token.
            base_url: GitHub API base URL.
            timeout: Request timeout in seconds.
            max_retries: Maximum retry attempts for rate limits.
            max_retry_wait: Cap on the wait between rate limit retries.
            transport: Optional httpx transport (used to stub GitHub in tests).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.max_retry_wait = max_retry_wait

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "github-mcp-sse/1.0.0",
            },
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # HTTP Request Helpers
    # -------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
        retry_count: int = 0,
    ) -> JsonData:
        """
        Make an HTTP request to the GitHub API.

        Rate limited requests are retried up to `max_retries` times, waiting
        for the advertised `Retry-After` (capped at `max_retry_wait`).

        Args:
            method: HTTP method (GET, POST, PATCH, PUT, DELETE).
            path: API path (e.g., /repos/owner/repo/issues).
            params: Query parameters. None values are dropped.
            json: JSON body for POST/PATCH/PUT/DELETE.
            retry_count: Current retry attempt.

        Returns:
            Parsed JSON response or None for 204 responses.

        Raises:
            GitHubAuthenticationError: For 401 responses.
            GitHubForbiddenError: For 403 responses.
            GitHubNotFoundError: For 404 responses.
            GitHubValidationError: For 422 responses.
            GitHubRateLimitError: When rate limit is exceeded.
            GitHubApiError: For other error responses and transport failures.
        """
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = await self._client.request(
                method=method,
                url=path,
                params=params,
                json=json,
            )
        except httpx.TimeoutException as e:
            raise GitHubApiError(message=f"Request timed out: {e}", status_code=0)
        except httpx.RequestError as e:
            raise GitHubApiError(message=f"Request failed: {e}", status_code=0)

        if response.status_code == 204:
            return None
        if 200 <= response.status_code < 300:
            return response.json()

        error_data: dict[str, Any] = {}
        try:
            error_data = response.json()
        except ValueError:
            pass
        if not isinstance(error_data, dict):
            error_data = {}

        error_message = error_data.get("message") or response.text or response.reason_phrase

        if response.status_code in (403, 429):
            remaining = response.headers.get("X-RateLimit-Remaining", "1")
            if (
                response.status_code == 429
                or remaining == "0"
                or "rate limit" in error_message.lower()
            ):
                reset_at = _header_int(response, "X-RateLimit-Reset", 0)
                retry_after = _header_int(response, "Retry-After", 60)

                if retry_count < self.max_retries:
                    wait_time = min(retry_after, self.max_retry_wait)
                    logger.warning(
                        f"Rate limited on {method} {path}. Waiting {wait_time}s "
                        f"before retry ({retry_count + 1}/{self.max_retries})"
                    )
                    await asyncio.sleep(wait_time)
                    return await self._request(
                        method, path, params, json, retry_count + 1
                    )

                raise GitHubRateLimitError(
                    message=f"Rate limit exceeded: {error_message}",
                    status_code=response.status_code,
                    response_data=error_data,
                    reset_at=reset_at,
                    retry_after=retry_after,
                )

            raise GitHubForbiddenError(
                message=error_message,
                status_code=403,
                response_data=error_data,
            )

        if response.status_code == 401:
            raise GitHubAuthenticationError(
                message=f"Authentication failed: {error_message}",
                status_code=401,
                response_data=error_data,
            )

        if response.status_code == 404:
            raise GitHubNotFoundError(
                message=f"Resource not found: {error_message}",
                status_code=404,
                response_data=error_data,
            )

        if response.status_code == 422:
            raise GitHubValidationError(
                message=f"Validation failed: {error_message}",
                status_code=422,
                response_data=error_data,
            )

        raise GitHubApiError(
            message=f"GitHub API error: {error_message}",
            status_code=response.status_code,
            response_data=error_data,
        )

    async def _get(self, path: str, params: Optional[dict] = None) -> JsonData:
        """Make a GET request."""
        return await self._request("GET", path, params=params)

    async def _post(self, path: str, json: Optional[dict] = None) -> JsonData:
        """Make a POST request."""
        return await self._request("POST", path, json=json)

    async def _put(self, path: str, json: Optional[dict] = None) -> JsonData:
        """Make a PUT request."""
        return await self._request("PUT", path, json=json)

    async def _delete(self, path: str, json: Optional[dict] = None) -> JsonData:
        """Make a DELETE request."""
        return await self._request("DELETE", path, json=json)

    # -------------------------------------------------------------------------
    # User Methods
    # -------------------------------------------------------------------------

    async def get_authenticated_user(self) -> dict[str, Any]:
        """Get the authenticated user's profile."""
        return await self._get("/user")

    # -------------------------------------------------------------------------
    # Repository Methods
    # -------------------------------------------------------------------------

    async def list_repositories(
        self,
        type: str = "all",
        sort: str = "updated",
        per_page: int = 30,
    ) -> list[dict[str, Any]]:
        """
        List repositories for the authenticated user.

        Args:
            type: Repository type filter (all, owner, public, private, member).
            sort: Sort field (created, updated, pushed, full_name).
            per_page: Results per page (max 100).

        Returns:
            List of repository objects.
        """
        params = {"type": type, "sort": sort, "per_page": min(per_page, 100)}
        return await self._get("/user/repos", params=params)

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        """Get repository information."""
        return await self._get(f"/repos/{owner}/{repo}")

    async def create_repository(
        self,
        name: str,
        description: Optional[str] = None,
        private: Optional[bool] = None,
        auto_init: Optional[bool] = None,
    ) -> dict[str, Any]:
        """
        Create a repository owned by the authenticated user.

        Args:
            name: Repository name.
            description: Optional description.
            private: Whether the repository is private.
            auto_init: Whether to create an initial commit with a README.

        Returns:
            The created repository object.
        """
        payload = {
            "name": name,
            "description": description,
            "private": private,
            "auto_init": auto_init,
        }
        return await self._post(
            "/user/repos",
            json={k: v for k, v in payload.items() if v is not None},
        )

    async def list_branches(
        self,
        owner: str,
        repo: str,
        per_page: int = 30,
    ) -> list[dict[str, Any]]:
        """List branches in a repository."""
        params = {"per_page": min(per_page, 100)}
        return await self._get(f"/repos/{owner}/{repo}/branches", params=params)

    async def search_repositories(
        self,
        query: str,
        sort: Optional[str] = None,
        per_page: int = 30,
    ) -> dict[str, Any]:
        """
        Search repositories.

        Args:
            query: GitHub search query.
            sort: Sort field (stars, forks, updated). Best match when omitted.
            per_page: Results per page (max 100).

        Returns:
            Search response including `items`.
        """
        params = {"q": query, "sort": sort, "per_page": min(per_page, 100)}
        return await self._get("/search/repositories", params=params)

    # -------------------------------------------------------------------------
    # Content Methods
    # -------------------------------------------------------------------------

    async def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
        ref: Optional[str] = None,
    ) -> JsonData:
        """
        Get file or directory content from a repository.

        Args:
            owner: Repository owner.
            repo: Repository name.
            path: Path within the repository.
            ref: Git reference (branch, tag, SHA). Defaults to default branch.

        Returns:
            A file object with base64 encoded content, or a list of entries
            when `path` is a directory.
        """
        return await self._get(
            f"/repos/{owner}/{repo}/contents/{path.lstrip('/')}",
            params={"ref": ref},
        )

    async def create_or_update_file(
        self,
        owner: str,
        repo: str,
        path: str,
        message: str,
        content: str,
        branch: Optional[str] = None,
        sha: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Create or overwrite a file.

        Args:
            owner: Repository owner.
            repo: Repository name.
            path: Path within the repository.
            message: Commit message.
            content: Plain text file content; encoded to base64 here.
            branch: Target branch. Defaults to the default branch.
            sha: Blob SHA of the file being replaced. Omit to create.

        Returns:
            Commit and content information for the write.
        """
        payload: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if branch:
            payload["branch"] = branch
        if sha:
            payload["sha"] = sha

        return await self._put(
            f"/repos/{owner}/{repo}/contents/{path.lstrip('/')}", json=payload
        )

    async def delete_file(
        self,
        owner: str,
        repo: str,
        path: str,
        message: str,
        sha: str,
        branch: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Delete a file.

        Args:
            owner: Repository owner.
            repo: Repository name.
            path: Path within the repository.
            message: Commit message.
            sha: Blob SHA of the file being deleted.
            branch: Target branch. Defaults to the default branch.

        Returns:
            Commit information for the deletion.
        """
        payload: dict[str, Any] = {"message": message, "sha": sha}
        if branch:
            payload["branch"] = branch

        return await self._delete(
            f"/repos/{owner}/{repo}/contents/{path.lstrip('/')}", json=payload
        )

    # -------------------------------------------------------------------------
    # Issue Methods
    # -------------------------------------------------------------------------

    async def list_issues(
        self,
        owner: str,
        repo: str,
        state: str = "open",
        per_page: int = 30,
    ) -> list[dict[str, Any]]:
        """List issues in a repository."""
        params = {"state": state, "per_page": min(per_page, 100)}
        return await self._get(f"/repos/{owner}/{repo}/issues", params=params)

    async def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: Optional[str] = None,
        labels: Optional[list[str]] = None,
    ) -> dict[str, Any]:
        """
        Create a new issue.

        Args:
            owner: Repository owner.
            repo: Repository name.
            title: Issue title.
            body: Issue body (Markdown).
            labels: Label names to apply.

        Returns:
            The created issue object.
        """
        payload: dict[str, Any] = {"title": title}
        if body is not None:
            payload["body"] = body
        if labels:
            payload["labels"] = labels

        return await self._post(f"/repos/{owner}/{repo}/issues", json=payload)

    # -------------------------------------------------------------------------
    # Pull Request Methods
    # -------------------------------------------------------------------------

    async def list_pull_requests(
        self,
        owner: str,
        repo: str,
        state: str = "open",
        per_page: int = 30,
    ) -> list[dict[str, Any]]:
        """List pull requests in a repository."""
        params = {"state": state, "per_page": min(per_page, 100)}
        return await self._get(f"/repos/{owner}/{repo}/pulls", params=params)

    async def create_pull_request(
        self,
        owner: str,
        repo: str,
        title: str,
        head: str,
        base: str,
        body: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Create a pull request.

        Args:
            owner: Repository owner.
            repo: Repository name.
            title: Pull request title.
            head: Branch containing the changes.
            base: Branch to merge into.
            body: Pull request description.

        Returns:
            The created pull request object.
        """
        payload: dict[str, Any] = {"title": title, "head": head, "base": base}
        if body is not None:
            payload["body"] = body

        return await self._post(f"/repos/{owner}/{repo}/pulls", json=payload)

    # -------------------------------------------------------------------------
    # Commit Methods
    # -------------------------------------------------------------------------

    async def list_commits(
        self,
        owner: str,
        repo: str,
        sha: Optional[str] = None,
        per_page: int = 30,
    ) -> list[dict[str, Any]]:
        """
        List commits in a repository.

        Args:
            owner: Repository owner.
            repo: Repository name.
            sha: SHA or branch to start from.
            per_page: Results per page (max 100).

        Returns:
            List of commit objects.
        """
        params = {"sha": sha, "per_page": min(per_page, 100)}
        return await self._get(f"/repos/{owner}/{repo}/commits", params=params)

    # -------------------------------------------------------------------------
    # Actions Methods
    # -------------------------------------------------------------------------

    async def list_workflows(self, owner: str, repo: str) -> dict[str, Any]:
        """List GitHub Actions workflows defined in a repository."""
        return await self._get(f"/repos/{owner}/{repo}/actions/workflows")

    async def list_workflow_runs(
        self,
        owner: str,
        repo: str,
        workflow_id: Optional[str] = None,
        per_page: int = 10,
    ) -> dict[str, Any]:
        """
        List workflow runs, for one workflow or the whole repository.

        Args:
            owner: Repository owner.
            repo: Repository name.
            workflow_id: Workflow ID or file name. All runs when omitted.
            per_page: Results per page (max 100).

        Returns:
            Response including `workflow_runs`.
        """
        if workflow_id:
            path = f"/repos/{owner}/{repo}/actions/workflows/{workflow_id}/runs"
        else:
            path = f"/repos/{owner}/{repo}/actions/runs"

        return await self._get(path, params={"per_page": min(per_page, 100)})
