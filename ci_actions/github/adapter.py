"""GitHub client adapter for the githubkit library."""

from functools import wraps
from pathlib import Path
from typing import Any, Awaitable, Callable, Literal, Self, TypeVar

import structlog
from githubkit import Response
from githubkit.exception import RequestFailed
from githubkit.versions.latest.models import Issue

from ci_actions.configuration.models import GitHubAuthenticationType
from ci_actions.utils.github import split_repository_in_configuration
from ci_actions.utils.retry import retry_on_rate_limit

from .abc import GitHubClientBase
from .client import GitHubClient, get_github_client
from .exceptions import GitHubAPIError

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def handle_github_errors(func: F) -> F:
    """Decorator that turns a failed GitHub request into a GitHubAPIError with GitHub's own message."""

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except RequestFailed as exc:
            try:
                error_data = exc.response.json()
            except ValueError:
                error_data = {}
            if not isinstance(error_data, dict):
                error_data = {}
            message = error_data.get("message") or "Request failed"
            logger.error(
                "GitHub API request failed",
                function=func.__name__,
                status_code=exc.response.status_code,
                message=message,
                errors=error_data.get("errors", []),
            )
            raise GitHubAPIError(func.__name__, exc.response.status_code, message) from exc

    return wrapper  # type: ignore


class GitHubKitAdapter(GitHubClientBase):
    """GitHub client adapter for the githubkit library."""

    def __init__(self, client: GitHubClient, owner: str, repo_name: str) -> None:
        """Initialize the GitHub client adapter with an already-initialized client."""
        self.client = client
        self.owner = owner
        self.repo_name = repo_name

    @classmethod
    async def create(
        cls,
        repo: str,
        github_auth_type: GitHubAuthenticationType,
        github_pat_token: str | None = None,
        github_app_id: int | None = None,
        github_app_private_key_path: Path | None = None,
        github_app_installation_id: int | None = None,
        github_api_url: str = "https://api.github.com",
    ) -> Self:
        """Create a new GitHub client adapter.

        Args:
            repo: Repository in 'owner/repo' format
            github_auth_type: Type of authentication (PAT or APP)
            github_pat_token: Personal access token (required for PAT auth)
            github_app_id: GitHub App ID (required for APP auth)
            github_app_private_key_path: Path to private key file (required for APP auth)
            github_app_installation_id: Installation ID (required for APP auth)
            github_api_url: GitHub API URL (defaults to https://api.github.com)

        Returns:
            Configured GitHubKitAdapter instance

        Raises:
            ValueError: If the repository is malformed
        """
        owner, repo_name = await split_repository_in_configuration(repo=repo)
        logger.info(
            "Creating client for GitHub instance and repository",
            github_api_url=github_api_url,
            owner=owner,
            repo_name=repo_name,
        )
        client = await get_github_client(
            github_auth_type=github_auth_type,
            github_pat_token=github_pat_token,
            github_app_id=github_app_id,
            github_app_private_key_path=github_app_private_key_path,
            github_app_installation_id=github_app_installation_id,
            github_api_url=github_api_url,
        )
        return cls(client, owner, repo_name)

    @handle_github_errors
    @retry_on_rate_limit()
    async def list_issues(
        self,
        state: Literal["open", "closed", "all"] = "open",
        labels: str | None = None,
        per_page: int = 100,
        **kwargs: Any,
    ) -> list[Issue]:
        """List all issues for a repository, handling pagination."""
        if labels is not None:
            kwargs["labels"] = labels
        all_issues: list[Issue] = []
        page: int = 1
        while True:
            response: Response[list[Issue]] = await self.client.rest.issues.async_list_for_repo(
                owner=self.owner,
                repo=self.repo_name,
                state=state,
                per_page=per_page,
                page=page,
                **kwargs,
            )
            issues: list[Issue] = response.parsed_data
            if not issues:
                break
            all_issues.extend(issues)
            if len(issues) < per_page:
                break
            page += 1
        return all_issues

    @handle_github_errors
    @retry_on_rate_limit()
    async def remove_label_from_issue(self, issue_number: int, name: str) -> None:
        """Remove a single label from an issue."""
        await self.client.rest.issues.async_remove_label(
            owner=self.owner,
            repo=self.repo_name,
            issue_number=issue_number,
            name=name,
        )

    @handle_github_errors
    @retry_on_rate_limit()
    async def add_labels_to_issue(self, issue_number: int, labels: list[str]) -> None:
        """Add labels to an issue, keeping the labels it already has."""
        await self.client.rest.issues.async_add_labels(
            owner=self.owner,
            repo=self.repo_name,
            issue_number=issue_number,
            labels=labels,
        )
