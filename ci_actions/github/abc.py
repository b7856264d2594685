"""Base ABC for GitHub clients."""

from abc import ABC, abstractmethod
from typing import Any, Literal


class GitHubClientBase(ABC):
    """Base ABC for GitHub clients.

    Covers the issue queries and label mutations used by the CI commands.
    Implementations raise on failure; callers decide whether a failure is fatal.
    """

    @abstractmethod
    async def list_issues(
        self,
        state: Literal["open", "closed", "all"] = "open",
        labels: str | None = None,
        **kwargs: Any,
    ) -> list[Any]:
        """List issues for a repository, optionally only those carrying every label in a comma-separated list."""
        pass

    @abstractmethod
    async def remove_label_from_issue(self, issue_number: int, name: str) -> None:
        """Remove a single label from an issue."""
        pass

    @abstractmethod
    async def add_labels_to_issue(self, issue_number: int, labels: list[str]) -> None:
        """Add labels to an issue, keeping the labels it already has."""
        pass
