"""Contains exceptions raised by the GitHub client adapter."""


class GitHubAPIError(Exception):
    """Raised when the GitHub API rejects a request."""

    def __init__(self, operation: str, status_code: int, message: str) -> None:
        """Initializes the exception with the failed operation and GitHub's explanation."""
        super().__init__(f"GitHub API returned {status_code} for {operation}: {message}")
        self.operation = operation
        self.status_code = status_code
        self.message = message
