"""Contains utility functions for GitHub interactions."""


async def split_repository_in_configuration(repo: str | None) -> tuple[str, str]:
    """Splits an 'owner/repo' string into its owner and repository name."""
    if repo is None:
        raise ValueError("A repository is required (--repo option or GITHUB_REPOSITORY environment variable).")
    parts = repo.strip("/").split("/")
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Repository must be in the format 'owner/repo', got '{repo}'.")
    owner, repository = parts
    return owner, repository
