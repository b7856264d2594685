"""Sets up the authenticated githubkit client."""

from pathlib import Path
from typing import TypeAlias

from githubkit import GitHub
from githubkit.auth import AppAuthStrategy, AppInstallationAuthStrategy, TokenAuthStrategy

from ci_actions.configuration.models import GitHubAuthenticationType

GitHubClient: TypeAlias = GitHub[AppInstallationAuthStrategy] | GitHub[TokenAuthStrategy]


async def get_github_app_client(
    github_app_id: int,
    github_app_private_key_path: Path,
    github_app_installation_id: int,
    github_api_url: str,
) -> GitHub[AppInstallationAuthStrategy]:
    """Returns a GitHub client authenticated as an installation of a GitHub App."""
    try:
        private_key = Path(github_app_private_key_path).read_text()
    except OSError as e:
        raise ValueError(f"Failed to read GitHub App private key from {github_app_private_key_path}: {e}") from e
    auth = AppAuthStrategy(app_id=github_app_id, private_key=private_key)
    # Disable HTTP caching to always see the current labels
    app_client = GitHub(auth=auth, base_url=github_api_url, http_cache=False)
    return app_client.with_auth(app_client.auth.as_installation(github_app_installation_id))


async def get_github_pat_client(github_pat_token: str, github_api_url: str) -> GitHub[TokenAuthStrategy]:
    """Returns a GitHub client authenticated with a personal access token."""
    # Disable HTTP caching to always see the current labels
    return GitHub(auth=TokenAuthStrategy(github_pat_token), base_url=github_api_url, http_cache=False)


async def get_github_client(
    github_auth_type: GitHubAuthenticationType,
    github_pat_token: str | None,
    github_app_id: int | None,
    github_app_private_key_path: Path | None,
    github_app_installation_id: int | None,
    github_api_url: str,
) -> GitHubClient:
    """Returns an authenticated GitHub client using either GitHub App or PAT credentials.

    Supports a custom base URL for GitHub Enterprise Server (GHES).
    Raises RuntimeError if the credentials for the chosen authentication type are missing.
    """
    if github_auth_type == GitHubAuthenticationType.APP:
        if not (github_app_id and github_app_private_key_path and github_app_installation_id):
            raise RuntimeError("GitHub App authentication requires app_id, private_key_path, and installation_id.")
        return await get_github_app_client(github_app_id, github_app_private_key_path, github_app_installation_id, github_api_url)
    if not github_pat_token:
        raise RuntimeError("GitHub PAT authentication requires a token.")
    return await get_github_pat_client(github_pat_token, github_api_url)
