"""Reconcile GitHub authentication configuration."""

from pathlib import Path

from ci_actions.configuration.exceptions import GitHubAuthenticationConfigurationUndefinedError
from ci_actions.configuration.models import GitHubAuthenticationType


async def validate_github_authentication_configuration(
    github_pat_token: str | None,
    github_app_id: int | None,
    github_app_private_key_path: Path | None,
    github_app_installation_id: int | None,
) -> GitHubAuthenticationType:
    """Validates the GitHub authentication configuration.

    Exactly one of a personal access token or a complete set of GitHub App
    credentials must be provided.

    Args:
        github_pat_token (str | None): The GitHub PAT token.
        github_app_id (int | None): The GitHub App ID.
        github_app_private_key_path (Path | None): The path to the GitHub App private key.
        github_app_installation_id (int | None): The GitHub App installation ID.

    Raises:
        GitHubAuthenticationConfigurationUndefinedError: If no credentials, both kinds of
            credentials, or an incomplete GitHub App configuration are provided.

    Returns:
        GitHubAuthenticationType: The type of GitHub authentication used.
    """
    app_settings = [
        ("GitHub App ID", "--github-app-id", "GITHUB_APP_ID", github_app_id),
        ("GitHub App private key path", "--github-app-private-key-path", "GITHUB_APP_PRIVATE_KEY_PATH", github_app_private_key_path),
        ("GitHub App installation ID", "--github-app-installation-id", "GITHUB_APP_INSTALLATION_ID", github_app_installation_id),
    ]
    provided_app_settings = [value for *_, value in app_settings if value]

    if github_pat_token and provided_app_settings:
        raise GitHubAuthenticationConfigurationUndefinedError("Both PAT and GitHub App configurations are defined. Please use one or the other.")

    if github_pat_token:
        return GitHubAuthenticationType.PAT

    if not provided_app_settings:
        raise GitHubAuthenticationConfigurationUndefinedError(
            "No GitHub authentication configuration provided. Please provide either a PAT (GITHUB_PAT_TOKEN or GITHUB_TOKEN) "
            "or a GitHub App configuration."
        )

    missing = [f"{name} (command line option {cli_name}, environment variable {env_name})" for name, cli_name, env_name, value in app_settings if not value]
    if missing:
        raise GitHubAuthenticationConfigurationUndefinedError("Incomplete GitHub App configuration - missing settings include " + ", ".join(missing))

    return GitHubAuthenticationType.APP
