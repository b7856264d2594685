"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from typer import Argument, Option
from typing_extensions import Annotated

from ci_actions.configuration.env import get_settings
from ci_actions.configuration.reconcile import validate_github_authentication_configuration
from ci_actions.licenses.check import build_license_check_options, check_licenses
from ci_actions.licenses.exceptions import LicenseOptionsError
from ci_actions.licenses.models import DependencyType, DetailsOutputFormat
from ci_actions.manifests.merge import DEFAULT_OUTPUT_PATH, merge_workspace_manifests
from ci_actions.sla.driver import run_sla_labels_workflow
from ci_actions.sla.models import DEFAULT_REQUIRED_LABELS
from ci_actions.utils.actions import describe_failure, set_failed, set_output
from ci_actions.utils.logging import LogFormat, configure_logging

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False, no_args_is_help=True)


@typer_app.callback()
def main_callback(
    debug: Annotated[bool | None, Option(help="Enable debug logging. Defaults to the DEBUG environment variable.")] = None,
    log_format: Annotated[
        str | None, Option(help="Log output format, 'console' or 'json'. Defaults to the LOG_FORMAT environment variable.")
    ] = None,
) -> None:
    """CI automation commands for GitHub Actions workflows."""
    settings = get_settings()
    chosen_format = log_format or settings.LOG_FORMAT
    if chosen_format not in ("console", "json"):
        raise typer.BadParameter(f"Unsupported log format '{chosen_format}'. Use 'console' or 'json'.", param_hint="--log-format")
    resolved_format: LogFormat = "json" if chosen_format == "json" else "console"
    configure_logging(debug=settings.DEBUG if debug is None else debug, log_format=resolved_format)


@typer_app.command(name="sla-labels")
def sla_labels_cli(
    repo: Annotated[str, Option(envvar="GITHUB_REPOSITORY", help="Repository name (owner/repo).")],
    required_label: Annotated[
        list[str] | None,
        Option(help="Label an issue must carry to be tracked. Repeat for several labels. Defaults to A11y and VPAT."),
    ] = None,
    github_api_url: Annotated[str | None, Option(envvar="GITHUB_API_URL", help="GitHub API URL. Defaults to https://api.github.com.")] = None,
    github_pat_token: Annotated[str | None, Option(envvar=["GITHUB_PAT_TOKEN", "GITHUB_TOKEN"], help="GitHub Personal Access Token.")] = None,
    github_app_id: Annotated[int | None, Option(envvar="GITHUB_APP_ID", help="GitHub App ID.")] = None,
    github_app_private_key_path: Annotated[Path | None, Option(envvar="GITHUB_APP_PRIVATE_KEY_PATH", help="Path to GitHub App private key.")] = None,
    github_app_installation_id: Annotated[int | None, Option(envvar="GITHUB_APP_INSTALLATION_ID", help="GitHub App Installation ID.")] = None,
) -> None:
    """Keep the SLA tier label of accessibility issues in line with their age and impact level."""
    required_labels = required_label or list(DEFAULT_REQUIRED_LABELS)
    github_api_url = github_api_url or get_settings().GITHUB_API_URL
    try:
        github_auth_type = asyncio.run(
            validate_github_authentication_configuration(
                github_pat_token=github_pat_token,
                github_app_id=github_app_id,
                github_app_private_key_path=github_app_private_key_path,
                github_app_installation_id=github_app_installation_id,
            )
        )
        result = asyncio.run(
            run_sla_labels_workflow(
                repo=repo,
                github_auth_type=github_auth_type,
                github_pat_token=github_pat_token,
                github_app_id=github_app_id,
                github_app_private_key_path=github_app_private_key_path,
                github_app_installation_id=github_app_installation_id,
                github_api_url=github_api_url,
                required_labels=required_labels,
            )
        )
    except Exception as exc:
        set_failed(describe_failure(exc))

    typer.echo(f"Issues fetched: {result.issues_fetched}")
    typer.echo(f"Issues skipped (no impact level): {len(result.skipped_issue_numbers)}")
    typer.echo(f"Issues updated: {result.issues_updated}")
    typer.echo(f"Labels removed: {result.labels_removed}")
    typer.echo(f"Labels added: {result.labels_added}")


@typer_app.command(name="merge-manifests")
def merge_manifests_cli(
    workspace_path_list: Annotated[str, Argument(envvar="WORKSPACE_PATH_LIST", help="Comma-separated list of workspace directories.")],
    output_path: Annotated[str, Option(envvar="OUTPUT_PATH", help="Directory for the temporary package.json.")] = DEFAULT_OUTPUT_PATH,
) -> None:
    """Merge the production dependencies of npm workspaces into a temporary package.json for license scanning."""
    output_path = output_path.strip() or DEFAULT_OUTPUT_PATH
    try:
        result = merge_workspace_manifests(workspace_path_list, output_path=Path(output_path))
    except Exception as exc:
        set_failed(describe_failure(exc))

    for workspace in result.skipped_workspaces:
        typer.echo(f"Skipped workspace with a missing or empty package.json: {workspace}")
    typer.echo(f"Merged {len(result.merged_dependencies)} production dependencies into {result.package_json_path}")
    set_output("temp-path", output_path)


@typer_app.command(name="check-licenses")
def check_licenses_cli(
    start_path: Annotated[str, Option(envvar="START_PATH", help="Directory holding the package.json to scan.")] = "./",
    dependency_type: Annotated[
        str, Option(envvar="DEPENDENCY_TYPE", help="Dependencies to scan: production, development or all.")
    ] = DependencyType.PRODUCTION.value,
    custom_fields_path: Annotated[
        str | None, Option(envvar="CUSTOM_FIELDS_PATH", help="JSON file naming the fields reported for each package.")
    ] = None,
    clarifications_path: Annotated[
        str | None, Option(envvar="CLARIFICATIONS_PATH", help="JSON file clarifying the license of specific packages.")
    ] = None,
    only_allow: Annotated[
        str | None, Option(envvar="ONLY_ALLOW", help="Semicolon-separated licenses; any other license fails the check.")
    ] = None,
    details_output_path: Annotated[str | None, Option(envvar="DETAILS_OUTPUT_PATH", help="File receiving per-package details.")] = None,
    details_output_format: Annotated[
        str, Option(envvar="DETAILS_OUTPUT_FORMAT", help="Format of the details file: json, csv or markdown.")
    ] = DetailsOutputFormat.JSON.value,
    exclude_packages: Annotated[str | None, Option(envvar="EXCLUDE_PACKAGES", help="Semicolon-separated packages to skip.")] = None,
    exclude_packages_starting_with: Annotated[
        str | None, Option(envvar="EXCLUDE_PACKAGES_STARTING_WITH", help="Semicolon-separated package name prefixes to skip.")
    ] = None,
) -> None:
    """Check the licenses of an npm package tree and print a summary per license."""
    try:
        options = build_license_check_options(
            start_path=start_path,
            dependency_type=dependency_type,
            details_output_format=details_output_format,
            custom_fields_path=custom_fields_path,
            clarifications_path=clarifications_path,
            only_allow=only_allow,
            details_output_path=details_output_path,
            exclude_packages=exclude_packages,
            exclude_packages_starting_with=exclude_packages_starting_with,
        )
    except LicenseOptionsError as exc:
        set_failed(str(exc))

    try:
        result = check_licenses(options)
    except Exception as exc:
        set_failed(f"Error checking licenses: {describe_failure(exc)}")

    typer.echo(f"License checker summary:\n{result.summary}")


if __name__ == "__main__":
    typer_app()
