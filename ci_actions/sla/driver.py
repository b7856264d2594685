"""Orchestrates SLA tier labeling for a repository's issues."""

from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

import structlog

from ci_actions.configuration.models import GitHubAuthenticationType
from ci_actions.github.abc import GitHubClientBase
from ci_actions.github.adapter import GitHubKitAdapter
from ci_actions.sla.exceptions import LabelAdditionError, LabelRemovalError
from ci_actions.sla.labels import (
    calculate_weeks_old,
    determine_sla_tier,
    normalize_label_name,
    reconcile_sla_labels,
    resolve_impact_level,
)
from ci_actions.sla.models import DEFAULT_REQUIRED_LABELS, ImpactLevel, TrackedIssue
from ci_actions.sla.results import IssueSLADecision, SLALabelsResult
from ci_actions.utils.actions import describe_failure

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def fetch_tracked_issues(github_adapter: GitHubClientBase, required_labels: Sequence[str]) -> list[TrackedIssue]:
    """Fetch open issues carrying every required label, with normalized label names."""
    github_issues = await github_adapter.list_issues(state="open", labels=",".join(required_labels))
    return [
        TrackedIssue(
            number=github_issue.number,
            created_at=github_issue.created_at,
            labels=[normalize_label_name(label) for label in github_issue.labels or []],
        )
        for github_issue in github_issues
    ]


async def apply_sla_labels(
    github_adapter: GitHubClientBase,
    required_labels: Sequence[str] = DEFAULT_REQUIRED_LABELS,
    now: datetime | None = None,
) -> SLALabelsResult:
    """Bring the SLA tier label of every tracked issue in line with its age.

    Issues are handled one at a time and every GitHub call is awaited before
    the next one. The first label change GitHub refuses aborts the run;
    issues after it are left untouched.
    """
    logger.info("Fetching open issues from GitHub", required_labels=list(required_labels))
    issues = await fetch_tracked_issues(github_adapter, required_labels)
    logger.info("Total issues fetched", issue_count=len(issues))

    result = SLALabelsResult(issues_fetched=len(issues))
    if not issues:
        logger.info("No issues found with the required labels", required_labels=list(required_labels))
        return result

    if now is None:
        now = datetime.now(timezone.utc)

    for issue in issues:
        impact_level = resolve_impact_level(issue.labels)
        if impact_level is None:
            logger.info(
                "Issue has no recognized impact level, skipping",
                issue_number=issue.number,
                impact_levels=[level.value for level in ImpactLevel],
            )
            result.skipped_issue_numbers.append(issue.number)
            continue

        weeks_old = calculate_weeks_old(issue.created_at, now)
        target_tier = determine_sla_tier(weeks_old, impact_level)
        changes = reconcile_sla_labels(issue.labels, target_tier)
        logger.debug(
            "Determined SLA tier",
            issue_number=issue.number,
            impact_level=impact_level.value,
            weeks_old=weeks_old,
            target_tier=target_tier.value if target_tier else None,
        )

        for label_name in changes.to_remove:
            logger.info("Removing label from issue", label=label_name, issue_number=issue.number)
            try:
                await github_adapter.remove_label_from_issue(issue.number, label_name)
            except Exception as exc:
                raise LabelRemovalError(label_name, issue.number, describe_failure(exc)) from exc

        if changes.to_add:
            logger.info("Adding label to issue", label=changes.to_add[0], issue_number=issue.number)
            try:
                await github_adapter.add_labels_to_issue(issue.number, changes.to_add)
            except Exception as exc:
                raise LabelAdditionError(changes.to_add[0], issue.number, describe_failure(exc)) from exc

        result.decisions.append(IssueSLADecision(issue.number, impact_level, weeks_old, target_tier, changes))

    logger.info(
        "Processed issues",
        issues_fetched=result.issues_fetched,
        issues_skipped=len(result.skipped_issue_numbers),
        issues_updated=result.issues_updated,
        labels_removed=result.labels_removed,
        labels_added=result.labels_added,
    )
    return result


async def run_sla_labels_workflow(
    repo: str,
    github_auth_type: GitHubAuthenticationType,
    github_pat_token: str | None,
    github_app_id: int | None,
    github_app_private_key_path: Path | None,
    github_app_installation_id: int | None,
    github_api_url: str,
    required_labels: Sequence[str] = DEFAULT_REQUIRED_LABELS,
) -> SLALabelsResult:
    """Run the sla-labels workflow against a repository."""
    github_adapter = await GitHubKitAdapter.create(
        repo=repo,
        github_auth_type=github_auth_type,
        github_pat_token=github_pat_token,
        github_app_id=github_app_id,
        github_app_private_key_path=github_app_private_key_path,
        github_app_installation_id=github_app_installation_id,
        github_api_url=github_api_url,
    )
    return await apply_sla_labels(github_adapter, required_labels)
