"""Contains unit tests for the SLA labels workflow."""

import logging
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock, call, patch

import pytest
from pytest import LogCaptureFixture

from ci_actions.configuration.models import GitHubAuthenticationType
from ci_actions.sla.driver import apply_sla_labels, fetch_tracked_issues, run_sla_labels_workflow
from ci_actions.sla.exceptions import LabelAdditionError, LabelMutationError, LabelRemovalError
from ci_actions.sla.models import ImpactLevel, SLATier

NOW = datetime(2024, 1, 29, 12, 0, 0, tzinfo=timezone.utc)


def make_issue(number: int, age: timedelta, labels: list[Any]) -> SimpleNamespace:
    """Build a stand-in for a githubkit issue created ``age`` before NOW."""
    return SimpleNamespace(
        number=number,
        created_at=NOW - age,
        labels=[SimpleNamespace(name=label) if isinstance(label, str) else label for label in labels],
    )


def make_adapter(issues: list[SimpleNamespace]) -> MagicMock:
    """Build a GitHub adapter double returning the given issues."""
    adapter = MagicMock()
    adapter.list_issues = AsyncMock(return_value=issues)
    adapter.remove_label_from_issue = AsyncMock(return_value=None)
    adapter.add_labels_to_issue = AsyncMock(return_value=None)
    return adapter


@pytest.mark.asyncio
async def test_no_issues_found(caplog: LogCaptureFixture) -> None:
    """Test that a run without tracked issues logs and makes no changes."""
    caplog.set_level(logging.INFO)
    adapter = make_adapter([])

    result = await apply_sla_labels(adapter, now=NOW)

    adapter.list_issues.assert_awaited_once_with(state="open", labels="A11y,VPAT")
    adapter.remove_label_from_issue.assert_not_awaited()
    adapter.add_labels_to_issue.assert_not_awaited()
    assert result.issues_fetched == 0
    assert result.decisions == []
    assert "Fetching open issues from GitHub" in caplog.text
    assert "Total issues fetched" in caplog.text
    assert "No issues found with the required labels" in caplog.text


@pytest.mark.asyncio
async def test_issue_without_impact_level_is_skipped(caplog: LogCaptureFixture) -> None:
    """Test that an issue without an impact label is left untouched."""
    caplog.set_level(logging.INFO)
    adapter = make_adapter([make_issue(1, timedelta(weeks=40), ["A11y", "VPAT", "SomeOtherLabel", "SLA P1"])])

    result = await apply_sla_labels(adapter, now=NOW)

    adapter.remove_label_from_issue.assert_not_awaited()
    adapter.add_labels_to_issue.assert_not_awaited()
    assert result.skipped_issue_numbers == [1]
    assert "Issue has no recognized impact level, skipping" in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "age, labels, expected_removed, expected_added",
    [
        pytest.param(timedelta(weeks=5), ["A11y", "VPAT", "Blocker", "SLA P1"], ["SLA P1"], ["SLA Breach"], id="blocker breached"),
        pytest.param(timedelta(weeks=3), ["A11y", "VPAT", "Blocker"], [], ["SLA P1"], id="blocker one week from breach"),
        pytest.param(timedelta(weeks=2), ["A11y", "VPAT", "Blocker"], [], ["SLA P2"], id="blocker two weeks from breach"),
        pytest.param(timedelta(weeks=1), ["A11y", "VPAT", "Blocker"], [], ["SLA P3"], id="blocker three weeks from breach"),
        pytest.param(timedelta(days=3), ["A11y", "VPAT", "Blocker"], [], [], id="blocker too new"),
        pytest.param(timedelta(days=3), ["A11y", "VPAT", "Blocker", "SLA P3"], ["SLA P3"], [], id="stale tier on new issue"),
        pytest.param(timedelta(weeks=3), ["A11y", "VPAT", "Blocker", "SLA P1"], [], [], id="already correct"),
        pytest.param(timedelta(weeks=9), ["A11y", "VPAT", "Critical"], [], ["SLA P1"], id="critical nine weeks"),
        pytest.param(timedelta(weeks=20), ["A11y", "VPAT", "Serious"], [], ["SLA Breach"], id="serious twenty weeks"),
        pytest.param(timedelta(weeks=29), ["A11y", "VPAT", "moderate"], [], ["SLA P1"], id="moderate lowercase"),
        pytest.param(
            timedelta(weeks=6),
            ["A11y", "VPAT", "Blocker", "SLA P1", "SLA P2"],
            ["SLA P1", "SLA P2"],
            ["SLA Breach"],
            id="multiple stale tiers",
        ),
    ],
)
async def test_apply_sla_labels(age: timedelta, labels: list[str], expected_removed: list[str], expected_added: list[str]) -> None:
    """Test the label changes applied to a single issue."""
    adapter = make_adapter([make_issue(10, age, labels)])

    await apply_sla_labels(adapter, now=NOW)

    assert adapter.remove_label_from_issue.await_args_list == [call(10, label) for label in expected_removed]
    if expected_added:
        adapter.add_labels_to_issue.assert_awaited_once_with(10, expected_added)
    else:
        adapter.add_labels_to_issue.assert_not_awaited()


@pytest.mark.asyncio
async def test_removals_happen_before_addition() -> None:
    """Test that stale tiers are removed before the new tier is added."""
    adapter = make_adapter([make_issue(10, timedelta(weeks=5), ["A11y", "VPAT", "Blocker", "SLA P1", "SLA P2"])])

    await apply_sla_labels(adapter, now=NOW)

    mutation_calls = [c for c in adapter.mock_calls if c[0] != "list_issues"]
    assert mutation_calls == [
        call.remove_label_from_issue(10, "SLA P1"),
        call.remove_label_from_issue(10, "SLA P2"),
        call.add_labels_to_issue(10, ["SLA Breach"]),
    ]


@pytest.mark.asyncio
async def test_second_run_is_noop() -> None:
    """Test that running again against the converged labels changes nothing."""
    first_adapter = make_adapter([make_issue(10, timedelta(weeks=5), ["A11y", "VPAT", "Blocker", "SLA P1"])])
    await apply_sla_labels(first_adapter, now=NOW)

    second_adapter = make_adapter([make_issue(10, timedelta(weeks=5), ["A11y", "VPAT", "Blocker", "SLA Breach"])])
    result = await apply_sla_labels(second_adapter, now=NOW)

    second_adapter.remove_label_from_issue.assert_not_awaited()
    second_adapter.add_labels_to_issue.assert_not_awaited()
    assert result.issues_updated == 0


@pytest.mark.asyncio
async def test_removal_failure_aborts_run() -> None:
    """Test that a refused removal stops the run before later issues are touched."""
    adapter = make_adapter(
        [
            make_issue(10, timedelta(weeks=5), ["A11y", "VPAT", "Blocker", "SLA P1"]),
            make_issue(11, timedelta(weeks=5), ["A11y", "VPAT", "Blocker"]),
        ]
    )
    adapter.remove_label_from_issue.side_effect = Exception("API Error")

    with pytest.raises(LabelRemovalError) as exc_info:
        await apply_sla_labels(adapter, now=NOW)

    assert str(exc_info.value) == "Could not remove label SLA P1 from issue #10: API Error"
    assert exc_info.value.label_name == "SLA P1"
    assert exc_info.value.issue_number == 10
    adapter.add_labels_to_issue.assert_not_awaited()


@pytest.mark.asyncio
async def test_addition_failure_aborts_run() -> None:
    """Test that a refused addition stops the run before later issues are touched."""
    adapter = make_adapter(
        [
            make_issue(12, timedelta(weeks=3), ["A11y", "VPAT", "Blocker"]),
            make_issue(13, timedelta(weeks=3), ["A11y", "VPAT", "Blocker", "SLA P3"]),
        ]
    )
    adapter.add_labels_to_issue.side_effect = Exception("API Error")

    with pytest.raises(LabelAdditionError) as exc_info:
        await apply_sla_labels(adapter, now=NOW)

    assert str(exc_info.value) == "Could not add label SLA P1 to issue #12: API Error"
    adapter.add_labels_to_issue.assert_awaited_once_with(12, ["SLA P1"])
    adapter.remove_label_from_issue.assert_not_awaited()


@pytest.mark.asyncio
async def test_failure_without_message_is_reported_as_unknown() -> None:
    """Test that an exception without a message still yields a readable reason."""
    adapter = make_adapter([make_issue(10, timedelta(weeks=5), ["A11y", "VPAT", "Blocker"])])
    adapter.add_labels_to_issue.side_effect = RuntimeError()

    with pytest.raises(LabelMutationError, match=r"Could not add label SLA Breach to issue #10: An unknown error occurred: RuntimeError\(\)"):
        await apply_sla_labels(adapter, now=NOW)


@pytest.mark.asyncio
async def test_multiple_issues_processed_in_order() -> None:
    """Test that issues are processed one after the other and summarized."""
    adapter = make_adapter(
        [
            make_issue(1, timedelta(weeks=5), ["A11y", "VPAT", "Blocker", "SLA P1"]),
            make_issue(2, timedelta(weeks=1), ["A11y", "VPAT"]),
            make_issue(3, timedelta(weeks=18), ["A11y", "VPAT", "Serious"]),
            make_issue(4, timedelta(weeks=3), ["A11y", "VPAT", "Blocker", "SLA P1"]),
        ]
    )

    result = await apply_sla_labels(adapter, now=NOW)

    assert [c for c in adapter.mock_calls if c[0] != "list_issues"] == [
        call.remove_label_from_issue(1, "SLA P1"),
        call.add_labels_to_issue(1, ["SLA Breach"]),
        call.add_labels_to_issue(3, ["SLA P2"]),
    ]
    assert result.issues_fetched == 4
    assert result.skipped_issue_numbers == [2]
    assert [decision.issue_number for decision in result.decisions] == [1, 3, 4]
    assert result.decisions[1].impact_level == ImpactLevel.SERIOUS
    assert result.decisions[1].weeks_old == 18
    assert result.decisions[1].target_tier == SLATier.P2
    assert result.issues_updated == 2
    assert result.labels_removed == 1
    assert result.labels_added == 2


@pytest.mark.asyncio
async def test_label_formats_from_api_response() -> None:
    """Test that string, named, unnamed and null labels are all handled."""
    issue = SimpleNamespace(
        number=20,
        created_at=NOW - timedelta(weeks=3),
        labels=["A11y", SimpleNamespace(name="VPAT"), "blocker", SimpleNamespace(name=None), SimpleNamespace(), None, SimpleNamespace(name="SLA P3")],
    )
    adapter = make_adapter([issue])

    await apply_sla_labels(adapter, now=NOW)

    adapter.remove_label_from_issue.assert_awaited_once_with(20, "SLA P3")
    adapter.add_labels_to_issue.assert_awaited_once_with(20, ["SLA P1"])


@pytest.mark.asyncio
async def test_fetch_tracked_issues_uses_required_labels() -> None:
    """Test that custom marker labels are sent to GitHub as a comma-separated filter."""
    adapter = make_adapter([make_issue(5, timedelta(days=1), ["Accessibility", "Audit", None])])

    issues = await fetch_tracked_issues(adapter, ["Accessibility", "Audit"])

    adapter.list_issues.assert_awaited_once_with(state="open", labels="Accessibility,Audit")
    assert issues[0].number == 5
    assert issues[0].labels == ["Accessibility", "Audit", ""]
    assert issues[0].created_at == NOW - timedelta(days=1)


@pytest.mark.asyncio
async def test_apply_sla_labels_defaults_to_current_time() -> None:
    """Test that the age is measured against the current time when none is given."""
    issue = make_issue(30, timedelta(0), ["A11y", "VPAT", "Blocker"])
    issue.created_at = datetime.now(timezone.utc) - timedelta(weeks=4, days=1)
    adapter = make_adapter([issue])

    await apply_sla_labels(adapter)

    adapter.add_labels_to_issue.assert_awaited_once_with(30, ["SLA Breach"])


@pytest.mark.asyncio
async def test_run_sla_labels_workflow_creates_adapter() -> None:
    """Test that the workflow builds a GitHub adapter and runs against it."""
    adapter = make_adapter([])
    with patch("ci_actions.sla.driver.GitHubKitAdapter.create", new=AsyncMock(return_value=adapter)) as mock_create:
        result = await run_sla_labels_workflow(
            repo="owner/repo",
            github_auth_type=GitHubAuthenticationType.PAT,
            github_pat_token="token",
            github_app_id=None,
            github_app_private_key_path=None,
            github_app_installation_id=None,
            github_api_url="https://api.github.com",
            required_labels=["A11y"],
        )

    mock_create.assert_awaited_once()
    assert mock_create.await_args.kwargs["repo"] == "owner/repo"
    adapter.list_issues.assert_awaited_once_with(state="open", labels="A11y")
    assert result.issues_fetched == 0
