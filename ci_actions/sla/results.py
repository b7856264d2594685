"""Contains results of the SLA labels workflow."""

from ci_actions.sla.models import ImpactLevel, LabelChanges, SLATier


class IssueSLADecision:
    """What was decided, and applied, for a single issue."""

    def __init__(
        self,
        issue_number: int,
        impact_level: ImpactLevel,
        weeks_old: int,
        target_tier: SLATier | None,
        changes: LabelChanges,
    ) -> None:
        """Initialize the decision with the inputs and the resulting label changes."""
        self.issue_number = issue_number
        self.impact_level = impact_level
        self.weeks_old = weeks_old
        self.target_tier = target_tier
        self.changes = changes


class SLALabelsResult:
    """Contains results of the SLA labels workflow for all fetched issues."""

    def __init__(self, issues_fetched: int = 0) -> None:
        """Initialize an empty result for a run that fetched the given number of issues."""
        self.issues_fetched = issues_fetched
        self.decisions: list[IssueSLADecision] = []
        self.skipped_issue_numbers: list[int] = []

    @property
    def labels_removed(self) -> int:
        """Total number of labels removed across all issues."""
        return sum(len(decision.changes.to_remove) for decision in self.decisions)

    @property
    def labels_added(self) -> int:
        """Total number of labels added across all issues."""
        return sum(len(decision.changes.to_add) for decision in self.decisions)

    @property
    def issues_updated(self) -> int:
        """Number of issues that needed at least one label change."""
        return sum(1 for decision in self.decisions if not decision.changes.is_noop)
