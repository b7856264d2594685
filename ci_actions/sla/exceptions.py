"""Custom exceptions for SLA tier labeling."""


class LabelMutationError(Exception):
    """Raised when GitHub refuses a label change; aborts the whole run."""

    action = "change"
    preposition = "on"

    def __init__(self, label_name: str, issue_number: int, reason: str) -> None:
        """Initializes the exception with the label, the issue and the underlying reason."""
        super().__init__(f"Could not {self.action} label {label_name} {self.preposition} issue #{issue_number}: {reason}")
        self.label_name = label_name
        self.issue_number = issue_number
        self.reason = reason


class LabelRemovalError(LabelMutationError):
    """Raised when an SLA tier label cannot be removed from an issue."""

    action = "remove"
    preposition = "from"


class LabelAdditionError(LabelMutationError):
    """Raised when an SLA tier label cannot be added to an issue."""

    action = "add"
    preposition = "to"
