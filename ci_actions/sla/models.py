"""Models and constants for SLA tier labeling."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, field_validator


class ImpactLevel(str, Enum):
    """Impact level of an issue, declared in tie-break order."""

    BLOCKER = "Blocker"
    CRITICAL = "Critical"
    SERIOUS = "Serious"
    MODERATE = "Moderate"


class SLATier(str, Enum):
    """SLA tier label, from least to most severe."""

    P3 = "SLA P3"
    P2 = "SLA P2"
    P1 = "SLA P1"
    BREACH = "SLA Breach"


# SLA window of each impact level, in whole weeks.
SLA_WINDOWS: Mapping[ImpactLevel, int] = MappingProxyType(
    {
        ImpactLevel.BLOCKER: 4,
        ImpactLevel.CRITICAL: 10,
        ImpactLevel.SERIOUS: 20,
        ImpactLevel.MODERATE: 30,
    }
)

SLA_TIER_LABELS: frozenset[str] = frozenset(tier.value for tier in SLATier)

DEFAULT_REQUIRED_LABELS: tuple[str, ...] = ("A11y", "VPAT")


class TrackedIssue(BaseModel):
    """An open issue whose SLA tier label is kept up to date."""

    number: int
    created_at: datetime
    labels: list[str] = []

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


@dataclass(frozen=True)
class LabelChanges:
    """Labels to remove from and add to an issue to reach its target SLA tier."""

    to_remove: list[str] = field(default_factory=list)
    to_add: list[str] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        """Whether the issue already carries exactly the right SLA tier label."""
        return not self.to_remove and not self.to_add
