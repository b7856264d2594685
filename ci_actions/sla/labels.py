"""Decides which SLA tier label an issue should carry.

Everything in this module is pure: the functions look at an issue's labels and
age and return what should change, leaving the GitHub calls to the driver.
"""

import math
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from ci_actions.sla.models import SLA_TIER_LABELS, SLA_WINDOWS, ImpactLevel, LabelChanges, SLATier

SECONDS_PER_DAY = 86400
DAYS_PER_WEEK = 7


def normalize_label_name(label: Any) -> str:
    """Return the name of a label as reported by the GitHub API.

    Labels come back either as plain strings or as objects with an optional
    ``name``. Anything without a usable name becomes an empty string, which
    never matches a known label.
    """
    if isinstance(label, str):
        return label
    if isinstance(label, Mapping):
        name = label.get("name")
    else:
        name = getattr(label, "name", None)
    if isinstance(name, str):
        return name
    return ""


def resolve_impact_level(labels: Iterable[str]) -> ImpactLevel | None:
    """Return the impact level named by the labels, ignoring case.

    Levels are tested in declaration order, so an issue labeled both
    "Blocker" and "Critical" is a Blocker.
    """
    lowered = {label.lower() for label in labels}
    for impact_level in ImpactLevel:
        if impact_level.value.lower() in lowered:
            return impact_level
    return None


def calculate_weeks_old(created_at: datetime, now: datetime) -> int:
    """Return the number of whole weeks elapsed since the issue was created."""
    elapsed_seconds = math.floor(now.timestamp()) - math.floor(created_at.timestamp())
    days_old = elapsed_seconds // SECONDS_PER_DAY
    return days_old // DAYS_PER_WEEK


def determine_sla_tier(weeks_old: int, impact_level: ImpactLevel) -> SLATier | None:
    """Return the SLA tier for an issue of the given age and impact level.

    The checks are ordered from most to least severe and the first match
    wins, since an older issue satisfies every lower threshold too.
    """
    sla_weeks = SLA_WINDOWS[impact_level]
    if weeks_old >= sla_weeks:
        return SLATier.BREACH
    elif weeks_old >= sla_weeks - 1:
        return SLATier.P1
    elif weeks_old >= sla_weeks - 2:
        return SLATier.P2
    elif weeks_old >= sla_weeks - 3:
        return SLATier.P3
    return None


def reconcile_sla_labels(labels: Iterable[str], target_tier: SLATier | None) -> LabelChanges:
    """Compute the label changes that leave an issue with only its target SLA tier label.

    Every tier label other than the target is removed, however many there
    are. The target is added only when missing. Tier labels match exactly,
    so "sla p1" is left alone.
    """
    current_labels = list(labels)
    target_label = target_tier.value if target_tier is not None else None

    to_remove: list[str] = []
    for label in current_labels:
        if label in SLA_TIER_LABELS and label != target_label and label not in to_remove:
            to_remove.append(label)

    to_add: list[str] = []
    if target_label is not None and target_label not in current_labels:
        to_add.append(target_label)

    return LabelChanges(to_remove=to_remove, to_add=to_add)
