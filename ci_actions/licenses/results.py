"""Contains results of the check-licenses workflow."""

from dataclasses import dataclass, field
from typing import Any

from ci_actions.licenses.models import LicenseCheckOptions


@dataclass
class LicenseCheckResult:
    """What the scanner reported for a package tree."""

    options: LicenseCheckOptions
    summary: str
    packages: dict[str, Any] = field(default_factory=dict)
