"""Pydantic schemas for license check options."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class DependencyType(str, Enum):
    """Which dependencies of the package are scanned."""

    PRODUCTION = "production"
    DEVELOPMENT = "development"
    ALL = "all"


class DetailsOutputFormat(str, Enum):
    """Format of the per-package details file."""

    JSON = "json"
    CSV = "csv"
    MARKDOWN = "markdown"


# Fields reported for every package when no custom fields file is given.
DEFAULT_CUSTOM_FIELDS: dict[str, Any] = {
    "name": "",
    "version": "",
    "licenses": "",
    "licenseText": "",
}


class LicenseCheckOptions(BaseModel):
    """Validated options handed to the license scanner."""

    start_path: str
    dependency_type: DependencyType = DependencyType.PRODUCTION
    custom_fields: dict[str, Any] = Field(default_factory=lambda: dict(DEFAULT_CUSTOM_FIELDS))
    only_allow: str | None = None
    details_output_path: str | None = None
    details_output_format: DetailsOutputFormat = DetailsOutputFormat.JSON
    exclude_packages: str | None = None
    exclude_packages_starting_with: str | None = None
    clarifications_path: str | None = None
