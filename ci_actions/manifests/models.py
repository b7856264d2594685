"""Pydantic schemas for npm package manifests."""

from pydantic import BaseModel, ConfigDict

TEMP_PACKAGE_NAME = "temp-license-check"


class PackageManifest(BaseModel):
    """The parts of a workspace package.json we read; everything else is ignored."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    dependencies: dict[str, str] | None = None


class TemporaryPackageManifest(BaseModel):
    """The package.json written for license scanning."""

    name: str = TEMP_PACKAGE_NAME
    dependencies: dict[str, str]
