"""Contains results of the merge-manifests workflow."""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ManifestMergeResult:
    """Where the temporary package was written and what went into it."""

    output_path: Path
    package_json_path: Path
    merged_dependencies: dict[str, str]
    dependencies_by_workspace: dict[str, dict[str, str]]
    skipped_workspaces: list[str] = field(default_factory=list)
