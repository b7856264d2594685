"""Merges the production dependencies of npm workspaces into one temporary package.

License scanners walk a single package.json. For a monorepo we collect the
``dependencies`` of every listed workspace, write them to a temporary
package.json and point its ``node_modules`` at the root install, so the
scanner only sees production dependencies.
"""

from pathlib import Path

import structlog
from pydantic import ValidationError

from ci_actions.manifests.exceptions import ManifestMergeError
from ci_actions.manifests.models import TEMP_PACKAGE_NAME, PackageManifest, TemporaryPackageManifest
from ci_actions.manifests.results import ManifestMergeResult

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

DEFAULT_OUTPUT_PATH = f"./{TEMP_PACKAGE_NAME}"


def parse_workspace_paths(workspace_path_list: str) -> list[str]:
    """Split a comma-separated list of workspace paths, dropping blanks."""
    return [path.strip() for path in workspace_path_list.split(",") if path.strip()]


def read_workspace_manifest(workspace_path: str, root_dir: Path = Path(".")) -> PackageManifest | None:
    """Read a workspace's package.json, or return None when it is missing or empty.

    Relative workspace paths are resolved against ``root_dir``.
    """
    package_json_path = root_dir / workspace_path / "package.json"
    if not package_json_path.exists():
        logger.warning("The package.json file is not found in the workspace, skipping", workspace=workspace_path)
        return None

    try:
        content = package_json_path.read_text(encoding="utf-8")
        if not content:
            logger.warning("The package.json file in the workspace is empty, skipping", workspace=workspace_path)
            return None
        return PackageManifest.model_validate_json(content)
    except (OSError, UnicodeDecodeError, ValidationError) as exc:
        raise ManifestMergeError(f'Failed to process "{package_json_path}": {exc}') from exc


def link_node_modules(node_modules_path: Path, output_path: Path) -> Path:
    """Symlink ``output_path/node_modules`` to the root node_modules directory."""
    symlink_path = output_path / "node_modules"
    if symlink_path.is_symlink():
        symlink_path.unlink()
    symlink_path.symlink_to(node_modules_path.resolve(), target_is_directory=True)
    if not symlink_path.is_symlink():
        raise ManifestMergeError(f'Failed to create symlink to temporary "{symlink_path}" directory')
    return symlink_path


def merge_workspace_manifests(
    workspace_path_list: str,
    output_path: Path | str = DEFAULT_OUTPUT_PATH,
    root_dir: Path = Path("."),
) -> ManifestMergeResult:
    """Write a temporary package.json holding the production dependencies of every workspace.

    Workspaces are merged in the order given; when two of them depend on the
    same package, the later one's version wins.

    Args:
        workspace_path_list: Comma-separated workspace directories.
        output_path: Directory that receives the temporary package.json.
        root_dir: Directory holding the installed node_modules. Relative workspace
            paths are resolved against it too.

    Raises:
        ManifestMergeError: If node_modules is missing, no workspace is given, a
            package.json cannot be parsed, or no dependencies were found.
    """
    output_path = Path(output_path)
    node_modules_path = root_dir / "node_modules"
    if not node_modules_path.exists():
        raise ManifestMergeError(
            "The `node_modules` directory not found in the root directory. Please install all dependencies before this action."
        )

    workspace_paths = parse_workspace_paths(workspace_path_list)
    if not workspace_paths:
        raise ManifestMergeError(
            "No workspace paths provided. Please specify at least one valid workspace path in the `workspace-path-list` input."
        )
    logger.info("Provided workspaces", workspaces=workspace_paths)

    output_path.mkdir(parents=True, exist_ok=True)

    merged_dependencies: dict[str, str] = {}
    dependencies_by_workspace: dict[str, dict[str, str]] = {}
    skipped_workspaces: list[str] = []
    for workspace_path in workspace_paths:
        logger.info("Processing workspace", workspace=workspace_path)
        manifest = read_workspace_manifest(workspace_path, root_dir)
        if manifest is None:
            skipped_workspaces.append(workspace_path)
            continue
        dependencies = manifest.dependencies or {}
        merged_dependencies.update(dependencies)
        dependencies_by_workspace[manifest.name or workspace_path] = dependencies
        logger.info("Merged workspace dependencies", workspace=workspace_path, dependency_count=len(dependencies))

    logger.info("Total merged dependencies", dependency_count=len(merged_dependencies))
    if not merged_dependencies:
        raise ManifestMergeError("No production dependencies found in any workspace")

    package_json_path = output_path / "package.json"
    logger.info("Creating temporary package.json with the production dependencies", path=str(package_json_path))
    temporary_manifest = TemporaryPackageManifest(dependencies=merged_dependencies)
    package_json_path.write_text(temporary_manifest.model_dump_json(indent=2), encoding="utf-8")

    link_node_modules(node_modules_path, output_path)

    logger.info(
        "Created temporary package.json with merged dependencies from all workspaces",
        path=str(package_json_path),
        dependencies_by_workspace=dependencies_by_workspace,
    )
    return ManifestMergeResult(
        output_path=output_path,
        package_json_path=package_json_path,
        merged_dependencies=merged_dependencies,
        dependencies_by_workspace=dependencies_by_workspace,
        skipped_workspaces=skipped_workspaces,
    )
