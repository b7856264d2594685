"""Checks the licenses of an npm package tree with license-checker-rseidelsohn.

The scan itself is delegated to the ``license-checker-rseidelsohn`` CLI run
through ``npx``. This module validates the inputs, builds the scanner
arguments and turns the scanner's JSON report into a license summary.
"""

import json
import subprocess
import tempfile
from collections import Counter
from pathlib import Path
from typing import Any, Callable

import structlog
from pydantic import TypeAdapter, ValidationError

from ci_actions.licenses.exceptions import LicenseCheckError, LicenseOptionsError
from ci_actions.licenses.models import DEFAULT_CUSTOM_FIELDS, DependencyType, DetailsOutputFormat, LicenseCheckOptions
from ci_actions.licenses.results import LicenseCheckResult

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

LICENSE_CHECKER_COMMAND = ["npx", "--yes", "license-checker-rseidelsohn"]

LicenseScanner = Callable[[list[str]], str]

_custom_fields_adapter: TypeAdapter[dict[str, Any]] = TypeAdapter(dict[str, Any])


def load_custom_fields(custom_fields_path: str) -> dict[str, Any]:
    """Read the JSON object describing which fields to report for each package."""
    logger.info("Provided custom fields path, reading custom fields", custom_fields_path=custom_fields_path)
    try:
        content = Path(custom_fields_path).resolve().read_text(encoding="utf-8")
        custom_fields = _custom_fields_adapter.validate_json(content)
    except (OSError, UnicodeDecodeError, ValidationError) as exc:
        raise LicenseOptionsError(f"Error reading or parsing customFieldsPath: {exc}") from exc
    logger.info("Custom fields", custom_fields=custom_fields)
    return custom_fields


def build_license_check_options(
    start_path: str,
    dependency_type: str = DependencyType.PRODUCTION.value,
    details_output_format: str = DetailsOutputFormat.JSON.value,
    custom_fields_path: str | None = None,
    clarifications_path: str | None = None,
    only_allow: str | None = None,
    details_output_path: str | None = None,
    exclude_packages: str | None = None,
    exclude_packages_starting_with: str | None = None,
) -> LicenseCheckOptions:
    """Validate the raw inputs of a license check.

    Blank optional inputs count as not given.

    Raises:
        LicenseOptionsError: If the dependency type or details format is unknown,
            a given path does not exist, or the custom fields cannot be read.
    """
    allowed_dependency_types = [member.value for member in DependencyType]
    if dependency_type not in allowed_dependency_types:
        raise LicenseOptionsError(f"Invalid dependency-type: {dependency_type}. Allowed values are: {', '.join(allowed_dependency_types)}")

    allowed_formats = [member.value for member in DetailsOutputFormat]
    if details_output_format not in allowed_formats:
        raise LicenseOptionsError(f"Invalid details-output-format: {details_output_format}. Allowed values are: {', '.join(allowed_formats)}")

    if not Path(start_path).resolve().exists():
        raise LicenseOptionsError(f"The file specified by start-path does not exist: {start_path}")

    if custom_fields_path and not Path(custom_fields_path).resolve().exists():
        raise LicenseOptionsError(f"The file specified by custom-fields-path does not exist: {custom_fields_path}")

    if clarifications_path and not Path(clarifications_path).resolve().exists():
        raise LicenseOptionsError(f"The file specified by clarifications-path does not exist: {clarifications_path}")

    custom_fields = load_custom_fields(custom_fields_path) if custom_fields_path else dict(DEFAULT_CUSTOM_FIELDS)
    options = LicenseCheckOptions(
        start_path=start_path,
        dependency_type=DependencyType(dependency_type),
        custom_fields=custom_fields,
        details_output_format=DetailsOutputFormat(details_output_format),
        only_allow=only_allow or None,
        details_output_path=details_output_path or None,
        exclude_packages=exclude_packages if exclude_packages and exclude_packages.strip() else None,
        exclude_packages_starting_with=(
            exclude_packages_starting_with if exclude_packages_starting_with and exclude_packages_starting_with.strip() else None
        ),
        clarifications_path=clarifications_path if clarifications_path and clarifications_path.strip() else None,
    )
    logger.info("Provided options", options=options.model_dump(mode="json"))
    return options


def build_scanner_arguments(
    options: LicenseCheckOptions,
    custom_fields_file: Path,
    output_format: DetailsOutputFormat,
    out: str | None = None,
) -> list[str]:
    """Translate the options into license-checker-rseidelsohn command line arguments."""
    arguments = ["--start", options.start_path, f"--{output_format.value}", "--customPath", str(custom_fields_file)]
    if options.dependency_type == DependencyType.PRODUCTION:
        arguments.append("--production")
    elif options.dependency_type == DependencyType.DEVELOPMENT:
        arguments.append("--development")
    if out:
        arguments += ["--out", out]
    if options.only_allow:
        arguments += ["--onlyAllow", options.only_allow]
    if options.exclude_packages:
        arguments += ["--excludePackages", options.exclude_packages]
    if options.exclude_packages_starting_with:
        arguments += ["--excludePackagesStartingWith", options.exclude_packages_starting_with]
    if options.clarifications_path:
        arguments += ["--clarificationsFile", options.clarifications_path]
    return arguments


def run_license_checker(arguments: list[str]) -> str:
    """Run license-checker-rseidelsohn and return what it printed."""
    cmd = [*LICENSE_CHECKER_COMMAND, *arguments]
    logger.debug("Running license checker", command=cmd)
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except FileNotFoundError as exc:
        raise LicenseCheckError("npx not found. Install Node.js to run the license checker.") from exc
    if result.returncode != 0:
        raise LicenseCheckError(result.stderr.strip() or f"license-checker-rseidelsohn exited with status {result.returncode}")
    return result.stdout


def summarize_licenses(packages: dict[str, Any]) -> str:
    """Count packages per license, most used license first, as a tree."""
    license_counts: Counter[str] = Counter()
    for package_info in packages.values():
        licenses = package_info.get("licenses") if isinstance(package_info, dict) else None
        if isinstance(licenses, list):
            licenses = ", ".join(str(license_name) for license_name in licenses)
        if licenses:
            license_counts[str(licenses)] += 1

    lines = []
    ranked = license_counts.most_common()
    for index, (license_name, count) in enumerate(ranked):
        branch = "└─" if index == len(ranked) - 1 else "├─"
        lines.append(f"{branch} {license_name}: {count}")
    return "\n".join(lines)


def check_licenses(options: LicenseCheckOptions, scanner: LicenseScanner = run_license_checker) -> LicenseCheckResult:
    """Scan the package tree and summarize the licenses found.

    The details file, when requested, is written by a second scanner run in
    the requested format.

    Raises:
        LicenseCheckError: If the scanner fails, reports something other than a
            JSON object, or finds no licenses.
    """
    with tempfile.TemporaryDirectory() as temp_dir:
        custom_fields_file = Path(temp_dir) / "custom-fields.json"
        custom_fields_file.write_text(json.dumps(options.custom_fields), encoding="utf-8")

        arguments = build_scanner_arguments(options, custom_fields_file, DetailsOutputFormat.JSON)
        logger.info("Start checking licenses", arguments=arguments)
        report = scanner(arguments)
        try:
            packages = json.loads(report)
        except ValueError as exc:
            raise LicenseCheckError(f"Could not parse the license checker report: {exc}") from exc
        if not isinstance(packages, dict):
            raise LicenseCheckError("Could not parse the license checker report: expected a JSON object")

        if options.details_output_path:
            logger.info(
                "Writing license details",
                details_output_path=options.details_output_path,
                details_output_format=options.details_output_format.value,
            )
            scanner(build_scanner_arguments(options, custom_fields_file, options.details_output_format, out=options.details_output_path))

    summary = summarize_licenses(packages)
    if not summary:
        raise LicenseCheckError("No licenses found")
    logger.info("License checker summary", package_count=len(packages))
    return LicenseCheckResult(options=options, summary=summary, packages=packages)
