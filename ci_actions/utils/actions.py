"""Helpers for talking to the GitHub Actions runner."""

import os
from typing import NoReturn

import typer


def set_output(name: str, value: str) -> bool:
    """Append a step output to the file named by GITHUB_OUTPUT.

    Returns False when not running inside GitHub Actions.
    """
    github_output = os.environ.get("GITHUB_OUTPUT")
    if not github_output:
        return False
    with open(github_output, "a", encoding="utf-8") as f:
        f.write(f"{name}={value}\n")
    return True


def describe_failure(exc: BaseException) -> str:
    """Return the message reported to the operator for a failed run."""
    message = str(exc)
    if message:
        return message
    return f"An unknown error occurred: {exc!r}"


def set_failed(message: str) -> NoReturn:
    """Report a failed step as an error annotation and exit with status 1."""
    typer.echo(f"::error::{message}", err=True)
    raise typer.Exit(1)
