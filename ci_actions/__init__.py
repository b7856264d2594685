"""CI automation commands for GitHub Actions workflows."""
