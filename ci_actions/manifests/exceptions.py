"""Custom exceptions for merging workspace manifests."""


class ManifestMergeError(Exception):
    """Raised when workspace manifests cannot be merged into a temporary package."""

    pass
