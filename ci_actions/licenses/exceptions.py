"""Custom exceptions for license checks."""


class LicenseCheckError(Exception):
    """Raised when the license scan fails or finds no licenses."""

    pass


class LicenseOptionsError(Exception):
    """Raised when the license check options are invalid, before anything is scanned."""

    pass
