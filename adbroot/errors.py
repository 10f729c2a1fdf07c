"""Exception hierarchy for adbroot."""


class AdbRootError(Exception):
    """Base class for all adbroot errors."""


class PermissionDenied(AdbRootError, PermissionError):
    """Raised when the caller's role may not perform an operation."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class RegistrationError(AdbRootError):
    """Raised when the service endpoint cannot be published."""


class ConfigError(AdbRootError, ValueError):
    """Raised when a configuration file is malformed."""
