"""Domain exceptions for the configuration engine.

These are raised at adapter and parsing boundaries and converted into
result values by the public store and backup operations.
"""


class ConfigurationError(Exception):
    """Base class for configuration engine errors."""


class PersistenceError(ConfigurationError):
    """Raised when the key-value backend cannot complete an operation."""

    def __init__(self, operation: str, key: str, reason: str | None = None):
        self.operation = operation
        self.key = key
        message = f"Persistence {operation} failed for key '{key}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class BackupNotFoundError(ConfigurationError):
    """Raised when a backup key does not exist."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Backup '{key}' not found")


class BackupFormatError(ConfigurationError):
    """Raised when a backup or import payload is not a valid snapshot."""
