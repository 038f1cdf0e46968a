"""Pydantic schemas for backups, exports and imports."""

from typing import Any

from pydantic import Field

from console_config.models.base import CamelModel
from console_config.schemas.validation import ValidationSummary


class BackupInfo(CamelModel):
    description: str | None = None
    creator: str | None = None
    platform: str = ""


class ConfigurationBackup(CamelModel):
    """Versioned snapshot written to storage or exported as a file.

    Records are kept as raw camelCase mappings so that an imported file can
    be validated before any of it is parsed into store records.
    """

    version: str
    timestamp: str
    metadata: BackupInfo
    global_config: dict[str, Any]
    project_configs: list[dict[str, Any]]
    validation_summary: dict[str, Any]


class BackupMetadata(CamelModel):
    """Listing entry for a stored backup."""

    key: str
    timestamp: str
    description: str | None = None
    size: int
    is_valid: bool
    project_count: int


class ImportResult(CamelModel):
    success: bool
    message: str
    validation_summary: ValidationSummary | None = None


class RestoreResult(CamelModel):
    success: bool
    message: str


class CleanupResult(CamelModel):
    deleted_count: int = Field(ge=0)
