"""Pydantic schemas package."""
from console_config.schemas.backup import (
    BackupInfo,
    BackupMetadata,
    CleanupResult,
    ConfigurationBackup,
    ImportResult,
    RestoreResult,
)
from console_config.schemas.validation import ValidationResult, ValidationSummary

__all__ = [
    # Validation schemas
    "ValidationResult",
    "ValidationSummary",
    # Backup schemas
    "BackupInfo",
    "BackupMetadata",
    "CleanupResult",
    "ConfigurationBackup",
    "ImportResult",
    "RestoreResult",
]
