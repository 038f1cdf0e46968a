"""Configuration record models."""
from console_config.models.global_config import GlobalConfiguration, LogLevel
from console_config.models.legacy import LegacyRegistryEntry
from console_config.models.project import DataClassification, ProjectConfiguration
from console_config.models.user import (
    ProjectAccess,
    ProjectRole,
    SessionContext,
    UserConfiguration,
)

__all__ = [
    "DataClassification",
    "GlobalConfiguration",
    "LegacyRegistryEntry",
    "LogLevel",
    "ProjectAccess",
    "ProjectConfiguration",
    "ProjectRole",
    "SessionContext",
    "UserConfiguration",
]
