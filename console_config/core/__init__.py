"""Core configuration engine."""
from console_config.core.configuration_store import ConfigurationStore
from console_config.core.migration import MigrationEngine, MigrationReport
from console_config.core.validator import ConfigurationValidator, render_report

__all__ = [
    "ConfigurationStore",
    "ConfigurationValidator",
    "MigrationEngine",
    "MigrationReport",
    "render_report",
]
