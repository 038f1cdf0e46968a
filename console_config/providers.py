"""FastAPI dependency providers for the configuration engine.

Route modules should import type aliases from here.
"""

from typing import Annotated

from fastapi import Depends

from console_config.core.configuration_store import ConfigurationStore
from console_config.core.validator import ConfigurationValidator
from console_config.dependencies import Container
from console_config.services.backup_service import BackupService


def get_store(container: Container) -> ConfigurationStore:
    return container.store


def get_validator(container: Container) -> ConfigurationValidator:
    return container.validator


def get_backup_service(container: Container) -> BackupService:
    return container.backups


Store = Annotated[ConfigurationStore, Depends(get_store)]
Validator = Annotated[ConfigurationValidator, Depends(get_validator)]
Backups = Annotated[BackupService, Depends(get_backup_service)]
