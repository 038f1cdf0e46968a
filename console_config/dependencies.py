"""Dependency wiring for the API, CLI and tests."""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, Request
from redis import Redis

from console_config.config import Settings
from console_config.core.configuration_store import ConfigurationStore
from console_config.core.migration import MigrationEngine
from console_config.core.validator import ConfigurationValidator
from console_config.models.global_config import GlobalConfiguration
from console_config.models.user import ProjectRole, SessionContext
from console_config.repositories.kv_store import InMemoryKeyValueStore, RedisKeyValueStore
from console_config.repositories.protocols import KeyValueStoreProtocol
from console_config.services.backup_service import BackupService, DirectoryDownloadSink

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Resource helpers
# ---------------------------------------------------------------------------


def create_redis(settings: Settings) -> Redis:
    """Create the Redis client."""
    return Redis.from_url(str(settings.redis_url), decode_responses=True)


def create_kv_store(settings: Settings) -> KeyValueStoreProtocol:
    """Create the persistence adapter selected by ``storage_backend``."""
    if settings.storage_backend == "redis":
        return RedisKeyValueStore(create_redis(settings), namespace=settings.storage_namespace)
    return InMemoryKeyValueStore()


@dataclass
class ConfigContainer:
    """Holds one configuration engine and everything it is wired to.

    Replaces a process-wide singleton with an explicit object that callers
    create and own, so tests can build isolated instances.
    """

    settings: Settings
    kv: KeyValueStoreProtocol
    store: ConfigurationStore
    validator: ConfigurationValidator
    migration: MigrationEngine
    backups: BackupService

    @classmethod
    def from_settings(
        cls, settings: Settings, kv: KeyValueStoreProtocol | None = None
    ) -> "ConfigContainer":
        """Factory that wires adapter, store, validator, migration and backups."""
        kv = kv if kv is not None else create_kv_store(settings)
        store = ConfigurationStore(
            kv,
            global_defaults=GlobalConfiguration.defaults(
                platform_name=settings.platform_name,
                base_url=settings.platform_base_url,
            ),
        )
        validator = ConfigurationValidator(settings.health_issue_budget_per_record)
        return cls(
            settings=settings,
            kv=kv,
            store=store,
            validator=validator,
            migration=MigrationEngine(store, kv),
            backups=BackupService(
                store,
                validator,
                kv,
                download=DirectoryDownloadSink(settings.export_dir),
                creator=f"{settings.platform_name} Configuration Manager",
            ),
        )

    def start(self) -> None:
        """Load state and run migration once; call before serving callers."""
        if self.settings.run_migration_on_startup:
            self.migration.run()
        else:
            self.store.reload()

    def close(self) -> None:
        """Release the Redis connection pool, if any."""
        if isinstance(self.kv, RedisKeyValueStore):
            self.kv.redis.close()


# ---------------------------------------------------------------------------
# FastAPI dependencies: the container lives on app.state (set in lifespan)
# ---------------------------------------------------------------------------


def get_container(request: Request) -> ConfigContainer:
    return request.app.state.container


def get_session_context(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[ProjectRole | None, Header()] = None,
) -> SessionContext:
    """Session for the calling operator.

    Identity is resolved upstream (gateway / SSO); this service only reads the
    forwarded headers.
    """
    return SessionContext(
        user_id=x_user_id or "default-user",
        role=x_user_role or ProjectRole.USER,
    )


# ---------------------------------------------------------------------------
# Type aliases for cleaner dependency injection
# ---------------------------------------------------------------------------
Container = Annotated[ConfigContainer, Depends(get_container)]
Session = Annotated[SessionContext, Depends(get_session_context)]
