"""Shared test fixtures for the configuration console service."""

import copy
import itertools
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import fakeredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from console_config.config import Settings
from console_config.core.configuration_store import ConfigurationStore
from console_config.core.migration import MigrationEngine
from console_config.core.validator import ConfigurationValidator
from console_config.dependencies import ConfigContainer
from console_config.main import create_application
from console_config.repositories.kv_store import InMemoryKeyValueStore, RedisKeyValueStore
from console_config.services.backup_service import BackupService

# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------

_BASE_PROJECT: dict[str, Any] = {
    "id": "acme",
    "name": "acme",
    "displayName": "Acme Assistant",
    "businessInfo": {
        "domain": "Manufacturing",
        "owner": "Acme Digital",
        "costCentre": "CC-ACME-001",
        "department": "Digital",
        "contactInfo": {"email": "digital@acme.gc.ca"},
    },
    "technical": {
        "apiEndpoints": {
            "primary": "https://api.acme.gc.ca/v1",
            "timeout": 20000,
            "retryCount": 2,
        },
        "dataConfig": {
            "containerName": "acme-documents",
            "partitionKey": ["domain"],
            "throughput": 1000,
        },
        "searchConfig": {
            "service": "search-acme",
            "indexName": "acme-index",
            "apiVersion": "2023-11-01",
        },
        "aiConfig": {"model": "gpt-4-turbo-preview", "temperature": 0.2},
    },
    "uiConfig": {
        "theme": {
            "name": "Acme",
            "primary": "#112233",
            "accent": "#445566",
            "background": "#FFFFFF",
            "surface": "#F8F9FA",
            "baseFontPx": 16,
        },
        "branding": {"title": "Acme"},
    },
    "compliance": {
        "dataClassification": "internal",
        "retentionPolicy": {"chatHistory": 90, "userActivity": 365, "auditLogs": 730},
    },
}


def make_project(**overrides: Any) -> dict[str, Any]:
    """Return a fully valid camelCase project payload.

    Top-level keys in *overrides* replace the base value wholesale.
    """
    data = copy.deepcopy(_BASE_PROJECT)
    data.update(overrides)
    return data


def make_legacy_entry(**overrides: Any) -> dict[str, Any]:
    """Return one row of the pre-versioning project registry."""
    data = {
        "id": "acme",
        "label": "Acme",
        "domain": "Manufacturing",
        "owner": "Acme Digital",
        "costCentre": "CC-ACME-001",
        "description": "Answers questions about Acme products.",
        "theme": {"primary": "#112233", "background": "#FFFFFF", "surface": "#F8F9FA"},
        "ragIndex": {"indexName": "acme-index"},
    }
    data.update(overrides)
    return data


def make_clock(start: datetime | None = None) -> Callable[[], datetime]:
    """Deterministic clock advancing one second per call."""
    start = start or datetime(2025, 1, 1, tzinfo=UTC)
    counter = itertools.count()
    return lambda: start + timedelta(seconds=next(counter))


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def store(kv) -> ConfigurationStore:
    return ConfigurationStore(kv)


@pytest.fixture()
def validator() -> ConfigurationValidator:
    return ConfigurationValidator()


@pytest.fixture()
def migration(store, kv) -> MigrationEngine:
    return MigrationEngine(store, kv)


@pytest.fixture()
def downloads() -> list[tuple[str, str]]:
    """Collects (filename, text) pairs handed to the download collaborator."""
    return []


@pytest.fixture()
def backups(store, validator, kv, downloads) -> BackupService:
    return BackupService(
        store,
        validator,
        kv,
        download=lambda name, text: downloads.append((name, text)),
        clock=make_clock(),
    )


# ---------------------------------------------------------------------------
# Redis fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
def redis_client():
    """Provide a fake Redis client."""
    client = fakeredis.FakeRedis(decode_responses=True)
    yield client
    client.flushall()
    client.close()


@pytest.fixture()
def redis_kv(redis_client) -> RedisKeyValueStore:
    return RedisKeyValueStore(redis_client, namespace="test")


# ---------------------------------------------------------------------------
# HTTP client fixture (FastAPI app with an in-memory container)
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        storage_backend="memory",
        export_dir=tmp_path / "exports",
        log_format="console",
    )


@pytest.fixture()
def container(settings) -> ConfigContainer:
    """Container wired to a fresh in-memory store, migrated with defaults."""
    container = ConfigContainer.from_settings(settings)
    container.backups.clock = make_clock()
    container.start()
    return container


@pytest_asyncio.fixture()
async def client(settings, container) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the FastAPI app.

    The container is injected directly, so no Redis is needed.
    """
    app = create_application(settings=settings, container=container)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
