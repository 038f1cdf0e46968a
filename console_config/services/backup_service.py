"""Backup, restore, export and import of configuration snapshots."""

import json
import logging
import platform
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from console_config.constants import (
    BACKUP_FORMAT_VERSION,
    BACKUP_HEALTHY_THRESHOLD,
    BACKUP_PREFIX,
    EXPORT_FILENAME_PREFIX,
)
from console_config.core.configuration_store import ConfigurationStore
from console_config.core.validator import ConfigurationValidator
from console_config.exceptions import BackupFormatError, BackupNotFoundError, PersistenceError
from console_config.models.global_config import GlobalConfiguration
from console_config.models.project import ProjectConfiguration
from console_config.repositories.protocols import KeyValueStoreProtocol
from console_config.schemas.backup import (
    BackupInfo,
    BackupMetadata,
    ConfigurationBackup,
    ImportResult,
    RestoreResult,
)

logger = logging.getLogger(__name__)

# Receives (filename, text) for a user-facing download
DownloadSink = Callable[[str, str], None]
Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _key_safe(timestamp: str) -> str:
    return timestamp.replace(":", "-").replace(".", "-")


def _parse_timestamp(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return datetime.min.replace(tzinfo=UTC)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


class DirectoryDownloadSink:
    """Default download collaborator: writes exports into a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def __call__(self, filename: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / filename
        path.write_text(text, encoding="utf-8")
        logger.info("Configuration exported to %s", path)


class BackupService:
    """Builds snapshots of the store and applies them back.

    Stored backups are trusted and restored without re-validation; imported
    files are validated first and rejected on any blocking error.
    """

    def __init__(
        self,
        store: ConfigurationStore,
        validator: ConfigurationValidator,
        kv: KeyValueStoreProtocol,
        download: DownloadSink | None = None,
        creator: str = "EVA DA 2.0 Configuration Manager",
        clock: Clock = _utcnow,
    ):
        self.store = store
        self.validator = validator
        self.kv = kv
        self.download = download
        self.creator = creator
        self.clock = clock

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def build_snapshot(self, description: str | None = None) -> ConfigurationBackup:
        """Current Global and Project records with a fresh validation summary."""
        global_config = self.store.get_global()
        projects = self.store.list_projects()
        summary = self.validator.validate_all(global_config, projects)
        return ConfigurationBackup(
            version=BACKUP_FORMAT_VERSION,
            timestamp=self.clock().isoformat(),
            metadata=BackupInfo(
                description=description,
                creator=self.creator,
                platform=platform.platform(),
            ),
            global_config=global_config.to_wire(),
            project_configs=[project.to_wire() for project in projects],
            validation_summary=summary.to_wire(),
        )

    def _next_backup_key(self, timestamp: str) -> str:
        base = f"{BACKUP_PREFIX}{_key_safe(timestamp)}"
        key, suffix = base, 1
        while self.kv.get(key) is not None:
            key = f"{base}-{suffix}"
            suffix += 1
        return key

    def create_backup(self, description: str | None = None) -> str | None:
        """Snapshot into storage; returns the backup key, or None if the write failed."""
        snapshot = self.build_snapshot(description)
        try:
            key = self._next_backup_key(snapshot.timestamp)
            ok = self.kv.set(key, json.dumps(snapshot.to_wire()))
        except PersistenceError:
            logger.exception("Failed to store configuration backup")
            return None
        if not ok:
            logger.error("Storage rejected configuration backup")
            return None
        logger.info("Configuration backed up as %s", key)
        return key

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------

    def render_export(self, description: str | None = None) -> tuple[str, str]:
        """Filename and pretty-printed JSON for a downloadable export."""
        snapshot = self.build_snapshot(description or "Configuration Export")
        filename = f"{EXPORT_FILENAME_PREFIX}{_key_safe(snapshot.timestamp)}.json"
        return filename, json.dumps(snapshot.to_wire(), indent=2, ensure_ascii=False)

    def export_to_file(self, description: str | None = None) -> bool:
        """Hand an export to the download collaborator; nothing is stored locally.

        Returns ``False`` when no collaborator is configured or the hand-off fails.
        """
        if self.download is None:
            logger.error("No download collaborator configured, export skipped")
            return False
        filename, text = self.render_export(description)
        try:
            self.download(filename, text)
        except OSError:
            logger.exception("Failed to hand off export %s", filename)
            return False
        return True

    @staticmethod
    def parse_snapshot(content: str | bytes) -> ConfigurationBackup:
        """Parse and structurally check a snapshot.

        Raises:
            BackupFormatError: If the content is not JSON or lacks a required field.
        """
        try:
            data = json.loads(content)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as exc:
            raise BackupFormatError(f"File is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise BackupFormatError("Snapshot must be a JSON object")
        try:
            return ConfigurationBackup.model_validate(data)
        except ValidationError as exc:
            missing = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
            raise BackupFormatError(
                f"Missing or malformed fields: {', '.join(missing)}"
            ) from exc

    def import_from_file(self, content: str | bytes) -> ImportResult:
        """Validate an external snapshot and apply it only if it has no errors."""
        try:
            snapshot = self.parse_snapshot(content)
        except BackupFormatError as exc:
            logger.warning("Rejected configuration import: %s", exc)
            return ImportResult(
                success=False,
                message=(
                    "Invalid configuration file format. Please ensure this is a "
                    f"valid configuration export. ({exc})"
                ),
            )

        summary = self.validator.validate_all(snapshot.global_config, snapshot.project_configs)
        if summary.has_blocking_errors:
            return ImportResult(
                success=False,
                message=(
                    "Configuration file contains critical errors and cannot be imported. "
                    "Please fix validation issues first."
                ),
                validation_summary=summary,
            )

        try:
            global_config, projects = self._parse_records(snapshot)
        except BackupFormatError as exc:
            logger.warning("Rejected configuration import: %s", exc)
            return ImportResult(
                success=False,
                message=f"Configuration file contains unreadable records: {exc}",
                validation_summary=summary,
            )
        if not self.store.apply_records(global_config, projects):
            return ImportResult(
                success=False,
                message="Import failed: configuration could not be stored. No changes were made.",
                validation_summary=summary,
            )
        logger.info("Imported %d project configurations", len(snapshot.project_configs))
        return ImportResult(
            success=True,
            message=(
                f"Successfully imported {len(snapshot.project_configs)} project "
                "configurations and global settings."
            ),
            validation_summary=summary,
        )

    # ------------------------------------------------------------------
    # Restore
    # ------------------------------------------------------------------

    def _read_backup(self, key: str) -> tuple[ConfigurationBackup, int]:
        raw = self.kv.get(key)
        if raw is None:
            raise BackupNotFoundError(key)
        return self.parse_snapshot(raw), len(raw)

    def restore_from_backup(self, backup_key: str) -> RestoreResult:
        try:
            backup, _ = self._read_backup(backup_key)
        except BackupNotFoundError:
            return RestoreResult(
                success=False,
                message="Backup not found. It may have been deleted or corrupted.",
            )
        except BackupFormatError as exc:
            logger.warning("Backup %s is corrupt: %s", backup_key, exc)
            return RestoreResult(success=False, message=f"Restore failed: {exc}")
        except PersistenceError as exc:
            logger.exception("Failed to read backup %s", backup_key)
            return RestoreResult(success=False, message=f"Restore failed: {exc}")

        try:
            global_config, projects = self._parse_records(backup)
        except BackupFormatError as exc:
            logger.warning("Backup %s has unreadable records: %s", backup_key, exc)
            return RestoreResult(success=False, message=f"Restore failed: {exc}")
        if not self.store.apply_records(global_config, projects):
            return RestoreResult(
                success=False,
                message="Restore failed: configuration could not be stored. No changes were made.",
            )
        logger.info("Configuration restored from backup %s", backup_key)
        return RestoreResult(
            success=True,
            message=(
                "Successfully restored configuration from backup created on "
                f"{backup.timestamp}."
            ),
        )

    @staticmethod
    def _parse_records(
        snapshot: ConfigurationBackup,
    ) -> tuple[GlobalConfiguration, list[ProjectConfiguration]]:
        """Parse every record of *snapshot* before anything is written.

        Raises:
            BackupFormatError: Naming each record that does not parse.
        """
        unreadable: list[str] = []
        global_config = None
        try:
            global_config = GlobalConfiguration.model_validate(snapshot.global_config)
        except ValidationError:
            unreadable.append("global")
        projects: list[ProjectConfiguration] = []
        for raw in snapshot.project_configs:
            try:
                projects.append(ProjectConfiguration.model_validate(raw))
            except ValidationError:
                unreadable.append(str(raw.get("id") or "<unknown>"))
        if unreadable or global_config is None:
            raise BackupFormatError(f"Records failed to parse: {', '.join(unreadable)}")
        return global_config, projects

    # ------------------------------------------------------------------
    # Listing and retention
    # ------------------------------------------------------------------

    def list_backups(self) -> list[BackupMetadata]:
        """Stored backups, newest first; corrupt entries are skipped."""
        backups: list[BackupMetadata] = []
        try:
            keys = self.kv.keys(BACKUP_PREFIX)
        except PersistenceError:
            logger.exception("Failed to enumerate backups")
            return backups
        for key in keys:
            try:
                backup, size = self._read_backup(key)
            except (BackupNotFoundError, BackupFormatError, PersistenceError) as exc:
                logger.warning("Corrupted backup entry %s: %s", key, exc)
                continue
            health = _summary_health(backup.validation_summary)
            backups.append(
                BackupMetadata(
                    key=key,
                    timestamp=backup.timestamp,
                    description=backup.metadata.description,
                    size=size,
                    is_valid=health > BACKUP_HEALTHY_THRESHOLD,
                    project_count=len(backup.project_configs),
                )
            )
        backups.sort(key=lambda b: _parse_timestamp(b.timestamp), reverse=True)
        return backups

    def delete_backup(self, backup_key: str) -> bool:
        if not backup_key.startswith(BACKUP_PREFIX):
            logger.warning("Refusing to delete non-backup key %s", backup_key)
            return False
        try:
            return self.kv.delete(backup_key)
        except PersistenceError:
            logger.exception("Failed to delete backup %s", backup_key)
            return False

    def cleanup_old_backups(self, keep_count: int = 10) -> int:
        """Delete all but the *keep_count* newest backups; returns how many were deleted."""
        keep_count = max(keep_count, 0)
        deleted = 0
        for backup in self.list_backups()[keep_count:]:
            if self.delete_backup(backup.key):
                deleted += 1
        if deleted:
            logger.info("Deleted %d old configuration backups", deleted)
        return deleted


def _summary_health(summary: dict[str, Any]) -> float:
    value = summary.get("overallHealth", summary.get("overall_health", 0))
    return value if isinstance(value, (int, float)) else 0
