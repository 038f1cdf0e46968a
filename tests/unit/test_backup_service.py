"""Unit tests for BackupService (snapshots, restore, import/export, retention)."""

import json

import pytest

from console_config.constants import BACKUP_PREFIX, PROJECT_CONFIG_KEY
from console_config.core.configuration_store import ConfigurationStore
from console_config.exceptions import BackupFormatError, PersistenceError
from console_config.repositories.kv_store import InMemoryKeyValueStore
from console_config.services.backup_service import BackupService, DirectoryDownloadSink
from tests.conftest import make_clock, make_project


class ReadOnlyKeyValueStore(InMemoryKeyValueStore):
    def set(self, key: str, value: str) -> bool:
        raise PersistenceError("set", key, "read-only")


class ProjectWriteFailingKeyValueStore(InMemoryKeyValueStore):
    """Project map writes fail once ``fail_project_writes`` is switched on."""

    fail_project_writes = False

    def set(self, key: str, value: str) -> bool:
        if self.fail_project_writes and key == PROJECT_CONFIG_KEY:
            raise PersistenceError("set", key, "backend unavailable")
        return super().set(key, value)


def _unparseable_project(project_id: str = "bad") -> dict:
    project = make_project(id=project_id, name=project_id)
    project["technical"]["apiEndpoints"]["timeout"] = "slow"
    return project


# ======================================================================
# Snapshots
# ======================================================================


class TestCreateBackup:
    """Storing snapshots."""

    def test_create_backup_stores_snapshot(self, backups, store, kv):
        store.set_project(make_project())

        key = backups.create_backup("before release")

        assert key is not None
        assert key.startswith(BACKUP_PREFIX)
        stored = json.loads(kv.get(key))
        assert stored["version"] == "2.0.0"
        assert stored["metadata"]["description"] == "before release"
        assert [p["id"] for p in stored["projectConfigs"]] == ["acme"]
        assert stored["globalConfig"]["platform"]["name"] == "EVA DA 2.0"
        assert stored["validationSummary"]["overallHealth"] == 100

    def test_keys_are_unique_for_same_timestamp(self, store, validator, kv):
        frozen = make_clock()()
        service = BackupService(store, validator, kv, clock=lambda: frozen)

        first = service.create_backup()
        second = service.create_backup()

        assert first != second
        assert second == f"{first}-1"

    def test_write_failure_returns_none(self, store, validator):
        service = BackupService(store, validator, ReadOnlyKeyValueStore())

        assert service.create_backup() is None


# ======================================================================
# Restore
# ======================================================================


class TestRestore:
    """Applying stored backups."""

    def test_round_trip(self, backups, store):
        store.set_project(make_project())
        store.update_global({"platform": {"sessionTimeout": 120}})
        key = backups.create_backup()
        snapshot = (store.get_global(), store.list_projects())

        store.update_project("acme", {"displayName": "Changed"})
        store.update_global({"platform": {"sessionTimeout": 30}})
        result = backups.restore_from_backup(key)

        assert result.success is True
        assert (store.get_global(), store.list_projects()) == snapshot

    def test_restore_without_changes_is_idempotent(self, backups, store, migration):
        migration.run()
        before = (store.get_global(), store.list_projects())

        result = backups.restore_from_backup(backups.create_backup())

        assert result.success is True
        assert (store.get_global(), store.list_projects()) == before

    def test_missing_backup(self, backups):
        result = backups.restore_from_backup(f"{BACKUP_PREFIX}nope")

        assert result.success is False
        assert "not found" in result.message

    def test_corrupt_backup(self, backups, kv):
        kv.set(f"{BACKUP_PREFIX}bad", "{truncated")

        result = backups.restore_from_backup(f"{BACKUP_PREFIX}bad")

        assert result.success is False

    def test_restore_keeps_projects_not_in_backup(self, backups, store):
        key = backups.create_backup()
        store.set_project(make_project())

        backups.restore_from_backup(key)

        assert store.has_project("acme")

    def test_unparseable_record_leaves_store_unchanged(self, backups, store, kv):
        store.set_project(make_project())
        key = backups.create_backup()
        stored = json.loads(kv.get(key))
        stored["globalConfig"]["platform"]["name"] = "From Backup"
        stored["projectConfigs"] = [make_project(id="good", name="good"), _unparseable_project()]
        kv.set(key, json.dumps(stored))
        before = (store.get_global(), store.list_projects())

        result = backups.restore_from_backup(key)

        assert result.success is False
        assert "bad" in result.message
        assert (store.get_global(), store.list_projects()) == before


# ======================================================================
# Export / import
# ======================================================================


class TestExportImport:
    """User-facing export files and validated imports."""

    def test_render_export(self, backups, store):
        store.set_project(make_project())

        filename, text = backups.render_export()

        assert filename.startswith("config-export-")
        assert filename.endswith(".json")
        data = json.loads(text)
        assert data["metadata"]["description"] == "Configuration Export"
        assert "\n  " in text

    def test_export_hands_file_to_download(self, backups, downloads, kv):
        keys_before = kv.keys()

        assert backups.export_to_file("manual") is True

        assert len(downloads) == 1
        assert json.loads(downloads[0][1])["metadata"]["description"] == "manual"
        assert kv.keys() == keys_before

    def test_export_without_download_collaborator(self, store, validator, kv):
        keys_before = kv.keys()

        assert BackupService(store, validator, kv).export_to_file() is False
        assert kv.keys() == keys_before

    def test_directory_download_sink(self, tmp_path):
        sink = DirectoryDownloadSink(tmp_path / "out")

        sink("export.json", "{}")

        assert (tmp_path / "out" / "export.json").read_text() == "{}"

    def test_import_valid_file(self, backups, store):
        store.set_project(make_project())
        _, text = backups.render_export()
        store.delete_project("acme")

        result = backups.import_from_file(text)

        assert result.success is True
        assert result.validation_summary.overall_health == 100
        assert store.has_project("acme")

    def test_import_missing_global_leaves_store_unchanged(self, backups, store):
        store.set_project(make_project())
        before = (store.get_global(), store.list_projects())
        data = json.loads(backups.render_export()[1])
        del data["globalConfig"]
        data["projectConfigs"][0]["displayName"] = "Imported"

        result = backups.import_from_file(json.dumps(data))

        assert result.success is False
        assert "Invalid configuration file format" in result.message
        assert (store.get_global(), store.list_projects()) == before

    def test_import_with_errors_rejected(self, backups, store):
        data = json.loads(backups.render_export()[1])
        bad = make_project()
        bad["uiConfig"]["theme"]["primary"] = "blue"
        data["projectConfigs"] = [bad]

        result = backups.import_from_file(json.dumps(data))

        assert result.success is False
        assert result.validation_summary is not None
        assert result.validation_summary.has_blocking_errors is True
        assert store.list_projects() == []

    def test_import_with_unparseable_record_leaves_store_unchanged(self, backups, store):
        store.set_project(make_project())
        before = (store.get_global(), store.list_projects())
        data = json.loads(backups.render_export()[1])
        data["globalConfig"]["platform"]["name"] = "Changed By Import"
        data["projectConfigs"] = [make_project(id="good", name="good"), _unparseable_project()]

        result = backups.import_from_file(json.dumps(data))

        assert result.success is False
        assert "bad" in result.message
        assert (store.get_global(), store.list_projects()) == before
        assert not store.has_project("good")

    def test_import_write_failure_leaves_store_unchanged(self, validator):
        kv = ProjectWriteFailingKeyValueStore()
        store = ConfigurationStore(kv)
        store.set_project(make_project())
        service = BackupService(store, validator, kv, clock=make_clock())
        data = json.loads(service.render_export()[1])
        data["globalConfig"]["platform"]["name"] = "Imported"
        data["projectConfigs"].append(make_project(id="new", name="new"))
        before = (store.get_global(), store.list_projects())
        kv.fail_project_writes = True

        result = service.import_from_file(json.dumps(data))

        assert result.success is False
        assert "No changes were made" in result.message
        assert (store.get_global(), store.list_projects()) == before
        assert ConfigurationStore(kv).get_global().platform.name == "EVA DA 2.0"

    def test_import_not_json(self, backups):
        result = backups.import_from_file(b"\x89PNG")

        assert result.success is False

    def test_parse_snapshot_names_missing_fields(self):
        with pytest.raises(BackupFormatError, match="projectConfigs"):
            BackupService.parse_snapshot(
                json.dumps(
                    {
                        "version": "2.0.0",
                        "timestamp": "2025-01-01T00:00:00+00:00",
                        "metadata": {},
                        "globalConfig": {},
                        "validationSummary": {},
                    }
                )
            )


# ======================================================================
# Listing and retention
# ======================================================================


class TestListingAndCleanup:
    """Enumerating and pruning stored backups."""

    def test_list_newest_first(self, backups):
        keys = [backups.create_backup(f"b{i}") for i in range(3)]

        listed = backups.list_backups()

        assert [b.key for b in listed] == list(reversed(keys))
        assert listed[0].description == "b2"
        assert listed[0].is_valid is True
        assert listed[0].project_count == 0
        assert listed[0].size > 0

    def test_list_skips_corrupt_entries(self, backups, kv):
        backups.create_backup()
        kv.set(f"{BACKUP_PREFIX}corrupt", "not json")

        assert len(backups.list_backups()) == 1

    def test_low_health_backup_marked_invalid(self, backups, store):
        store.set_project({"id": "bare"})

        backups.create_backup()

        assert backups.list_backups()[0].is_valid is False

    def test_cleanup_keeps_newest(self, backups):
        keys = [backups.create_backup() for _ in range(5)]

        deleted = backups.cleanup_old_backups(2)

        assert deleted == 3
        assert [b.key for b in backups.list_backups()] == [keys[4], keys[3]]

    def test_cleanup_with_fewer_backups(self, backups):
        backups.create_backup()

        assert backups.cleanup_old_backups() == 0

    def test_delete_refuses_other_keys(self, backups, kv):
        assert backups.delete_backup("globalConfig.v1") is False
