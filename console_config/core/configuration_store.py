"""Layered configuration store: one Global, many Projects, one User per operator.

The store owns the in-memory records and writes through to the key-value
persistence adapter on every mutation. Reads return deep copies so callers
cannot mutate stored state in place.

Persistence failures never propagate: loads fall back to built-in defaults
and writes report ``False`` after logging. In-memory state is updated before
the write is attempted, so a failed write still leaves the new value visible
to readers in this process.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, get_args, get_origin

from pydantic import BaseModel, ValidationError

from console_config.constants import (
    DEFAULT_USER_ID,
    GLOBAL_CONFIG_KEY,
    PROJECT_CONFIG_KEY,
    USER_CONFIG_KEY,
)
from console_config.exceptions import PersistenceError
from console_config.models.global_config import GlobalConfiguration
from console_config.models.project import ProjectConfiguration, Theme
from console_config.models.user import (
    ProjectAccess,
    ProjectRole,
    SessionContext,
    UserConfiguration,
)
from console_config.repositories.protocols import KeyValueStoreProtocol
from console_config.utils.mapping import deep_merge, get_path

logger = logging.getLogger(__name__)


class ConfigurationStore:
    """Owner of the Global, Project and User configuration records."""

    def __init__(
        self,
        kv: KeyValueStoreProtocol,
        global_defaults: GlobalConfiguration | None = None,
    ):
        self._kv = kv
        self._global_defaults = global_defaults or GlobalConfiguration()
        self._global: GlobalConfiguration | None = None
        self._projects: dict[str, ProjectConfiguration] = {}
        self._users: dict[str, UserConfiguration] = {}
        self._loaded = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._global = self._load_global()
        self._projects = self._load_projects()
        self._users = {}
        self._loaded = True

    def reload(self) -> None:
        """Discard in-memory state and load again from persistence."""
        self._loaded = False
        self._ensure_loaded()

    def _read_json(self, key: str) -> Any:
        """Read and decode *key*; ``None`` when absent, unreadable or corrupt."""
        try:
            raw = self._kv.get(key)
        except PersistenceError:
            logger.warning("Failed to read %s from storage, using defaults", key, exc_info=True)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Stored value for %s is not valid JSON, using defaults", key)
            return None

    def _load_global(self) -> GlobalConfiguration:
        stored = self._read_json(GLOBAL_CONFIG_KEY)
        if isinstance(stored, Mapping):
            try:
                return GlobalConfiguration.model_validate(
                    deep_merge(self._global_defaults.to_wire(), stored)
                )
            except ValidationError as exc:
                logger.warning("Stored global config is invalid, using defaults: %s", exc)
        return self._global_defaults.model_copy(deep=True)

    def _load_projects(self) -> dict[str, ProjectConfiguration]:
        stored = self._read_json(PROJECT_CONFIG_KEY)
        projects: dict[str, ProjectConfiguration] = {}
        if not isinstance(stored, list):
            if stored is not None:
                logger.warning("Stored project map is not a list, ignoring it")
            return projects
        for raw in stored:
            try:
                project = ProjectConfiguration.model_validate(raw)
            except ValidationError as exc:
                logger.warning("Skipping unreadable stored project record: %s", exc)
                continue
            projects[project.id] = project
        return projects

    def _load_user(self, user_id: str) -> UserConfiguration | None:
        stored = self._read_json(user_config_key(user_id))
        if stored is None:
            return None
        try:
            user = UserConfiguration.model_validate(stored)
        except ValidationError as exc:
            logger.warning("Stored config for user %s is invalid, ignoring it: %s", user_id, exc)
            return None
        if user.user_id != user_id:
            logger.warning(
                "Stored config under %s belongs to %s, ignoring it", user_id, user.user_id
            )
            return None
        return user

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _write(self, key: str, payload: Any) -> bool:
        try:
            ok = self._kv.set(key, json.dumps(payload))
        except PersistenceError:
            logger.exception("Failed to persist %s", key)
            return False
        if not ok:
            logger.error("Storage rejected write for %s", key)
        return bool(ok)

    def _save_global(self) -> bool:
        assert self._global is not None
        return self._write(GLOBAL_CONFIG_KEY, self._global.to_wire())

    def _save_projects(self) -> bool:
        return self._write(
            PROJECT_CONFIG_KEY, [project.to_wire() for project in self._projects.values()]
        )

    def _save_user(self, user: UserConfiguration) -> bool:
        return self._write(user_config_key(user.user_id), user.to_wire())

    # ------------------------------------------------------------------
    # Global
    # ------------------------------------------------------------------

    def get_global(self) -> GlobalConfiguration:
        self._ensure_loaded()
        assert self._global is not None
        return self._global.model_copy(deep=True)

    def update_global(self, partial: Mapping[str, Any] | GlobalConfiguration) -> bool:
        """Deep-merge *partial* (camelCase or snake_case keys) into Global."""
        self._ensure_loaded()
        assert self._global is not None
        updates = _as_mapping(partial)
        try:
            merged = GlobalConfiguration.model_validate(
                deep_merge(self._global.to_wire(), _to_wire_keys(GlobalConfiguration, updates))
            )
        except ValidationError as exc:
            logger.error("Rejected global config update: %s", exc)
            return False
        self._global = merged
        if not self._save_global():
            logger.error("Failed to update global config")
            return False
        return True

    def replace_global(self, config: GlobalConfiguration | Mapping[str, Any]) -> bool:
        self._ensure_loaded()
        try:
            self._global = _parse(GlobalConfiguration, config)
        except ValidationError as exc:
            logger.error("Rejected global config replacement: %s", exc)
            return False
        return self._save_global()

    def reset_global(self) -> bool:
        """Restore the built-in Global defaults."""
        self._ensure_loaded()
        self._global = self._global_defaults.model_copy(deep=True)
        logger.info("Global configuration reset to defaults")
        return self._save_global()

    def has_feature_enabled(self, feature: str) -> bool:
        self._ensure_loaded()
        assert self._global is not None
        return bool(self._global.features.get(feature, False))

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def get_project(self, project_id: str) -> ProjectConfiguration | None:
        self._ensure_loaded()
        project = self._projects.get(project_id)
        return project.model_copy(deep=True) if project else None

    def has_project(self, project_id: str) -> bool:
        self._ensure_loaded()
        return project_id in self._projects

    def list_projects(self) -> list[ProjectConfiguration]:
        self._ensure_loaded()
        return [project.model_copy(deep=True) for project in self._projects.values()]

    def set_project(self, config: ProjectConfiguration | Mapping[str, Any]) -> bool:
        """Create or replace the record keyed by ``config.id``."""
        self._ensure_loaded()
        try:
            project = _parse(ProjectConfiguration, config)
        except ValidationError as exc:
            logger.error("Rejected project config: %s", exc)
            return False
        self._projects[project.id] = project
        if not self._save_projects():
            logger.error("Failed to set project config %s", project.id)
            return False
        return True

    def update_project(self, project_id: str, partial: Mapping[str, Any]) -> bool:
        """Deep-merge *partial* into an existing project; the id cannot change."""
        self._ensure_loaded()
        current = self._projects.get(project_id)
        if current is None:
            logger.warning("Cannot update unknown project %s", project_id)
            return False
        updates = _to_wire_keys(ProjectConfiguration, _as_mapping(partial))
        updates.pop("id", None)
        try:
            merged = ProjectConfiguration.model_validate(deep_merge(current.to_wire(), updates))
        except ValidationError as exc:
            logger.error("Rejected update for project %s: %s", project_id, exc)
            return False
        self._projects[project_id] = merged
        return self._save_projects()

    def delete_project(self, project_id: str) -> bool:
        """Remove a project. User access grants are left untouched."""
        self._ensure_loaded()
        if self._projects.pop(project_id, None) is None:
            return False
        logger.info("Deleted project %s", project_id)
        return self._save_projects()

    def apply_records(
        self,
        global_config: GlobalConfiguration,
        projects: list[ProjectConfiguration],
    ) -> bool:
        """Replace Global and upsert *projects* as one unit.

        Projects not named in *projects* are kept. If either write fails the
        previous records are put back, in memory and in storage.
        """
        self._ensure_loaded()
        previous_global = self._global
        previous_projects = dict(self._projects)

        self._global = global_config.model_copy(deep=True)
        for project in projects:
            self._projects[project.id] = project.model_copy(deep=True)
        if self._save_global() and self._save_projects():
            return True

        logger.error("Failed to apply configuration records, rolling back")
        self._global = previous_global
        self._projects = previous_projects
        if not (self._save_global() and self._save_projects()):
            logger.error("Rollback could not be persisted; storage may be inconsistent")
        return False

    # ------------------------------------------------------------------
    # User
    # ------------------------------------------------------------------

    def get_user(self, session: SessionContext | None = None) -> UserConfiguration:
        """The session's user record; a default skeleton when none is stored yet."""
        self._ensure_loaded()
        return self._ensure_user(session).model_copy(deep=True)

    def _ensure_user(self, session: SessionContext | None) -> UserConfiguration:
        user_id = session.user_id if session else DEFAULT_USER_ID
        user = self._users.get(user_id)
        if user is None:
            user = self._load_user(user_id) or UserConfiguration(user_id=user_id)
            self._users[user_id] = user
        return user

    def update_user(
        self, partial: Mapping[str, Any], session: SessionContext | None = None
    ) -> bool:
        """Deep-merge *partial* into the session's user record, creating it if needed."""
        self._ensure_loaded()
        user = self._ensure_user(session)
        updates = _to_wire_keys(UserConfiguration, _as_mapping(partial))
        updates.pop("userId", None)
        try:
            merged = UserConfiguration.model_validate(deep_merge(user.to_wire(), updates))
        except ValidationError as exc:
            logger.error("Rejected config update for user %s: %s", user.user_id, exc)
            return False
        self._users[merged.user_id] = merged
        if not self._save_user(merged):
            logger.error("Failed to update config for user %s", merged.user_id)
            return False
        return True

    def record_project_access(
        self,
        session: SessionContext,
        project_id: str,
        role: ProjectRole | None = None,
    ) -> bool:
        """Stamp ``lastAccessed`` for *project_id*, granting access if absent."""
        self._ensure_loaded()
        user = self._ensure_user(session)
        grant = user.project_access.get(project_id) or ProjectAccess(role=role or session.role)
        if role is not None:
            grant.role = role
        grant.last_accessed = datetime.now(UTC)
        user.project_access[project_id] = grant
        return self._save_user(user)

    def orphaned_access_grants(self, session: SessionContext | None = None) -> list[str]:
        """Project ids granted to the session's user that no longer exist."""
        self._ensure_loaded()
        user = self._ensure_user(session)
        return [pid for pid in user.project_access if pid not in self._projects]

    # ------------------------------------------------------------------
    # Resolution (Project override, then Global default)
    # ------------------------------------------------------------------

    def resolve(self, project_id: str, path: str, global_path: str | None = None) -> Any:
        """Effective value at *path*: the project's if set, else the Global one.

        Paths are dotted camelCase (``"technical.apiEndpoints.timeout"``).
        *global_path* names the Global field to fall back to when it differs
        from *path*. Returns ``None`` when neither record has a value.
        """
        self._ensure_loaded()
        assert self._global is not None
        project = self._projects.get(project_id)
        if project is not None:
            value = get_path(project.to_wire(), path)
            if value is not None:
                return value
        return get_path(self._global.to_wire(), global_path or path)

    def effective_api_timeout(self, project_id: str) -> int:
        value = self.resolve(
            project_id, "technical.apiEndpoints.timeout", "performance.defaultTimeout"
        )
        if value is None:
            return self.get_global().performance.default_timeout
        return int(value)

    def effective_theme(self, project_id: str) -> Theme | None:
        value = self.resolve(project_id, "uiConfig.theme")
        return Theme.model_validate(value) if value else None


def _as_mapping(value: Mapping[str, Any] | Any) -> dict[str, Any]:
    if hasattr(value, "to_wire"):
        return value.to_wire()
    return dict(value)


def user_config_key(user_id: str) -> str:
    """Persistence key for a user's record; the default user keeps the bare key."""
    if user_id == DEFAULT_USER_ID:
        return USER_CONFIG_KEY
    return f"{USER_CONFIG_KEY}:{user_id}"


def _parse(model: type, value: Any) -> Any:
    if isinstance(value, model):
        return value.model_copy(deep=True)
    return model.model_validate(value)


def _to_wire_keys(model: type, updates: Mapping[str, Any]) -> dict[str, Any]:
    """Rename snake_case keys in *updates* to their camelCase aliases, recursively.

    Partial updates may use either spelling; merging happens on the wire
    form, so both must land on the same key.
    """
    by_key: dict[str, Any] = {}
    for name, info in model.model_fields.items():
        by_key[name] = info
        if info.alias:
            by_key[info.alias] = info
    renamed: dict[str, Any] = {}
    for key, value in updates.items():
        info = by_key.get(key)
        if info is None:
            renamed[key] = value
            continue
        nested = _nested_model(info.annotation)
        if nested is not None and isinstance(value, Mapping):
            value = _to_wire_keys(nested, value)
        renamed[info.alias or key] = value
    return renamed


def _nested_model(annotation: Any) -> type | None:
    """The model class inside ``Model`` or ``Model | None``; None for containers."""
    if get_origin(annotation) in (dict, list):
        return None
    for candidate in get_args(annotation) or (annotation,):
        if isinstance(candidate, type) and issubclass(candidate, BaseModel):
            return candidate
    return None
