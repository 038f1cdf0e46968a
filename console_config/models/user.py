"""User (operator) configuration record and session context."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from pydantic import Field

from console_config.models.base import CamelModel


class ProjectRole(StrEnum):
    """Role granted to a user within a single project."""

    VIEWER = "viewer"
    USER = "user"
    CONTRIBUTOR = "contributor"
    ADMIN = "admin"


class Language(StrEnum):
    EN = "en"
    FR = "fr"


class ThemePreference(StrEnum):
    LIGHT = "light"
    DARK = "dark"
    AUTO = "auto"


class FontSize(StrEnum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class Density(StrEnum):
    COMPACT = "compact"
    COMFORTABLE = "comfortable"
    SPACIOUS = "spacious"


class NotificationFrequency(StrEnum):
    IMMEDIATE = "immediate"
    DAILY = "daily"
    WEEKLY = "weekly"


class NotificationSettings(CamelModel):
    email: bool = True
    browser: bool = True
    frequency: NotificationFrequency = NotificationFrequency.DAILY


class UserPreferences(CamelModel):
    language: Language = Language.EN
    theme: ThemePreference = ThemePreference.AUTO
    font_size: FontSize = FontSize.MEDIUM
    density: Density = Density.COMFORTABLE
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)


class ProjectAccess(CamelModel):
    role: ProjectRole = ProjectRole.VIEWER
    permissions: list[str] = Field(default_factory=list)
    last_accessed: datetime | None = None


class SavedSearch(CamelModel):
    name: str
    query: str
    project_id: str


class UserCustomizations(CamelModel):
    dashboard_layout: dict | None = None
    favorite_projects: list[str] = Field(default_factory=list)
    recent_queries: list[str] = Field(default_factory=list)
    saved_searches: list[SavedSearch] = Field(default_factory=list)


class UserConfiguration(CamelModel):
    """Preferences, per-project access grants and personal customisations."""

    user_id: str = "default-user"
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    project_access: dict[str, ProjectAccess] = Field(default_factory=dict)
    customizations: UserCustomizations = Field(default_factory=UserCustomizations)


@dataclass(frozen=True)
class SessionContext:
    """Already-resolved identity of the operator making a call.

    Authentication happens upstream; the store only needs to know whose
    record it is touching.
    """

    user_id: str = "default-user"
    role: ProjectRole = ProjectRole.USER
