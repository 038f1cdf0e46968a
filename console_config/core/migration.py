"""Migration from the pre-versioning project registry.

Runs once per cold start, before callers touch the store:

1. Read the legacy registry (a bare list, or ``{"version", "items"}``).
2. Convert each entry: merge it onto the built-in template with the same id,
   or synthesise a minimal record when no template matches.
3. Write converted records into the store.
4. Backfill every built-in template whose id is not yet in the store.

Legacy entries for ids the store already holds are ignored unless the run is
forced, so repeated runs never revert records edited after a first migration.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from console_config.constants import LEGACY_REGISTRY_KEY, PLACEHOLDER_COST_CENTRE_MARKER
from console_config.core.configuration_store import ConfigurationStore
from console_config.defaults import load_default_projects
from console_config.exceptions import PersistenceError
from console_config.models.legacy import LegacyRegistryEntry
from console_config.models.project import (
    AccessControl,
    AiConfig,
    ApiEndpoints,
    AuditConfig,
    Branding,
    BusinessInfo,
    ComplianceConfig,
    ContactInfo,
    DataClassification,
    DataConfig,
    ProjectConfiguration,
    RetentionPolicy,
    SearchConfig,
    TechnicalConfig,
    Theme,
    UiConfig,
)
from console_config.repositories.protocols import KeyValueStoreProtocol

logger = logging.getLogger(__name__)

LEGACY_API_BASE = "https://eva-foundation-api.azurewebsites.net/api"
LEGACY_CONTACT_DOMAIN = "platform.gc.ca"


@dataclass
class MigrationReport:
    """Outcome of one migration run."""

    migrated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    backfilled: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed


class ProjectIssues(BaseModel):
    """Integrity findings for one stored project."""

    project: str
    issues: list[str] = Field(default_factory=list)


class MigrationEngine:
    """Brings persisted state into the current schema, idempotently."""

    def __init__(
        self,
        store: ConfigurationStore,
        kv: KeyValueStoreProtocol,
        templates: list[ProjectConfiguration] | None = None,
    ):
        self.store = store
        self.kv = kv
        self._templates = templates

    @property
    def templates(self) -> list[ProjectConfiguration]:
        if self._templates is None:
            self._templates = load_default_projects()
        return self._templates

    def _template_for(self, project_id: str) -> ProjectConfiguration | None:
        for template in self.templates:
            if template.id == project_id:
                return template.model_copy(deep=True)
        return None

    # ------------------------------------------------------------------
    # Legacy source
    # ------------------------------------------------------------------

    def read_legacy_entries(self) -> list[Any]:
        """Raw legacy rows; empty when the source is absent or unreadable."""
        try:
            raw = self.kv.get(LEGACY_REGISTRY_KEY)
        except PersistenceError:
            logger.warning("Could not read legacy registry", exc_info=True)
            return []
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Legacy registry is not valid JSON, skipping conversion")
            return []
        if isinstance(parsed, dict):
            parsed = parsed.get("items")
        if not isinstance(parsed, list):
            logger.warning("Legacy registry has an unexpected shape, skipping conversion")
            return []
        return parsed

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def convert(self, legacy: LegacyRegistryEntry) -> ProjectConfiguration:
        """Convert one legacy entry into a current Project record."""
        template = self._template_for(legacy.id)
        if template is None:
            logger.info("No template for legacy project %s, creating basic config", legacy.id)
            return self._synthesise(legacy)

        template.display_name = legacy.label
        business = template.business_info
        business.domain = legacy.domain or business.domain
        business.owner = legacy.owner or business.owner
        business.cost_centre = legacy.cost_centre or business.cost_centre

        template.technical.search_config.index_name = legacy.rag_index.index_name
        if legacy.description:
            template.technical.ai_config.system_prompt = legacy.description

        theme = template.ui_config.theme
        theme.primary = legacy.theme.primary
        theme.background = legacy.theme.background
        theme.surface = legacy.theme.surface
        theme.base_font_px = legacy.theme.base_font_px
        template.ui_config.branding.title = legacy.label
        return template

    def _synthesise(self, legacy: LegacyRegistryEntry) -> ProjectConfiguration:
        """Minimal valid record built only from the legacy fields."""
        pid = legacy.id
        return ProjectConfiguration(
            id=pid,
            name=pid,
            display_name=legacy.label,
            business_info=BusinessInfo(
                domain=legacy.domain,
                owner=legacy.owner,
                cost_centre=legacy.cost_centre,
                department="Unknown",
                contact_info=ContactInfo(email=f"{pid.lower()}@{LEGACY_CONTACT_DOMAIN}"),
            ),
            technical=TechnicalConfig(
                api_endpoints=ApiEndpoints(
                    primary=f"{LEGACY_API_BASE}/{pid}", timeout=30000, retry_count=3
                ),
                data_config=DataConfig(
                    container_name=f"{pid}-documents", partition_key=["domain"], throughput=1000
                ),
                search_config=SearchConfig(
                    service=f"eva-search-{pid}",
                    index_name=legacy.rag_index.index_name,
                    api_version="2023-11-01",
                ),
                ai_config=AiConfig(
                    max_tokens=4000,
                    temperature=0.3,
                    system_prompt=legacy.description,
                    templates=[
                        "Based on the available information: {answer}",
                        "According to the documentation: {answer}",
                    ],
                ),
            ),
            ui_config=UiConfig(
                theme=Theme(
                    name=f"{legacy.label} Theme",
                    primary=legacy.theme.primary,
                    accent=legacy.theme.primary,
                    background=legacy.theme.background,
                    surface=legacy.theme.surface,
                    base_font_px=legacy.theme.base_font_px,
                ),
                branding=Branding(title=legacy.label, subtitle=legacy.description or None),
            ),
            compliance=ComplianceConfig(
                data_classification=DataClassification.INTERNAL,
                retention_policy=RetentionPolicy(chat_history=90, user_activity=365, audit_logs=730),
                audit_config=AuditConfig(),
                access_control=AccessControl(),
            ),
        )

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, force: bool = False) -> MigrationReport:
        """Migrate legacy entries and backfill defaults.

        Args:
            force: Overwrite records that already exist with the converted
                legacy entry instead of skipping them.
        """
        report = MigrationReport()
        entries = self.read_legacy_entries()
        if entries:
            logger.info("Found %d legacy projects to migrate", len(entries))
        else:
            logger.info("No legacy data found, initialising with defaults")

        for raw in entries:
            entry_id = raw.get("id") if isinstance(raw, dict) else None
            try:
                legacy = LegacyRegistryEntry.model_validate(raw)
                if self.store.has_project(legacy.id) and not force:
                    report.skipped.append(legacy.id)
                    continue
                migrated = self.convert(legacy)
            except (ValidationError, ValueError, TypeError, AttributeError):
                logger.exception("Failed to convert legacy entry %s", entry_id or "<unknown>")
                report.failed.append(str(entry_id or "<unknown>"))
                continue
            if not self.store.set_project(migrated):
                report.failed.append(migrated.id)
                continue
            logger.info("Migrated project: %s", migrated.id)
            report.migrated.append(migrated.id)

        report.backfilled = self.ensure_default_projects()
        logger.info(
            "Migration complete: migrated=%d skipped=%d failed=%d backfilled=%d",
            len(report.migrated),
            len(report.skipped),
            len(report.failed),
            len(report.backfilled),
        )
        return report

    def ensure_default_projects(self) -> list[str]:
        """Insert every template whose id is missing; return the inserted ids."""
        added: list[str] = []
        for template in self.templates:
            if self.store.has_project(template.id):
                continue
            self.store.set_project(template)
            logger.info("Added missing default project: %s", template.id)
            added.append(template.id)
        return added

    # ------------------------------------------------------------------
    # Integrity
    # ------------------------------------------------------------------

    def integrity_issues(self) -> list[ProjectIssues]:
        """Missing essentials and seeded placeholders that need customising."""
        findings: list[ProjectIssues] = []
        for project in self.store.list_projects():
            issues: list[str] = []
            if not project.business_info.owner:
                issues.append("Missing business owner")
            if not project.technical.api_endpoints.primary:
                issues.append("Missing primary API endpoint")
            if not project.ui_config.theme.primary:
                issues.append("Missing primary theme color")
            if PLACEHOLDER_COST_CENTRE_MARKER in project.business_info.cost_centre:
                issues.append("Using default cost centre - needs customization")
            if issues:
                findings.append(ProjectIssues(project=project.id, issues=issues))
        return findings
