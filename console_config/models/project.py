"""Project (tenant) configuration record."""

from datetime import date
from enum import StrEnum
from typing import Any

from pydantic import Field

from console_config.models.base import CamelModel


class DataClassification(StrEnum):
    """Closed set of data-classification levels."""

    PUBLIC = "public"
    INTERNAL = "internal"
    CONFIDENTIAL = "confidential"
    RESTRICTED = "restricted"


class AuditExportFormat(StrEnum):
    JSON = "json"
    CSV = "csv"
    EXCEL = "excel"


# ---------------------------------------------------------------------------
# Business metadata
# ---------------------------------------------------------------------------


class ContactInfo(CamelModel):
    email: str = ""
    phone: str | None = None
    manager: str | None = None


class BusinessInfo(CamelModel):
    domain: str = ""
    owner: str = ""
    cost_centre: str = ""
    department: str = ""
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    business_case: str | None = None
    expected_users: int | None = None
    launch_date: date | None = None


# ---------------------------------------------------------------------------
# Technical settings
# ---------------------------------------------------------------------------


class ApiEndpoints(CamelModel):
    primary: str = ""
    backup: str | None = None
    timeout: int = 30000  # ms
    retry_count: int = 3


class DataConfig(CamelModel):
    cosmos_endpoint: str | None = None
    container_name: str = ""
    partition_key: list[str] = Field(default_factory=list)
    indexing_policy: dict[str, Any] | None = None
    throughput: int = 1000  # RU/s


class SearchConfig(CamelModel):
    service: str = ""
    index_name: str = ""
    api_version: str = "2023-11-01"
    vector_dimensions: int | None = None
    semantic_config: str | None = None


class AiConfig(CamelModel):
    deployment: str = "gpt-4-turbo"
    model: str = "gpt-4-turbo-preview"
    max_tokens: int = 4000
    temperature: float = 0.3
    system_prompt: str = ""
    templates: list[str] = Field(default_factory=list)


class TechnicalConfig(CamelModel):
    api_endpoints: ApiEndpoints = Field(default_factory=ApiEndpoints)
    data_config: DataConfig = Field(default_factory=DataConfig)
    search_config: SearchConfig = Field(default_factory=SearchConfig)
    ai_config: AiConfig = Field(default_factory=AiConfig)


# ---------------------------------------------------------------------------
# UI settings
# ---------------------------------------------------------------------------


class Theme(CamelModel):
    name: str = ""
    primary: str = ""
    accent: str = ""
    background: str = "#FFFFFF"
    surface: str = "#F8F9FA"
    base_font_px: int = 16


class Branding(CamelModel):
    logo: str | None = None
    favicon: str | None = None
    title: str = ""
    subtitle: str | None = None
    footer_text: str | None = None


class Layout(CamelModel):
    show_sidebar: bool = True
    sidebar_width: int = 320
    header_height: int = 64
    max_content_width: int = 1200


class UiFeatures(CamelModel):
    enable_chat: bool = True
    enable_file_upload: bool = False
    enable_export: bool = True
    enable_history: bool = True
    show_project_info: bool = True


class UiConfig(CamelModel):
    theme: Theme = Field(default_factory=Theme)
    branding: Branding = Field(default_factory=Branding)
    layout: Layout = Field(default_factory=Layout)
    features: UiFeatures = Field(default_factory=UiFeatures)


# ---------------------------------------------------------------------------
# Compliance
# ---------------------------------------------------------------------------


class RetentionPolicy(CamelModel):
    """Retention periods in days."""

    chat_history: int = 90
    user_activity: int = 365
    audit_logs: int = 730


class AuditConfig(CamelModel):
    enable_full_audit: bool = False
    log_user_actions: bool = False
    log_system_events: bool = True
    export_format: AuditExportFormat = AuditExportFormat.JSON


class TimeRestrictions(CamelModel):
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    timezone: str


class AccessControl(CamelModel):
    require_approval: bool = False
    allow_guest_access: bool = False
    ip_whitelist: list[str] | None = None
    time_restrictions: TimeRestrictions | None = None


class ComplianceConfig(CamelModel):
    data_classification: DataClassification = DataClassification.INTERNAL
    retention_policy: RetentionPolicy = Field(default_factory=RetentionPolicy)
    audit_config: AuditConfig = Field(default_factory=AuditConfig)
    access_control: AccessControl = Field(default_factory=AccessControl)


# ---------------------------------------------------------------------------
# Domain extension
# ---------------------------------------------------------------------------


class LegalDatabases(CamelModel):
    primary: str = ""
    secondary: list[str] | None = None


class JurisprudenceConfig(CamelModel):
    """Extension block present only on legal-research projects."""

    enable_case_law_search: bool = True
    enable_regulatory_compliance: bool = True
    enable_bilingual_processing: bool = True
    supported_jurisdictions: list[str] = Field(default_factory=list)
    legal_databases: LegalDatabases = Field(default_factory=LegalDatabases)
    compliance_frameworks: list[str] = Field(default_factory=list)


class ProjectConfiguration(CamelModel):
    """One record per tenant project, keyed by ``id``."""

    id: str
    name: str = ""
    display_name: str = ""
    business_info: BusinessInfo = Field(default_factory=BusinessInfo)
    technical: TechnicalConfig = Field(default_factory=TechnicalConfig)
    ui_config: UiConfig = Field(default_factory=UiConfig)
    compliance: ComplianceConfig = Field(default_factory=ComplianceConfig)
    jurisprudence_config: JurisprudenceConfig | None = None
