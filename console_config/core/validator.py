"""Schema and consistency validation for configuration records.

Validators work on the camelCase wire form so that raw, partially-formed
input (an uploaded file, a corrupt stored record) is judged the same way as
a parsed model. They never raise: a missing nested block is reported as an
error on the field that should have been there.
"""

import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import AnyHttpUrl, EmailStr, TypeAdapter, ValidationError

from console_config.constants import (
    HEX_COLOR_PATTERN,
    MAX_CHAT_RETENTION_DAYS,
    MAX_PROJECTS_PER_USER,
    MAX_SESSION_TIMEOUT,
    MAX_THROUGHPUT,
    MIN_SESSION_TIMEOUT,
    MIN_THROUGHPUT,
    TIME_OF_DAY_PATTERN,
)
from console_config.models.project import DataClassification
from console_config.schemas.validation import ValidationResult, ValidationSummary
from console_config.utils.mapping import get_path

_HEX_COLOR = re.compile(HEX_COLOR_PATTERN)
_TIME_OF_DAY = re.compile(TIME_OF_DAY_PATTERN)
_URL_ADAPTER = TypeAdapter(AnyHttpUrl)
_EMAIL_ADAPTER = TypeAdapter(EmailStr)

_CLASSIFICATIONS = {c.value for c in DataClassification}
_RETENTION_FIELDS = {
    "chatHistory": "Chat history",
    "userActivity": "User activity",
    "auditLogs": "Audit log",
}


def is_valid_hex_color(value: Any) -> bool:
    return isinstance(value, str) and bool(_HEX_COLOR.match(value))


def is_valid_url(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return True


def is_valid_email(value: Any) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        _EMAIL_ADAPTER.validate_python(value)
    except ValidationError:
        return False
    return True


def _as_wire(record: Any) -> Any:
    """Accept a parsed model or a raw mapping."""
    if hasattr(record, "to_wire"):
        return record.to_wire()
    return record


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigurationValidator:
    """Validates Global and Project records and scores overall health.

    Args:
        issue_budget_per_record: Issues each record may carry before the
            health score reaches 0. The ceiling for a summary is
            ``(project_count + 1) * issue_budget_per_record``.
    """

    def __init__(self, issue_budget_per_record: int = 10):
        self.issue_budget_per_record = issue_budget_per_record

    # ------------------------------------------------------------------
    # Project
    # ------------------------------------------------------------------

    def validate_project(self, config: Any) -> ValidationResult:
        data = _as_wire(config)
        errors: list[str] = []
        warnings: list[str] = []

        if not isinstance(data, Mapping):
            return ValidationResult(
                is_valid=False, errors=["Project configuration must be an object"]
            )

        project_id = data.get("id")
        if not isinstance(project_id, str) or not project_id:
            errors.append("Project ID is required and cannot be empty")
        if not get_path(data, "displayName"):
            errors.append("Display name is required and cannot be empty")

        self._check_business(data, errors, warnings)
        self._check_technical(data, errors, warnings)
        self._check_ui(data, errors, warnings)
        self._check_compliance(data, errors, warnings)

        extension = data.get("jurisprudenceConfig")
        if extension is not None:
            self._check_jurisprudence(extension, warnings)

        return ValidationResult(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            project=project_id if isinstance(project_id, str) else None,
        )

    def _check_business(self, data: Mapping, errors: list[str], warnings: list[str]) -> None:
        if not get_path(data, "businessInfo.domain"):
            errors.append("Business domain is required")
        if not get_path(data, "businessInfo.owner"):
            errors.append("Business owner is required")
        if not get_path(data, "businessInfo.costCentre"):
            warnings.append("Cost centre should be specified for budget tracking")
        email = get_path(data, "businessInfo.contactInfo.email")
        if email and not is_valid_email(email):
            warnings.append("Contact email address is not valid")

    def _check_technical(self, data: Mapping, errors: list[str], warnings: list[str]) -> None:
        primary = get_path(data, "technical.apiEndpoints.primary")
        if not primary:
            errors.append("Primary API endpoint must be configured")
        elif not is_valid_url(primary):
            errors.append("Primary API endpoint must be a valid URL")

        backup = get_path(data, "technical.apiEndpoints.backup")
        if backup and not is_valid_url(backup):
            warnings.append("Backup API endpoint is not a valid URL")

        if not get_path(data, "technical.searchConfig.indexName"):
            errors.append("Search index name is required")
        if not get_path(data, "technical.aiConfig.model"):
            errors.append("AI model configuration is required")

        temperature = get_path(data, "technical.aiConfig.temperature")
        if _is_number(temperature) and not 0 <= temperature <= 2:
            warnings.append("AI temperature should be between 0 and 2")

        throughput = get_path(data, "technical.dataConfig.throughput")
        if _is_number(throughput):
            if throughput < MIN_THROUGHPUT:
                warnings.append(f"Throughput below {MIN_THROUGHPUT} RU/s may impact performance")
            elif throughput > MAX_THROUGHPUT:
                warnings.append("High throughput configuration - verify cost implications")

    def _check_ui(self, data: Mapping, errors: list[str], warnings: list[str]) -> None:
        theme = get_path(data, "uiConfig.theme")
        if not isinstance(theme, Mapping):
            errors.append("Valid primary theme color (hex format) is required")
            return
        if not is_valid_hex_color(theme.get("primary")):
            errors.append("Valid primary theme color (hex format) is required")
        for key in ("accent", "background", "surface"):
            value = theme.get(key)
            if value and not is_valid_hex_color(value):
                warnings.append(f"Theme {key} color should be a hex value")
        if not theme.get("name"):
            warnings.append("Theme name should be specified for better identification")

    def _check_compliance(self, data: Mapping, errors: list[str], warnings: list[str]) -> None:
        classification = get_path(data, "compliance.dataClassification")
        if not classification:
            errors.append("Data classification must be specified")
        elif classification not in _CLASSIFICATIONS:
            errors.append(
                f"Data classification '{classification}' must be one of: "
                + ", ".join(sorted(_CLASSIFICATIONS))
            )

        for key, label in _RETENTION_FIELDS.items():
            days = get_path(data, f"compliance.retentionPolicy.{key}")
            if not _is_number(days):
                errors.append(f"{label} retention period is required")
            elif days < 1:
                errors.append(f"{label} retention must be at least 1 day")

        chat_days = get_path(data, "compliance.retentionPolicy.chatHistory")
        if _is_number(chat_days) and chat_days > MAX_CHAT_RETENTION_DAYS:
            warnings.append("Chat history retention over 7 years - verify legal requirements")

        window = get_path(data, "compliance.accessControl.timeRestrictions")
        if isinstance(window, Mapping):
            for key in ("startTime", "endTime"):
                value = window.get(key)
                if not (isinstance(value, str) and _TIME_OF_DAY.match(value)):
                    warnings.append(f"Access time restriction {key} should use HH:MM")

    def _check_jurisprudence(self, extension: Any, warnings: list[str]) -> None:
        if not isinstance(extension, Mapping):
            warnings.append("Jurisprudence configuration block is malformed")
            return
        if not extension.get("supportedJurisdictions"):
            warnings.append("Jurisprudence projects should specify supported jurisdictions")
        if not get_path(extension, "legalDatabases.primary"):
            warnings.append("Primary legal database should be configured for jurisprudence projects")

    # ------------------------------------------------------------------
    # Global
    # ------------------------------------------------------------------

    def validate_global(self, config: Any) -> ValidationResult:
        data = _as_wire(config)
        errors: list[str] = []
        warnings: list[str] = []

        if not isinstance(data, Mapping):
            return ValidationResult(is_valid=False, errors=["Global configuration must be an object"])

        if not get_path(data, "platform.name"):
            errors.append("Platform name is required")
        if not get_path(data, "platform.version"):
            errors.append("Platform version is required")

        max_projects = get_path(data, "platform.maxProjectsPerUser")
        if not _is_number(max_projects) or max_projects < 1:
            errors.append("Maximum projects per user must be at least 1")
        elif max_projects > MAX_PROJECTS_PER_USER:
            warnings.append("High maximum projects per user - may impact performance")

        timeout = get_path(data, "platform.sessionTimeout")
        if not _is_number(timeout) or timeout < 1:
            errors.append("Session timeout must be a positive number of minutes")
        elif timeout < MIN_SESSION_TIMEOUT:
            warnings.append(
                f"Session timeout below {MIN_SESSION_TIMEOUT} minutes may cause user frustration"
            )
        elif timeout > MAX_SESSION_TIMEOUT:
            warnings.append("Session timeout over 8 hours may be a security risk")

        if not is_valid_email(get_path(data, "platform.supportEmail")):
            errors.append("Valid support email address is required")

        return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

    # ------------------------------------------------------------------
    # Everything
    # ------------------------------------------------------------------

    def validate_all(self, global_config: Any, projects: Iterable[Any]) -> ValidationSummary:
        """Validate every record, run cross-record checks and score health."""
        project_data = [_as_wire(p) for p in projects]
        global_result = self.validate_global(global_config)
        project_results = [self.validate_project(p) for p in project_data]

        self._check_cross_project(project_data, project_results)

        total_issues = global_result.issue_count + sum(r.issue_count for r in project_results)
        ceiling = (len(project_data) + 1) * self.issue_budget_per_record
        # Halves round up
        overall_health = max(0, math.floor(100 - total_issues / ceiling * 100 + 0.5))

        return ValidationSummary(
            overall_health=overall_health,
            total_issues=total_issues,
            project_results=project_results,
            global_result=global_result,
        )

    def _check_cross_project(
        self, projects: list[Any], results: list[ValidationResult]
    ) -> None:
        """Duplicate ids are errors on every record sharing them; shared endpoints warn."""
        ids: dict[str, list[int]] = {}
        endpoints: dict[str, list[int]] = {}
        for index, data in enumerate(projects):
            project_id = data.get("id") if isinstance(data, Mapping) else None
            if isinstance(project_id, str) and project_id:
                ids.setdefault(project_id, []).append(index)
            endpoint = get_path(data, "technical.apiEndpoints.primary")
            if isinstance(endpoint, str) and endpoint:
                endpoints.setdefault(endpoint, []).append(index)

        for project_id, indexes in ids.items():
            if len(indexes) > 1:
                for index in indexes:
                    results[index].errors.append(f"Duplicate project ID: {project_id}")
                    results[index].is_valid = False

        for indexes in endpoints.values():
            if len(indexes) > 1:
                for index in indexes:
                    results[index].warnings.append(
                        "API endpoint shared with another project - verify if intentional"
                    )


def render_report(summary: ValidationSummary) -> str:
    """Render a Markdown validation report for display or download."""
    lines = [
        "# Configuration Validation Report",
        "",
        f"## Overall Health: {summary.overall_health}%",
        f"Total Issues Found: {summary.total_issues}",
        "",
        "## Global Configuration",
    ]
    lines.extend(_report_section(summary.global_result, heading="###"))
    lines.extend(["", "## Project Configurations"])
    for result in summary.project_results:
        lines.extend(["", f"### {result.project or '(missing id)'}"])
        lines.extend(_report_section(result, heading="####"))
    return "\n".join(lines) + "\n"


def _report_section(result: ValidationResult, heading: str) -> list[str]:
    lines = ["**VALID**" if result.is_valid else "**INVALID** - critical issues found"]
    if result.errors:
        lines.extend(["", f"{heading} Errors:"])
        lines.extend(f"- {error}" for error in result.errors)
    if result.warnings:
        lines.extend(["", f"{heading} Warnings:"])
        lines.extend(f"- {warning}" for warning in result.warnings)
    return lines
