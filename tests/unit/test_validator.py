"""Unit tests for ConfigurationValidator and the Markdown report."""

import pytest

from console_config.core.validator import (
    ConfigurationValidator,
    is_valid_email,
    is_valid_hex_color,
    is_valid_url,
    render_report,
)
from console_config.defaults import load_default_projects
from console_config.models.global_config import GlobalConfiguration
from console_config.models.project import ProjectConfiguration
from tests.conftest import make_project

# ======================================================================
# Field helpers
# ======================================================================


class TestFieldHelpers:
    """Tests for the primitive format checks."""

    @pytest.mark.parametrize("value", ["#112233", "#abcdef", "#ABC", "#fff"])
    def test_hex_colors_accepted(self, value):
        assert is_valid_hex_color(value) is True

    @pytest.mark.parametrize("value", ["blue", "112233", "#12345", "#GGGGGG", "", None, 123])
    def test_hex_colors_rejected(self, value):
        assert is_valid_hex_color(value) is False

    def test_url_requires_http_scheme(self):
        assert is_valid_url("https://api.example.org/v1") is True
        assert is_valid_url("ftp://files.example.org") is False
        assert is_valid_url("not a url") is False
        assert is_valid_url("") is False

    def test_email(self):
        assert is_valid_email("ops@agency.gc.ca") is True
        assert is_valid_email("no-at-sign") is False
        assert is_valid_email(None) is False


# ======================================================================
# Project
# ======================================================================


class TestValidateProject:
    """Per-record project checks."""

    def test_valid_project(self, validator):
        result = validator.validate_project(make_project())

        assert result.is_valid is True
        assert result.errors == []
        assert result.warnings == []
        assert result.project == "acme"

    def test_accepts_parsed_model(self, validator):
        project = ProjectConfiguration.model_validate(make_project())

        assert validator.validate_project(project).is_valid is True

    def test_named_color_is_an_error(self, validator):
        payload = make_project()
        payload["uiConfig"]["theme"]["primary"] = "blue"

        result = validator.validate_project(payload)

        assert result.is_valid is False
        assert any("primary theme color" in e for e in result.errors)

    def test_zero_chat_retention_is_an_error(self, validator):
        payload = make_project()
        payload["compliance"]["retentionPolicy"]["chatHistory"] = 0

        result = validator.validate_project(payload)

        assert result.is_valid is False
        assert any("Chat history retention" in e for e in result.errors)

    def test_missing_retention_field_is_an_error(self, validator):
        payload = make_project()
        del payload["compliance"]["retentionPolicy"]["auditLogs"]

        result = validator.validate_project(payload)

        assert any("Audit log retention period is required" in e for e in result.errors)

    def test_missing_blocks_reported_without_raising(self, validator):
        result = validator.validate_project({"id": "bare"})

        assert result.is_valid is False
        assert "Display name is required and cannot be empty" in result.errors
        assert "Primary API endpoint must be configured" in result.errors
        assert "Data classification must be specified" in result.errors

    def test_non_mapping_input(self, validator):
        result = validator.validate_project(["not", "a", "record"])

        assert result.is_valid is False
        assert result.project is None

    def test_unknown_classification(self, validator):
        payload = make_project()
        payload["compliance"]["dataClassification"] = "top-secret"

        result = validator.validate_project(payload)

        assert any("top-secret" in e for e in result.errors)

    def test_invalid_primary_endpoint(self, validator):
        payload = make_project()
        payload["technical"]["apiEndpoints"]["primary"] = "localhost-api"

        result = validator.validate_project(payload)

        assert "Primary API endpoint must be a valid URL" in result.errors

    def test_warnings_do_not_invalidate(self, validator):
        payload = make_project()
        payload["businessInfo"]["costCentre"] = ""
        payload["technical"]["dataConfig"]["throughput"] = 100
        payload["technical"]["aiConfig"]["temperature"] = 3

        result = validator.validate_project(payload)

        assert result.is_valid is True
        assert len(result.warnings) == 3

    def test_high_throughput_warning(self, validator):
        payload = make_project()
        payload["technical"]["dataConfig"]["throughput"] = 50000

        result = validator.validate_project(payload)

        assert any("verify cost" in w for w in result.warnings)

    def test_bad_time_restriction_warns(self, validator):
        payload = make_project()
        payload["compliance"]["accessControl"] = {
            "timeRestrictions": {"startTime": "6am", "endTime": "22:00", "timezone": "UTC"}
        }

        result = validator.validate_project(payload)

        assert result.is_valid is True
        assert any("startTime" in w for w in result.warnings)

    def test_jurisprudence_extension_warnings(self, validator):
        payload = make_project(jurisprudenceConfig={"supportedJurisdictions": []})

        result = validator.validate_project(payload)

        assert result.is_valid is True
        assert len(result.warnings) == 2


# ======================================================================
# Global
# ======================================================================


class TestValidateGlobal:
    """Global record checks."""

    def test_defaults_are_valid(self, validator):
        result = validator.validate_global(GlobalConfiguration())

        assert result.is_valid is True
        assert result.warnings == []

    def test_invalid_support_email(self, validator):
        data = GlobalConfiguration().to_wire()
        data["platform"]["supportEmail"] = "support"

        result = validator.validate_global(data)

        assert "Valid support email address is required" in result.errors

    def test_session_timeout_bounds(self, validator):
        data = GlobalConfiguration().to_wire()
        data["platform"]["sessionTimeout"] = 2
        assert any("below" in w for w in validator.validate_global(data).warnings)

        data["platform"]["sessionTimeout"] = 600
        assert any("8 hours" in w for w in validator.validate_global(data).warnings)

        data["platform"]["sessionTimeout"] = 0
        assert validator.validate_global(data).is_valid is False

    def test_max_projects_per_user(self, validator):
        data = GlobalConfiguration().to_wire()
        data["platform"]["maxProjectsPerUser"] = 0
        assert validator.validate_global(data).is_valid is False

        data["platform"]["maxProjectsPerUser"] = 100
        result = validator.validate_global(data)
        assert result.is_valid is True
        assert len(result.warnings) == 1


# ======================================================================
# Summary / health
# ======================================================================


class TestValidateAll:
    """Cross-record checks and the health score."""

    def test_defaults_score_full_health(self, validator):
        summary = validator.validate_all(GlobalConfiguration(), load_default_projects())

        assert summary.overall_health == 100
        assert summary.total_issues == 0
        assert summary.has_blocking_errors is False

    def test_duplicate_ids_flag_every_record(self, validator):
        first = make_project()
        second = make_project()
        second["technical"]["apiEndpoints"]["primary"] = "https://other.acme.gc.ca/v1"

        summary = validator.validate_all(GlobalConfiguration(), [first, second])

        for result in summary.project_results:
            assert result.is_valid is False
            assert "Duplicate project ID: acme" in result.errors

    def test_shared_endpoint_warns_both(self, validator):
        other = make_project(id="other", name="other")

        summary = validator.validate_all(GlobalConfiguration(), [make_project(), other])

        assert summary.has_blocking_errors is False
        for result in summary.project_results:
            assert any("shared with another project" in w for w in result.warnings)

    def test_health_decreases_with_issues(self, validator):
        clean = validator.validate_all(GlobalConfiguration(), [make_project()])
        payload = make_project()
        payload["businessInfo"]["costCentre"] = ""
        one_issue = validator.validate_all(GlobalConfiguration(), [payload])
        payload["uiConfig"]["theme"]["primary"] = "blue"
        two_issues = validator.validate_all(GlobalConfiguration(), [payload])

        assert clean.overall_health == 100
        # 1 issue against a ceiling of 2 records * 10
        assert one_issue.overall_health == 95
        assert two_issues.overall_health == 90

    def test_health_rounds_halves_up(self, validator):
        projects = [make_project(id=f"p{i}", name=f"p{i}") for i in range(3)]

        summary = validator.validate_all(GlobalConfiguration(), projects)

        # 3 shared-endpoint warnings against a ceiling of 40 is 92.5
        assert summary.total_issues == 3
        assert summary.overall_health == 93

    def test_health_never_negative(self, validator):
        broken = [{"id": f"p{i}"} for i in range(3)]

        summary = validator.validate_all({}, broken)

        assert summary.overall_health == 0
        assert summary.total_issues > 40

    def test_budget_is_configurable(self):
        payload = make_project()
        payload["businessInfo"]["costCentre"] = ""

        summary = ConfigurationValidator(issue_budget_per_record=5).validate_all(
            GlobalConfiguration(), [payload]
        )

        assert summary.overall_health == 90

    def test_empty_project_list(self, validator):
        summary = validator.validate_all(GlobalConfiguration(), [])

        assert summary.overall_health == 100
        assert summary.project_results == []

    def test_summary_wire_form_is_camel_case(self, validator):
        wire = validator.validate_all(GlobalConfiguration(), [make_project()]).to_wire()

        assert set(wire) >= {"overallHealth", "totalIssues", "projectResults", "globalResult"}
        assert wire["projectResults"][0]["isValid"] is True


# ======================================================================
# Report
# ======================================================================


class TestRenderReport:
    """Markdown rendering."""

    def test_report_lists_issues(self, validator):
        payload = make_project()
        payload["uiConfig"]["theme"]["primary"] = "blue"
        summary = validator.validate_all(GlobalConfiguration(), [payload])

        report = render_report(summary)

        assert report.startswith("# Configuration Validation Report")
        assert f"## Overall Health: {summary.overall_health}%" in report
        assert "### acme" in report
        assert "**INVALID** - critical issues found" in report
        assert "- Valid primary theme color (hex format) is required" in report

    def test_report_for_missing_id(self, validator):
        summary = validator.validate_all(GlobalConfiguration(), [{}])

        assert "### (missing id)" in render_report(summary)
