"""Pydantic schemas for validation results."""

from pydantic import Field

from console_config.models.base import CamelModel


class ValidationResult(CamelModel):
    """Errors (blocking) and warnings (advisory) for a single record."""

    is_valid: bool = True
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    project: str | None = None

    @property
    def issue_count(self) -> int:
        return len(self.errors) + len(self.warnings)


class ValidationSummary(CamelModel):
    """Aggregate of every record's result plus the health score."""

    overall_health: int = Field(ge=0, le=100)
    total_issues: int = Field(ge=0)
    project_results: list[ValidationResult] = Field(default_factory=list)
    global_result: ValidationResult

    @property
    def has_blocking_errors(self) -> bool:
        """True if any record carries at least one error."""
        return bool(self.global_result.errors) or any(
            result.errors for result in self.project_results
        )
