"""Validation endpoints for the admin dashboard."""

from typing import Any

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from console_config.core.validator import render_report
from console_config.dependencies import Container, Session
from console_config.providers import Store, Validator
from console_config.schemas.validation import ValidationSummary

router = APIRouter()


@router.get("", response_model=ValidationSummary)
async def validate_all(store: Store, validator: Validator) -> ValidationSummary:
    """Validate the Global record and every project."""
    return validator.validate_all(store.get_global(), store.list_projects())


@router.get("/report", response_class=PlainTextResponse)
async def validation_report(store: Store, validator: Validator) -> str:
    """Markdown validation report."""
    return render_report(validator.validate_all(store.get_global(), store.list_projects()))


@router.get("/integrity")
async def integrity(container: Container, session: Session) -> dict[str, Any]:
    """Seeded placeholders needing customisation, and the caller's dangling grants."""
    return {
        "projects": [
            finding.model_dump() for finding in container.migration.integrity_issues()
        ],
        "orphanedAccessGrants": container.store.orphaned_access_grants(session),
    }
