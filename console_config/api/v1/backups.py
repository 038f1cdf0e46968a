"""Backup, restore, export and import endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import BaseModel

from console_config.dependencies import Container
from console_config.providers import Backups
from console_config.schemas.backup import (
    BackupMetadata,
    CleanupResult,
    ImportResult,
    RestoreResult,
)
from console_config.utils.audit import audit_logged

router = APIRouter()


class BackupCreateRequest(BaseModel):
    description: str | None = None


class BackupCreateResponse(BaseModel):
    key: str


@router.get("/backups", response_model=list[BackupMetadata])
async def list_backups(backups: Backups) -> list[BackupMetadata]:
    """Stored backups, newest first."""
    return backups.list_backups()


@router.post(
    "/backups",
    response_model=BackupCreateResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(audit_logged("create_backup"))],
)
async def create_backup(
    backups: Backups, body: BackupCreateRequest | None = None
) -> BackupCreateResponse:
    """Snapshot the current configuration into storage."""
    key = backups.create_backup(body.description if body else None)
    if key is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Backup could not be stored",
        )
    return BackupCreateResponse(key=key)


@router.delete(
    "/backups/{key}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(audit_logged("delete_backup"))],
)
async def delete_backup(key: str, backups: Backups) -> Response:
    if not backups.delete_backup(key):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Backup '{key}' not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/backups/{key}/restore",
    response_model=RestoreResult,
    dependencies=[Depends(audit_logged("restore_backup"))],
)
async def restore_backup(key: str, backups: Backups, response: Response) -> RestoreResult:
    """Apply a stored backup (trusted; not re-validated)."""
    result = backups.restore_from_backup(key)
    if not result.success:
        response.status_code = status.HTTP_409_CONFLICT
    return result


@router.post(
    "/backups/cleanup",
    response_model=CleanupResult,
    dependencies=[Depends(audit_logged("cleanup_backups"))],
)
async def cleanup_backups(
    backups: Backups,
    container: Container,
    keep: int | None = Query(None, ge=0),
) -> CleanupResult:
    """Delete all but the newest *keep* backups (default from settings)."""
    keep_count = keep if keep is not None else container.settings.backup_keep_count
    return CleanupResult(deleted_count=backups.cleanup_old_backups(keep_count))


@router.get("/export")
async def export_configuration(
    backups: Backups, description: str | None = Query(None, max_length=500)
) -> Response:
    """Download the current configuration as a JSON file."""
    filename, text = backups.render_export(description)
    return Response(
        content=text,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post(
    "/import",
    response_model=ImportResult,
    dependencies=[Depends(audit_logged("import_configuration"))],
)
async def import_configuration(
    request: Request, backups: Backups, response: Response
) -> ImportResult:
    """Import a configuration export; rejected when any record has errors."""
    result = backups.import_from_file(await request.body())
    if not result.success:
        response.status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    return result
