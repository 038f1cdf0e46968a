"""Endpoints for the calling operator's user configuration."""

from typing import Any

from fastapi import APIRouter, Body, HTTPException, status

from console_config.dependencies import Session
from console_config.providers import Store

router = APIRouter()


@router.get("")
async def get_user(store: Store, session: Session) -> dict[str, Any]:
    """User configuration for the session (default skeleton when none is stored)."""
    return store.get_user(session).to_wire()


@router.patch("")
async def update_user(
    store: Store,
    session: Session,
    body: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Deep-merge a partial update into the session's user configuration."""
    if not store.update_user(body, session):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="User configuration update was rejected or could not be stored",
        )
    return store.get_user(session).to_wire()


@router.post("/projects/{project_id}/access")
async def record_access(project_id: str, store: Store, session: Session) -> dict[str, Any]:
    """Stamp last access to a project for the session's user."""
    if not store.has_project(project_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project '{project_id}' not found",
        )
    store.record_project_access(session, project_id)
    return store.get_user(session).to_wire()
