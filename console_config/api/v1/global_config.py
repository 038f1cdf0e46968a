"""API endpoints for the Global configuration."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from console_config.providers import Store
from console_config.utils.audit import audit_logged

router = APIRouter()


@router.get("")
async def get_global(store: Store) -> dict[str, Any]:
    """Current Global configuration."""
    return store.get_global().to_wire()


@router.patch("", dependencies=[Depends(audit_logged("update_global"))])
async def update_global(
    store: Store,
    body: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Deep-merge a partial Global configuration. Nested blocks may be sent partially."""
    if not store.update_global(body):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Global configuration update was rejected or could not be stored",
        )
    return store.get_global().to_wire()


@router.post("/reset", dependencies=[Depends(audit_logged("reset_global"))])
async def reset_global(store: Store) -> dict[str, Any]:
    """Restore built-in Global defaults."""
    if not store.reset_global():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Global configuration could not be stored",
        )
    return store.get_global().to_wire()
