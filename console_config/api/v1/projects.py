"""Project configuration endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Response, status

from console_config.models.project import ProjectConfiguration
from console_config.providers import Store
from console_config.utils.audit import audit_logged

router = APIRouter()

_PROJECT_ID = Path(min_length=1, max_length=100, description="Project identifier")


def _not_found(project_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Project '{project_id}' not found",
    )


@router.get("")
async def list_projects(store: Store) -> list[dict[str, Any]]:
    """List all project configurations."""
    return [project.to_wire() for project in store.list_projects()]


@router.get("/{project_id}")
async def get_project(store: Store, project_id: str = _PROJECT_ID) -> dict[str, Any]:
    """Get a project configuration by id."""
    project = store.get_project(project_id)
    if project is None:
        raise _not_found(project_id)
    return project.to_wire()


@router.put("/{project_id}", dependencies=[Depends(audit_logged("set_project"))])
async def set_project(
    body: ProjectConfiguration,
    store: Store,
    project_id: str = _PROJECT_ID,
) -> dict[str, Any]:
    """Create or replace a project configuration."""
    if body.id != project_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Project id in body does not match the URL",
        )
    if not store.set_project(body):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Project configuration could not be stored",
        )
    return body.to_wire()


@router.patch("/{project_id}", dependencies=[Depends(audit_logged("update_project"))])
async def update_project(
    store: Store,
    project_id: str = _PROJECT_ID,
    body: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Deep-merge a partial update into an existing project."""
    if not store.has_project(project_id):
        raise _not_found(project_id)
    if not store.update_project(project_id, body):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Project update was rejected or could not be stored",
        )
    project = store.get_project(project_id)
    assert project is not None
    return project.to_wire()


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(audit_logged("delete_project"))],
)
async def delete_project(store: Store, project_id: str = _PROJECT_ID) -> Response:
    """Delete a project configuration."""
    if not store.delete_project(project_id):
        raise _not_found(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{project_id}/effective-timeout")
async def effective_timeout(store: Store, project_id: str = _PROJECT_ID) -> dict[str, Any]:
    """API timeout for the project, falling back to the Global default."""
    return {"projectId": project_id, "timeout": store.effective_api_timeout(project_id)}
