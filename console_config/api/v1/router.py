"""API v1 router aggregation."""

from fastapi import APIRouter

from console_config.api.v1 import backups, global_config, health, projects, user, validation

api_router = APIRouter()

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(global_config.router, prefix="/global", tags=["Global"])
api_router.include_router(projects.router, prefix="/projects", tags=["Projects"])
api_router.include_router(user.router, prefix="/user", tags=["User"])
api_router.include_router(validation.router, prefix="/validation", tags=["Validation"])
api_router.include_router(backups.router, tags=["Backups"])
