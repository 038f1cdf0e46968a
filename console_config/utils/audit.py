"""Audit trail for configuration changes made through the API."""

import logging

from fastapi import Request

from console_config.dependencies import Session

logger = logging.getLogger("audit")


def audit_logged(action: str):
    """Dependency factory recording who changed what.

    Usage::

        @router.patch("/{project_id}", dependencies=[Depends(audit_logged("update_project"))])
    """

    async def _record(request: Request, session: Session) -> None:
        target = ",".join(f"{k}={v}" for k, v in request.path_params.items()) or "-"
        logger.info(
            "AUDIT action=%s target=%s user=%s role=%s client=%s request_id=%s",
            action,
            target,
            session.user_id,
            session.role,
            request.client.host if request.client else "unknown",
            getattr(request.state, "request_id", "n/a"),
        )

    return _record
