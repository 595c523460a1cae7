"""
Audit Routes — view the registry audit trail.

Endpoints:
    GET  /          List entries (filter by module, action, actor, resource, date)
    GET  /{id}      Get a single entry with full before/after data
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from calycompta.registry.dependencies import require_module_permission
from calycompta.registry.service import RegistryService
from calycompta.utils import success_response

audit_router = APIRouter()

_can_view_audit = require_module_permission("admin", "view_audit")


@audit_router.get("/")
async def list_audit_logs(
    module: Optional[str] = Query(None, description="modules or roles"),
    action: Optional[str] = Query(None, description="install, grant, update, ..."),
    actor_id: Optional[str] = Query(None),
    resource_id: Optional[str] = Query(None),
    from_date: Optional[datetime] = Query(None),
    to_date: Optional[datetime] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    registry: RegistryService = Depends(_can_view_audit),
):
    """
    List audit entries, most recent first.

    Common queries:
        - Everything done to a module:  ?resource_id=expenses
        - All grants and revokes:       ?module=roles&action=grant
        - One administrator's actions:  ?actor_id=xxx
    """
    logs, total = await registry.audit.list_logs(
        module=module, action=action, actor_id=actor_id,
        resource_id=resource_id,
        from_date=from_date, to_date=to_date,
        limit=limit, offset=offset,
    )
    return success_response(
        data={"logs": logs, "total": total, "limit": limit, "offset": offset}
    )


@audit_router.get("/{log_id}")
async def get_audit_log(
    log_id: str,
    registry: RegistryService = Depends(_can_view_audit),
):
    return success_response(data=await registry.audit.get_log(log_id))
