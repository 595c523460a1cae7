"""
FastAPI dependencies wiring the registry to the authenticated request.

Usage:
    @router.post("/{module_id}/install")
    async def install(
        module_id: str,
        registry: RegistryService = Depends(require_module_permission("admin", "install_modules")),
    ):
        ...
"""

from fastapi import Depends, HTTPException, Request, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from calycompta.config import get_database
from calycompta.modules.catalog import ModuleCatalog, build_catalog
from calycompta.tenant.resolver import validate_club_id
from .service import RegistryService


async def get_catalog(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> ModuleCatalog:
    """Process-wide catalog, loaded on first use if startup did not."""
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        catalog = await build_catalog(db)
        request.app.state.catalog = catalog
    return catalog


def get_club_id(request: Request) -> str:
    club_id = getattr(request.state, "club_id", None)
    if not club_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="club_id not found on request",
        )
    try:
        return validate_club_id(club_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def get_actor_id(request: Request) -> str | None:
    return getattr(request.state, "actor_id", None)


async def get_registry(
    request: Request,
    db: AsyncIOMotorDatabase = Depends(get_database),
    catalog: ModuleCatalog = Depends(get_catalog),
) -> RegistryService:
    hooks = getattr(request.app.state, "module_hooks", None)
    registry = RegistryService(db, get_club_id(request), catalog, hooks=hooks)
    return await registry.initialize()


def require_module_permission(module_id: str, permission_id: str):
    """
    Dependency factory: the caller's role must hold `permission_id` on an
    active `module_id`. Resolves to the club's RegistryService.
    """

    async def dependency(
        request: Request,
        registry: RegistryService = Depends(get_registry),
    ) -> RegistryService:
        role_id = getattr(request.state, "role_id", None)
        if not role_id or not registry.has_permission(role_id, module_id, permission_id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied. Requires: {module_id}.{permission_id}",
            )
        return registry

    return dependency
