from fastapi import APIRouter, Depends, HTTPException, Request, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from calycompta.config import get_database, settings
from calycompta.modules.catalog import ModuleCatalog
from calycompta.tenant.resolver import validate_club_id
from calycompta.utils import serialize_mongo_doc, success_response
from .dependencies import get_catalog
from .service import RegistryService

clubs_router = APIRouter()


def _require_app_admin(request: Request):
    """Guard: only platform admins with the correct app-key can bootstrap clubs."""
    role = request.headers.get("role")
    app_key = request.headers.get("app-key")

    if role != "system_admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )
    if app_key != settings.app_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid app-key",
        )
    return True


@clubs_router.post("/{club_id}/bootstrap")
async def bootstrap_club(
    request: Request,
    club_id: str,
    db: AsyncIOMotorDatabase = Depends(get_database),
    catalog: ModuleCatalog = Depends(get_catalog),
    _: bool = Depends(_require_app_admin),
):
    """
    Seed the system roles, install every core module and apply the starter
    grants for a club. Safe to call again on an initialised club.
    """
    try:
        club_id = validate_club_id(club_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    hooks = getattr(request.app.state, "module_hooks", None)
    registry = await RegistryService(db, club_id, catalog, hooks=hooks).initialize()
    result = await registry.bootstrap(actor_id=settings.system_actor_id)
    return success_response(
        data=serialize_mongo_doc({"club_id": club_id, **result}),
        message="Club bootstrapped",
    )
