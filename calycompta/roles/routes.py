"""
Role routes — club roles and their module permission grants.

Endpoints:
    GET     /                                   List roles (by level)
    POST    /                                   Create a custom role
    POST    /seed                               Seed the system roles if none exist
    GET     /{id}                               Get a role
    PATCH   /{id}                               Update a role
    DELETE  /{id}                               Delete a custom role
    PUT     /{id}/permissions/{module}          Replace grants on a module
    POST    /{id}/permissions/{module}/{perm}   Grant one permission
    DELETE  /{id}/permissions/{module}/{perm}   Revoke one permission
    GET     /{id}/check/{module}/{perm}         Evaluate a permission
"""

from fastapi import APIRouter, Depends, Request

from calycompta.registry.dependencies import get_actor_id, require_module_permission
from calycompta.registry.service import RegistryService
from calycompta.utils import serialize_mongo_doc, success_response
from .schemas import (
    CreateRoleRequest,
    ModularRole,
    SetPermissionsRequest,
    UpdateRoleRequest,
)

roles_router = APIRouter()

_can_view = require_module_permission("admin", "view_modules")
_can_manage = require_module_permission("admin", "manage_roles")


def _role_data(role: ModularRole) -> dict:
    return serialize_mongo_doc(role.model_dump())


@roles_router.get("/")
async def list_roles(registry: RegistryService = Depends(_can_view)):
    roles = [_role_data(r) for r in registry.list_roles()]
    return success_response(data={"roles": roles, "total": len(roles)})


@roles_router.post("/")
async def create_role(
    request: Request,
    body: CreateRoleRequest,
    registry: RegistryService = Depends(_can_manage),
):
    role = await registry.create_role(body.model_dump(), actor_id=get_actor_id(request))
    return success_response(data=_role_data(role), message="Role created", code=201)


@roles_router.post("/seed")
async def seed_roles(
    request: Request,
    registry: RegistryService = Depends(_can_manage),
):
    seeded = await registry.seed_default_roles(actor_id=get_actor_id(request))
    return success_response(
        data={"seeded": [r.id for r in seeded]},
        message=f"{len(seeded)} roles seeded",
    )


@roles_router.get("/{role_id}")
async def get_role(role_id: str, registry: RegistryService = Depends(_can_view)):
    return success_response(data=_role_data(registry.get_role(role_id)))


@roles_router.patch("/{role_id}")
async def update_role(
    request: Request,
    role_id: str,
    body: UpdateRoleRequest,
    registry: RegistryService = Depends(_can_manage),
):
    role = await registry.update_role(
        role_id, body.model_dump(exclude_unset=True), actor_id=get_actor_id(request)
    )
    return success_response(data=_role_data(role), message="Role updated")


@roles_router.delete("/{role_id}")
async def delete_role(
    request: Request,
    role_id: str,
    registry: RegistryService = Depends(_can_manage),
):
    await registry.delete_role(role_id, actor_id=get_actor_id(request))
    return success_response(message="Role deleted")


@roles_router.put("/{role_id}/permissions/{module_id}")
async def set_role_permissions(
    request: Request,
    role_id: str,
    module_id: str,
    body: SetPermissionsRequest,
    registry: RegistryService = Depends(_can_manage),
):
    permissions = await registry.set_module_permissions(
        role_id, module_id, body.permissions, actor_id=get_actor_id(request)
    )
    return success_response(
        data={"role_id": role_id, "module_id": module_id, "permissions": permissions},
        message="Permissions updated",
    )


@roles_router.post("/{role_id}/permissions/{module_id}/{permission_id}")
async def grant_permission(
    request: Request,
    role_id: str,
    module_id: str,
    permission_id: str,
    registry: RegistryService = Depends(_can_manage),
):
    changed = await registry.grant_permission(
        role_id, module_id, permission_id, actor_id=get_actor_id(request)
    )
    return success_response(
        data={
            "role_id": role_id,
            "module_id": module_id,
            "permissions": registry.get_role_permissions(role_id, module_id),
            "changed": changed,
        },
        message="Permission granted",
    )


@roles_router.delete("/{role_id}/permissions/{module_id}/{permission_id}")
async def revoke_permission(
    request: Request,
    role_id: str,
    module_id: str,
    permission_id: str,
    registry: RegistryService = Depends(_can_manage),
):
    changed = await registry.revoke_permission(
        role_id, module_id, permission_id, actor_id=get_actor_id(request)
    )
    return success_response(
        data={
            "role_id": role_id,
            "module_id": module_id,
            "permissions": registry.get_role_permissions(role_id, module_id),
            "changed": changed,
        },
        message="Permission revoked",
    )


@roles_router.get("/{role_id}/check/{module_id}/{permission_id}")
async def check_permission(
    role_id: str,
    module_id: str,
    permission_id: str,
    registry: RegistryService = Depends(_can_view),
):
    return success_response(
        data={
            "role_id": role_id,
            "module_id": module_id,
            "permission_id": permission_id,
            "allowed": registry.has_permission(role_id, module_id, permission_id),
        }
    )
