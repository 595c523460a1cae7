"""
Module routes — catalog browsing and per-club module lifecycle.

Endpoints:
    GET     /                       Catalog with install state for the club
    GET     /installed              Installed modules
    GET     /available              Catalog modules not yet installed
    GET     /{id}                   One catalog entry with its instance
    POST    /{id}/install           Install (optional initial settings)
    DELETE  /{id}                   Uninstall (non-core only, data archived)
    POST    /{id}/enable            Enable
    POST    /{id}/disable           Disable (non-core only)
    GET     /{id}/settings          Current settings + applicable keys
    PUT     /{id}/settings          Replace settings
    GET     /{id}/data-stats        Module data namespace statistics

Guarded by the permissions of the core `admin` module.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from calycompta.registry.dependencies import get_actor_id, require_module_permission
from calycompta.registry.service import RegistryService
from calycompta.utils import serialize_mongo_doc, success_response
from .schemas import (
    InstallModuleRequest,
    ModuleDefinition,
    ModuleInstance,
    UpdateSettingsRequest,
)

modules_router = APIRouter()

_can_view = require_module_permission("admin", "view_modules")
_can_install = require_module_permission("admin", "install_modules")
_can_uninstall = require_module_permission("admin", "uninstall_modules")
_can_configure = require_module_permission("admin", "configure_modules")


def _instance_data(instance: Optional[ModuleInstance]) -> Optional[dict]:
    if instance is None:
        return None
    return serialize_mongo_doc(instance.model_dump())


def _module_data(registry: RegistryService, module: ModuleDefinition) -> dict:
    instance = registry.get_instance(module.id)
    return {
        **module.model_dump(mode="json"),
        "installed": instance is not None,
        "is_active": bool(instance and instance.is_active),
    }


@modules_router.get("/")
async def list_modules(registry: RegistryService = Depends(_can_view)):
    modules = [_module_data(registry, m) for m in registry.list_catalog()]
    return success_response(
        data={"modules": modules, "total": len(modules), "source": registry.catalog.source}
    )


@modules_router.get("/installed")
async def list_installed_modules(registry: RegistryService = Depends(_can_view)):
    instances = [_instance_data(i) for i in registry.list_installed()]
    return success_response(data={"modules": instances, "total": len(instances)})


@modules_router.get("/available")
async def list_available_modules(registry: RegistryService = Depends(_can_view)):
    modules = [m.model_dump(mode="json") for m in registry.list_available()]
    return success_response(data={"modules": modules, "total": len(modules)})


@modules_router.get("/{module_id}")
async def get_module(module_id: str, registry: RegistryService = Depends(_can_view)):
    module = registry.get_module(module_id)
    return success_response(
        data={
            "module": module.model_dump(mode="json"),
            "instance": _instance_data(registry.get_instance(module_id)),
        }
    )


@modules_router.post("/{module_id}/install")
async def install_module(
    request: Request,
    module_id: str,
    body: Optional[InstallModuleRequest] = None,
    registry: RegistryService = Depends(_can_install),
):
    instance = await registry.install(
        module_id,
        settings_values=body.settings if body else None,
        actor_id=get_actor_id(request),
    )
    return success_response(
        data=_instance_data(instance), message=f"Module {module_id} installed", code=201
    )


@modules_router.delete("/{module_id}")
async def uninstall_module(
    request: Request,
    module_id: str,
    registry: RegistryService = Depends(_can_uninstall),
):
    await registry.uninstall(module_id, actor_id=get_actor_id(request))
    return success_response(message=f"Module {module_id} uninstalled")


@modules_router.post("/{module_id}/enable")
async def enable_module(
    request: Request,
    module_id: str,
    registry: RegistryService = Depends(_can_configure),
):
    changed = await registry.enable(module_id, actor_id=get_actor_id(request))
    return success_response(
        data={"module_id": module_id, "is_active": True, "changed": changed},
        message=f"Module {module_id} enabled",
    )


@modules_router.post("/{module_id}/disable")
async def disable_module(
    request: Request,
    module_id: str,
    registry: RegistryService = Depends(_can_configure),
):
    changed = await registry.disable(module_id, actor_id=get_actor_id(request))
    return success_response(
        data={"module_id": module_id, "is_active": False, "changed": changed},
        message=f"Module {module_id} disabled",
    )


@modules_router.get("/{module_id}/settings")
async def get_module_settings(
    module_id: str, registry: RegistryService = Depends(_can_view)
):
    return success_response(
        data={
            "module_id": module_id,
            "settings": registry.get_settings(module_id),
            "applicable": [s.key for s in registry.applicable_settings(module_id)],
        }
    )


@modules_router.put("/{module_id}/settings")
async def update_module_settings(
    request: Request,
    module_id: str,
    body: UpdateSettingsRequest,
    registry: RegistryService = Depends(_can_configure),
):
    instance = await registry.update_settings(
        module_id, body.settings, actor_id=get_actor_id(request)
    )
    return success_response(
        data={"module_id": module_id, "settings": instance.settings},
        message="Settings updated",
    )


@modules_router.get("/{module_id}/data-stats")
async def module_data_stats(
    module_id: str, registry: RegistryService = Depends(_can_view)
):
    stats = await registry.get_module_data_stats(module_id)
    return success_response(data=serialize_mongo_doc(stats))
