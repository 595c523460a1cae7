from .service import ModuleHook, RegistryService
from .dependencies import (
    get_catalog,
    get_registry,
    require_module_permission,
)

__all__ = [
    "ModuleHook",
    "RegistryService",
    "get_catalog",
    "get_registry",
    "require_module_permission",
]
