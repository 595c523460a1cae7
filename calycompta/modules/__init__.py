from .schemas import (
    ModuleCategory,
    ModuleDefinition,
    ModuleInstance,
    PermissionCategory,
    PermissionDefinition,
    RiskLevel,
    SettingDefinition,
    SettingDependency,
    SettingType,
)
from .catalog import (
    BuiltinCatalogSource,
    CatalogSource,
    ModuleCatalog,
    StoreCatalogSource,
    build_catalog,
    publish_catalog,
)
from .grants import default_grants, tier_permissions
from .settings import applicable_settings, validate_settings
from .store import ModuleInstanceStore

__all__ = [
    "ModuleCategory",
    "ModuleDefinition",
    "ModuleInstance",
    "PermissionCategory",
    "PermissionDefinition",
    "RiskLevel",
    "SettingDefinition",
    "SettingDependency",
    "SettingType",
    "BuiltinCatalogSource",
    "CatalogSource",
    "ModuleCatalog",
    "StoreCatalogSource",
    "build_catalog",
    "publish_catalog",
    "default_grants",
    "tier_permissions",
    "applicable_settings",
    "validate_settings",
    "ModuleInstanceStore",
]
