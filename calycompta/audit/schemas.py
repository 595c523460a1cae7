"""
Audit log enums — every registry mutation leaves one entry.
"""

from enum import Enum


class AuditModuleEnum(str, Enum):
    MODULES = "modules"
    ROLES = "roles"


class AuditActionEnum(str, Enum):
    INSTALL = "install"
    UNINSTALL = "uninstall"
    ENABLE = "enable"
    DISABLE = "disable"
    UPDATE_SETTINGS = "update_settings"
    APPLY_DEFAULT_GRANTS = "apply_default_grants"
    SEED = "seed"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    GRANT = "grant"
    REVOKE = "revoke"
    SET_PERMISSIONS = "set_permissions"
