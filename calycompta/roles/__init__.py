from .members import MemberDirectory
from .registry import RoleRegistry
from .schemas import (
    SYSTEM_ROLE_EDITABLE_FIELDS,
    SYSTEM_ROLES,
    CreateRoleRequest,
    ModularRole,
    SetPermissionsRequest,
    UpdateRoleRequest,
)

__all__ = [
    "MemberDirectory",
    "RoleRegistry",
    "SYSTEM_ROLE_EDITABLE_FIELDS",
    "SYSTEM_ROLES",
    "CreateRoleRequest",
    "ModularRole",
    "SetPermissionsRequest",
    "UpdateRoleRequest",
]
