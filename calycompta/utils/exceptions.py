"""
Registry error taxonomy.

Every business-rule rejection is an HTTPException subclass so routes can let
it propagate untouched. `kind` is the stable machine-readable name clients
switch on; `details` carries the offending identifiers.
"""

from functools import wraps

from fastapi import HTTPException, status
from pymongo.errors import PyMongoError


class RegistryError(HTTPException):
    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **details):
        super().__init__(status_code=self.status_code_default, detail=message)
        self.message = message
        self.details = details

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        return {
            "code": self.status_code,
            "kind": self.kind,
            "message": self.message,
            **self.details,
        }


# ── 404: unknown references ──────────────────────────────────────
class UnknownModule(RegistryError):
    status_code_default = status.HTTP_404_NOT_FOUND

    def __init__(self, module_id: str):
        super().__init__(f"Module {module_id} not found", module_id=module_id)


class ModuleNotInstalled(RegistryError):
    status_code_default = status.HTTP_404_NOT_FOUND

    def __init__(self, module_id: str):
        super().__init__(f"Module {module_id} is not installed", module_id=module_id)


class UnknownRole(RegistryError):
    status_code_default = status.HTTP_404_NOT_FOUND

    def __init__(self, role_id: str):
        super().__init__(f"Role {role_id} not found", role_id=role_id)


class UnknownPermission(RegistryError):
    status_code_default = status.HTTP_404_NOT_FOUND

    def __init__(self, module_id: str, permission_id: str):
        super().__init__(
            f"Permission {permission_id} not found in module {module_id}",
            module_id=module_id,
            permission_id=permission_id,
        )


# ── 409: structural constraints ──────────────────────────────────
class DependencyMissing(RegistryError):
    status_code_default = status.HTTP_409_CONFLICT

    def __init__(self, module_id: str, dependency_id: str):
        super().__init__(
            f"Dependency {dependency_id} must be installed before {module_id}",
            module_id=module_id,
            dependency_id=dependency_id,
        )


class IncompatibleModule(RegistryError):
    status_code_default = status.HTTP_409_CONFLICT

    def __init__(self, module_id: str, conflicting_id: str):
        super().__init__(
            f"Module {conflicting_id} is incompatible with {module_id}",
            module_id=module_id,
            conflicting_id=conflicting_id,
        )


class DependentModuleExists(RegistryError):
    status_code_default = status.HTTP_409_CONFLICT

    def __init__(self, module_id: str, dependent_id: str):
        super().__init__(
            f"Module {dependent_id} depends on {module_id}",
            module_id=module_id,
            dependent_id=dependent_id,
        )


class AlreadyInstalled(RegistryError):
    status_code_default = status.HTTP_409_CONFLICT

    def __init__(self, module_id: str):
        super().__init__(f"Module {module_id} is already installed", module_id=module_id)


class RoleInUse(RegistryError):
    status_code_default = status.HTTP_409_CONFLICT

    def __init__(self, role_id: str, member_count: int):
        super().__init__(
            f"Cannot delete role: {member_count} members have this role",
            role_id=role_id,
            member_count=member_count,
        )


# ── 403: protected records ───────────────────────────────────────
class CoreModuleProtected(RegistryError):
    status_code_default = status.HTTP_403_FORBIDDEN

    def __init__(self, module_id: str, action: str):
        super().__init__(
            f"Core module {module_id} cannot be {action}",
            module_id=module_id,
            action=action,
        )


class SystemRoleRestricted(RegistryError):
    status_code_default = status.HTTP_403_FORBIDDEN

    def __init__(self, role_id: str, field: str):
        super().__init__(
            f"Cannot modify {field} of system role {role_id}",
            role_id=role_id,
            field=field,
        )


class SystemRoleProtected(RegistryError):
    status_code_default = status.HTTP_403_FORBIDDEN

    def __init__(self, role_id: str):
        super().__init__(f"Cannot delete system role {role_id}", role_id=role_id)


# ── 422: settings ────────────────────────────────────────────────
class SettingValidationError(RegistryError):
    status_code_default = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, key: str, message: str):
        super().__init__(message, key=key)
        self.key = key


# ── 503: infrastructure ──────────────────────────────────────────
class StoreUnavailable(RegistryError):
    status_code_default = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, reason: str):
        super().__init__(f"Document store unavailable: {reason}")


class CatalogUnavailable(RegistryError):
    status_code_default = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, tried: list[str]):
        super().__init__(
            "No catalog source produced a usable module set",
            tried=tried,
        )


def store_call(func):
    """
    Decorator for coroutines that talk to MongoDB: driver failures surface
    as StoreUnavailable, business-rule errors pass through unchanged.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except PyMongoError as exc:
            raise StoreUnavailable(str(exc)) from exc

    return wrapper
