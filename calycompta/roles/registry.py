"""
Role registry — club roles and their module → permission grant maps.

Collection: {club}_roles (club-scoped, _id = role id)

The grant maps held here are the only thing permission checks consult.
Reads are served from the cache filled by `load()`; writes go to MongoDB
first, then to the cache.
"""

import secrets
from typing import Any, Iterable, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from calycompta.modules.catalog import ModuleCatalog
from calycompta.modules.store import ModuleInstanceStore
from calycompta.tenant import get_club_collection
from calycompta.utils import Logger, utc_now
from calycompta.utils.exceptions import (
    RoleInUse,
    SystemRoleProtected,
    SystemRoleRestricted,
    UnknownModule,
    UnknownPermission,
    UnknownRole,
    store_call,
)
from .members import MemberDirectory
from .schemas import (
    SYSTEM_ROLE_EDITABLE_FIELDS,
    SYSTEM_ROLE_HIERARCHY,
    SYSTEM_ROLES,
    ModularRole,
)

logger = Logger("roles")

_UPDATABLE_FIELDS = frozenset(
    {"name", "description", "level", "color", "icon", "is_active", "can_manage"}
)


class RoleRegistry:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        club_id: str,
        catalog: ModuleCatalog,
        instances: ModuleInstanceStore,
        members: MemberDirectory,
    ):
        self.db = db
        self.club_id = club_id
        self.catalog = catalog
        self.instances = instances
        self.members = members
        self.roles = get_club_collection(db, club_id, "roles")
        self._cache: dict[str, ModularRole] = {}

    @store_call
    async def load(self) -> int:
        cache = {}
        async for doc in self.roles.find({}):
            role = ModularRole.from_document(doc)
            cache[role.id] = role
        self._cache = cache
        return len(cache)

    def reset(self) -> None:
        self._cache = {}

    # ── Reads ────────────────────────────────────────────────────
    def get(self, role_id: str) -> Optional[ModularRole]:
        return self._cache.get(role_id)

    def require(self, role_id: str) -> ModularRole:
        role = self._cache.get(role_id)
        if role is None:
            raise UnknownRole(role_id)
        return role

    def list_roles(self) -> list[ModularRole]:
        return sorted(self._cache.values(), key=lambda r: (r.level, r.name))

    def get_permissions(self, role_id: str, module_id: str) -> list[str]:
        return self.require(role_id).granted(module_id)

    def has_permission(self, role_id: str, module_id: str, permission_id: str) -> bool:
        """
        False for an unknown or inactive role, for a module that is not
        installed and active, or when the permission is not granted.
        """
        role = self._cache.get(role_id)
        if role is None or not role.is_active:
            return False
        if not self.instances.is_active(module_id):
            return False
        return permission_id in role.module_permissions.get(module_id, [])

    # ── Writes ───────────────────────────────────────────────────
    @store_call
    async def seed_defaults(self, actor_id: str) -> list[ModularRole]:
        """Create the system role ladder if the club has no role at all."""
        if self._cache or await self.roles.count_documents({}) > 0:
            return []

        now = utc_now()
        seeded = [
            ModularRole(
                **entry,
                club_id=self.club_id,
                description="Rôle système",
                is_system=True,
                is_active=True,
                module_permissions={},
                can_manage=SYSTEM_ROLE_HIERARCHY[entry["id"]],
                created_at=now,
                created_by=actor_id,
            )
            for entry in SYSTEM_ROLES
        ]
        await self.roles.insert_many([r.to_document() for r in seeded])
        for role in seeded:
            self._cache[role.id] = role
        logger.info(f"Seeded {len(seeded)} system roles for club {self.club_id}")
        return seeded

    @store_call
    async def create(self, data: dict[str, Any], actor_id: str) -> ModularRole:
        if data.get("is_system"):
            raise ValueError("Caller-created roles cannot be system roles")

        module_permissions = {
            module_id: self._validated(module_id, perms)
            for module_id, perms in (data.get("module_permissions") or {}).items()
        }
        fields = {k: v for k, v in data.items() if k in _UPDATABLE_FIELDS}

        role = ModularRole(
            **fields,
            id=f"role_{secrets.token_hex(6)}",
            club_id=self.club_id,
            is_system=False,
            module_permissions=module_permissions,
            created_at=utc_now(),
            created_by=actor_id,
        )
        await self.roles.insert_one(role.to_document())
        self._cache[role.id] = role
        logger.info(f"Role {role.id} ({role.name}) created for club {self.club_id}")
        return role

    @store_call
    async def update(self, role_id: str, patch: dict[str, Any], actor_id: str) -> ModularRole:
        role = self.require(role_id)

        if role.is_system:
            for field in patch:
                if field not in SYSTEM_ROLE_EDITABLE_FIELDS:
                    logger.warning(f"Update rejected: {field} of system role {role_id}")
                    raise SystemRoleRestricted(role_id, field)

        unknown = [k for k in patch if k not in _UPDATABLE_FIELDS]
        if unknown:
            raise ValueError(f"Cannot update role fields {unknown}")

        changes = {**patch, "updated_at": utc_now(), "updated_by": actor_id}
        await self.roles.update_one({"_id": role_id}, {"$set": changes})
        updated = role.model_copy(update=changes)
        self._cache[role_id] = updated
        logger.info(f"Role {role_id} updated for club {self.club_id}")
        return updated

    @store_call
    async def delete(self, role_id: str, actor_id: str) -> ModularRole:
        role = self.require(role_id)
        if role.is_system:
            logger.warning(f"Delete rejected: {role_id} is a system role")
            raise SystemRoleProtected(role_id)

        in_use = await self.members.count_members_with_role(role_id)
        if in_use:
            logger.warning(f"Delete rejected: {in_use} members still hold {role_id}")
            raise RoleInUse(role_id, in_use)

        await self.roles.delete_one({"_id": role_id})
        del self._cache[role_id]
        logger.info(f"Role {role_id} deleted from club {self.club_id} by {actor_id}")
        return role

    async def grant(
        self, role_id: str, module_id: str, permission_id: str, actor_id: str
    ) -> bool:
        """Returns False when the permission was already granted."""
        role = self.require(role_id)
        self._validated(module_id, [permission_id])
        current = role.granted(module_id)
        if permission_id in current:
            return False
        await self._write_grants(role, module_id, current + [permission_id], actor_id)
        logger.info(f"Granted {module_id}.{permission_id} to {role_id}")
        return True

    async def revoke(
        self, role_id: str, module_id: str, permission_id: str, actor_id: str
    ) -> bool:
        """Returns False when the permission was not granted."""
        role = self.require(role_id)
        self._validated(module_id, [permission_id])
        current = role.granted(module_id)
        if permission_id not in current:
            return False
        await self._write_grants(
            role, module_id, [p for p in current if p != permission_id], actor_id
        )
        logger.info(f"Revoked {module_id}.{permission_id} from {role_id}")
        return True

    async def set_module_permissions(
        self,
        role_id: str,
        module_id: str,
        permission_ids: Iterable[str],
        actor_id: str,
    ) -> list[str]:
        role = self.require(role_id)
        permissions = self._validated(module_id, permission_ids)
        await self._write_grants(role, module_id, permissions, actor_id)
        logger.info(f"Permissions of {role_id} on {module_id} set to {permissions}")
        return permissions

    @store_call
    async def _write_grants(
        self, role: ModularRole, module_id: str, permissions: list[str], actor_id: str
    ) -> ModularRole:
        now = utc_now()
        await self.roles.update_one(
            {"_id": role.id},
            {
                "$set": {
                    f"module_permissions.{module_id}": permissions,
                    "updated_at": now,
                    "updated_by": actor_id,
                }
            },
        )
        updated = role.model_copy(
            update={
                "module_permissions": {**role.module_permissions, module_id: permissions},
                "updated_at": now,
                "updated_by": actor_id,
            }
        )
        self._cache[role.id] = updated
        return updated

    def _validated(self, module_id: str, permission_ids: Iterable[str]) -> list[str]:
        """Deduplicated permission ids, each declared by the module."""
        module = self.catalog.get(module_id)
        if module is None:
            raise UnknownModule(module_id)
        permissions = list(dict.fromkeys(permission_ids))
        for permission_id in permissions:
            if not module.has_permission(permission_id):
                logger.warning(f"Unknown permission {module_id}.{permission_id}")
                raise UnknownPermission(module_id, permission_id)
        return permissions
