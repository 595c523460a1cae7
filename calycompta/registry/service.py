"""
Registry service — the single entry point for one club's modules and roles.

    registry = await RegistryService(db, "calypso", catalog).initialize()
    await registry.install("expenses", actor_id="user_123")
    registry.has_permission("validateur", "expenses", "approve")

Every mutation is stamped with the acting user and a server timestamp,
written through to MongoDB and the in-memory state before returning, then
recorded in the club audit trail. Lifecycle hooks named by a module's
`config.hooks` are looked up in the `hooks` mapping and awaited after the
change has been persisted.
"""

from typing import Any, Awaitable, Callable, Mapping, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from calycompta.audit import AuditActionEnum, AuditModuleEnum, AuditService
from calycompta.config import settings
from calycompta.modules.catalog import ModuleCatalog, build_catalog
from calycompta.modules.grants import default_grants
from calycompta.modules.schemas import (
    ModuleDefinition,
    ModuleInstance,
    SettingDefinition,
)
from calycompta.modules.settings import applicable_settings
from calycompta.modules.store import ModuleInstanceStore
from calycompta.roles.members import MemberDirectory
from calycompta.roles.registry import RoleRegistry
from calycompta.roles.schemas import ModularRole
from calycompta.utils import Logger
from calycompta.utils.exceptions import StoreUnavailable

logger = Logger("registry")

ModuleHook = Callable[["RegistryService", ModuleDefinition], Awaitable[None]]


class RegistryService:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        club_id: str,
        catalog: Optional[ModuleCatalog] = None,
        hooks: Optional[Mapping[str, ModuleHook]] = None,
    ):
        self.db = db
        self.club_id = club_id
        self.hooks = dict(hooks or {})
        self.degraded = False
        self.members = MemberDirectory(db, club_id)
        self.audit = AuditService(db, club_id)
        self._catalog_loaded = catalog is not None
        self._use_catalog(catalog or ModuleCatalog())

    def _use_catalog(self, catalog: ModuleCatalog) -> None:
        self.catalog = catalog
        self.instances = ModuleInstanceStore(self.db, self.club_id, catalog)
        self.roles = RoleRegistry(
            self.db, self.club_id, catalog, self.instances, self.members
        )

    async def initialize(self) -> "RegistryService":
        """
        Load catalog, module instances and roles for the club.

        Load failures never abort: the failing part starts empty, a warning
        is logged and `degraded` is set.
        """
        if not self._catalog_loaded:
            try:
                self._use_catalog(await build_catalog(self.db))
                self._catalog_loaded = True
            except Exception as e:
                logger.warning(f"Catalog unavailable for club {self.club_id}: {e}")
                self.degraded = True

        try:
            await self.instances.load()
        except Exception as e:
            logger.warning(f"Could not load modules of club {self.club_id}: {e}")
            self.instances.reset()
            self.degraded = True

        try:
            await self.roles.load()
        except Exception as e:
            logger.warning(f"Could not load roles of club {self.club_id}: {e}")
            self.roles.reset()
            self.degraded = True

        return self

    # ── Cross-cutting helpers ────────────────────────────────────
    @staticmethod
    def _actor(actor_id: Optional[str]) -> str:
        return actor_id or settings.system_actor_id

    async def _record(
        self,
        module: AuditModuleEnum,
        action: AuditActionEnum,
        actor_id: str,
        resource_id: str,
        description: str,
        before: Any = None,
        after: Any = None,
    ) -> None:
        # Audit failures are logged, never raised.
        try:
            await self.audit.log(
                module=module.value,
                action=action.value,
                actor_id=actor_id,
                resource_id=resource_id,
                description=description,
                before=before,
                after=after,
            )
        except StoreUnavailable as e:
            logger.error(f"Audit entry '{description}' not recorded: {e}")

    async def _run_hook(self, module: ModuleDefinition, event: str) -> None:
        hook_name = getattr(module.config.hooks, event)
        if not hook_name:
            return
        handler = self.hooks.get(hook_name)
        if handler is None:
            logger.debug(f"No handler registered for hook {hook_name} of {module.id}")
            return
        try:
            await handler(self, module)
        except Exception:
            logger.exception(f"Hook {hook_name} of module {module.id} failed")

    # ── Catalog & instances: reads ───────────────────────────────
    def list_catalog(self) -> list[ModuleDefinition]:
        return self.catalog.list_all()

    def get_module(self, module_id: str) -> ModuleDefinition:
        return self.instances.definition(module_id)

    def get_instance(self, module_id: str) -> Optional[ModuleInstance]:
        return self.instances.get(module_id)

    def list_installed(self) -> list[ModuleInstance]:
        return self.instances.list_installed()

    def list_active(self) -> list[ModuleInstance]:
        return self.instances.list_active()

    def list_available(self) -> list[ModuleDefinition]:
        return [m for m in self.catalog if not self.instances.is_installed(m.id)]

    def is_installed(self, module_id: str) -> bool:
        return self.instances.is_installed(module_id)

    def is_active(self, module_id: str) -> bool:
        return self.instances.is_active(module_id)

    def get_settings(self, module_id: str) -> dict[str, Any]:
        return dict(self.instances.require(module_id).settings)

    def applicable_settings(self, module_id: str) -> list[SettingDefinition]:
        module = self.instances.definition(module_id)
        return applicable_settings(module, self.instances.require(module_id).settings)

    async def get_module_data_stats(self, module_id: str) -> dict:
        return await self.instances.get_data_stats(module_id)

    # ── Catalog & instances: writes ──────────────────────────────
    async def install(
        self,
        module_id: str,
        settings_values: Optional[dict[str, Any]] = None,
        actor_id: Optional[str] = None,
    ) -> ModuleInstance:
        actor = self._actor(actor_id)
        instance = await self.instances.install(module_id, actor, settings_values)
        await self._record(
            AuditModuleEnum.MODULES, AuditActionEnum.INSTALL, actor, module_id,
            f"Installed module {module_id}", after=instance.to_document(),
        )
        await self._run_hook(self.get_module(module_id), "on_install")
        return instance

    async def uninstall(self, module_id: str, actor_id: Optional[str] = None) -> None:
        actor = self._actor(actor_id)
        module = self.get_module(module_id)
        instance = await self.instances.uninstall(module_id, actor)
        await self._record(
            AuditModuleEnum.MODULES, AuditActionEnum.UNINSTALL, actor, module_id,
            f"Uninstalled module {module_id}", before=instance.to_document(),
        )
        await self._run_hook(module, "on_uninstall")

    async def enable(self, module_id: str, actor_id: Optional[str] = None) -> bool:
        actor = self._actor(actor_id)
        changed = await self.instances.enable(module_id, actor)
        if changed:
            await self._record(
                AuditModuleEnum.MODULES, AuditActionEnum.ENABLE, actor, module_id,
                f"Enabled module {module_id}",
            )
            await self._run_hook(self.get_module(module_id), "on_enable")
        return changed

    async def disable(self, module_id: str, actor_id: Optional[str] = None) -> bool:
        actor = self._actor(actor_id)
        changed = await self.instances.disable(module_id, actor)
        if changed:
            await self._record(
                AuditModuleEnum.MODULES, AuditActionEnum.DISABLE, actor, module_id,
                f"Disabled module {module_id}",
            )
            await self._run_hook(self.get_module(module_id), "on_disable")
        return changed

    async def update_settings(
        self,
        module_id: str,
        values: dict[str, Any],
        actor_id: Optional[str] = None,
    ) -> ModuleInstance:
        actor = self._actor(actor_id)
        before = self.instances.get(module_id)
        instance = await self.instances.update_settings(module_id, values, actor)
        await self._record(
            AuditModuleEnum.MODULES, AuditActionEnum.UPDATE_SETTINGS, actor, module_id,
            f"Updated settings of module {module_id}",
            before=before.settings if before else None,
            after=instance.settings,
        )
        await self._run_hook(self.get_module(module_id), "on_update")
        return instance

    async def apply_default_grants(
        self, module_id: str, actor_id: Optional[str] = None
    ) -> dict[str, list[str]]:
        """
        Merge the module's tier grants into the matching system roles.

        Grants already present are kept; roles that are missing or not
        system roles are skipped. Returns the resulting grant set per role.
        """
        actor = self._actor(actor_id)
        module = self.get_module(module_id)
        self.instances.require(module_id)

        applied: dict[str, list[str]] = {}
        for tier, permissions in default_grants(module).items():
            role = self.roles.get(tier)
            if role is None or not role.is_system:
                continue
            current = role.granted(module_id)
            merged = current + [p for p in permissions if p not in current]
            if merged != current:
                await self.roles.set_module_permissions(tier, module_id, merged, actor)
            applied[tier] = merged

        await self._record(
            AuditModuleEnum.MODULES, AuditActionEnum.APPLY_DEFAULT_GRANTS, actor, module_id,
            f"Applied default grants of module {module_id}", after=applied,
        )
        return applied

    # ── Roles ────────────────────────────────────────────────────
    def list_roles(self) -> list[ModularRole]:
        return self.roles.list_roles()

    def get_role(self, role_id: str) -> ModularRole:
        return self.roles.require(role_id)

    def get_role_permissions(self, role_id: str, module_id: str) -> list[str]:
        return self.roles.get_permissions(role_id, module_id)

    async def seed_default_roles(self, actor_id: Optional[str] = None) -> list[ModularRole]:
        actor = self._actor(actor_id)
        seeded = await self.roles.seed_defaults(actor)
        if seeded:
            await self._record(
                AuditModuleEnum.ROLES, AuditActionEnum.SEED, actor, self.club_id,
                f"Seeded {len(seeded)} system roles",
            )
        return seeded

    async def create_role(
        self, data: dict[str, Any], actor_id: Optional[str] = None
    ) -> ModularRole:
        actor = self._actor(actor_id)
        role = await self.roles.create(data, actor)
        await self._record(
            AuditModuleEnum.ROLES, AuditActionEnum.CREATE, actor, role.id,
            f"Created role {role.name}", after=role.to_document(),
        )
        return role

    async def update_role(
        self, role_id: str, patch: dict[str, Any], actor_id: Optional[str] = None
    ) -> ModularRole:
        actor = self._actor(actor_id)
        before = self.roles.require(role_id)
        role = await self.roles.update(role_id, patch, actor)
        await self._record(
            AuditModuleEnum.ROLES, AuditActionEnum.UPDATE, actor, role_id,
            f"Updated role {role.name}",
            before=before.to_document(), after=role.to_document(),
        )
        return role

    async def delete_role(self, role_id: str, actor_id: Optional[str] = None) -> None:
        actor = self._actor(actor_id)
        role = await self.roles.delete(role_id, actor)
        await self._record(
            AuditModuleEnum.ROLES, AuditActionEnum.DELETE, actor, role_id,
            f"Deleted role {role.name}", before=role.to_document(),
        )

    async def grant_permission(
        self,
        role_id: str,
        module_id: str,
        permission_id: str,
        actor_id: Optional[str] = None,
    ) -> bool:
        actor = self._actor(actor_id)
        changed = await self.roles.grant(role_id, module_id, permission_id, actor)
        if changed:
            await self._record(
                AuditModuleEnum.ROLES, AuditActionEnum.GRANT, actor, role_id,
                f"Granted {module_id}.{permission_id} to {role_id}",
            )
        return changed

    async def revoke_permission(
        self,
        role_id: str,
        module_id: str,
        permission_id: str,
        actor_id: Optional[str] = None,
    ) -> bool:
        actor = self._actor(actor_id)
        changed = await self.roles.revoke(role_id, module_id, permission_id, actor)
        if changed:
            await self._record(
                AuditModuleEnum.ROLES, AuditActionEnum.REVOKE, actor, role_id,
                f"Revoked {module_id}.{permission_id} from {role_id}",
            )
        return changed

    async def set_module_permissions(
        self,
        role_id: str,
        module_id: str,
        permission_ids: list[str],
        actor_id: Optional[str] = None,
    ) -> list[str]:
        actor = self._actor(actor_id)
        before = self.roles.get_permissions(role_id, module_id)
        permissions = await self.roles.set_module_permissions(
            role_id, module_id, permission_ids, actor
        )
        await self._record(
            AuditModuleEnum.ROLES, AuditActionEnum.SET_PERMISSIONS, actor, role_id,
            f"Set permissions of {role_id} on {module_id}",
            before={module_id: before}, after={module_id: permissions},
        )
        return permissions

    # ── Authorization ────────────────────────────────────────────
    def has_permission(self, role_id: str, module_id: str, permission_id: str) -> bool:
        return self.roles.has_permission(role_id, module_id, permission_id)

    async def user_has_permission(
        self, user_id: str, module_id: str, permission_id: str
    ) -> bool:
        role_id = await self.members.get_member_role_id(user_id)
        if role_id is None:
            return False
        return self.has_permission(role_id, module_id, permission_id)

    # ── Club bootstrap ───────────────────────────────────────────
    async def bootstrap(self, actor_id: Optional[str] = None) -> dict:
        """
        Bring a fresh club to a usable state: system roles, every core
        module (dependencies first) and their starter grants. Parts that
        already exist are left alone, so running it twice is harmless.
        """
        actor = self._actor(actor_id)
        seeded = await self.seed_default_roles(actor)

        core_ids = [m.id for m in self.catalog if m.is_core]
        installed = []
        for module_id in self.catalog.dependency_order(core_ids):
            if not self.instances.is_installed(module_id):
                await self.install(module_id, actor_id=actor)
                installed.append(module_id)

        grants = {}
        for module_id in installed:
            grants[module_id] = await self.apply_default_grants(module_id, actor)

        logger.info(
            f"Club {self.club_id} bootstrapped: {len(seeded)} roles, "
            f"{len(installed)} modules"
        )
        return {
            "roles_seeded": [r.id for r in seeded],
            "modules_installed": installed,
            "grants": grants,
        }
