"""
Module instance store — which catalog modules a club has installed.

Collections (club-scoped):
    {club}_modules              one document per installed module (_id = module id)
    {club}_module_data          per-module data namespace metadata (_id = module id)
    {club}_module_data_items    module business documents, tagged with module_id
    {club}_archived_modules     data moved out of the live collections on uninstall

Reads are served from an in-memory cache filled by `load()`; every write
goes to MongoDB first and then to the cache.
"""

from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from calycompta.tenant import get_club_collection
from calycompta.utils import Logger, utc_now
from calycompta.utils.exceptions import (
    AlreadyInstalled,
    CoreModuleProtected,
    DependencyMissing,
    DependentModuleExists,
    IncompatibleModule,
    ModuleNotInstalled,
    UnknownModule,
    store_call,
)
from .catalog import ModuleCatalog
from .grants import default_grants
from .schemas import ModuleDefinition, ModuleInstance, settings_to_pairs
from .settings import validate_settings

logger = Logger("modules")

DATA_SCHEMA_VERSION = 1


class ModuleInstanceStore:
    def __init__(self, db: AsyncIOMotorDatabase, club_id: str, catalog: ModuleCatalog):
        self.db = db
        self.club_id = club_id
        self.catalog = catalog
        self.instances = get_club_collection(db, club_id, "modules")
        self.module_data = get_club_collection(db, club_id, "module_data")
        self.module_data_items = get_club_collection(db, club_id, "module_data_items")
        self.archive = get_club_collection(db, club_id, "archived_modules")
        self._cache: dict[str, ModuleInstance] = {}

    @store_call
    async def load(self) -> int:
        """Replace the cache with the persisted instances of this club."""
        cache: dict[str, ModuleInstance] = {}
        async for doc in self.instances.find({}):
            if doc["_id"] not in self.catalog:
                logger.warning(
                    f"Ignoring instance of unknown module {doc['_id']} for club {self.club_id}"
                )
                continue
            cache[doc["_id"]] = ModuleInstance.from_document(doc)
        self._cache = cache
        return len(cache)

    def reset(self) -> None:
        self._cache = {}

    # ── Lookups ──────────────────────────────────────────────────
    def definition(self, module_id: str) -> ModuleDefinition:
        module = self.catalog.get(module_id)
        if module is None:
            raise UnknownModule(module_id)
        return module

    def get(self, module_id: str) -> Optional[ModuleInstance]:
        return self._cache.get(module_id)

    def require(self, module_id: str) -> ModuleInstance:
        self.definition(module_id)
        instance = self._cache.get(module_id)
        if instance is None:
            raise ModuleNotInstalled(module_id)
        return instance

    def list_installed(self) -> list[ModuleInstance]:
        return list(self._cache.values())

    def list_active(self) -> list[ModuleInstance]:
        return [i for i in self._cache.values() if i.is_active]

    def is_installed(self, module_id: str) -> bool:
        return module_id in self._cache

    def is_active(self, module_id: str) -> bool:
        instance = self._cache.get(module_id)
        return instance is not None and instance.is_active

    # ── Lifecycle ────────────────────────────────────────────────
    @store_call
    async def install(
        self,
        module_id: str,
        actor_id: str,
        initial_settings: Optional[dict[str, Any]] = None,
    ) -> ModuleInstance:
        module = self.definition(module_id)

        if module_id in self._cache:
            logger.warning(f"Install rejected: {module_id} already installed for {self.club_id}")
            raise AlreadyInstalled(module_id)

        for dep in module.dependencies:
            if dep not in self._cache:
                logger.warning(f"Install rejected: {module_id} needs {dep} for {self.club_id}")
                raise DependencyMissing(module_id, dep)

        for other in module.incompatible_with:
            if other in self._cache:
                raise IncompatibleModule(module_id, other)
        for installed_id in self._cache:
            installed = self.catalog.get(installed_id)
            if installed and module_id in installed.incompatible_with:
                raise IncompatibleModule(module_id, installed_id)

        if initial_settings is not None:
            validate_settings(module, initial_settings)
            values = dict(initial_settings)
        else:
            values = module.default_settings()

        now = utc_now()
        instance = ModuleInstance(
            module_id=module_id,
            club_id=self.club_id,
            settings=values,
            permissions=default_grants(module),
            is_active=True,
            installed_at=now,
            installed_by=actor_id,
            last_updated=now,
            last_updated_by=actor_id,
        )
        await self.instances.insert_one(instance.to_document())
        await self._create_data_namespace(module, actor_id)

        self._cache[module_id] = instance
        logger.info(f"Module {module_id} installed for club {self.club_id}")
        return instance

    @store_call
    async def uninstall(self, module_id: str, actor_id: str) -> ModuleInstance:
        module = self.definition(module_id)
        if module.is_core:
            logger.warning(f"Uninstall rejected: {module_id} is a core module")
            raise CoreModuleProtected(module_id, "uninstalled")

        instance = self.require(module_id)

        for other_id in self._cache:
            if other_id == module_id:
                continue
            other = self.catalog.get(other_id)
            if other and module_id in other.dependencies:
                logger.warning(f"Uninstall rejected: {other_id} depends on {module_id}")
                raise DependentModuleExists(module_id, other_id)

        archived = await self._archive_data(module_id, actor_id)
        await self.instances.delete_one({"_id": module_id})

        del self._cache[module_id]
        logger.info(
            f"Module {module_id} uninstalled for club {self.club_id} "
            f"({archived} documents archived)"
        )
        return instance

    async def enable(self, module_id: str, actor_id: str) -> bool:
        """Returns False when the module was already active."""
        return await self._set_active(module_id, True, actor_id)

    async def disable(self, module_id: str, actor_id: str) -> bool:
        """Returns False when the module was already inactive."""
        if self.definition(module_id).is_core:
            logger.warning(f"Disable rejected: {module_id} is a core module")
            raise CoreModuleProtected(module_id, "disabled")
        return await self._set_active(module_id, False, actor_id)

    @store_call
    async def _set_active(self, module_id: str, active: bool, actor_id: str) -> bool:
        instance = self.require(module_id)
        if instance.is_active == active:
            return False

        now = utc_now()
        await self.instances.update_one(
            {"_id": module_id},
            {"$set": {"is_active": active, "last_updated": now, "last_updated_by": actor_id}},
        )
        self._cache[module_id] = instance.model_copy(
            update={"is_active": active, "last_updated": now, "last_updated_by": actor_id}
        )
        logger.info(
            f"Module {module_id} {'enabled' if active else 'disabled'} for club {self.club_id}"
        )
        return True

    @store_call
    async def update_settings(
        self, module_id: str, values: dict[str, Any], actor_id: str
    ) -> ModuleInstance:
        """Validate and replace the whole settings map of an installed module."""
        module = self.definition(module_id)
        instance = self.require(module_id)
        validate_settings(module, values)

        now = utc_now()
        await self.instances.update_one(
            {"_id": module_id},
            {
                "$set": {
                    "settings": settings_to_pairs(values),
                    "last_updated": now,
                    "last_updated_by": actor_id,
                }
            },
        )
        updated = instance.model_copy(
            update={"settings": dict(values), "last_updated": now, "last_updated_by": actor_id}
        )
        self._cache[module_id] = updated
        logger.info(f"Settings of module {module_id} updated for club {self.club_id}")
        return updated

    # ── Data namespace ───────────────────────────────────────────
    async def _create_data_namespace(self, module: ModuleDefinition, actor_id: str) -> None:
        await self.module_data.replace_one(
            {"_id": module.id},
            {
                "_id": module.id,
                "version": module.version,
                "schema_version": DATA_SCHEMA_VERSION,
                "created_at": utc_now(),
                "created_by": actor_id,
            },
            upsert=True,
        )

    async def _archive_data(self, module_id: str, actor_id: str) -> int:
        """Move the module's live data documents into the archive collection."""
        now = utc_now()
        archived = []

        metadata = await self.module_data.find_one({"_id": module_id})
        if metadata:
            archived.append(("module_data", metadata))
        async for doc in self.module_data_items.find({"module_id": module_id}):
            archived.append(("module_data_items", doc))

        if archived:
            await self.archive.insert_many(
                [
                    {
                        "module_id": module_id,
                        "source_collection": source,
                        "original_id": doc["_id"],
                        "data": doc,
                        "archived_at": now,
                        "archived_by": actor_id,
                    }
                    for source, doc in archived
                ]
            )
        await self.module_data_items.delete_many({"module_id": module_id})
        await self.module_data.delete_one({"_id": module_id})
        return len(archived)

    @store_call
    async def get_data_stats(self, module_id: str) -> dict:
        self.require(module_id)
        metadata = await self.module_data.find_one({"_id": module_id})
        return {
            "module_id": module_id,
            "document_count": await self.module_data_items.count_documents(
                {"module_id": module_id}
            ),
            "archived_count": await self.archive.count_documents({"module_id": module_id}),
            "metadata": metadata,
        }
