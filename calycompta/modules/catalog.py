"""
Module catalog — the immutable set of installable module definitions.

Loading walks an ordered list of sources (by default the published
`module_definitions` collection, then the compiled built-ins). A source is
adopted as a whole or not at all: one invalid definition, or a dependency
pointing outside the set, rejects that source and the next one is tried.

Collection: module_definitions (global, `_id` = module id)
"""

from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Optional, Union

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo import ReplaceOne
from pymongo.errors import PyMongoError

from calycompta.config import settings
from calycompta.tenant import get_global_collection
from calycompta.utils import Logger
from calycompta.utils.exceptions import CatalogUnavailable, store_call
from .builtin import BUILTIN_MODULES
from .schemas import ModuleDefinition

logger = Logger("catalog")


class CatalogSourceError(Exception):
    """A source produced nothing usable."""


class CatalogSource(ABC):
    name: str = "source"

    @abstractmethod
    async def fetch(self) -> list[ModuleDefinition]:
        ...


class BuiltinCatalogSource(CatalogSource):
    name = "builtin"

    def __init__(self, modules: Optional[Iterable[ModuleDefinition]] = None):
        self._modules = list(modules if modules is not None else BUILTIN_MODULES)

    async def fetch(self) -> list[ModuleDefinition]:
        return list(self._modules)


class StoreCatalogSource(CatalogSource):
    name = "store"

    def __init__(self, db: AsyncIOMotorDatabase, collection_name: Optional[str] = None):
        self.collection = get_global_collection(
            db, collection_name or settings.catalog_collection
        )

    async def fetch(self) -> list[ModuleDefinition]:
        cursor = self.collection.find({}).sort("_id", 1)
        docs = [d async for d in cursor]
        if not docs:
            raise CatalogSourceError("no published module definitions")
        return [_definition_from_document(d) for d in docs]


def _definition_from_document(doc: dict) -> ModuleDefinition:
    data = {k: v for k, v in doc.items() if k != "_id"}
    data["id"] = doc["_id"]
    return ModuleDefinition.model_validate(data)


def _definition_to_document(module: ModuleDefinition) -> dict:
    doc = module.model_dump(mode="json", exclude={"id"})
    doc["_id"] = module.id
    return doc


def _check_references(modules: list[ModuleDefinition]) -> None:
    ids = [m.id for m in modules]
    duplicates = {i for i in ids if ids.count(i) > 1}
    if duplicates:
        raise CatalogSourceError(f"duplicate module ids {sorted(duplicates)}")
    known = set(ids)
    for module in modules:
        missing = [d for d in module.dependencies if d not in known]
        if missing:
            raise CatalogSourceError(
                f"module {module.id} depends on unknown modules {missing}"
            )


class ModuleCatalog:
    """Read-only view over one adopted set of module definitions."""

    def __init__(self, modules: Iterable[ModuleDefinition] = (), source: str = "empty"):
        self._modules: dict[str, ModuleDefinition] = {m.id: m for m in modules}
        self.source = source

    @classmethod
    async def load(cls, sources: list[CatalogSource]) -> "ModuleCatalog":
        """
        Adopt the first source that yields a complete, consistent module set.

        Raises CatalogUnavailable when every source fails.
        """
        tried = []
        for source in sources:
            tried.append(source.name)
            try:
                modules = await source.fetch()
                _check_references(modules)
            except (CatalogSourceError, ValidationError, PyMongoError) as e:
                logger.warning(f"Catalog source '{source.name}' rejected: {e}")
                continue
            logger.info(
                f"Catalog loaded from '{source.name}' ({len(modules)} modules)"
            )
            return cls(modules, source=source.name)
        raise CatalogUnavailable(tried)

    def get(self, module_id: str) -> Optional[ModuleDefinition]:
        return self._modules.get(module_id)

    def list_all(self) -> list[ModuleDefinition]:
        return list(self._modules.values())

    def dependency_order(self, module_ids: Iterable[str]) -> list[str]:
        """Order `module_ids` so every module follows its dependencies."""
        ordered: list[str] = []

        def visit(module_id: str, trail: tuple[str, ...]):
            if module_id in ordered:
                return
            if module_id in trail:
                raise ValueError(f"Dependency cycle through {module_id}")
            module = self._modules.get(module_id)
            for dep in module.dependencies if module else []:
                visit(dep, trail + (module_id,))
            ordered.append(module_id)

        for module_id in module_ids:
            visit(module_id, ())
        return ordered

    def __contains__(self, module_id: str) -> bool:
        return module_id in self._modules

    def __iter__(self) -> Iterator[ModuleDefinition]:
        return iter(self._modules.values())

    def __len__(self) -> int:
        return len(self._modules)


def build_sources(
    db: AsyncIOMotorDatabase, names: Optional[list[str]] = None
) -> list[CatalogSource]:
    factories = {
        "store": lambda: StoreCatalogSource(db),
        "builtin": BuiltinCatalogSource,
    }
    sources = []
    for name in names or settings.catalog_sources:
        if name not in factories:
            raise ValueError(f"Unknown catalog source '{name}'")
        sources.append(factories[name]())
    return sources


async def build_catalog(
    db: AsyncIOMotorDatabase, names: Optional[list[str]] = None
) -> ModuleCatalog:
    return await ModuleCatalog.load(build_sources(db, names))


@store_call
async def publish_catalog(
    db: AsyncIOMotorDatabase,
    definitions: Iterable[Union[ModuleDefinition, dict]],
    collection_name: Optional[str] = None,
) -> int:
    """
    Write a complete module set to the catalog collection.

    Every definition is validated before anything is written; the set is
    then upserted with one ordered bulk write. An interrupted run leaves the
    group incomplete and is repaired by running it again.
    """
    modules = [
        d if isinstance(d, ModuleDefinition) else ModuleDefinition.model_validate(d)
        for d in definitions
    ]
    try:
        _check_references(modules)
    except CatalogSourceError as e:
        raise ValueError(str(e)) from e

    collection = get_global_collection(
        db, collection_name or settings.catalog_collection
    )
    requests = [
        ReplaceOne({"_id": m.id}, _definition_to_document(m), upsert=True)
        for m in modules
    ]
    if requests:
        await collection.bulk_write(requests, ordered=True)
    logger.info(f"Published {len(modules)} module definitions")
    return len(modules)
