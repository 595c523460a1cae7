"""Module catalog tests: definitions, source fallback, publishing."""

import pytest
from pydantic import ValidationError

from calycompta.modules.builtin import BUILTIN_MODULES, CORE_MODULES
from calycompta.modules.catalog import (
    BuiltinCatalogSource,
    ModuleCatalog,
    StoreCatalogSource,
    build_catalog,
    publish_catalog,
)
from calycompta.modules.grants import default_grants
from calycompta.modules.schemas import ModuleDefinition
from calycompta.modules.settings import validate_settings
from calycompta.utils.exceptions import CatalogUnavailable, SettingValidationError

MODULES = {m.id: m for m in BUILTIN_MODULES}


def _perm(id, category="view", risk_level="low"):
    return {"id": id, "category": category, "risk_level": risk_level}


class TestModuleDefinition:
    def test_builtin_ids_and_core_flags(self):
        assert [m.id for m in BUILTIN_MODULES] == [
            "admin", "transactions", "expenses", "events", "inventory", "excursions",
        ]
        assert {m.id for m in CORE_MODULES} == {"admin", "transactions", "expenses", "events"}
        assert MODULES["events"].dependencies == ["expenses"]

    def test_duplicate_permission_across_categories_rejected(self):
        with pytest.raises(ValidationError):
            ModuleDefinition(
                id="dup",
                name="Dup",
                category="extension",
                permissions={"a": [_perm("view")], "b": [_perm("view")]},
            )

    def test_duplicate_setting_key_rejected(self):
        setting = {"key": "general.flag", "type": "boolean", "default_value": False}
        with pytest.raises(ValidationError):
            ModuleDefinition(
                id="dup",
                name="Dup",
                category="extension",
                settings={"general": {"flag": setting}, "other": {"flag": setting}},
            )

    def test_self_reference_rejected(self):
        with pytest.raises(ValidationError):
            ModuleDefinition(id="loop", name="Loop", category="extension", dependencies=["loop"])

    def test_dependency_and_incompatibility_overlap_rejected(self):
        with pytest.raises(ValidationError):
            ModuleDefinition(
                id="odd", name="Odd", category="extension",
                dependencies=["expenses"], incompatible_with=["expenses"],
            )

    @pytest.mark.parametrize("module_id", ["Expenses", "1st", "has space", ""])
    def test_invalid_ids_rejected(self, module_id):
        with pytest.raises(ValidationError):
            ModuleDefinition(id=module_id, name="x", category="extension")

    def test_permission_lookup(self):
        expenses = MODULES["expenses"]
        assert expenses.has_permission("approve")
        assert not expenses.has_permission("sign")
        assert expenses.get_permission("approve").risk_level == "high"
        assert expenses.get_permission("view_all").implied_permissions == ["view_own"]


class TestDefaultGrants:
    def test_tiers_for_expenses(self):
        grants = default_grants(MODULES["expenses"])
        assert set(grants["superadmin"]) == set(MODULES["expenses"].permission_ids)
        assert "delete_all" not in grants["admin"]
        assert "approve" in grants["admin"]
        assert "approve" not in grants["validateur"]
        assert "configure" not in grants["validateur"]
        assert "reject" in grants["validateur"]
        assert set(grants["user"]) == {
            "view_own", "create", "update_own", "delete_own", "view_all", "comment", "export",
        }
        assert "membre" not in grants


class TestCatalogLoad:
    async def test_builtin_source(self):
        catalog = await ModuleCatalog.load([BuiltinCatalogSource()])
        assert catalog.source == "builtin"
        assert len(catalog) == len(BUILTIN_MODULES)
        assert "expenses" in catalog
        assert catalog.get("nope") is None
        assert [m.id for m in catalog.list_all()] == [m.id for m in BUILTIN_MODULES]

    async def test_empty_store_falls_back_to_builtin(self, db):
        catalog = await build_catalog(db)
        assert catalog.source == "builtin"

    async def test_published_store_wins(self, db):
        await publish_catalog(db, [MODULES["admin"], MODULES["expenses"]])
        catalog = await build_catalog(db)
        assert catalog.source == "store"
        assert sorted(m.id for m in catalog) == ["admin", "expenses"]

    async def test_store_round_trip_keeps_schema(self, db):
        await publish_catalog(db, BUILTIN_MODULES)
        catalog = await ModuleCatalog.load([StoreCatalogSource(db)])
        expenses = catalog.get("expenses")
        dependency = expenses.get_setting("payment.requireIBAN").depends_on
        assert (dependency.key, dependency.equals) == ("payment.defaultPaymentMethod", "transfer")
        assert expenses.permission_ids == MODULES["expenses"].permission_ids
        assert catalog.get("inventory").config.scheduled_tasks[0].schedule == "0 9 * * *"

    async def test_store_loaded_definition_keeps_custom_validator(self, db):
        await publish_catalog(db, BUILTIN_MODULES)
        catalog = await build_catalog(db)
        assert catalog.source == "store"

        transactions = catalog.get("transactions")
        rules = transactions.get_setting("download.filenamePattern").validation
        assert rules.custom == "no_forbidden_filename_chars"
        with pytest.raises(SettingValidationError) as exc:
            validate_settings(transactions, {"download.filenamePattern": "a/b"})
        assert exc.value.key == "download.filenamePattern"

    async def test_unknown_validator_name_rejects_store(self, db):
        await publish_catalog(db, [MODULES["admin"]])
        await db["module_definitions"].update_one(
            {"_id": "admin"},
            {"$set": {"settings": {"general": {"mode": {
                "key": "general.mode", "type": "string", "default_value": "x",
                "validation": {"custom": "does_not_exist"},
            }}}}},
        )
        catalog = await build_catalog(db)
        assert catalog.source == "builtin"

    async def test_one_invalid_document_rejects_whole_store(self, db):
        await publish_catalog(db, [MODULES["admin"], MODULES["expenses"]])
        await db["module_definitions"].insert_one({"_id": "broken", "name": "No category"})
        catalog = await build_catalog(db)
        assert catalog.source == "builtin"
        assert len(catalog) == len(BUILTIN_MODULES)

    async def test_dangling_dependency_rejects_whole_store(self, db):
        await publish_catalog(db, [MODULES["expenses"], MODULES["events"]])
        await db["module_definitions"].delete_one({"_id": "expenses"})
        catalog = await build_catalog(db)
        assert catalog.source == "builtin"

    async def test_every_source_failing_raises(self, db):
        with pytest.raises(CatalogUnavailable) as exc:
            await ModuleCatalog.load([StoreCatalogSource(db)])
        assert exc.value.details["tried"] == ["store"]
        assert exc.value.status_code == 503

    async def test_unknown_source_name(self, db):
        with pytest.raises(ValueError):
            await build_catalog(db, ["remote"])


class TestPublish:
    async def test_rerun_is_idempotent(self, db):
        assert await publish_catalog(db, BUILTIN_MODULES) == len(BUILTIN_MODULES)
        assert await publish_catalog(db, BUILTIN_MODULES) == len(BUILTIN_MODULES)
        assert await db["module_definitions"].count_documents({}) == len(BUILTIN_MODULES)

    async def test_invalid_set_writes_nothing(self, db):
        with pytest.raises(ValidationError):
            await publish_catalog(
                db, [MODULES["admin"], {"id": "bad", "name": "Bad", "category": "nope"}]
            )
        assert await db["module_definitions"].count_documents({}) == 0

    async def test_dangling_dependency_writes_nothing(self, db):
        with pytest.raises(ValueError):
            await publish_catalog(db, [MODULES["events"]])
        assert await db["module_definitions"].count_documents({}) == 0


class TestDependencyOrder:
    def test_dependencies_come_first(self, catalog):
        assert catalog.dependency_order(["events", "admin"]) == ["expenses", "events", "admin"]
        order = catalog.dependency_order(["excursions"])
        assert order.index("expenses") < order.index("events") < order.index("excursions")
