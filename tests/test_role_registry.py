"""Role registry tests: seeding, CRUD guards, grants and permission checks."""

import pytest

from calycompta.roles.schemas import SYSTEM_ROLES
from calycompta.utils.exceptions import (
    RoleInUse,
    SystemRoleProtected,
    SystemRoleRestricted,
    UnknownModule,
    UnknownPermission,
    UnknownRole,
)
from conftest import CLUB_ID


class TestSeed:
    async def test_seeds_ladder_once(self, registry):
        seeded = await registry.seed_default_roles(actor_id="tester")
        assert [r.id for r in seeded] == ["membre", "user", "validateur", "admin", "superadmin"]
        levels = [r.level for r in registry.list_roles()]
        assert levels == sorted(levels) and len(set(levels)) == 5
        assert all(r.is_system and r.module_permissions == {} for r in seeded)
        assert registry.get_role("admin").can_manage == ["validateur", "user", "membre"]

        assert await registry.seed_default_roles() == []
        assert len(registry.list_roles()) == len(SYSTEM_ROLES)

    async def test_skipped_when_any_role_exists(self, registry):
        await registry.create_role({"name": "Trésorier", "level": 2})
        assert await registry.seed_default_roles() == []
        assert len(registry.list_roles()) == 1


class TestCreateUpdateDelete:
    async def test_create_custom_role(self, seeded_registry):
        await seeded_registry.install("expenses")
        role = await seeded_registry.create_role(
            {
                "name": "Trésorier",
                "level": 2,
                "color": "#F59E0B",
                "module_permissions": {"expenses": ["view_all", "approve", "approve"]},
            },
            actor_id="u1",
        )
        assert role.id.startswith("role_")
        assert not role.is_system
        assert role.created_by == "u1"
        assert role.module_permissions == {"expenses": ["view_all", "approve"]}
        assert seeded_registry.has_permission(role.id, "expenses", "approve")

    async def test_create_cannot_claim_system(self, seeded_registry):
        with pytest.raises(ValueError):
            await seeded_registry.create_role({"name": "Root", "is_system": True})

    async def test_create_validates_grants(self, seeded_registry):
        with pytest.raises(UnknownPermission):
            await seeded_registry.create_role(
                {"name": "Bad", "module_permissions": {"expenses": ["fly"]}}
            )
        with pytest.raises(UnknownModule):
            await seeded_registry.create_role(
                {"name": "Bad", "module_permissions": {"payroll": ["view"]}}
            )

    async def test_system_role_field_restriction(self, seeded_registry):
        with pytest.raises(SystemRoleRestricted) as exc:
            await seeded_registry.update_role("validateur", {"name": "x"})
        assert exc.value.details["field"] == "name"
        assert seeded_registry.get_role("validateur").name == "Validateur"

        role = await seeded_registry.update_role(
            "validateur", {"description": "x", "color": "#000000", "icon": "Check"}, actor_id="u9"
        )
        assert role.description == "x"
        assert role.updated_by == "u9"

    async def test_system_role_level_restricted(self, seeded_registry):
        with pytest.raises(SystemRoleRestricted):
            await seeded_registry.update_role("admin", {"description": "ok", "level": 9})
        assert seeded_registry.get_role("admin").description == "Rôle système"

    async def test_custom_role_fully_editable(self, seeded_registry):
        role = await seeded_registry.create_role({"name": "Moniteur"})
        updated = await seeded_registry.update_role(role.id, {"name": "Moniteur N2", "level": 1})
        assert (updated.name, updated.level) == ("Moniteur N2", 1)

    @pytest.mark.parametrize(
        "patch", [{"is_system": False}, {"module_permissions": {"expenses": ["approve"]}}]
    )
    async def test_system_role_rejects_non_cosmetic_fields(self, seeded_registry, patch):
        with pytest.raises(SystemRoleRestricted) as exc:
            await seeded_registry.update_role("admin", patch)
        assert exc.value.details["field"] in patch
        assert seeded_registry.get_role("admin").is_system

    async def test_unknown_update_field(self, seeded_registry):
        role = await seeded_registry.create_role({"name": "Moniteur"})
        with pytest.raises(ValueError):
            await seeded_registry.update_role(role.id, {"module_permissions": {}})

    async def test_unknown_role(self, seeded_registry):
        with pytest.raises(UnknownRole):
            await seeded_registry.update_role("ghost", {"description": "x"})
        with pytest.raises(UnknownRole):
            seeded_registry.get_role("ghost")

    async def test_system_role_cannot_be_deleted(self, seeded_registry):
        with pytest.raises(SystemRoleProtected):
            await seeded_registry.delete_role("membre")

    async def test_role_in_use(self, seeded_registry, db):
        role = await seeded_registry.create_role({"name": "Moniteur"})
        members = db[f"{CLUB_ID}_members"]
        await members.insert_one({"_id": "m1", "name": "Alice", "role_id": role.id})

        with pytest.raises(RoleInUse) as exc:
            await seeded_registry.delete_role(role.id)
        assert exc.value.details["member_count"] == 1

        await members.delete_one({"_id": "m1"})
        await seeded_registry.delete_role(role.id)
        assert seeded_registry.roles.get(role.id) is None


class TestGrants:
    async def test_grant_is_idempotent(self, seeded_registry):
        await seeded_registry.install("expenses")
        assert await seeded_registry.grant_permission("user", "expenses", "comment") is True
        assert await seeded_registry.grant_permission("user", "expenses", "comment") is False
        assert seeded_registry.get_role_permissions("user", "expenses") == ["comment"]

    async def test_revoke_missing_is_noop(self, seeded_registry):
        assert await seeded_registry.revoke_permission("user", "expenses", "comment") is False
        await seeded_registry.grant_permission("user", "expenses", "comment")
        assert await seeded_registry.revoke_permission("user", "expenses", "comment") is True
        assert seeded_registry.get_role_permissions("user", "expenses") == []

    async def test_grant_unknown_references(self, seeded_registry):
        with pytest.raises(UnknownPermission):
            await seeded_registry.grant_permission("user", "expenses", "sign")
        with pytest.raises(UnknownModule):
            await seeded_registry.grant_permission("user", "payroll", "view")
        with pytest.raises(UnknownRole):
            await seeded_registry.grant_permission("ghost", "expenses", "comment")
        with pytest.raises(UnknownPermission):
            await seeded_registry.revoke_permission("user", "expenses", "sign")

    async def test_set_module_permissions_round_trip(self, seeded_registry):
        wanted = ["approve", "view_all", "reject"]
        await seeded_registry.set_module_permissions("validateur", "expenses", wanted)
        assert set(seeded_registry.get_role_permissions("validateur", "expenses")) == set(wanted)

        await seeded_registry.set_module_permissions("validateur", "expenses", ["comment", "comment"])
        assert seeded_registry.get_role_permissions("validateur", "expenses") == ["comment"]

    async def test_set_module_permissions_is_all_or_nothing(self, seeded_registry):
        await seeded_registry.set_module_permissions("validateur", "expenses", ["approve"])
        with pytest.raises(UnknownPermission):
            await seeded_registry.set_module_permissions(
                "validateur", "expenses", ["view_all", "teleport"]
            )
        assert seeded_registry.get_role_permissions("validateur", "expenses") == ["approve"]

    async def test_grants_persisted(self, seeded_registry, db):
        await seeded_registry.grant_permission("admin", "transactions", "sign")
        doc = await db[f"{CLUB_ID}_roles"].find_one({"_id": "admin"})
        assert doc["module_permissions"] == {"transactions": ["sign"]}


class TestHasPermission:
    async def test_unknown_role_or_module(self, seeded_registry):
        await seeded_registry.install("expenses")
        await seeded_registry.grant_permission("validateur", "expenses", "approve")
        assert seeded_registry.has_permission("validateur", "expenses", "approve")
        assert not seeded_registry.has_permission("ghost", "expenses", "approve")
        assert not seeded_registry.has_permission("validateur", "expenses", "reject")
        assert not seeded_registry.has_permission("validateur", "payroll", "approve")

    async def test_module_must_be_installed(self, seeded_registry):
        await seeded_registry.grant_permission("validateur", "inventory", "view")
        assert not seeded_registry.has_permission("validateur", "inventory", "view")
        await seeded_registry.install("inventory")
        assert seeded_registry.has_permission("validateur", "inventory", "view")

    async def test_disabling_gates_without_touching_grants(self, seeded_registry):
        await seeded_registry.install("inventory")
        await seeded_registry.grant_permission("validateur", "inventory", "approve_loans")
        assert seeded_registry.has_permission("validateur", "inventory", "approve_loans")

        await seeded_registry.disable("inventory")
        assert not seeded_registry.has_permission("validateur", "inventory", "approve_loans")
        assert seeded_registry.get_role_permissions("validateur", "inventory") == ["approve_loans"]

        await seeded_registry.enable("inventory")
        assert seeded_registry.has_permission("validateur", "inventory", "approve_loans")

    async def test_inactive_role(self, seeded_registry):
        role = await seeded_registry.create_role({"name": "Moniteur"})
        await seeded_registry.install("inventory")
        await seeded_registry.grant_permission(role.id, "inventory", "view")
        await seeded_registry.update_role(role.id, {"is_active": False})
        assert not seeded_registry.has_permission(role.id, "inventory", "view")

    async def test_user_has_permission(self, seeded_registry, db):
        await seeded_registry.install("inventory")
        await seeded_registry.grant_permission("user", "inventory", "view")
        members = db[f"{CLUB_ID}_members"]
        await members.insert_many(
            [
                {"_id": "alice", "role_id": "user", "is_active": True},
                {"_id": "bob", "role_id": "user", "is_active": False},
            ]
        )
        assert await seeded_registry.user_has_permission("alice", "inventory", "view")
        assert not await seeded_registry.user_has_permission("bob", "inventory", "view")
        assert not await seeded_registry.user_has_permission("carol", "inventory", "view")
