"""HTTP surface: auth, club bootstrap, module, role and audit endpoints."""

from conftest import API, CLUB_ID, auth_headers


class TestPublicAndAuth:
    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["catalog"] == "builtin"

    def test_missing_token(self, client):
        response = client.get(f"{API}/modules/")
        assert response.status_code == 401

    def test_malformed_token(self, client):
        response = client.get(f"{API}/modules/", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == 401

    def test_missing_token_uses_error_envelope(self, client):
        body = client.get(f"{API}/modules/").json()
        assert body["error"]["message"] == "Missing Authorization header"

    def test_invalid_club_id_in_token(self, client):
        response = client.get(f"{API}/modules/", headers=auth_headers(club_id="Bad Club!"))
        assert response.status_code == 400


class TestBootstrap:
    def test_wrong_app_key(self, client):
        response = client.post(
            f"{API}/clubs/{CLUB_ID}/bootstrap",
            headers={"role": "system_admin", "app-key": "guess"},
        )
        assert response.status_code == 401

    def test_wrong_role(self, client, app_admin_headers):
        response = client.post(
            f"{API}/clubs/{CLUB_ID}/bootstrap",
            headers={**app_admin_headers, "role": "admin"},
        )
        assert response.status_code == 403

    def test_invalid_club_id(self, client, app_admin_headers):
        response = client.post(f"{API}/clubs/bad club!/bootstrap", headers=app_admin_headers)
        assert response.status_code == 400

    def test_second_bootstrap_is_noop(self, bootstrapped_client, app_admin_headers):
        response = bootstrapped_client.post(
            f"{API}/clubs/{CLUB_ID}/bootstrap", headers=app_admin_headers
        )
        data = response.json()["data"]
        assert data["roles_seeded"] == []
        assert data["modules_installed"] == []


class TestModuleEndpoints:
    def test_list_catalog(self, bootstrapped_client):
        response = bootstrapped_client.get(f"{API}/modules/", headers=auth_headers())
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 6
        installed = {m["id"] for m in data["modules"] if m["installed"]}
        assert installed == {"admin", "transactions", "expenses", "events"}

    def test_install_then_reinstall(self, bootstrapped_client):
        headers = auth_headers(sub="u42")
        response = bootstrapped_client.post(f"{API}/modules/inventory/install", headers=headers)
        assert response.status_code == 201
        assert response.json()["data"]["installed_by"] == "u42"

        response = bootstrapped_client.post(f"{API}/modules/inventory/install", headers=headers)
        assert response.status_code == 409
        assert response.json()["error"]["kind"] == "AlreadyInstalled"

    def test_core_module_cannot_be_disabled(self, bootstrapped_client):
        response = bootstrapped_client.post(
            f"{API}/modules/expenses/disable", headers=auth_headers()
        )
        assert response.status_code == 403
        assert response.json()["error"]["kind"] == "CoreModuleProtected"

    def test_invalid_settings(self, bootstrapped_client):
        response = bootstrapped_client.put(
            f"{API}/modules/transactions/settings",
            json={"settings": {"validation.signatureThreshold": -5}},
            headers=auth_headers(),
        )
        assert response.status_code == 422
        assert response.json()["error"]["key"] == "validation.signatureThreshold"

        current = bootstrapped_client.get(
            f"{API}/modules/transactions/settings", headers=auth_headers()
        )
        assert current.json()["data"]["settings"]["validation.signatureThreshold"] == 100

    def test_unknown_module(self, bootstrapped_client):
        response = bootstrapped_client.get(f"{API}/modules/payroll", headers=auth_headers())
        assert response.status_code == 404
        assert response.json()["error"]["kind"] == "UnknownModule"

    def test_user_cannot_install(self, bootstrapped_client):
        response = bootstrapped_client.post(
            f"{API}/modules/inventory/install", headers=auth_headers("user")
        )
        assert response.status_code == 403

    def test_admin_cannot_uninstall(self, bootstrapped_client):
        bootstrapped_client.post(f"{API}/modules/inventory/install", headers=auth_headers())
        response = bootstrapped_client.delete(
            f"{API}/modules/inventory", headers=auth_headers("admin")
        )
        assert response.status_code == 403

        response = bootstrapped_client.delete(f"{API}/modules/inventory", headers=auth_headers())
        assert response.status_code == 200


class TestRoleEndpoints:
    def test_system_role_fields(self, bootstrapped_client):
        response = bootstrapped_client.patch(
            f"{API}/roles/validateur", json={"name": "Chef"}, headers=auth_headers()
        )
        assert response.status_code == 403
        assert response.json()["error"]["kind"] == "SystemRoleRestricted"

        response = bootstrapped_client.patch(
            f"{API}/roles/validateur",
            json={"description": "Valide les dépenses"},
            headers=auth_headers(),
        )
        assert response.status_code == 200
        assert response.json()["data"]["description"] == "Valide les dépenses"

    def test_grant_check_and_gate(self, bootstrapped_client):
        client = bootstrapped_client
        headers = auth_headers()
        check = f"{API}/roles/validateur/check/inventory/approve_loans"

        client.post(f"{API}/modules/inventory/install", headers=headers)
        response = client.post(
            f"{API}/roles/validateur/permissions/inventory/approve_loans", headers=headers
        )
        assert response.json()["data"]["changed"] is True
        assert client.get(check, headers=headers).json()["data"]["allowed"] is True

        client.post(f"{API}/modules/inventory/disable", headers=headers)
        assert client.get(check, headers=headers).json()["data"]["allowed"] is False

        client.post(f"{API}/modules/inventory/enable", headers=headers)
        assert client.get(check, headers=headers).json()["data"]["allowed"] is True

    def test_create_custom_role(self, bootstrapped_client):
        response = bootstrapped_client.post(
            f"{API}/roles/",
            json={"name": "Trésorier", "level": 2, "module_permissions": {"expenses": ["approve"]}},
            headers=auth_headers(),
        )
        assert response.status_code == 201
        role_id = response.json()["data"]["id"]

        roles = bootstrapped_client.get(f"{API}/roles/", headers=auth_headers()).json()["data"]
        assert role_id in [r["id"] for r in roles["roles"]]

    def test_admin_cannot_manage_roles(self, bootstrapped_client):
        response = bootstrapped_client.post(
            f"{API}/roles/user/permissions/expenses/approve", headers=auth_headers("admin")
        )
        assert response.status_code == 403


class TestAuditEndpoints:
    def test_bootstrap_is_audited(self, bootstrapped_client):
        response = bootstrapped_client.get(
            f"{API}/audit-logs/", params={"module": "modules"}, headers=auth_headers()
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] >= 4
        assert {log["actor_id"] for log in data["logs"]} == {"system"}

    def test_other_club_has_no_roles(self, bootstrapped_client):
        response = bootstrapped_client.get(
            f"{API}/audit-logs/", headers=auth_headers(club_id="neptune")
        )
        assert response.status_code == 403
