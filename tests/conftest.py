"""
Pytest configuration and fixtures.

This module provides:
- An in-memory MongoDB (mongomock-motor) per test
- The built-in module catalog
- Registry fixtures at various stages of club setup
- A FastAPI test client with the database dependency overridden
- Helpers to mint JWTs for a club role
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from calycompta.app import create_app
from calycompta.auth import create_access_token
from calycompta.config import get_database, settings
from calycompta.modules.builtin import BUILTIN_MODULES
from calycompta.modules.catalog import ModuleCatalog
from calycompta.registry import RegistryService

CLUB_ID = "calypso"
API = f"/api/{settings.api_version}"


# =============================================================================
# DATABASE & CATALOG
# =============================================================================


@pytest.fixture
def db():
    """Fresh in-memory database for each test."""
    return AsyncMongoMockClient()["calycompta_test"]


@pytest.fixture
def catalog() -> ModuleCatalog:
    return ModuleCatalog(BUILTIN_MODULES, source="builtin")


# =============================================================================
# REGISTRY FIXTURES
# =============================================================================


@pytest.fixture
async def registry(db, catalog) -> RegistryService:
    """Registry for an empty club: no roles, no modules."""
    return await RegistryService(db, CLUB_ID, catalog).initialize()


@pytest.fixture
async def seeded_registry(registry) -> RegistryService:
    """Registry with the five system roles and no modules."""
    await registry.seed_default_roles(actor_id="tester")
    return registry


@pytest.fixture
def make_registry(db):
    """Build an initialised registry over an arbitrary catalog."""

    async def _make(modules, club_id=CLUB_ID, hooks=None) -> RegistryService:
        custom = ModuleCatalog(modules, source="test")
        return await RegistryService(db, club_id, custom, hooks=hooks).initialize()

    return _make


# =============================================================================
# HTTP FIXTURES
# =============================================================================


@pytest.fixture
def app(db, catalog):
    application = create_app()
    application.state.catalog = catalog

    async def override_get_database():
        return db

    application.dependency_overrides[get_database] = override_get_database
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    # Not used as a context manager: the lifespan would connect to MongoDB.
    return TestClient(app)


@pytest.fixture
def app_admin_headers() -> dict:
    return {"role": "system_admin", "app-key": settings.app_key}


@pytest.fixture
def bootstrapped_client(client, app_admin_headers) -> TestClient:
    response = client.post(f"{API}/clubs/{CLUB_ID}/bootstrap", headers=app_admin_headers)
    assert response.status_code == 200, response.text
    return client


def auth_headers(role_id: str = "superadmin", club_id: str = CLUB_ID, sub: str = "user_1") -> dict:
    token = create_access_token({"sub": sub, "club_id": club_id, "role_id": role_id})
    return {"Authorization": f"Bearer {token}"}
