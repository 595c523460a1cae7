"""
Club collection resolver.

Convention:
  - Club-scoped collections:  {club_id}_{collection_name}
    e.g.  calypso_modules, calypso_roles, calypso_members
  - Global collections:       {collection_name}
    e.g.  module_definitions  (shared across all clubs)
"""

import re
from motor.motor_asyncio import AsyncIOMotorDatabase, AsyncIOMotorCollection


_CLUB_ID_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_\-]*$")


def validate_club_id(club_id: str) -> str:
    """Ensure the club id is safe for use as a collection name prefix."""
    slug = club_id.strip().lower()
    if not _CLUB_ID_PATTERN.match(slug):
        raise ValueError(
            f"Invalid club_id '{club_id}'. "
            "Must be lowercase alphanumeric with optional hyphens or underscores."
        )
    return slug.replace("-", "_")


def get_club_collection(
    db: AsyncIOMotorDatabase,
    club_id: str,
    collection_name: str,
) -> AsyncIOMotorCollection:
    """
    Return a club-scoped collection.

    Example:
        get_club_collection(db, "calypso", "roles")  →  db["calypso_roles"]
    """
    safe_id = validate_club_id(club_id)
    return db[f"{safe_id}_{collection_name}"]


def get_global_collection(
    db: AsyncIOMotorDatabase,
    collection_name: str,
) -> AsyncIOMotorCollection:
    """
    Return a global (non-club) collection.

    Example:
        get_global_collection(db, "module_definitions")  →  db["module_definitions"]
    """
    return db[collection_name]
