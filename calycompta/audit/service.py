"""
Audit Service — record and query registry audit trail entries.

Collection: {club}_audit_logs (club-scoped)

Usage from the registry:
    audit = AuditService(db, club_id)
    await audit.log(
        module="modules",
        action="install",
        actor_id="user_123",
        resource_id="expenses",
        description="Installed module expenses",
        after=instance_doc,
    )
"""

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from calycompta.tenant import get_club_collection
from calycompta.utils import serialize_mongo_doc, utc_now
from calycompta.utils.exceptions import store_call


def _diff_fields(before: dict | None, after: dict | None) -> list[str]:
    """
    Compare two dicts and return the field names that changed.
    Ignores bookkeeping fields.
    """
    if not before or not after:
        return []

    skip = {"_id", "updated_at", "updated_by", "last_updated", "last_updated_by"}
    changed = []
    for key in sorted(set(before) | set(after)):
        if key in skip:
            continue
        if before.get(key) != after.get(key):
            changed.append(key)
    return changed


class AuditService:
    def __init__(self, db: AsyncIOMotorDatabase, club_id: str):
        self.db = db
        self.club_id = club_id
        self.logs = get_club_collection(db, club_id, "audit_logs")

    @store_call
    async def log(
        self,
        module: str,
        action: str,
        actor_id: str,
        resource_id: str | None = None,
        description: str = "",
        before: dict | Any = None,
        after: dict | Any = None,
    ) -> dict:
        """
        Record an audit entry after a successful mutation.

        Args:
            module: Which area changed (modules, roles)
            action: What happened (install, grant, update, ...)
            actor_id: Who did it
            resource_id: Module id or role id affected
            before / after: Snapshots around the change
        """
        before = serialize_mongo_doc(before) if isinstance(before, dict) else before
        after = serialize_mongo_doc(after) if isinstance(after, dict) else after

        entry = {
            "module": module,
            "action": action,
            "actor_id": actor_id,
            "resource_id": resource_id,
            "description": description,
            "before": before,
            "after": after,
            "changed_fields": _diff_fields(before, after) if before and after else None,
            "timestamp": utc_now(),
        }
        result = await self.logs.insert_one(entry)
        entry["_id"] = result.inserted_id
        return serialize_mongo_doc(entry)

    @store_call
    async def list_logs(
        self,
        module: Optional[str] = None,
        action: Optional[str] = None,
        actor_id: Optional[str] = None,
        resource_id: Optional[str] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[dict], int]:
        """Query audit entries, most recent first."""
        filters: dict = {}
        if module:
            filters["module"] = module
        if action:
            filters["action"] = action
        if actor_id:
            filters["actor_id"] = actor_id
        if resource_id:
            filters["resource_id"] = resource_id
        if from_date or to_date:
            date_filter = {}
            if from_date:
                date_filter["$gte"] = from_date
            if to_date:
                date_filter["$lte"] = to_date
            filters["timestamp"] = date_filter

        total = await self.logs.count_documents(filters)
        cursor = (
            self.logs.find(filters)
            .sort("timestamp", -1)
            .skip(offset)
            .limit(limit)
        )
        docs = [serialize_mongo_doc(d) async for d in cursor]
        return docs, total

    @store_call
    async def get_log(self, log_id: str) -> dict:
        if not ObjectId.is_valid(log_id):
            raise HTTPException(status_code=400, detail="Invalid audit log ID")
        doc = await self.logs.find_one({"_id": ObjectId(log_id)})
        if not doc:
            raise HTTPException(status_code=404, detail="Audit log not found")
        return serialize_mongo_doc(doc)
