"""Read-only access to club members, used for role reference checks."""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from calycompta.tenant import get_club_collection
from calycompta.utils.exceptions import store_call


class MemberDirectory:
    def __init__(self, db: AsyncIOMotorDatabase, club_id: str):
        self.db = db
        self.club_id = club_id
        self.members = get_club_collection(db, club_id, "members")

    @store_call
    async def count_members_with_role(self, role_id: str) -> int:
        return await self.members.count_documents({"role_id": role_id})

    @store_call
    async def get_member_role_id(self, user_id: str) -> Optional[str]:
        """Role of an active member, or None if unknown or deactivated."""
        member = await self.members.find_one(
            {"_id": user_id, "is_active": {"$ne": False}},
            {"role_id": 1},
        )
        return member.get("role_id") if member else None
