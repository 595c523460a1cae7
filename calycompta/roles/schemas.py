"""
Role schemas — club roles and their per-module permission grants.
"""

from datetime import datetime
from typing import Optional
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Fields a system role may still change.
SYSTEM_ROLE_EDITABLE_FIELDS = frozenset({"description", "color", "icon"})

_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class ModularRole(BaseModel):
    id: str
    club_id: str
    name: str
    description: str = ""
    level: int = 0
    color: str = "#6B7280"
    icon: str = "User"
    is_system: bool = False
    is_active: bool = True
    module_permissions: dict[str, list[str]] = Field(default_factory=dict)
    can_manage: list[str] = Field(default_factory=list)
    created_at: datetime
    created_by: str
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    def granted(self, module_id: str) -> list[str]:
        return list(self.module_permissions.get(module_id, []))

    def to_document(self) -> dict:
        doc = self.model_dump(exclude={"id"})
        doc["_id"] = self.id
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "ModularRole":
        data = {k: v for k, v in doc.items() if k != "_id"}
        data["id"] = doc["_id"]
        return cls(**data)


# ── Default ladder, ascending privilege ──────────────────────────
SYSTEM_ROLES: list[dict] = [
    {"id": "membre", "name": "Membre", "level": -1, "color": "#6B7280", "icon": "UserMinus"},
    {"id": "user", "name": "Utilisateur", "level": 0, "color": "#10B981", "icon": "User"},
    {"id": "validateur", "name": "Validateur", "level": 1, "color": "#2563EB", "icon": "CheckCircle"},
    {"id": "admin", "name": "Administrateur", "level": 2, "color": "#DC2626", "icon": "Shield"},
    {"id": "superadmin", "name": "Super Administrateur", "level": 3, "color": "#7C3AED", "icon": "Crown"},
]

SYSTEM_ROLE_HIERARCHY: dict[str, list[str]] = {
    "superadmin": ["superadmin", "admin", "validateur", "user", "membre"],
    "admin": ["validateur", "user", "membre"],
    "validateur": [],
    "user": [],
    "membre": [],
}


# ── Request schemas ──────────────────────────────────────────────
class CreateRoleRequest(BaseModel):
    """POST /roles"""
    name: str = Field(..., min_length=2, max_length=100)
    description: str = Field("", max_length=500)
    level: int = Field(0, ge=-1, le=100)
    color: str = "#6B7280"
    icon: str = "User"
    is_active: bool = True
    module_permissions: dict[str, list[str]] = Field(default_factory=dict)
    can_manage: list[str] = Field(default_factory=list)

    @field_validator("color")
    @classmethod
    def validate_color(cls, v):
        if not _COLOR_PATTERN.match(v):
            raise ValueError("Color must be a hex value such as #2563EB")
        return v


class UpdateRoleRequest(BaseModel):
    """PATCH /roles/{role_id} — only the fields sent are applied."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    level: Optional[int] = Field(None, ge=-1, le=100)
    color: Optional[str] = None
    icon: Optional[str] = None
    is_active: Optional[bool] = None
    can_manage: Optional[list[str]] = None

    @field_validator("color")
    @classmethod
    def validate_color(cls, v):
        if v is not None and not _COLOR_PATTERN.match(v):
            raise ValueError("Color must be a hex value such as #2563EB")
        return v


class SetPermissionsRequest(BaseModel):
    """PUT /roles/{role_id}/permissions/{module_id} — replaces the grant set."""
    permissions: list[str] = Field(default_factory=list)
