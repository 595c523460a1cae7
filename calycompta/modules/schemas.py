"""
Module catalog and module instance schemas.

A ModuleDefinition is the immutable catalog entry; a ModuleInstance is the
club-scoped record of one installed module.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Iterator, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from .validators import get_validator


class ModuleCategory(str, Enum):
    CORE = "core"
    FINANCE = "finance"
    OPERATIONS = "operations"
    COMMUNICATION = "communication"
    ADMIN = "admin"
    EXTENSION = "extension"


class SettingType(str, Enum):
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SELECT = "select"
    MULTISELECT = "multiselect"
    JSON = "json"
    DATE = "date"
    COLOR = "color"


class PermissionCategory(str, Enum):
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"
    ADMIN = "admin"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


_MODULE_ID_PATTERN = re.compile(r"^[a-z][a-z0-9_\-]*$")


# ── Settings schema ──────────────────────────────────────────────
class SettingOption(BaseModel):
    value: Any
    label: str = ""


class SettingValidation(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None
    # Name of a predicate in calycompta.modules.validators.
    custom: Optional[str] = None

    @field_validator("custom")
    @classmethod
    def known_validator(cls, v):
        if v is not None:
            get_validator(v)
        return v


class SettingDependency(BaseModel):
    """
    Visibility gate of a setting, evaluated against the same settings map.

    Accepts the catalog's string form: "otherKey" (truthy) or
    "otherKey=value" (textual equality).
    """

    key: str
    equals: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def parse_expression(cls, value):
        if isinstance(value, str):
            key, sep, expected = value.partition("=")
            return {"key": key.strip(), "equals": expected.strip() if sep else None}
        return value

    def holds(self, settings: dict[str, Any]) -> bool:
        current = settings.get(self.key)
        if self.equals is None:
            return bool(current)
        return _as_text(current) == self.equals

    def __str__(self) -> str:
        return self.key if self.equals is None else f"{self.key}={self.equals}"


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class SettingDefinition(BaseModel):
    key: str
    label: str = ""
    description: Optional[str] = None
    type: SettingType
    default_value: Any = None
    required: bool = False
    validation: Optional[SettingValidation] = None
    options: list[SettingOption] = Field(default_factory=list)
    depends_on: Optional[SettingDependency] = None
    advanced: bool = False

    @model_validator(mode="after")
    def default_matches_type(self):
        # Imported lazily: the checker module depends on these schemas.
        from .settings import check_type

        error = check_type(self, self.default_value)
        if error:
            raise ValueError(f"default value of {self.key}: {error}")
        return self

    @property
    def option_values(self) -> list[Any]:
        return [o.value for o in self.options]

    def is_applicable(self, settings: dict[str, Any]) -> bool:
        return self.depends_on is None or self.depends_on.holds(settings)


# ── Permission schema ────────────────────────────────────────────
class PermissionDefinition(BaseModel):
    id: str = Field(..., min_length=1)
    label: str = ""
    description: str = ""
    category: PermissionCategory
    risk_level: RiskLevel
    requires_condition: Optional[str] = None
    # Documentary only: never expanded when checking grants.
    implied_permissions: list[str] = Field(default_factory=list)


# ── UI wiring metadata ───────────────────────────────────────────
class ModuleRoute(BaseModel):
    path: str
    component: str
    permission: Optional[str] = None
    exact: bool = False
    props: dict[str, Any] = Field(default_factory=dict)


class MenuBadge(BaseModel):
    type: Literal["count", "new", "alert"]
    value: Optional[Union[int, str]] = None


class ModuleMenuItem(BaseModel):
    id: str
    label: str = ""
    icon: str = ""
    path: Optional[str] = None
    permission: Optional[str] = None
    badge: Optional[MenuBadge] = None
    sub_items: list["ModuleMenuItem"] = Field(default_factory=list)
    position: Optional[int] = None


class ModuleWidget(BaseModel):
    id: str
    component: str
    position: Literal["dashboard", "sidebar", "header"] = "dashboard"
    permission: Optional[str] = None
    default_size: Optional[dict[str, int]] = None
    resizable: bool = True


class ModuleHooks(BaseModel):
    on_install: Optional[str] = None
    on_uninstall: Optional[str] = None
    on_enable: Optional[str] = None
    on_disable: Optional[str] = None
    on_update: Optional[str] = None


class ModuleApiEndpoint(BaseModel):
    method: Literal["GET", "POST", "PUT", "DELETE"]
    path: str
    handler: str
    permission: Optional[str] = None
    rate_limit: Optional[int] = None


class ModuleScheduledTask(BaseModel):
    id: str
    name: str
    schedule: str  # cron expression
    handler: str
    enabled: bool = True


class ModuleConfig(BaseModel):
    routes: list[ModuleRoute] = Field(default_factory=list)
    menu_items: list[ModuleMenuItem] = Field(default_factory=list)
    widgets: list[ModuleWidget] = Field(default_factory=list)
    hooks: ModuleHooks = Field(default_factory=ModuleHooks)
    api_endpoints: list[ModuleApiEndpoint] = Field(default_factory=list)
    scheduled_tasks: list[ModuleScheduledTask] = Field(default_factory=list)


# ── Catalog entry ────────────────────────────────────────────────
class ModuleDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    icon: str = ""
    version: str = "1.0.0"
    category: ModuleCategory
    is_core: bool = False
    dependencies: list[str] = Field(default_factory=list)
    incompatible_with: list[str] = Field(default_factory=list)
    settings: dict[str, dict[str, SettingDefinition]] = Field(default_factory=dict)
    permissions: dict[str, list[PermissionDefinition]] = Field(default_factory=dict)
    config: ModuleConfig = Field(default_factory=ModuleConfig)
    author: Optional[str] = None

    @field_validator("id")
    @classmethod
    def validate_id(cls, v):
        if not _MODULE_ID_PATTERN.match(v):
            raise ValueError(
                "Module id must start with a lowercase letter and contain only "
                "lowercase letters, digits, underscores and hyphens"
            )
        return v

    @field_validator("dependencies", "incompatible_with")
    @classmethod
    def dedupe(cls, v):
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def validate_unique_ids(self):
        if self.id in self.dependencies or self.id in self.incompatible_with:
            raise ValueError(f"Module {self.id} cannot reference itself")
        overlap = set(self.dependencies) & set(self.incompatible_with)
        if overlap:
            raise ValueError(
                f"Module {self.id} both depends on and is incompatible with {sorted(overlap)}"
            )

        seen_keys: set[str] = set()
        for setting in self.iter_settings():
            if setting.key in seen_keys:
                raise ValueError(f"Duplicate setting key {setting.key} in module {self.id}")
            seen_keys.add(setting.key)

        seen_permissions: set[str] = set()
        for permission in self.iter_permissions():
            if permission.id in seen_permissions:
                raise ValueError(
                    f"Duplicate permission id {permission.id} in module {self.id}"
                )
            seen_permissions.add(permission.id)
        return self

    def iter_settings(self) -> Iterator[SettingDefinition]:
        """Settings in declaration order: categories first, keys within."""
        for category in self.settings.values():
            yield from category.values()

    def iter_permissions(self) -> Iterator[PermissionDefinition]:
        for category in self.permissions.values():
            yield from category

    def get_setting(self, key: str) -> Optional[SettingDefinition]:
        return next((s for s in self.iter_settings() if s.key == key), None)

    def get_permission(self, permission_id: str) -> Optional[PermissionDefinition]:
        return next((p for p in self.iter_permissions() if p.id == permission_id), None)

    def has_permission(self, permission_id: str) -> bool:
        return self.get_permission(permission_id) is not None

    @property
    def permission_ids(self) -> list[str]:
        return [p.id for p in self.iter_permissions()]

    def default_settings(self) -> dict[str, Any]:
        return {s.key: s.default_value for s in self.iter_settings()}


# ── Club-scoped instance ─────────────────────────────────────────
class ModuleInstance(BaseModel):
    module_id: str
    club_id: str
    settings: dict[str, Any] = Field(default_factory=dict)
    # Starter grants per system role tier, derived at install time.
    # Informational: the role registry is the only source checked.
    permissions: dict[str, list[str]] = Field(default_factory=dict)
    is_active: bool = True
    installed_at: datetime
    installed_by: str
    last_updated: Optional[datetime] = None
    last_updated_by: Optional[str] = None

    def to_document(self) -> dict:
        """
        MongoDB treats dots in field names as paths, so the flat
        dotted-key settings map is persisted as ordered key/value pairs.
        """
        doc = self.model_dump(exclude={"module_id", "settings"})
        doc["_id"] = self.module_id
        doc["settings"] = settings_to_pairs(self.settings)
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "ModuleInstance":
        data = {k: v for k, v in doc.items() if k != "_id"}
        data["module_id"] = doc["_id"]
        data["settings"] = settings_from_pairs(doc.get("settings") or [])
        return cls(**data)


def settings_from_pairs(pairs: list[dict]) -> dict[str, Any]:
    return {p["key"]: p.get("value") for p in pairs}


def settings_to_pairs(settings: dict[str, Any]) -> list[dict]:
    return [{"key": k, "value": v} for k, v in settings.items()]


# ── Request schemas ──────────────────────────────────────────────
class InstallModuleRequest(BaseModel):
    """POST /modules/{module_id}/install"""
    settings: Optional[dict[str, Any]] = None


class UpdateSettingsRequest(BaseModel):
    """PUT /modules/{module_id}/settings — replaces the whole settings map."""
    settings: dict[str, Any]
