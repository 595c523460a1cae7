"""
Starter permission grants derived from a module's permission schema.

Each system role tier receives a structural subset of the module's declared
permissions at install time:

    superadmin  →  everything
    admin       →  everything except critical risk
    validateur  →  operational: not admin category, not high risk
    user        →  view category or low risk

The lowest tier (membre) gets nothing.
"""

from typing import Callable

from .schemas import (
    ModuleDefinition,
    PermissionCategory,
    PermissionDefinition,
    RiskLevel,
)

TIER_RULES: dict[str, Callable[[PermissionDefinition], bool]] = {
    "superadmin": lambda p: True,
    "admin": lambda p: p.risk_level != RiskLevel.CRITICAL,
    "validateur": lambda p: (
        p.category != PermissionCategory.ADMIN and p.risk_level != RiskLevel.HIGH
    ),
    "user": lambda p: (
        p.category == PermissionCategory.VIEW or p.risk_level == RiskLevel.LOW
    ),
}


def tier_permissions(module: ModuleDefinition, tier: str) -> list[str]:
    rule = TIER_RULES.get(tier)
    if rule is None:
        return []
    return [p.id for p in module.iter_permissions() if rule(p)]


def default_grants(module: ModuleDefinition) -> dict[str, list[str]]:
    return {tier: tier_permissions(module, tier) for tier in TIER_RULES}
