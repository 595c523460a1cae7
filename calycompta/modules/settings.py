"""Settings validation against a module's declared SettingDefinitions."""

import re
from datetime import date, datetime
from typing import Any, Optional

from calycompta.utils.exceptions import SettingValidationError
from .schemas import ModuleDefinition, SettingDefinition, SettingType
from .validators import get_validator

_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_MISSING = object()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_iso_date(value: Any) -> bool:
    if isinstance(value, (date, datetime)):
        return True
    if not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value)
    except ValueError:
        return False
    return True


def check_type(setting: SettingDefinition, value: Any) -> Optional[str]:
    """Return an error message if `value` does not fit the setting's type."""
    kind = setting.type

    if kind == SettingType.JSON:
        return None
    if value is None:
        return None if not setting.required else "a value is required"

    if kind == SettingType.BOOLEAN and not isinstance(value, bool):
        return "must be a boolean"
    if kind == SettingType.NUMBER and not _is_number(value):
        return "must be a number"
    if kind == SettingType.STRING and not isinstance(value, str):
        return "must be a string"
    if kind == SettingType.DATE and not _is_iso_date(value):
        return "must be an ISO-8601 date"
    if kind == SettingType.COLOR and not (
        isinstance(value, str) and _COLOR_PATTERN.match(value)
    ):
        return "must be a hex colour such as #1E40AF"
    if kind == SettingType.SELECT:
        if setting.options and value not in setting.option_values:
            return f"must be one of {setting.option_values}"
    if kind == SettingType.MULTISELECT:
        if not isinstance(value, list):
            return "must be a list"
        if setting.options:
            invalid = [v for v in value if v not in setting.option_values]
            if invalid:
                return f"contains unknown options {invalid}"
    return None


def _check_rules(setting: SettingDefinition, value: Any) -> Optional[str]:
    rules = setting.validation
    if rules is None or value is None:
        return None

    if rules.min is not None and _is_number(value) and value < rules.min:
        return f"{setting.key} must be at least {rules.min:g}"
    if rules.max is not None and _is_number(value) and value > rules.max:
        return f"{setting.key} must be at most {rules.max:g}"

    if rules.pattern:
        if not isinstance(value, str) or not re.search(rules.pattern, value):
            return f"{setting.key} format is invalid"

    if rules.custom is not None:
        result = get_validator(rules.custom)(value)
        if result is not True:
            return result if isinstance(result, str) else f"{setting.key} validation failed"
    return None


def validate_settings(module: ModuleDefinition, values: dict[str, Any]) -> None:
    """
    Check a complete settings map for `module`.

    Declared settings are visited in declaration order (categories in order,
    keys within each category) and the first violation raises
    SettingValidationError naming the key. Keys the module does not declare
    are rejected afterwards.
    """
    for setting in module.iter_settings():
        value = values.get(setting.key, _MISSING)

        if value is _MISSING:
            if setting.required:
                raise SettingValidationError(setting.key, f"Setting {setting.key} is required")
            continue

        error = check_type(setting, value)
        if error:
            raise SettingValidationError(setting.key, f"{setting.key} {error}")

        error = _check_rules(setting, value)
        if error:
            raise SettingValidationError(setting.key, error)

    declared = {s.key for s in module.iter_settings()}
    for key in values:
        if key not in declared:
            raise SettingValidationError(
                key, f"Setting {key} is not declared by module {module.id}"
            )


def applicable_settings(
    module: ModuleDefinition, values: dict[str, Any]
) -> list[SettingDefinition]:
    """Settings whose depends_on predicate holds for the current values."""
    return [s for s in module.iter_settings() if s.is_applicable(values)]
