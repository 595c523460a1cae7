"""
Named custom setting validators.

A SettingDefinition refers to a predicate by name (`validation.custom`), so
the definition stays plain data and survives a round trip through the
`module_definitions` collection. A predicate returns True when the value is
acceptable, otherwise an error message.
"""

from typing import Any, Callable, Union

SettingValidator = Callable[[Any], Union[bool, str]]


def no_forbidden_filename_chars(value: Any) -> Union[bool, str]:
    if any(ch in value for ch in '<>:"/\\|?*'):
        return "Le format contient des caractères interdits"
    return True


SETTING_VALIDATORS: dict[str, SettingValidator] = {
    "no_forbidden_filename_chars": no_forbidden_filename_chars,
}


def get_validator(name: str) -> SettingValidator:
    try:
        return SETTING_VALIDATORS[name]
    except KeyError:
        raise ValueError(f"Unknown setting validator '{name}'") from None
