from __future__ import annotations

"""Shared helpers for configuration loading and validation.

Two families live here: the strict ``expect_*`` validators used for the
application sections (``log``, ``catalog``), which raise on bad input, and
the lenient ``coerce_*`` readers used for author-edited page properties,
which return ``None`` so every field can fall back to its own default.
"""

from typing import Any, Mapping


def get_section(raw: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    """Return a mapping section from root config.

    Args:
        raw: Root configuration mapping.
        key: Section name.
        required: Whether the section must exist.

    Returns:
        Section mapping, or empty mapping for optional missing sections.

    Raises:
        ValueError: If section is required but missing.
        TypeError: If section is not a mapping.
    """
    section = raw.get(key)
    if section is None:
        if required:
            raise ValueError(f"Missing required config: {key}")
        return {}
    if not isinstance(section, Mapping):
        raise TypeError(f"{key} must be an object")
    return section


def get_required_value(section: Mapping[str, Any], field: str, config_key: str) -> Any:
    """Return a required field value from a section.

    Raises:
        ValueError: If field is missing.
    """
    if field not in section:
        raise ValueError(f"Missing required config: {config_key}")
    return section[field]


def expect_str(value: Any, config_key: str) -> str:
    """Validate and return string value."""
    if not isinstance(value, str):
        raise TypeError(f"{config_key} must be a string")
    return value


def expect_bool(value: Any, config_key: str) -> bool:
    """Validate and return boolean value."""
    if not isinstance(value, bool):
        raise TypeError(f"{config_key} must be a boolean")
    return value


def coerce_int(value: Any) -> int | None:
    """Read an integer from an int or a numeric string.

    Returns:
        The integer, or None for bools, floats, blanks and non-numeric text.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def coerce_str(value: Any) -> str | None:
    """Read a non-blank, stripped string."""
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def coerce_str_list(value: Any) -> list[str] | None:
    """Read a string or list of strings, dropping blanks and non-strings.

    Returns:
        Stripped strings in order, or None when ``value`` is neither a string
        nor a list.
    """
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return None
    out: list[str] = []
    for item in value:
        normalized = coerce_str(item)
        if normalized:
            out.append(normalized)
    return out
