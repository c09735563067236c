"""Naming rules shared by the TypeScript emitters."""

from __future__ import annotations

import re

_HUMP = re.compile(r"([A-Z][a-z])")
_DIGITS = re.compile(r"(\d+)")
_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")
_FUNCTION_SUFFIX = "Function"


def slugify(name: str) -> str:
    """Return the file stem for a type name, e.g. ``OrderItem2`` -> ``order-item-2``."""
    slug = _HUMP.sub(r"-\1", name)
    slug = _DIGITS.sub(r"-\1", slug)
    if slug.startswith("-"):
        slug = slug[1:]
    return slug.lower()


def client_method_name(logical_name: str) -> str:
    """``GetItemFunction`` becomes ``getItem``."""
    name = logical_name
    if name.endswith(_FUNCTION_SUFFIX):
        name = name[: -len(_FUNCTION_SUFFIX)]
    if not name:
        return name
    return name[0].lower() + name[1:]


def is_identifier(value: str) -> bool:
    return bool(_IDENTIFIER.match(value))


__all__ = ["client_method_name", "is_identifier", "slugify"]
