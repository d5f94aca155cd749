"""Naming-convention predicates for module-level symbols."""

from __future__ import annotations

import re

_CONSTANT_RE = re.compile(r"^[A-Z0-9_]+$")
_UNDERSCORE_ONLY_RE = re.compile(r"^_+$")
_CAMEL_CASE_RE = re.compile(r"^_{0,2}[A-Z][A-Za-z0-9_]+$")


def is_private_name(name: str) -> bool:
    return len(name) > 2 and name.startswith("__") and not name.endswith("__")


def is_protected_name(name: str) -> bool:
    return len(name) > 1 and name.startswith("_") and not name.startswith("__")


def is_private_or_protected_name(name: str) -> bool:
    return is_private_name(name) or is_protected_name(name)


def is_dunder_name(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


def is_constant_name(name: str) -> bool:
    return bool(_CONSTANT_RE.match(name)) and not _UNDERSCORE_ONLY_RE.match(name)


def is_type_alias_name(name: str) -> bool:
    return bool(_CAMEL_CASE_RE.match(name))


def is_public_constant_or_type_alias(name: str) -> bool:
    """
    True for ``MAX_SIZE`` or ``JsonDict``, false for ``counter`` or ``_CACHE``.

    Used to keep incidental module-level variables out of suggestions.
    """
    return not is_private_or_protected_name(name) and (
        is_constant_name(name) or is_type_alias_name(name)
    )
