"""Naming helpers and the entry point collision policy."""

import inspect
import keyword
from typing import Any, Optional

import inflection
import structlog

from expectant.config import COLLISION_POLICIES
from expectant.errors import MethodCollision, UnknownCollisionPolicy

logger = structlog.get_logger()

_MISSING = object()

# Attribute stamped on generated entry points: the schema they serve
SCHEMA_MARKER = "__expectant_schema__"


def singularize(word: Any) -> str:
    """``"inputs" -> "input"``, ``"data" -> "datum"``, ``"people" -> "person"``."""
    return inflection.singularize(str(word))


def is_method_name(name: Any) -> bool:
    """True if ``name`` can be used as a generated attribute name."""
    return isinstance(name, str) and name.isidentifier() and not keyword.iskeyword(name)


def rule_method_name(field_method: str, prefix: Optional[str] = None, suffix: Optional[str] = "rule") -> str:
    """``[prefix_]field_method[_suffix]`` — e.g. ``input_rule`` or ``validate_input``."""
    parts = []
    if prefix:
        parts.append(prefix)
    parts.append(field_method)
    if suffix:
        parts.append(suffix)
    return "_".join(parts)


def check_collision_policy(collision: str) -> str:
    if collision not in COLLISION_POLICIES:
        raise UnknownCollisionPolicy(f"Unknown collision policy: {collision!r}")
    return collision


def served_schema(attribute: Any) -> Optional[str]:
    """Schema name a generated entry point serves, or None for anything else."""
    target = getattr(attribute, "__func__", attribute)
    return getattr(target, SCHEMA_MARKER, None)


def find_collision(target: type, name: str, schema_name: str) -> bool:
    """True if ``name`` is taken on ``target`` by something other than our own
    entry point for ``schema_name`` (inherited ones are re-installed freely).
    """
    existing = inspect.getattr_static(target, name, _MISSING)
    if existing is _MISSING:
        return False
    return served_schema(existing) != schema_name


def define_with_collision_policy(
    target: type,
    name: str,
    value: Any,
    *,
    schema_name: str,
    collision: str,
) -> None:
    """Install ``value`` as ``target.name`` unless the policy forbids it.

    Raises:
        MethodCollision: If the name is taken and the policy is "error".
        UnknownCollisionPolicy: If the policy is not recognized.
    """
    check_collision_policy(collision)
    if find_collision(target, name, schema_name):
        if collision == "error":
            raise MethodCollision(f"Method {name} already defined on {target.__name__}")
        logger.warning("entry_point_replaced", owner=target.__name__, name=name, schema=schema_name)
    setattr(target, name, value)
