"""Schema registry — per-namespace store of named schemas.

A namespace (normally a class using the DSL) owns one registry. A child
namespace starts from a snapshot of its parents' registries, taken once at
creation time: every schema is duplicated, so later changes on either
side stay invisible to the other.
"""

from typing import Any, Iterator

import structlog

from expectant.errors import SchemaAlreadyDefined, UnknownSchema
from expectant.expectation import Expectation
from expectant.schema import Rule, Schema

logger = structlog.get_logger()


class SchemaRegistry:
    """Name -> Schema map with declared-here vs inherited bookkeeping."""

    def __init__(self):
        self._schemas: dict[str, Schema] = {}
        self._owned: set[str] = set()

    @classmethod
    def clone_from(cls, *parents: "SchemaRegistry") -> "SchemaRegistry":
        """Snapshot of ``parents``. Nothing is owned by the clone yet.

        With several parents, a schema name present in more than one is
        taken from the first parent that has it.
        """
        registry = cls()
        for parent in parents:
            for name, schema in parent._schemas.items():
                if name not in registry._schemas:
                    registry._schemas[name] = schema.duplicate()
        return registry

    def clone(self) -> "SchemaRegistry":
        return type(self).clone_from(self)

    def __contains__(self, name: Any) -> bool:
        return str(name) in self._schemas

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._schemas))

    def __len__(self) -> int:
        return len(self._schemas)

    def names(self) -> list[str]:
        return list(self._schemas)

    def is_owned(self, name: Any) -> bool:
        """Declared in this namespace, as opposed to inherited."""
        return str(name) in self._owned

    def declare(self, name: Any) -> Schema:
        """Register an empty schema under ``name``.

        An inherited schema of the same name is replaced by the new, empty one.

        Raises:
            SchemaAlreadyDefined: If ``name`` was already declared here.
        """
        name = str(name)
        if name in self._owned:
            raise SchemaAlreadyDefined(f"Schema {name} already defined")
        schema = Schema(name)
        self._schemas[name] = schema
        self._owned.add(name)
        return schema

    def get_schema(self, name: Any) -> Schema:
        try:
            return self._schemas[str(name)]
        except KeyError:
            raise UnknownSchema(f"Schema {name} is not defined") from None

    def add_field(self, name: Any, expectation: Expectation) -> Expectation:
        return self.get_schema(name).add_field(expectation)

    def add_rule(self, name: Any, rule: Rule) -> Rule:
        return self.get_schema(name).add_rule(rule)

    def reset(self, name: Any) -> None:
        self.get_schema(name).reset()

    def keys(self, name: Any) -> list[str]:
        """Field names of a schema; empty for unknown schemas."""
        schema = self._schemas.get(str(name))
        return schema.keys() if schema else []

    def freeze(self) -> None:
        for schema in self._schemas.values():
            schema.freeze()

    def clear(self) -> None:
        self._schemas.clear()
        self._owned.clear()
        logger.debug("registry_cleared")
