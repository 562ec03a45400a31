"""Schema — named, ordered collection of field expectations and rules."""

from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union

import structlog

from expectant.contract import Contract, ContractBuilder
from expectant.errors import DuplicateField, FrozenMutationError
from expectant.expectation import Expectation

logger = structlog.get_logger()

RuleScope = Union[None, str, tuple[str, ...]]


@dataclass(frozen=True)
class Rule:
    """A custom check scoped to one field, several fields, or the whole input."""

    scope: RuleScope
    predicate: Callable

    @classmethod
    def for_fields(cls, field_names: Iterable[str], predicate: Callable) -> "Rule":
        names = tuple(str(n) for n in field_names)
        if not names:
            scope: RuleScope = None
        elif len(names) == 1:
            scope = names[0]
        else:
            scope = names
        return cls(scope=scope, predicate=predicate)

    @property
    def keys(self) -> tuple[str, ...]:
        """Field names in scope, in declaration order (empty for global rules)."""
        if self.scope is None:
            return ()
        if isinstance(self.scope, str):
            return (self.scope,)
        return self.scope

    @property
    def is_global(self) -> bool:
        return self.scope is None

    @property
    def name(self) -> str:
        return getattr(self.predicate, "__name__", repr(self.predicate))


class Schema:
    """Fields and rules for one validation purpose (e.g. "inputs").

    The compiled Contract is cached and dropped whenever a field or rule is
    added. Declaration is expected to finish before concurrent use;
    ``freeze()`` enforces that.
    """

    def __init__(self, name: str):
        self.name = str(name)
        self._fields: list[Expectation] = []
        self._rules: list[Rule] = []
        self._contract: Optional[Contract] = None
        self._frozen = False

    def __repr__(self) -> str:
        return f"<Schema {self.name}: {len(self._fields)} fields, {len(self._rules)} rules>"

    @property
    def fields(self) -> tuple[Expectation, ...]:
        return tuple(self._fields)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def keys(self) -> list[str]:
        return [f.name for f in self._fields]

    def field(self, name: str) -> Optional[Expectation]:
        for expectation in self._fields:
            if expectation.name == name:
                return expectation
        return None

    def add_field(self, expectation: Expectation) -> Expectation:
        """Append a field.

        Raises:
            FrozenMutationError: If the schema is frozen.
            DuplicateField: If a field with the same name already exists.
        """
        self._ensure_mutable()
        if self.field(expectation.name) is not None:
            raise DuplicateField(f"Field '{expectation.name}' already defined in schema '{self.name}'")
        self._fields.append(expectation)
        self._contract = None
        return expectation

    def add_rule(self, rule: Rule) -> Rule:
        self._ensure_mutable()
        self._rules.append(rule)
        self._contract = None
        return rule

    def contract(self) -> Contract:
        """Compile on first use; cached until the next mutation."""
        if self._contract is None:
            self._contract = ContractBuilder(self).build()
        return self._contract

    def duplicate(self) -> "Schema":
        """Independent copy sharing the (immutable) expectations and rules."""
        copy = type(self)(self.name)
        copy._fields = list(self._fields)
        copy._rules = list(self._rules)
        return copy

    def reset(self) -> None:
        self._ensure_mutable()
        self._fields = []
        self._rules = []
        self._contract = None
        logger.debug("schema_reset", schema=self.name)

    def freeze(self) -> "Schema":
        self._frozen = True
        return self

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise FrozenMutationError(f"can't modify frozen schema '{self.name}'")
