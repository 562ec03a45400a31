"""Class-level DSL — declare schemas on a class, then fields and rules by name.

Usage:
    class Search(DSL):
        def __init__(self, max_per_page=100):
            self.max_per_page = max_per_page

    Search.expects("filters")                     # generates the entry points below
    Search.filter("per_page", type="int", default=25, fallback=25)

    @Search.filter_rule("per_page")
    def per_page_range(rule):
        if rule.value > rule.instance.max_per_page:
            rule.failure(f"must be <= {rule.instance.max_per_page}")

    result = Search().filters.validate({"per_page": "500"})
    result.to_dict()  # {"per_page": 25}

For a schema named ``filters`` the declaration generates:
    Search.filter(...)          field definer (singular of the schema name)
    Search.filter_rule(...)     rule definer ([prefix_]filter[_suffix])
    Search.reset_filters()      reset
    Search.filters              the Schema; ``Search().filters`` is a BoundSchema

Subclasses get an independent copy of every schema their parents declared.
With several DSL bases, a schema name found on more than one is copied
from the leftmost base.
"""

from typing import Any, Callable, Mapping, Optional

import structlog

from expectant.bound_schema import BoundSchema
from expectant.config import get_settings
from expectant.contract import Contract, ValidationResult
from expectant.engine import validation_engine
from expectant.errors import InvalidConfiguration, MethodCollision, SchemaAlreadyDefined
from expectant.expectation import Expectation
from expectant.registry import SchemaRegistry
from expectant.schema import Rule, Schema
from expectant.utils import (
    SCHEMA_MARKER,
    check_collision_policy,
    define_with_collision_policy,
    find_collision,
    is_method_name,
    rule_method_name,
    singularize,
)

logger = structlog.get_logger()

_UNSET = object()


class SchemaAccessor:
    """``Owner.<schema>`` -> Schema, ``owner.<schema>`` -> BoundSchema."""

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        setattr(self, SCHEMA_MARKER, schema_name)

    def __get__(self, instance, owner):
        schema = owner._expectant_registry.get_schema(self.schema_name)
        if instance is None:
            return schema
        return BoundSchema(instance, schema)


def _stamp(func: Callable, name: str, schema_name: str) -> classmethod:
    func.__name__ = name
    func.__qualname__ = name
    setattr(func, SCHEMA_MARKER, schema_name)
    return classmethod(func)


def _field_definer(schema_name: str, method_name: str) -> classmethod:
    def define_field(cls, name: str, type: Any = None, **options: Any) -> Expectation:
        expectation = Expectation(name, type, **options)
        return cls._expectant_registry.add_field(schema_name, expectation)

    define_field.__doc__ = f"Add a field to the '{schema_name}' schema."
    return _stamp(define_field, method_name, schema_name)


def _rule_definer(schema_name: str, method_name: str) -> classmethod:
    def define_rule(cls, *field_names: str, predicate: Optional[Callable] = None):
        # Bare decorator: @Owner.input_rule
        if predicate is None and len(field_names) == 1 and callable(field_names[0]):
            predicate, field_names = field_names[0], ()
        # One sequence names several fields: @Owner.input_rule(["start", "end"])
        if len(field_names) == 1 and isinstance(field_names[0], (list, tuple)):
            field_names = tuple(field_names[0])
        invalid = [name for name in field_names if not isinstance(name, str)]
        if invalid:
            raise InvalidConfiguration(f"Rule field names must be strings, got {invalid!r}")

        def register(func: Callable) -> Callable:
            cls._expectant_registry.add_rule(schema_name, Rule.for_fields(field_names, func))
            return func

        if predicate is not None:
            return register(predicate)
        return register

    define_rule.__doc__ = (
        f"Add a rule to the '{schema_name}' schema: scoped to the given fields, "
        "or global when none are given. Usable as a decorator."
    )
    return _stamp(define_rule, method_name, schema_name)


def _resetter(schema_name: str, method_name: str) -> classmethod:
    def reset(cls) -> None:
        cls._expectant_registry.reset(schema_name)

    reset.__doc__ = f"Remove every field and rule from the '{schema_name}' schema."
    return _stamp(reset, method_name, schema_name)


class DSL:
    """Mixin that gives a class its own schema registry and the declaration API."""

    _expectant_registry: SchemaRegistry = SchemaRegistry()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        parents = [
            base._expectant_registry
            for base in cls.__bases__
            if isinstance(getattr(base, "_expectant_registry", None), SchemaRegistry)
        ]
        cls._expectant_registry = SchemaRegistry.clone_from(*parents)

    # ── Declaration ──

    @classmethod
    def expects(
        cls,
        schema_name: str,
        *,
        collision: Optional[str] = None,
        singular: Optional[str] = None,
        rule_prefix: Any = _UNSET,
        rule_suffix: Any = _UNSET,
    ) -> Schema:
        """Declare a schema and generate its entry points.

        Args:
            schema_name: Plural name, also the accessor name (e.g. "inputs")
            collision: "error" (default) or "force" when a generated name is taken
            singular: Field definer name; defaults to the singular of schema_name
            rule_prefix: Overrides the configured rule definer prefix
            rule_suffix: Overrides the configured rule definer suffix

        Returns:
            The new, empty Schema

        Raises:
            SchemaAlreadyDefined: schema_name already declared on this class
            InvalidConfiguration: unusable schema_name or singular option, or called on DSL itself
            MethodCollision: a generated name is taken and collision is "error"
            UnknownCollisionPolicy: collision is neither "error" nor "force"
        """
        if cls is DSL:
            raise InvalidConfiguration("Declare schemas on a subclass of DSL, not on DSL itself")

        settings = get_settings()
        collision = check_collision_policy(collision or settings.COLLISION_POLICY)
        prefix = settings.RULE_PREFIX if rule_prefix is _UNSET else rule_prefix
        suffix = settings.RULE_SUFFIX if rule_suffix is _UNSET else rule_suffix

        schema_name = str(schema_name)
        if not is_method_name(schema_name):
            raise InvalidConfiguration(f"Invalid schema name: {schema_name!r}")
        if singular is None:
            field_method = singularize(schema_name)
        elif is_method_name(singular):
            field_method = singular
        else:
            raise InvalidConfiguration(f"Invalid singular option: {singular!r}")

        names = {
            "field_method": field_method,
            "rule_method": rule_method_name(field_method, prefix, suffix),
            "reset_method": f"reset_{schema_name}",
            "accessor": schema_name,
        }
        if len(set(names.values())) < len(names):
            raise InvalidConfiguration(
                f"Generated names for schema '{schema_name}' overlap: {sorted(names.values())}; "
                "pass singular= or change the rule prefix/suffix"
            )

        registry = cls._expectant_registry
        if registry.is_owned(schema_name):
            raise SchemaAlreadyDefined(f"Schema {schema_name} already defined")

        # Check every name before installing any, so a collision leaves no trace
        if collision == "error":
            for name in names.values():
                if find_collision(cls, name, schema_name):
                    raise MethodCollision(f"Method {name} already defined on {cls.__name__}")

        schema = registry.declare(schema_name)
        install = {
            names["field_method"]: _field_definer(schema_name, names["field_method"]),
            names["rule_method"]: _rule_definer(schema_name, names["rule_method"]),
            names["reset_method"]: _resetter(schema_name, names["reset_method"]),
            names["accessor"]: SchemaAccessor(schema_name),
        }
        for name, value in install.items():
            define_with_collision_policy(cls, name, value, schema_name=schema_name, collision=collision)

        logger.debug("schema_declared", owner=cls.__name__, schema=schema_name, entry_points=sorted(install))
        return schema

    declare = expects

    # ── Class-level access ──

    @classmethod
    def schema_definitions(cls) -> SchemaRegistry:
        return cls._expectant_registry

    @classmethod
    def get_schema(cls, schema_name: str) -> Schema:
        return cls._expectant_registry.get_schema(schema_name)

    @classmethod
    def get_contract(cls, schema_name: str) -> Contract:
        return cls.get_schema(schema_name).contract()

    @classmethod
    def schema_keys(cls, schema_name: str) -> list[str]:
        return cls._expectant_registry.keys(schema_name)

    @classmethod
    def freeze_schemas(cls) -> None:
        """Lock every schema on this class; later field/rule additions fail."""
        cls._expectant_registry.freeze()

    @classmethod
    def reset_inherited_expectations(cls) -> None:
        """Forget every schema on this class, inherited or declared."""
        cls._expectant_registry.clear()

    # ── Instance-level validation ──

    def validate(
        self,
        schema_name: str,
        data: Optional[Mapping[str, Any]],
        context: Optional[Mapping[str, Any]] = None,
    ) -> ValidationResult:
        """Validate ``data`` against one of this class's schemas, bound to ``self``."""
        schema = type(self)._expectant_registry.get_schema(schema_name)
        return validation_engine.validate(schema, data, instance=self, context=context)
