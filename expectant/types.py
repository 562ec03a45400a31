"""Type resolution — maps field type descriptors onto pydantic-backed coercers.

pydantic is the single source of truth for primitive coercion
("42" -> 42, "2024-01-31" -> date) and constraint checking. This module
only decides which annotation a descriptor stands for, plus the two
engine-level flags a resolved type can carry: optional and default.

Accepted descriptors:
    None                      -> Any
    "integer", "int", ...     -> predefined FieldType (see TAGS)
    ["array", <descriptor>]   -> list of the resolved element type
    FieldType                 -> returned as-is
    typing alias (list[int], Annotated[int, Field(ge=1)], ...) -> wrapped
    any other class           -> instance-of check
"""

import copy
import inspect
import typing
from datetime import date, datetime, time
from decimal import Decimal as _Decimal
from typing import Annotated, Optional

from pydantic import Field, InstanceOf, Strict as _StrictMarker, TypeAdapter

from expectant.errors import InvalidTypeDescriptor, UnknownTypeTag

_MISSING = object()

ARRAY_TAGS = {"array", "list"}


class FieldType:
    """A resolved field type: annotation + optional/default flags.

    Instances are never mutated; the builder methods return new objects.
    """

    def __init__(
        self,
        annotation,
        *,
        optional: bool = False,
        default=_MISSING,
        strict: bool = False,
        name: Optional[str] = None,
    ):
        self.annotation = annotation
        self.is_optional = optional
        self.strict = strict
        self.name = name or _describe(annotation)
        self._default = default
        self._adapter: Optional[TypeAdapter] = None

    def __repr__(self) -> str:
        flags = []
        if self.strict:
            flags.append("strict")
        if self.is_optional:
            flags.append("optional")
        if self.has_default:
            flags.append("default")
        suffix = f" ({', '.join(flags)})" if flags else ""
        return f"<FieldType {self.name}{suffix}>"

    # ── Flags ──

    @property
    def has_default(self) -> bool:
        return self._default is not _MISSING

    def default_value(self):
        """Produce the engine-level default. Factories are called with no arguments."""
        if not self.has_default:
            raise LookupError(f"{self!r} has no default")
        if callable(self._default):
            return self._default()
        return copy.deepcopy(self._default)

    # ── Builders ──

    def as_optional(self) -> "FieldType":
        """Same type, but None passes."""
        return self._replace(optional=True)

    def with_default(self, value) -> "FieldType":
        """Same type, filled with ``value`` (or ``value()`` if callable) when the key is absent."""
        return self._replace(default=value)

    def constrained(self, **constraints) -> "FieldType":
        """Attach pydantic Field constraints, e.g. ``Integer.constrained(ge=1, le=100)``."""
        annotated = Annotated[self.annotation, Field(**constraints)]
        return self._replace(annotation=annotated)

    def _replace(self, **changes) -> "FieldType":
        params = {
            "annotation": self.annotation,
            "optional": self.is_optional,
            "default": self._default,
            "strict": self.strict,
            "name": self.name,
        }
        params.update(changes)
        annotation = params.pop("annotation")
        return FieldType(annotation, **params)

    # ── Coercion ──

    def as_annotation(self):
        """Full annotation handed to pydantic, flags applied."""
        target = self.annotation
        if self.strict:
            target = Annotated[target, _StrictMarker()]
        if self.is_optional:
            target = Optional[target]
        return target

    @property
    def adapter(self) -> TypeAdapter:
        # Rebuilding on a race is harmless; the result is identical.
        if self._adapter is None:
            self._adapter = TypeAdapter(self.as_annotation())
        return self._adapter

    def coerce(self, value):
        """Coerce ``value`` or raise pydantic.ValidationError."""
        return self.adapter.validate_python(value)


def _describe(annotation) -> str:
    if inspect.isclass(annotation):
        return annotation.__name__
    return repr(annotation)


# ── Predefined types ──

String = FieldType(str, name="string")
Integer = FieldType(int, name="integer")
Float = FieldType(float, name="float")
Decimal = FieldType(_Decimal, name="decimal")
Bool = FieldType(bool, name="boolean")
Date = FieldType(date, name="date")
DateTime = FieldType(datetime, name="datetime")
Time = FieldType(time, name="time")
Array = FieldType(list, name="array")
Hash = FieldType(dict, name="hash")
Symbol = FieldType(str, strict=True, name="symbol")
Any = FieldType(typing.Any, name="any")
Nil = FieldType(type(None), name="nil")


class Strict:
    """Non-coercing variants: "42" is not an Integer here."""

    String = FieldType(str, strict=True, name="strict string")
    Integer = FieldType(int, strict=True, name="strict integer")
    Float = FieldType(float, strict=True, name="strict float")
    Bool = FieldType(bool, strict=True, name="strict boolean")
    Date = FieldType(date, strict=True, name="strict date")
    DateTime = FieldType(datetime, strict=True, name="strict datetime")


TAGS: dict[str, FieldType] = {
    "string": String,
    "str": String,
    "integer": Integer,
    "int": Integer,
    "float": Float,
    "decimal": Decimal,
    "boolean": Bool,
    "bool": Bool,
    "date": Date,
    "datetime": DateTime,
    "time": Time,
    "array": Array,
    "list": Array,
    "hash": Hash,
    "dict": Hash,
    "symbol": Symbol,
    "sym": Symbol,
    "any": Any,
    "nil": Nil,
    "none": Nil,
}


def instance_of(cls: type) -> FieldType:
    """Type that accepts only instances of ``cls`` (no coercion)."""
    return FieldType(InstanceOf[cls], name=cls.__name__)


def array_of(element: FieldType) -> FieldType:
    """List whose items all satisfy ``element``."""
    return FieldType(list[element.as_annotation()], name=f"array of {element.name}")


def resolve_tag(tag: str) -> FieldType:
    try:
        return TAGS[tag.lower()]
    except KeyError:
        raise UnknownTypeTag(f"Unknown type symbol: {tag!r}") from None


def resolve(descriptor) -> FieldType:
    """Map a type descriptor to a FieldType.

    Raises:
        UnknownTypeTag: For a string tag outside TAGS.
        InvalidTypeDescriptor: For any unrecognized shape, including
            array descriptors of the wrong arity.
    """
    if descriptor is None:
        return Any
    if isinstance(descriptor, FieldType):
        return descriptor
    if isinstance(descriptor, str):
        return resolve_tag(descriptor)
    if isinstance(descriptor, (list, tuple)):
        if (
            len(descriptor) == 2
            and isinstance(descriptor[0], str)
            and descriptor[0].lower() in ARRAY_TAGS
        ):
            return array_of(resolve(descriptor[1]))
        raise InvalidTypeDescriptor(f"Invalid array type definition: {descriptor!r}")
    if typing.get_origin(descriptor) is not None:
        return FieldType(descriptor)
    if inspect.isclass(descriptor):
        return instance_of(descriptor)
    raise InvalidTypeDescriptor(f"Invalid type definition: {descriptor!r}")


