"""Contract compilation and execution.

A Contract is the compiled, executable form of a Schema: every field laid
out as required or optional against its resolved FieldType, followed by
the schema's rules in declaration order.

Execution, per call:
    1. Type pass — each declared field is checked in declaration order.
       Absent keys are filled from the type's own default, reported as
       "is missing" when required, or skipped when optional. Present
       values go through pydantic coercion.
    2. Rule pass — each rule runs only if none of the fields in its scope
       failed the type pass. Global rules always run.

Data problems never raise: they are reported in the ValidationResult.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import structlog
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from expectant.errors import SchemaError
from expectant.types import FieldType

logger = structlog.get_logger()

MISSING_MESSAGE = "is missing"


class ValidationResult(BaseModel):
    """Outcome of one contract call."""

    values: dict[str, Any] = Field(default_factory=dict)
    errors: dict[str, list[str]] = Field(default_factory=dict)
    base_errors: list[str] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        values: dict[str, Any],
        errors: dict[str, list[str]],
        base_errors: list[str],
    ) -> "ValidationResult":
        return cls(
            values=values,
            errors={name: messages for name, messages in errors.items() if messages},
            base_errors=base_errors,
        )

    @property
    def success(self) -> bool:
        return not self.errors and not self.base_errors

    @property
    def failure(self) -> bool:
        return not self.success

    def to_dict(self) -> dict[str, Any]:
        return dict(self.values)

    def errors_for(self, name: str) -> list[str]:
        return list(self.errors.get(name, []))

    def messages(self) -> list[str]:
        """All messages, field errors first, prefixed with the field name."""
        flat = [f"{name} {message}" for name, messages in self.errors.items() for message in messages]
        flat.extend(self.base_errors)
        return flat


class _ErrorSink:
    def __init__(self, errors: dict[str, list[str]], base_errors: list[str]):
        self.errors = errors
        self.base_errors = base_errors

    def add(self, name: Optional[str], message: str) -> None:
        if name is None:
            self.base_errors.append(message)
        else:
            self.errors.setdefault(name, []).append(message)


class KeyHandle:
    """Failure-reporting handle for one key (or the base when ``name`` is None)."""

    def __init__(self, sink: _ErrorSink, name: Optional[str]):
        self._sink = sink
        self.name = name

    def failure(self, message: str) -> None:
        self._sink.add(self.name, message)


class RuleContext:
    """What a rule predicate sees.

    Usage:
        def per_page_range(rule):
            if rule.value is not None and not 1 <= rule.value <= 100:
                rule.failure("must be between 1 and 100")
    """

    def __init__(
        self,
        scope: tuple[str, ...],
        values: Mapping[str, Any],
        context: Mapping[str, Any],
        instance: Any,
        sink: _ErrorSink,
    ):
        self.scope = scope
        self.values = values
        self.context = context
        self.instance = instance
        self._sink = sink

    @property
    def key_name(self) -> Optional[str]:
        return self.scope[0] if self.scope else None

    @property
    def value(self) -> Any:
        """Coerced value of the scoped key; a tuple for multi-key rules."""
        if not self.scope:
            return None
        if len(self.scope) == 1:
            return self.values.get(self.scope[0])
        return tuple(self.values.get(name) for name in self.scope)

    def has_key(self, name: str) -> bool:
        return name in self.values

    def key(self, name: Optional[str] = None) -> KeyHandle:
        return KeyHandle(self._sink, name if name is not None else self.key_name)

    @property
    def base(self) -> KeyHandle:
        return KeyHandle(self._sink, None)

    def failure(self, message: str) -> None:
        self.key().failure(message)


@dataclass(frozen=True)
class CompiledField:
    name: str
    field_type: FieldType
    required: bool


def _error_messages(exc: PydanticValidationError) -> list[str]:
    messages = []
    for error in exc.errors(include_url=False):
        loc = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return messages


class Contract:
    """Executable validator for one schema. Read-only once built."""

    def __init__(self, schema_name: str, fields: tuple[CompiledField, ...], rules: tuple):
        self.schema_name = schema_name
        self.fields = fields
        self.rules = rules

    def __repr__(self) -> str:
        return f"<Contract {self.schema_name}: {len(self.fields)} fields, {len(self.rules)} rules>"

    @property
    def keys(self) -> list[str]:
        return [f.name for f in self.fields]

    def call(
        self,
        data: Optional[Mapping[str, Any]],
        context: Optional[Mapping[str, Any]] = None,
        instance: Any = None,
    ) -> ValidationResult:
        data = data or {}
        context = context if context is not None else {}
        values: dict[str, Any] = {}
        errors: dict[str, list[str]] = {}

        for compiled in self.fields:
            if compiled.name in data:
                raw = data[compiled.name]
            elif compiled.field_type.has_default:
                raw = compiled.field_type.default_value()
            elif compiled.required:
                errors[compiled.name] = [MISSING_MESSAGE]
                continue
            else:
                continue

            try:
                values[compiled.name] = compiled.field_type.coerce(raw)
            except PydanticValidationError as exc:
                errors[compiled.name] = _error_messages(exc)

        type_failures = set(errors)
        base_errors: list[str] = []
        sink = _ErrorSink(errors, base_errors)

        for rule in self.rules:
            if type_failures.intersection(rule.keys):
                continue
            rule.predicate(RuleContext(rule.keys, values, context, instance, sink))

        return ValidationResult.build(values, errors, base_errors)

    __call__ = call


class ContractBuilder:
    """Compiles a schema's fields and rules into a Contract. Never mutates the schema."""

    def __init__(self, schema):
        self.schema = schema

    def build(self) -> Contract:
        fields = tuple(
            CompiledField(name=f.name, field_type=f.field_type, required=f.required)
            for f in self.schema.fields
        )
        declared = {f.name for f in fields}
        rules = tuple(self.schema.rules)

        for rule in rules:
            unknown = [name for name in rule.keys if name not in declared]
            if unknown:
                raise SchemaError(
                    f"Rule '{rule.name}' references undeclared field(s) "
                    f"{', '.join(unknown)} in schema '{self.schema.name}'"
                )

        logger.debug(
            "contract_built",
            schema=self.schema.name,
            required=[f.name for f in fields if f.required],
            optional=[f.name for f in fields if not f.required],
            rules=len(rules),
        )
        return Contract(self.schema.name, fields, rules)
