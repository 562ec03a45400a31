"""Instance-bound schema wrapper."""

from typing import Any, Mapping, Optional

from expectant.contract import Contract, ValidationResult
from expectant.engine import ValidationEngine, validation_engine
from expectant.schema import Schema


class BoundSchema:
    """A schema paired with the object whose providers and rules it serves."""

    def __init__(self, instance: Any, schema: Schema, engine: Optional[ValidationEngine] = None):
        self.instance = instance
        self.schema = schema
        self._engine = engine or validation_engine

    def __repr__(self) -> str:
        return f"<BoundSchema {self.schema.name} of {type(self.instance).__name__}>"

    def validate(
        self,
        data: Optional[Mapping[str, Any]],
        context: Optional[Mapping[str, Any]] = None,
    ) -> ValidationResult:
        return self._engine.validate(self.schema, data, instance=self.instance, context=context)

    def keys(self) -> list[str]:
        return self.schema.keys()

    def contract(self) -> Contract:
        return self.schema.contract()
