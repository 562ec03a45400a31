"""expectant — named schemas on classes, validated with defaults and fallbacks.

Usage:
    from expectant import DSL

    class Listing(DSL):
        pass

    Listing.expects("params")
    Listing.param("per_page", type="int", default=25, fallback=25)

    result = Listing().params.validate({"per_page": "50"})
    result.success, result.to_dict()  # True, {"per_page": 50}
"""

from expectant import types
from expectant.bound_schema import BoundSchema
from expectant.config import Settings, configure, get_settings, reset_configuration
from expectant.contract import Contract, ContractBuilder, RuleContext, ValidationResult
from expectant.dsl import DSL
from expectant.engine import ValidationEngine, validation_engine
from expectant.errors import (
    ConfigurationError,
    DuplicateField,
    ExpectantError,
    FrozenMutationError,
    InvalidConfiguration,
    InvalidTypeDescriptor,
    MethodCollision,
    SchemaAlreadyDefined,
    SchemaError,
    UnknownCollisionPolicy,
    UnknownSchema,
    UnknownTypeTag,
)
from expectant.expectation import Expectation
from expectant.logging_setup import configure_logging
from expectant.registry import SchemaRegistry
from expectant.schema import Rule, Schema
from expectant.types import FieldType

__version__ = "0.1.0"

__all__ = [
    "BoundSchema",
    "ConfigurationError",
    "Contract",
    "ContractBuilder",
    "DSL",
    "DuplicateField",
    "Expectation",
    "ExpectantError",
    "FieldType",
    "FrozenMutationError",
    "InvalidConfiguration",
    "InvalidTypeDescriptor",
    "MethodCollision",
    "Rule",
    "RuleContext",
    "Schema",
    "SchemaAlreadyDefined",
    "SchemaError",
    "SchemaRegistry",
    "Settings",
    "UnknownCollisionPolicy",
    "UnknownSchema",
    "UnknownTypeTag",
    "ValidationEngine",
    "ValidationResult",
    "configure",
    "configure_logging",
    "get_settings",
    "reset_configuration",
    "types",
    "validation_engine",
]
