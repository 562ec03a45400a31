"""Exception taxonomy — declaration-time failures only.

Invalid input data is never raised: it comes back as a failing
ValidationResult. Everything here signals a mistake in how schemas,
fields, rules or configuration were declared.
"""


class ExpectantError(Exception):
    """Base class for all expectant errors."""


class ConfigurationError(ExpectantError):
    """Bad configuration or declaration options."""


class SchemaError(ExpectantError):
    """Bad schema structure or lifecycle misuse."""


class InvalidTypeDescriptor(ConfigurationError):
    """Type descriptor is none of the recognized shapes."""


class UnknownTypeTag(ConfigurationError):
    """Primitive type tag is not in the supported set."""


class InvalidConfiguration(ConfigurationError):
    """Configuration value or declaration option is unusable."""


class MethodCollision(ConfigurationError):
    """Generated entry point name is already taken under the "error" policy."""


class UnknownCollisionPolicy(ConfigurationError):
    """Collision policy is neither "error" nor "force"."""


class SchemaAlreadyDefined(SchemaError):
    """Schema name already declared in this namespace."""


class UnknownSchema(SchemaError, KeyError):
    """Schema name not declared in this namespace."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class DuplicateField(SchemaError):
    """Field name already present in the schema."""


class FrozenMutationError(SchemaError, TypeError):
    """Attempt to add a field or rule to a frozen schema."""
