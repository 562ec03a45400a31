"""Expectation — one field's descriptor: type, optionality, default, fallback."""

import inspect
from types import MappingProxyType
from typing import Any, Callable, Optional

from expectant.types import FieldType, resolve


def is_provider(value) -> bool:
    """Deferred value providers are plain callables."""
    return callable(value)


def _accepts_owner(provider: Callable) -> bool:
    try:
        signature = inspect.signature(provider)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures (date.today, list, ...)
        return False
    positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    return any(
        p.kind in positional and p.default is inspect.Parameter.empty
        for p in signature.parameters.values()
    )


def evaluate_provider(provider: Callable, instance: Any = None) -> Any:
    """Call a deferred provider, handing it the owning instance if it takes one.

    ``lambda: 25`` is called with no arguments; ``lambda owner: owner.limit``
    receives ``instance`` (None when nothing is bound). Exceptions raised by
    the provider propagate unchanged.
    """
    if _accepts_owner(provider):
        return provider(instance)
    return provider()


class Expectation:
    """Immutable descriptor for a single field.

    ``default`` fills an absent key before validation; ``fallback`` replaces a
    value that failed validation. Either may be an immediate value or a
    deferred provider. ``None`` means "not set" for both.
    """

    __slots__ = ("_name", "_type", "_optional", "_default", "_fallback", "_field_type", "_options")

    def __init__(
        self,
        name: str,
        type: Any = None,
        *,
        default: Any = None,
        optional: bool = False,
        fallback: Any = None,
        **options: Any,
    ):
        self._name = str(name)
        self._type = type
        self._optional = optional
        self._default = default
        self._fallback = fallback
        self._options = MappingProxyType(dict(options))

        field_type = resolve(type)
        if optional:
            field_type = field_type.as_optional()
        # Provider defaults are evaluated per validation, against the bound instance
        if default is not None and not is_provider(default):
            field_type = field_type.with_default(default)
        self._field_type = field_type

    def __repr__(self) -> str:
        return f"<Expectation {self._name}: {self._field_type.name}>"

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> Any:
        """The descriptor as declared."""
        return self._type

    @property
    def field_type(self) -> FieldType:
        return self._field_type

    @property
    def optional(self) -> bool:
        return self._optional

    @property
    def default(self) -> Any:
        return self._default

    @property
    def fallback(self) -> Any:
        return self._fallback

    @property
    def options(self) -> MappingProxyType:
        return self._options

    @property
    def required(self) -> bool:
        """Not optional and nothing to fill an absent key with."""
        return not self._field_type.is_optional and not self.has_default

    @property
    def has_default(self) -> bool:
        return self._field_type.has_default or self._default is not None

    @property
    def has_fallback(self) -> bool:
        return self._fallback is not None

    @property
    def default_provider(self) -> Optional[Callable]:
        return self._default if is_provider(self._default) else None
