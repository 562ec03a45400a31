"""Validation Engine — default injection, validation, fallback repair, one retry.

This is the main entry point for validating data against a schema.

Usage:
    result = validation_engine.validate(schema, {"per_page": "200"}, instance=owner)
    if result.success:
        params = result.to_dict()

Pipeline:
    1. Copy the input and fill absent fields whose default is a provider
       (evaluated against ``instance``). Immediate defaults are left to the
       field type. Supplied values, falsy ones included, are never replaced.
    2. Run the contract.
    3. On failure, overwrite every errored field that has a fallback.
    4. If any field was overwritten, run the contract exactly once more and
       return that result, failing or not.
"""

import copy
import time
from typing import Any, Mapping, Optional

import structlog

from expectant.contract import ValidationResult
from expectant.expectation import evaluate_provider, is_provider
from expectant.schema import Schema

logger = structlog.get_logger()


class ValidationEngine:
    """Runs the validate-then-repair pipeline for one schema at a time.

    Stateless: safe to share across threads once schemas are declared.
    """

    def validate(
        self,
        schema: Schema,
        data: Optional[Mapping[str, Any]],
        instance: Any = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> ValidationResult:
        """Validate ``data`` against ``schema``.

        Args:
            schema: Schema to validate against (compiled on first use)
            data: Input mapping; never modified
            instance: Owner handed to deferred providers and rule predicates
            context: Caller values available to rules as ``rule.context``

        Returns:
            ValidationResult of the last contract run
        """
        start_time = time.perf_counter()
        contract = schema.contract()
        context = context if context is not None else {}

        data = self.apply_defaults(schema, data, instance)
        result = contract.call(data, context=context, instance=instance)

        retried = False
        if result.failure:
            # Overwritten, not merely unequal: True == 1 and 1 == 1.0
            patched, applied = self.apply_fallbacks(schema, data, result, instance)
            if applied:
                result = contract.call(patched, context=context, instance=instance)
                retried = True

        logger.debug(
            "validation_complete",
            schema=schema.name,
            success=result.success,
            failed_fields=sorted(result.errors),
            retried=retried,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return result

    def apply_defaults(
        self,
        schema: Schema,
        data: Optional[Mapping[str, Any]],
        instance: Any = None,
    ) -> dict[str, Any]:
        """Copy ``data`` and fill absent keys that have a provider default."""
        data = dict(data or {})
        applied = []

        for field in schema.fields:
            # Skip if value already provided
            if field.name in data:
                continue
            provider = field.default_provider
            if provider is not None:
                data[field.name] = evaluate_provider(provider, instance)
                applied.append(field.name)

        if applied:
            logger.debug("defaults_applied", schema=schema.name, fields=applied)
        return data

    def apply_fallbacks(
        self,
        schema: Schema,
        data: Mapping[str, Any],
        result: ValidationResult,
        instance: Any = None,
    ) -> tuple[dict[str, Any], list[str]]:
        """Copy ``data`` and overwrite errored fields that have a fallback.

        Returns:
            The patched copy and the names of the fields overwritten
        """
        data = dict(data)
        applied = []

        for field in schema.fields:
            if not field.has_fallback or not result.errors.get(field.name):
                continue
            if is_provider(field.fallback):
                data[field.name] = evaluate_provider(field.fallback, instance)
            else:
                data[field.name] = copy.deepcopy(field.fallback)
            applied.append(field.name)

        if applied:
            logger.info("fallbacks_applied", schema=schema.name, fields=applied)
        return data, applied


# Module-level singleton
validation_engine = ValidationEngine()
