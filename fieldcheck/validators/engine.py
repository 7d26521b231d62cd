"""Validation Engine — applies rule sets to input data and collects one error per field.

This is the main entry point for field validation. Every call to set_rules
returns a fresh ValidationResult; nothing is shared between calls.

Usage:
    result = field_validator.set_rules(
        {"email": "a@example.com", "password": "secret1", "confirm": "secret1"},
        {"email": ["required", "email"], "confirm": ["required", "match:password"]},
    )
    if result.has_validation_errors():
        errors = result.get_validation_errors()
"""

import logging
import time
from typing import Any, Iterable, Mapping, Optional

import structlog

from fieldcheck.config import Settings, get_settings
from fieldcheck.validators.base import BaseRule, is_empty
from fieldcheck.validators.exceptions import UnknownReferenceFieldError
from fieldcheck.validators.models import ErrorCode, ValidationFailure
from fieldcheck.validators.parser import RuleParser, RuleRegistry, RuleSpecifier

logger = structlog.wrap_logger(logging.getLogger(__name__))


class ValidationResult:
    """Per-call error store: at most one failure per field."""

    def __init__(self) -> None:
        self._failures: dict[str, ValidationFailure] = {}

    def record(self, failure: ValidationFailure) -> None:
        self._failures[failure.field] = failure

    def set_validation_error(self, field: str, message: str) -> None:
        """Record a caller-supplied error, replacing any error already held for the field."""
        self.record(ValidationFailure(field=field, code=ErrorCode.CUSTOM, message=message))

    def has_validation_errors(self) -> bool:
        return bool(self._failures)

    def has_validation_error(self, field: str) -> bool:
        return field in self._failures

    def get_validation_errors(self) -> dict[str, str]:
        """Return field → message and clear the store (read-once)."""
        errors = self.errors
        self._failures = {}
        return errors

    @property
    def errors(self) -> dict[str, str]:
        return {field: failure.message for field, failure in self._failures.items()}

    @property
    def failures(self) -> list[ValidationFailure]:
        return list(self._failures.values())

    @property
    def passed(self) -> bool:
        return not self._failures

    def __repr__(self) -> str:
        return f"ValidationResult(errors={self.errors!r})"


class FieldValidator:
    """Runs ordered rule sets over input fields.

    Design principles:
        - Rule specifiers are parsed once per call, before any value is checked
        - First failure wins: a field with an error gets no further rules
        - Only ``required`` sees empty values; other rules skip them
        - Observable: logs every validation run with timing
    """

    def __init__(
        self,
        registry: Optional[RuleRegistry] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry or RuleRegistry()
        self.parser = RuleParser(self.registry, self.settings)

    def set_rules(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, Iterable[RuleSpecifier]],
    ) -> ValidationResult:
        """Validate ``data`` against ``rules`` and return the collected errors.

        Args:
            data: Field name → raw value
            rules: Field name → ordered rule specifiers ("required", "min_length:5", ...)

        Returns:
            ValidationResult holding at most one message per field

        Raises:
            UnknownRuleError: unregistered rule name while STRICT_RULES is on
            MalformedRuleError: bad or missing rule argument
            UnknownReferenceFieldError: ``match`` names a field absent from ``data``
                while MISSING_REFERENCE_POLICY is "raise"
        """
        start_time = time.perf_counter()

        compiled = self.parser.compile_rules(rules)
        result = ValidationResult()

        for field, rule_set in compiled.items():
            failure = self.validate_field(field, data.get(field), rule_set, data)
            if failure is not None:
                result.record(failure)

        total_duration = (time.perf_counter() - start_time) * 1000

        logger.info(
            "validation_complete",
            fields=len(compiled),
            failed_fields=sorted(result.errors),
            duration_ms=round(total_duration, 2),
        )

        return result

    def validate_field(
        self,
        field: str,
        value: Any,
        rule_set: Iterable[BaseRule],
        data: Mapping[str, Any],
    ) -> Optional[ValidationFailure]:
        """Return the first failing rule's failure for one field, or None."""
        empty = is_empty(value)

        for rule in rule_set:
            if empty and rule.skip_empty:
                continue

            failure = self._evaluate(rule, field, value, data)
            if failure is not None:
                return failure

        return None

    def add_rule(self, rule_cls: type[BaseRule]) -> None:
        """Register a custom rule class."""
        self.registry.register(rule_cls)

    def remove_rule(self, name: str) -> None:
        """Remove a rule by name."""
        self.registry.unregister(name)

    def _evaluate(
        self, rule: BaseRule, field: str, value: Any, data: Mapping[str, Any]
    ) -> Optional[ValidationFailure]:
        try:
            return rule.check(value, field, data)
        except UnknownReferenceFieldError as e:
            logger.warning(
                "reference_field_missing",
                field=field,
                reference=e.reference,
                policy=self.settings.MISSING_REFERENCE_POLICY,
            )
            if self.settings.MISSING_REFERENCE_POLICY == "fail":
                return rule.failure(field)
            raise
        except Exception as e:
            logger.error("rule_failed", rule=rule.specifier, field=field, error=str(e))
            raise


# Module-level singleton
field_validator = FieldValidator()


def set_rules(
    data: Mapping[str, Any], rules: Mapping[str, Iterable[RuleSpecifier]]
) -> ValidationResult:
    """Validate with the shared default FieldValidator."""
    return field_validator.set_rules(data, rules)
