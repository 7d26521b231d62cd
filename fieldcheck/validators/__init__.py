"""Field Validator — declarative per-field validation with one error per field.

Usage:
    from fieldcheck.validators import field_validator

    result = field_validator.set_rules(data, {"name": ["required", "alpha"]})
    if result.has_validation_errors():
        # Show result.get_validation_errors() to the user
"""

from fieldcheck.validators.base import BaseRule, is_empty
from fieldcheck.validators.engine import FieldValidator, ValidationResult, field_validator, set_rules
from fieldcheck.validators.exceptions import (
    MalformedRuleError,
    RuleConfigurationError,
    UnknownReferenceFieldError,
    UnknownRuleError,
)
from fieldcheck.validators.models import ErrorCode, ValidationFailure
from fieldcheck.validators.parser import RuleParser, RuleRegistry

__all__ = [
    "BaseRule",
    "is_empty",
    "FieldValidator",
    "ValidationResult",
    "field_validator",
    "set_rules",
    "RuleConfigurationError",
    "UnknownRuleError",
    "MalformedRuleError",
    "UnknownReferenceFieldError",
    "ErrorCode",
    "ValidationFailure",
    "RuleParser",
    "RuleRegistry",
]
