"""fieldcheck — declarative field validation."""

import logging

from fieldcheck.validators import (
    ErrorCode,
    FieldValidator,
    ValidationFailure,
    ValidationResult,
    field_validator,
    set_rules,
)

__version__ = "0.1.0"

# Silent unless the host application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ErrorCode",
    "FieldValidator",
    "ValidationFailure",
    "ValidationResult",
    "field_validator",
    "set_rules",
]
