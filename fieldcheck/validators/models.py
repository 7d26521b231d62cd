"""Validation models: error codes and the failure record produced by rules."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """One code per failure condition a rule can report."""

    REQUIRED = "REQUIRED"
    ALPHA = "ALPHA"
    ALPHA_NUM = "ALPHA_NUM"
    ARRAY_EXPECTED = "ARRAY_EXPECTED"
    ARRAY_STRING_EXPECTED = "ARRAY_STRING_EXPECTED"
    NUMBER = "NUMBER"
    LOWERCASE = "LOWERCASE"
    MIN_LENGTH = "MIN_LENGTH"
    MAX_LENGTH = "MAX_LENGTH"
    EMAIL = "EMAIL"
    MATCH = "MATCH"
    PHONE_NUMBER = "PHONE_NUMBER"
    DATE = "DATE"

    # Recorded by callers through ValidationResult.set_validation_error
    CUSTOM = "CUSTOM"


class ValidationFailure(BaseModel):
    """A single failed rule for one field."""

    model_config = ConfigDict(frozen=True)

    field: str
    code: ErrorCode
    message: str
    rule: Optional[str] = None  # Rule name, None for caller-recorded errors
