"""Built-in field rules.

Character-class rules work on text; ints and floats are converted with str(),
anything else fails the rule.
"""

import re
from datetime import date, datetime
from typing import Any, ClassVar, Mapping, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import Field

from fieldcheck.config import Settings
from fieldcheck.validators.base import BaseRule, is_empty
from fieldcheck.validators.exceptions import UnknownReferenceFieldError
from fieldcheck.validators.models import ErrorCode, ValidationFailure

ALPHA_PATTERN = re.compile(r"^[a-zA-Z. _-]+$")
ALPHA_NUM_PATTERN = re.compile(r"^[a-zA-Z0-9. _-]+$")
PHONE_NUMBER_PATTERN = re.compile(r"^[0-9+-]+$")
NUMERIC_PATTERN = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")
ISO_DATE_FORMAT = "%Y-%m-%d"


class _PatternRule(BaseRule):
    """Shared body for rules that whitelist a character class."""

    pattern: ClassVar[re.Pattern]

    def check(self, value: Any, field: str, data: Mapping[str, Any]) -> Optional[ValidationFailure]:
        text = self._as_text(value)
        if text is None or not self.pattern.fullmatch(text):
            return self.failure(field)
        return None


class Required(BaseRule):
    name = "required"
    code = ErrorCode.REQUIRED
    message_template = "{field} field is required."
    skip_empty = False

    def check(self, value: Any, field: str, data: Mapping[str, Any]) -> Optional[ValidationFailure]:
        if is_empty(value):
            return self.failure(field)
        return None


class Alpha(_PatternRule):
    name = "alpha"
    code = ErrorCode.ALPHA
    message_template = (
        "{field} input may only contain letters, spaces, periods (.), underscores (_), and hyphens (-)."
    )
    pattern = ALPHA_PATTERN


class AlphaNum(_PatternRule):
    name = "alpha_num"
    code = ErrorCode.ALPHA_NUM
    message_template = (
        "{field} input may only contain letters, spaces, numbers, periods (.), "
        "underscores (_), and hyphens (-)."
    )
    pattern = ALPHA_NUM_PATTERN


class PhoneNumber(_PatternRule):
    name = "phone_number"
    code = ErrorCode.PHONE_NUMBER
    message_template = "{field} input may only contain numbers, hyphens (-), and plus (+)."
    pattern = PHONE_NUMBER_PATTERN


class ArrayString(BaseRule):
    name = "array_string"
    code = ErrorCode.ARRAY_EXPECTED
    message_template = "{field} input must be an array."

    def check(self, value: Any, field: str, data: Mapping[str, Any]) -> Optional[ValidationFailure]:
        if not isinstance(value, (list, tuple)):
            return self.failure(field)
        if any(not isinstance(item, str) for item in value):
            return self.failure(
                field,
                code=ErrorCode.ARRAY_STRING_EXPECTED,
                message=f"{field} input must be an array of strings.",
            )
        return None


class Num(BaseRule):
    name = "num"
    code = ErrorCode.NUMBER
    message_template = "{field} input must be a number."

    def check(self, value: Any, field: str, data: Mapping[str, Any]) -> Optional[ValidationFailure]:
        if isinstance(value, bool):
            return self.failure(field)
        if isinstance(value, (int, float)):
            return None
        if isinstance(value, str) and NUMERIC_PATTERN.match(value):
            return None
        return self.failure(field)


class Lowercase(BaseRule):
    name = "lowercase"
    code = ErrorCode.LOWERCASE
    message_template = "{field} input must be all lowercase."

    def check(self, value: Any, field: str, data: Mapping[str, Any]) -> Optional[ValidationFailure]:
        text = self._as_text(value)
        if text is None or text.lower() != text:
            return self.failure(field)
        return None


class MinLength(BaseRule):
    name = "min_length"
    code = ErrorCode.MIN_LENGTH
    message_template = "{field} input must be at least {length} characters long."
    argument_field = "length"

    length: int = Field(ge=0)

    def check(self, value: Any, field: str, data: Mapping[str, Any]) -> Optional[ValidationFailure]:
        text = self._as_text(value)
        if text is None or len(text) < self.length:
            return self.failure(field)
        return None


class MaxLength(BaseRule):
    name = "max_length"
    code = ErrorCode.MAX_LENGTH
    message_template = "{field} input must not exceed {length} characters."
    argument_field = "length"

    length: int = Field(ge=0)

    def check(self, value: Any, field: str, data: Mapping[str, Any]) -> Optional[ValidationFailure]:
        text = self._as_text(value)
        if text is None or len(text) > self.length:
            return self.failure(field)
        return None


class Email(BaseRule):
    name = "email"
    code = ErrorCode.EMAIL
    message_template = "{field} input must be a valid email address."

    def check(self, value: Any, field: str, data: Mapping[str, Any]) -> Optional[ValidationFailure]:
        if not isinstance(value, str):
            return self.failure(field)
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            return self.failure(field)
        return None


class Match(BaseRule):
    """Cross-field equality: the value must be identical to input[other]."""

    name = "match"
    code = ErrorCode.MATCH
    message_template = "{field} doesn't match."
    argument_field = "other"

    other: str = Field(min_length=1)

    def check(self, value: Any, field: str, data: Mapping[str, Any]) -> Optional[ValidationFailure]:
        if self.other not in data:
            raise UnknownReferenceFieldError(field, self.other)

        expected = data[self.other]
        if type(value) is not type(expected) or value != expected:
            return self.failure(field)
        return None


class Date(BaseRule):
    """Calendar-valid date, as YYYY-MM-DD or one of the configured formats."""

    name = "date"
    code = ErrorCode.DATE
    message_template = "{field} input must be a valid date."

    formats: tuple[str, ...] = ()

    @classmethod
    def from_argument(cls, argument: Optional[str], settings: Settings) -> "Date":
        rule = super().from_argument(argument, settings)
        return rule.model_copy(update={"formats": tuple(settings.DATE_FORMATS)})

    def check(self, value: Any, field: str, data: Mapping[str, Any]) -> Optional[ValidationFailure]:
        if isinstance(value, date):
            return None
        if not isinstance(value, str) or self._parse(value.strip()) is None:
            return self.failure(field)
        return None

    def _parse(self, text: str) -> Optional[date]:
        # strptime raises ValueError for out-of-range days and months
        for fmt in (ISO_DATE_FORMAT, *self.formats):
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        return None


BUILTIN_RULES: list[type[BaseRule]] = [
    Required,
    Alpha,
    AlphaNum,
    ArrayString,
    Num,
    Lowercase,
    MinLength,
    MaxLength,
    Email,
    Match,
    PhoneNumber,
    Date,
]
