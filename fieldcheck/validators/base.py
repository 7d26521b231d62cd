"""Base rule — abstract class implementing the Strategy Pattern.

Each rule is a small immutable pydantic model: its fields are the typed rule
argument (``MinLength(length=5)``, ``Match(other="password")``) and its
``check`` method is a pure predicate over a value.
New rules are added by registering a subclass, without modifying the engine.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Mapping, Optional

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError

from fieldcheck.config import Settings
from fieldcheck.validators.exceptions import MalformedRuleError
from fieldcheck.validators.models import ErrorCode, ValidationFailure


class BaseRule(BaseModel, ABC):
    """Abstract base for all field rules.

    Contract:
        - check() is deterministic: same input → same output
        - check() returns None on success, one ValidationFailure otherwise
        - check() never mutates shared state
        - check() is only called with an empty value when ``skip_empty`` is False
    """

    model_config = ConfigDict(frozen=True)

    # Name used in rule specifiers ("min_length:5" → "min_length")
    name: ClassVar[str]
    code: ClassVar[ErrorCode]
    message_template: ClassVar[str]

    # Model field that receives the text after ":"; None for argument-less rules
    argument_field: ClassVar[Optional[str]] = None

    # Non-required rules never see empty values
    skip_empty: ClassVar[bool] = True

    @abstractmethod
    def check(self, value: Any, field: str, data: Mapping[str, Any]) -> Optional[ValidationFailure]:
        """Evaluate the rule against one field value.

        Args:
            value: The field value (None if absent from the input)
            field: Name of the field being validated
            data: The full input mapping, for cross-field rules

        Returns:
            A ValidationFailure if the rule is violated, else None
        """
        ...

    @classmethod
    def from_argument(cls, argument: Optional[str], settings: Settings) -> "BaseRule":
        """Build the rule from the raw text following ":" in a specifier."""
        specifier = cls.name if argument is None else f"{cls.name}:{argument}"

        if cls.argument_field is None:
            if argument is not None:
                raise MalformedRuleError(specifier, f"'{cls.name}' does not take an argument")
            return cls()

        if argument is None or not argument.strip():
            raise MalformedRuleError(specifier, f"'{cls.name}' requires an argument")

        try:
            return cls(**{cls.argument_field: argument.strip()})
        except PydanticValidationError as e:
            reason = e.errors()[0].get("msg", str(e))
            raise MalformedRuleError(specifier, reason) from e

    @property
    def specifier(self) -> str:
        """The canonical ``name`` / ``name:argument`` form of this rule."""
        if self.argument_field is None:
            return self.name
        return f"{self.name}:{getattr(self, self.argument_field)}"

    # ── Helper Methods ──

    def failure(
        self,
        field: str,
        code: Optional[ErrorCode] = None,
        message: Optional[str] = None,
    ) -> ValidationFailure:
        """Convenience method to create a ValidationFailure for this rule."""
        if message is None:
            params = {self.argument_field: getattr(self, self.argument_field)} if self.argument_field else {}
            message = self.message_template.format(field=field, **params)
        return ValidationFailure(
            field=field,
            code=code or self.code,
            message=message,
            rule=self.name,
        )

    def _as_text(self, value: Any) -> Optional[str]:
        """Coerce scalars to text; None for values no text rule can accept."""
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return str(value)
        return None


def is_empty(value: Any) -> bool:
    """True for None, "" and empty collections. 0, False and "0" are values."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False
