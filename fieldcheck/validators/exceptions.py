"""Configuration errors raised while building or applying rule sets.

Rule failures are never raised; they are recorded on a ValidationResult.
"""


class RuleConfigurationError(ValueError):
    """Base class for rule sets that cannot be applied as written."""


class UnknownRuleError(RuleConfigurationError):
    def __init__(self, name: str, field: str = ""):
        self.name = name
        self.field = field
        where = f" for field '{field}'" if field else ""
        super().__init__(f"Unknown validation rule '{name}'{where}")


class MalformedRuleError(RuleConfigurationError):
    def __init__(self, specifier: str, reason: str):
        self.specifier = specifier
        self.reason = reason
        super().__init__(f"Malformed rule '{specifier}': {reason}")


class UnknownReferenceFieldError(RuleConfigurationError):
    """A cross-field rule points at a field missing from the input."""

    def __init__(self, field: str, reference: str):
        self.field = field
        self.reference = reference
        super().__init__(f"Field '{field}' references unknown field '{reference}'")
