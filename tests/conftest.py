import pytest

from fieldcheck.config import Settings
from fieldcheck.validators import FieldValidator, RuleParser


@pytest.fixture
def settings() -> Settings:
    return Settings(STRICT_RULES=True, MISSING_REFERENCE_POLICY="raise")


@pytest.fixture
def validator(settings) -> FieldValidator:
    return FieldValidator(settings=settings)


@pytest.fixture
def parser(settings) -> RuleParser:
    return RuleParser(settings=settings)


@pytest.fixture
def check(validator):
    """Validate a single value against a rule set; returns the message or None."""

    def _check(value, *rules, data=None):
        data = dict(data or {})
        data["field"] = value
        errors = validator.set_rules(data, {"field": list(rules)}).get_validation_errors()
        return errors.get("field")

    return _check
