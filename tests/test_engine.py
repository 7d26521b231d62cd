from typing import Any, Mapping, Optional

import pytest
from structlog.testing import capture_logs

from fieldcheck import field_validator, set_rules
from fieldcheck.config import Settings
from fieldcheck.validators import (
    BaseRule,
    ErrorCode,
    FieldValidator,
    UnknownReferenceFieldError,
    UnknownRuleError,
    ValidationFailure,
)


class Uppercase(BaseRule):
    name = "uppercase"
    code = ErrorCode.CUSTOM
    message_template = "{field} input must be all uppercase."

    def check(self, value: Any, field: str, data: Mapping[str, Any]) -> Optional[ValidationFailure]:
        if str(value).upper() != str(value):
            return self.failure(field)
        return None


class Exploding(BaseRule):
    name = "exploding"
    code = ErrorCode.CUSTOM
    message_template = "never"

    def check(self, value, field, data):
        raise RuntimeError("boom")


SIGNUP_RULES = {
    "username": ["required", "alpha_num", "lowercase", "min_length:3", "max_length:20"],
    "email": ["required", "email"],
    "password": ["required", "min_length:8"],
    "confirm_password": ["required", "match:password"],
    "phone": ["phone_number"],
    "birthday": ["date"],
}


class TestSetRules:
    def test_valid_signup(self, validator):
        data = {
            "username": "jane_doe",
            "email": "jane@acme.io",
            "password": "correct-horse",
            "confirm_password": "correct-horse",
            "phone": "+1-555-0100",
            "birthday": "1990-07-14",
        }
        result = validator.set_rules(data, SIGNUP_RULES)

        assert result.passed
        assert not result.has_validation_errors()
        assert result.get_validation_errors() == {}

    def test_collects_one_message_per_field(self, validator):
        data = {
            "username": "Jane#Doe",
            "email": "nope",
            "password": "short",
            "confirm_password": "different",
        }
        result = validator.set_rules(data, SIGNUP_RULES)

        assert result.get_validation_errors() == {
            "username": "username input may only contain letters, spaces, numbers, periods (.), "
            "underscores (_), and hyphens (-).",
            "email": "email input must be a valid email address.",
            "password": "password input must be at least 8 characters long.",
            "confirm_password": "confirm_password doesn't match.",
        }

    def test_first_failure_wins(self, validator):
        # Fails both lowercase and min_length; only lowercase is reported
        result = validator.set_rules({"code": "AB"}, {"code": ["lowercase", "min_length:3"]})
        [failure] = result.failures
        assert failure.rule == "lowercase"
        assert failure.code == ErrorCode.LOWERCASE

    def test_required_suppresses_other_rules_on_empty_value(self, validator):
        result = validator.set_rules({"email": ""}, {"email": ["required", "email", "min_length:5"]})
        assert result.get_validation_errors() == {"email": "email field is required."}

    def test_optional_empty_field_skips_rules(self, validator):
        result = validator.set_rules({"phone": ""}, {"phone": ["phone_number"], "birthday": ["date"]})
        assert not result.has_validation_errors()

    def test_required_never_fires_on_present_value(self, validator):
        result = validator.set_rules({"age": 0}, {"age": ["required", "num"]})
        assert result.passed

    def test_fields_only_in_data_are_ignored(self, validator):
        result = validator.set_rules({"extra": "###"}, {})
        assert not result.has_validation_errors()

    def test_has_validation_error_per_field(self, validator):
        result = validator.set_rules({"a": "", "b": "ok"}, {"a": ["required"], "b": ["required"]})
        assert result.has_validation_error("a")
        assert not result.has_validation_error("b")

    def test_error_order_follows_rules_mapping(self, validator):
        result = validator.set_rules({}, {"z": ["required"], "a": ["required"]})
        assert list(result.get_validation_errors()) == ["z", "a"]


class TestResultLifecycle:
    def test_get_validation_errors_is_read_once(self, validator):
        result = validator.set_rules({}, {"name": ["required"]})

        assert result.get_validation_errors() == {"name": "name field is required."}
        assert result.get_validation_errors() == {}
        assert not result.has_validation_errors()

    def test_errors_property_does_not_clear(self, validator):
        result = validator.set_rules({}, {"name": ["required"]})
        assert result.errors == result.errors == {"name": "name field is required."}

    def test_calls_do_not_share_state(self, validator):
        first = validator.set_rules({}, {"name": ["required"]})
        second = validator.set_rules({"name": "Jane"}, {"name": ["required"]})

        assert first.has_validation_errors()
        assert not second.has_validation_errors()

    def test_set_validation_error_overrides(self, validator):
        result = validator.set_rules({}, {"name": ["required"]})
        result.set_validation_error("name", "name is taken.")
        result.set_validation_error("email", "email is blocked.")

        assert result.failures[0].code == ErrorCode.CUSTOM
        assert result.get_validation_errors() == {"name": "name is taken.", "email": "email is blocked."}


class TestConfigurationErrors:
    def test_unknown_rule_raises_before_any_check(self, validator):
        with pytest.raises(UnknownRuleError):
            validator.set_rules({"name": ""}, {"name": ["required", "titlecase"]})

    def test_unknown_rule_ignored_when_not_strict(self):
        validator = FieldValidator(settings=Settings(STRICT_RULES=False))
        result = validator.set_rules({"name": "x"}, {"name": ["titlecase", "min_length:2"]})
        assert result.errors == {"name": "name input must be at least 2 characters long."}

    def test_missing_match_reference_raises(self, validator):
        with pytest.raises(UnknownReferenceFieldError):
            validator.set_rules({"confirm": "abc"}, {"confirm": ["match:password"]})

    def test_missing_match_reference_fails_under_fail_policy(self):
        validator = FieldValidator(settings=Settings(MISSING_REFERENCE_POLICY="fail"))
        with capture_logs() as logs:
            result = validator.set_rules({"confirm": "abc"}, {"confirm": ["match:password"]})

        assert result.errors == {"confirm": "confirm doesn't match."}
        assert logs[0]["event"] == "reference_field_missing"

    def test_missing_reference_not_consulted_for_empty_value(self, validator):
        result = validator.set_rules({"confirm": ""}, {"confirm": ["match:password"]})
        assert result.passed


class TestCustomRules:
    def test_add_and_remove_rule(self, settings):
        validator = FieldValidator(settings=settings)
        validator.add_rule(Uppercase)

        result = validator.set_rules({"code": "abc"}, {"code": ["uppercase"]})
        assert result.errors == {"code": "code input must be all uppercase."}

        validator.remove_rule("uppercase")
        with pytest.raises(UnknownRuleError):
            validator.set_rules({"code": "abc"}, {"code": ["uppercase"]})

    def test_rule_objects_in_rule_sets(self, validator):
        result = validator.set_rules({"code": "ABC"}, {"code": [Uppercase(), "max_length:2"]})
        assert result.errors == {"code": "code input must not exceed 2 characters."}

    def test_rule_exceptions_propagate(self, validator):
        with capture_logs() as logs:
            with pytest.raises(RuntimeError, match="boom"):
                validator.set_rules({"x": "1"}, {"x": [Exploding()]})
        assert logs[0]["event"] == "rule_failed"
        assert logs[0]["rule"] == "exploding"


class TestValidateField:
    def test_returns_first_failure(self, validator, parser):
        rules = parser.parse_rule_set(["num", "min_length:3"])
        failure = validator.validate_field("qty", "12", rules, {"qty": "12"})
        assert failure.code == ErrorCode.MIN_LENGTH

    def test_returns_none_when_valid(self, validator, parser):
        rules = parser.parse_rule_set(["num"])
        assert validator.validate_field("qty", "12", rules, {}) is None


class TestLogging:
    def test_validation_complete_event(self, validator):
        with capture_logs() as logs:
            validator.set_rules({"b": "x"}, {"a": ["required"], "b": ["required"]})

        [event] = [log for log in logs if log["event"] == "validation_complete"]
        assert event["fields"] == 2
        assert event["failed_fields"] == ["a"]
        assert event["log_level"] == "info"


def test_module_level_set_rules():
    result = set_rules({"password": "abc", "confirm": "abd"}, {"confirm": ["match:password"]})
    assert result.get_validation_errors() == {"confirm": "confirm doesn't match."}
    assert isinstance(field_validator, FieldValidator)
