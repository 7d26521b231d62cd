"""Rule registry and specifier parsing.

Specifiers such as ``"min_length:5"`` are parsed once, before evaluation, into
rule objects. The registry maps each rule name to its class.
"""

import logging
from typing import Iterable, Mapping, Optional, Union

import structlog

from fieldcheck.config import Settings, get_settings
from fieldcheck.validators.base import BaseRule
from fieldcheck.validators.exceptions import MalformedRuleError, UnknownRuleError
from fieldcheck.validators.rules import BUILTIN_RULES

logger = structlog.wrap_logger(logging.getLogger(__name__))

RuleSpecifier = Union[str, BaseRule]


class RuleRegistry:
    """Name → rule class lookup used by the parser."""

    def __init__(self, rules: Optional[Iterable[type[BaseRule]]] = None):
        self._rules: dict[str, type[BaseRule]] = {}
        for rule_cls in BUILTIN_RULES if rules is None else rules:
            self.register(rule_cls)

    def register(self, rule_cls: type[BaseRule]) -> None:
        """Add a rule class, replacing any rule with the same name."""
        self._rules[rule_cls.name] = rule_cls

    def unregister(self, name: str) -> None:
        self._rules.pop(name, None)

    def get(self, name: str) -> Optional[type[BaseRule]]:
        return self._rules.get(name)

    def names(self) -> list[str]:
        return list(self._rules)

    def __contains__(self, name: object) -> bool:
        return name in self._rules


class RuleParser:
    """Turns rule specifiers into rule objects.

    Unknown names raise UnknownRuleError when ``STRICT_RULES`` is on;
    otherwise they are logged and dropped. Malformed arguments always raise.
    """

    def __init__(self, registry: Optional[RuleRegistry] = None, settings: Optional[Settings] = None):
        self.registry = registry or RuleRegistry()
        self.settings = settings or get_settings()

    def parse_rule(self, specifier: RuleSpecifier, field: str = "") -> Optional[BaseRule]:
        """Parse one specifier. Returns None only for dropped unknown rules."""
        if isinstance(specifier, BaseRule):
            return specifier
        if not isinstance(specifier, str):
            raise MalformedRuleError(repr(specifier), "rule specifiers must be strings or rule objects")

        name, sep, argument = specifier.partition(":")
        name = name.strip()
        rule_cls = self.registry.get(name)

        if rule_cls is None:
            if self.settings.STRICT_RULES:
                raise UnknownRuleError(name, field)
            logger.warning("rule_unknown", rule=name, field=field)
            return None

        return rule_cls.from_argument(argument if sep else None, self.settings)

    def parse_rule_set(self, specifiers: Iterable[RuleSpecifier], field: str = "") -> list[BaseRule]:
        """Parse an ordered rule set, preserving order."""
        if isinstance(specifiers, (str, BaseRule)):
            # A lone specifier, not a sequence of characters or model fields
            specifiers = [specifiers]

        parsed = []
        for specifier in specifiers:
            rule = self.parse_rule(specifier, field)
            if rule is not None:
                parsed.append(rule)
        return parsed

    def compile_rules(
        self, rules: Mapping[str, Iterable[RuleSpecifier]]
    ) -> dict[str, list[BaseRule]]:
        """Parse every field's rule set, keeping the mapping's field order."""
        return {field: self.parse_rule_set(rule_set, field) for field, rule_set in rules.items()}
