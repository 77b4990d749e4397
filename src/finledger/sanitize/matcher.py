"""Description sanitizer.

Rules are compiled once into a CompiledRuleSet: case-insensitive patterns are
upper-cased up front and regexes compiled ahead of time. A regex that fails
to compile never matches and is reported in ``CompiledRuleSet.diagnostics``.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from finledger.sanitize.rules import NameMappingConfig, NameMappingRule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SanitizeResult:
    clean_description: str
    category: Optional[str]
    matched_rule: Optional[NameMappingRule]
    was_modified: bool


@dataclass(frozen=True)
class RuleDiagnostic:
    """A pattern that could not be compiled."""

    rule_index: int
    target: str
    pattern: str
    message: str


@dataclass(frozen=True)
class CompiledRule:
    rule: NameMappingRule
    matchers: tuple[Callable[[str, str], bool], ...]

    def matches(self, value: str, value_upper: str) -> bool:
        return any(match(value, value_upper) for match in self.matchers)


@dataclass(frozen=True)
class CompiledRuleSet:
    config: NameMappingConfig
    rules: tuple[CompiledRule, ...]
    diagnostics: tuple[RuleDiagnostic, ...] = field(default_factory=tuple)

    @property
    def warn_on_unmapped(self) -> bool:
        return self.config.warn_on_unmapped

    @property
    def fallback_to_raw(self) -> bool:
        return self.config.fallback_to_raw


def _compile_pattern(rule: NameMappingRule, pattern: str) -> Callable[[str, str], bool]:
    if rule.match_mode == "regex":
        compiled = re.compile(pattern, 0 if rule.case_sensitive else re.IGNORECASE)
        return lambda value, _upper: compiled.search(value) is not None

    if rule.case_sensitive:
        if rule.match_mode == "exact":
            return lambda value, _upper: value == pattern
        return lambda value, _upper: pattern in value

    pattern_upper = pattern.upper()
    if rule.match_mode == "exact":
        return lambda _value, upper: upper == pattern_upper
    return lambda _value, upper: pattern_upper in upper


def compile_rules(config: NameMappingConfig) -> CompiledRuleSet:
    """Compile a rule configuration.

    Args:
        config: Ordered name mapping rules

    Returns:
        CompiledRuleSet; invalid regex patterns are listed in ``diagnostics``
        and logged as warnings
    """
    compiled_rules = []
    diagnostics = []

    for index, rule in enumerate(config.rules):
        matchers = []
        for pattern in rule.patterns:
            try:
                matchers.append(_compile_pattern(rule, pattern))
            except re.error as e:
                diagnostics.append(RuleDiagnostic(index, rule.target, pattern, str(e)))
                logger.warning(
                    "Invalid regex %r in rule %d (%s): %s; pattern will never match",
                    pattern,
                    index,
                    rule.target,
                    e,
                )
        compiled_rules.append(CompiledRule(rule, tuple(matchers)))

    return CompiledRuleSet(config, tuple(compiled_rules), tuple(diagnostics))


def sanitize_description(raw_description: str, rules: CompiledRuleSet) -> SanitizeResult:
    """Apply the first matching rule to a raw description.

    The input is trimmed before matching. Without a match the trimmed input
    is returned (or the untouched input when ``fallback_to_raw`` is off).
    ``was_modified`` is False when the description already equals the
    rule's target.
    """
    normalized = raw_description.strip()
    normalized_upper = normalized.upper()

    for compiled in rules.rules:
        if compiled.matches(normalized, normalized_upper):
            rule = compiled.rule
            return SanitizeResult(
                clean_description=rule.target,
                category=rule.category,
                matched_rule=rule,
                was_modified=normalized != rule.target,
            )

    return SanitizeResult(
        clean_description=normalized if rules.fallback_to_raw else raw_description,
        category=None,
        matched_rule=None,
        was_modified=False,
    )


def sanitize_batch(raw_descriptions: Iterable[str], rules: CompiledRuleSet) -> dict[str, SanitizeResult]:
    """Sanitize many descriptions, evaluating each distinct value once."""
    results: dict[str, SanitizeResult] = {}
    for raw in raw_descriptions:
        if raw not in results:
            results[raw] = sanitize_description(raw, rules)
    return results


def get_unmapped_descriptions(raw_descriptions: Iterable[str], rules: CompiledRuleSet) -> list[str]:
    """Distinct descriptions (first-seen order) that no rule matches."""
    return [raw for raw, result in sanitize_batch(raw_descriptions, rules).items() if result.matched_rule is None]
