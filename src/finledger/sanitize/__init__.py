"""Description sanitization: rules, matching and ledger migration."""

from finledger.sanitize.matcher import (
    CompiledRuleSet,
    SanitizeResult,
    compile_rules,
    get_unmapped_descriptions,
    sanitize_batch,
    sanitize_description,
)
from finledger.sanitize.rules import GENERIC_RULES, NameMappingConfig, NameMappingRule
from finledger.sanitize.rules_loader import RulesService

__all__ = [
    "CompiledRuleSet",
    "GENERIC_RULES",
    "NameMappingConfig",
    "NameMappingRule",
    "RulesService",
    "SanitizeResult",
    "compile_rules",
    "get_unmapped_descriptions",
    "sanitize_batch",
    "sanitize_description",
]
