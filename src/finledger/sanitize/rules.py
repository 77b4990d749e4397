"""Name mapping rule models and the generic rule set.

User-specific rules live in a TOML file referenced from the config
(``[sanitization] rules = "data/fin.rules.toml"``) and are placed ahead of
the generic rules below. Rule order matters: the first rule with a matching
pattern wins, so specific patterns must precede general ones.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

MatchMode = Literal["contains", "regex", "exact"]


class NameMappingRule(BaseModel):
    """Maps any of several description patterns to one clean name."""

    model_config = {"frozen": True}

    patterns: tuple[str, ...]
    target: str
    category: str | None = None
    case_sensitive: bool = False
    match_mode: MatchMode = "contains"

    @field_validator("patterns")
    @classmethod
    def validate_patterns(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """A rule needs at least one non-empty pattern."""
        patterns = tuple(p for p in v if p)
        if not patterns:
            raise ValueError("rule must have at least one non-empty pattern")
        return patterns


class NameMappingConfig(BaseModel):
    """Ordered rules plus the unmapped-description policy."""

    model_config = {"frozen": True}

    rules: tuple[NameMappingRule, ...] = Field(default_factory=tuple)
    warn_on_unmapped: bool = True
    fallback_to_raw: bool = True


GENERIC_RULES = NameMappingConfig(
    warn_on_unmapped=True,
    fallback_to_raw=True,
    rules=(
        NameMappingRule(patterns=("AMZNMKTPLACE", "AMAZON.CO.UK", "AMZN MKTP"), target="Amazon", category="shopping"),
        NameMappingRule(patterns=("TFL TRAVEL", "TFL.GOV.UK"), target="TfL", category="transport"),
        NameMappingRule(patterns=("HMRC VAT",), target="HMRC VAT", category="tax"),
        NameMappingRule(patterns=("HMRC",), target="HMRC", category="hmrctax"),
    ),
)
