"""Load and merge sanitization rules.

External rules come from a TOML file::

    warn_on_unmapped = true
    fallback_to_raw = true

    [[rules]]
    patterns = ["TESCO STORES", "TESCO EXPRESS"]
    target = "Tesco"
    category = "groceries"

    [[rules]]
    patterns = ["^AMZN\\\\s"]
    target = "Amazon"
    match_mode = "regex"
"""

import logging
import tomllib
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from finledger.config import FinConfig
from finledger.domain.errors import ConfigurationError
from finledger.sanitize.matcher import CompiledRuleSet, compile_rules
from finledger.sanitize.rules import GENERIC_RULES, NameMappingConfig

logger = logging.getLogger(__name__)


def load_rules_file(path: Path) -> NameMappingConfig:
    """Read a TOML rules file.

    Raises:
        ConfigurationError: If the file is not valid TOML or fails validation
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return NameMappingConfig.model_validate(data)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in rules file {path}: {e}") from e
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid rules file {path}: {e}") from e


def merge_rules(external: NameMappingConfig, generic: NameMappingConfig) -> NameMappingConfig:
    """External rules first, then generic; external policy flags win."""
    return NameMappingConfig(
        rules=external.rules + generic.rules,
        warn_on_unmapped=external.warn_on_unmapped,
        fallback_to_raw=external.fallback_to_raw,
    )


class RulesService:
    """Owns the merged, compiled rule set for an import run.

    The rule set is built on the first load() and cached until reset().
    """

    def __init__(
        self,
        config: Optional[FinConfig] = None,
        generic_rules: NameMappingConfig = GENERIC_RULES,
        rules_path: Optional[Path] = None,
    ):
        """Initialize rules service.

        Args:
            config: Loaded configuration; supplies the external rules path
            generic_rules: Rules shipped with the package
            rules_path: Explicit rules file, overriding the config
        """
        self.config = config
        self.generic_rules = generic_rules
        self.rules_path = rules_path
        self._compiled: Optional[CompiledRuleSet] = None
        self._external_loaded = False
        self.load_error: Optional[str] = None

    def _resolve_path(self) -> Optional[Path]:
        if self.rules_path is not None:
            return self.rules_path
        if self.config is not None:
            return self.config.get_rules_path()
        return None

    def _load_external(self) -> Optional[NameMappingConfig]:
        path = self._resolve_path()
        if path is None:
            return None
        if not path.exists():
            logger.debug("Rules file %s does not exist; using generic rules", path)
            return None
        try:
            return load_rules_file(path)
        except ConfigurationError as e:
            # Generic rules still apply when the rules file is broken
            self.load_error = str(e)
            logger.warning("Failed to load rules file at %s: %s", path, e)
            return None

    def load(self) -> CompiledRuleSet:
        """Return the compiled rule set, building it on first use."""
        if self._compiled is not None:
            return self._compiled

        external = self._load_external()
        self._external_loaded = external is not None
        merged = merge_rules(external, self.generic_rules) if external is not None else self.generic_rules
        self._compiled = compile_rules(merged)
        logger.debug(
            "Loaded %d sanitization rules (%s external rules)",
            len(merged.rules),
            "with" if self._external_loaded else "no",
        )
        return self._compiled

    def reset(self) -> None:
        """Drop the cached rule set so the next load() re-reads the rules file."""
        self._compiled = None
        self._external_loaded = False
        self.load_error = None

    @property
    def has_external_rules(self) -> bool:
        return self._external_loaded
