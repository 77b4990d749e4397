"""Configuration loading for finledger.

The configuration file (``data/fin.config.toml``) declares the chart of asset
accounts, which provider exports each one, the inbox folder files are dropped
into, and per-bank CSV column presets. It is parsed with ``tomllib`` and
validated with pydantic models.

Lookup order when no explicit path is given:

1. ``FIN_CONFIG_PATH``
2. ``FIN_HOME/data/fin.config.toml``
3. ``<root>/data/fin.config.toml`` where ``<root>`` is the nearest ancestor of
   the working directory holding ``fin.config.template.toml``
4. ``./data/fin.config.toml``
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from finledger.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FIN_CONFIG_PATH"
HOME_ENV_VAR = "FIN_HOME"
TEMPLATE_NAME = "fin.config.template.toml"

AccountType = Literal["asset", "liability", "equity", "income", "expense"]


class ConfigValidationError(ConfigurationError):
    """Raised when the configuration file is unreadable or invalid."""


class AccountConfig(BaseModel):
    """One ledger account as declared in ``[[accounts]]``."""

    id: str
    group: str
    type: AccountType
    provider: str
    label: str | None = None
    subtype: Literal["checking", "savings", "investment"] | None = None
    inbox_folder: str | None = None

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Account ids are colon paths with no empty segments."""
        if not v or any(not part.strip() for part in v.split(":")):
            raise ValueError(f"invalid account id '{v}'")
        return v

    @field_validator("provider")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        return v.strip().lower()


class BankColumns(BaseModel):
    """CSV header names for one bank export."""

    date: str
    time: str | None = None
    description: str
    amount: str
    balance: str | None = None
    transaction_id: str | None = None
    name: str | None = None
    category: str | None = None


class BankPreset(BaseModel):
    """Column preset declared in ``[[banks]]``."""

    name: str
    columns: BankColumns

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return v.strip().lower()


class SanitizationConfig(BaseModel):
    """``[sanitization]`` table."""

    rules: str | None = None


class GroupConfig(BaseModel):
    """Optional account group metadata from ``[[groups]]``."""

    id: str
    label: str
    icon: Literal["user", "briefcase", "heart", "building", "wallet", "piggy-bank"] = "wallet"
    tax_type: Literal["corp", "income", "none"] = "none"
    expense_reserve_months: int = 3


class FinConfig(BaseModel):
    """Validated configuration plus the path it was loaded from.

    Tables this package does not use (for example ``[financial]``) are
    accepted and ignored.
    """

    model_config = {"extra": "ignore"}

    accounts: list[AccountConfig] = Field(default_factory=list)
    banks: list[BankPreset] = Field(default_factory=list)
    sanitization: SanitizationConfig | None = None
    groups: list[GroupConfig] | None = None
    source_path: Path | None = Field(default=None, exclude=True)

    @model_validator(mode="after")
    def check_unique_keys(self) -> "FinConfig":
        seen_ids: set[str] = set()
        seen_folders: set[str] = set()
        for account in self.accounts:
            if account.id in seen_ids:
                raise ValueError(f"duplicate account id '{account.id}'")
            seen_ids.add(account.id)
            if account.inbox_folder:
                if account.inbox_folder in seen_folders:
                    raise ValueError(f"duplicate inbox_folder '{account.inbox_folder}'")
                seen_folders.add(account.inbox_folder)
        return self

    # Accessors
    def get_account_by_id(self, account_id: str) -> Optional[AccountConfig]:
        """Get account configuration by chart account id."""
        for account in self.accounts:
            if account.id == account_id:
                return account
        return None

    def get_accounts_by_provider(self, provider: str) -> list[AccountConfig]:
        """List accounts exported by a provider."""
        provider = provider.lower()
        return [a for a in self.accounts if a.provider == provider]

    def get_accounts_by_group(self, group: str) -> list[AccountConfig]:
        """List accounts belonging to a group."""
        return [a for a in self.accounts if a.group == group]

    def get_bank_preset(self, provider: str) -> Optional[BankPreset]:
        """Get the CSV column preset for a provider, if configured."""
        provider = provider.lower()
        for bank in self.banks:
            if bank.name == provider:
                return bank
        return None

    def get_inbox_folder_to_chart_id(self) -> dict[str, str]:
        """Map inbox folder names to chart account ids."""
        return {a.inbox_folder: a.id for a in self.accounts if a.inbox_folder}

    def get_provider_for_account(self, account_id: str) -> Optional[str]:
        """Get the provider configured for an account."""
        account = self.get_account_by_id(account_id)
        return account.provider if account else None

    def get_asset_account_ids(self) -> list[str]:
        """List ids of all asset accounts."""
        return [a.id for a in self.accounts if a.type == "asset"]

    @property
    def config_dir(self) -> Optional[Path]:
        """Directory holding the loaded config file."""
        return self.source_path.parent if self.source_path else None

    def get_rules_path(self) -> Optional[Path]:
        """Resolve the external sanitization rules file.

        Relative paths are resolved against the parent of the config
        directory, so ``rules = "data/fin.rules.toml"`` works next to
        ``data/fin.config.toml``.
        """
        if self.sanitization is None or not self.sanitization.rules:
            return None
        rules_path = Path(self.sanitization.rules)
        if rules_path.is_absolute():
            return rules_path
        if self.config_dir is not None:
            return self.config_dir.parent / rules_path
        return Path.cwd() / rules_path


def find_project_root(start_dir: Path) -> Optional[Path]:
    """Walk up from start_dir to the directory holding the config template."""
    for directory in [start_dir, *start_dir.parents]:
        if (directory / TEMPLATE_NAME).exists():
            return directory
    return None


def find_config_path(config_path: Optional[str | Path] = None) -> Path:
    """Resolve the config file location.

    Args:
        config_path: Explicit path. If None, environment variables and the
            project root are consulted.

    Returns:
        Absolute path (which may not exist)
    """
    cwd = Path.cwd()
    if config_path is not None:
        path = Path(config_path)
        return path if path.is_absolute() else cwd / path

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        return path if path.is_absolute() else cwd / path

    home_dir = os.environ.get(HOME_ENV_VAR)
    if home_dir:
        home = Path(home_dir)
        home = home if home.is_absolute() else cwd / home
        return home / "data" / "fin.config.toml"

    root = find_project_root(cwd)
    if root is not None:
        return root / "data" / "fin.config.toml"

    return cwd / "data" / "fin.config.toml"


def _format_validation_error(error: ValidationError) -> str:
    lines = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue["loc"]) or "(root)"
        lines.append(f"  {location}: {issue['msg']}")
    return "\n".join(lines)


def parse_config(data: dict, source_path: Optional[Path] = None) -> FinConfig:
    """Validate an already-parsed TOML document.

    Raises:
        ConfigValidationError: If the document does not match the schema
    """
    try:
        config = FinConfig.model_validate(data)
    except ValidationError as e:
        where = f" at {source_path}" if source_path else ""
        raise ConfigValidationError(f"Invalid config file{where}:\n{_format_validation_error(e)}") from e
    config.source_path = source_path
    return config


def load_config(config_path: Optional[str | Path] = None) -> FinConfig:
    """Load and validate the configuration file.

    Args:
        config_path: Optional explicit path to the TOML file

    Returns:
        Validated FinConfig

    Raises:
        ConfigurationError: If the file does not exist
        ConfigValidationError: If the file is not valid TOML or fails validation
    """
    path = find_config_path(config_path)
    if not path.exists():
        raise ConfigurationError(
            f"Config file not found: {path}\n"
            f"Copy {TEMPLATE_NAME} to data/fin.config.toml and customize it."
        )

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigValidationError(f"Invalid TOML in {path}: {e}") from e

    config = parse_config(data, source_path=path)
    logger.debug("Loaded config from %s (%d accounts)", path, len(config.accounts))
    return config
