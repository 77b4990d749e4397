"""Chart account identifiers and the configured account registry."""

from typing import NewType, Optional

from finledger.config import AccountConfig, BankPreset, FinConfig
from finledger.domain.errors import NotFoundError, WrongProviderForAccount, account_not_found

AccountId = NewType("AccountId", str)
"""Colon-separated chart account path, e.g. ``Assets:Personal:Monzo``."""


def parent_account_id(account_id: str) -> Optional[str]:
    """Return the parent path of an account id, or None for a root."""
    if ":" not in account_id:
        return None
    return account_id.rsplit(":", 1)[0]


class AccountRegistry:
    """Lookup table of configured accounts, built once per import run.

    Raw strings from folder names, CSV files or CLI arguments are turned into
    AccountId values here; everything downstream works with validated ids.
    """

    def __init__(self, config: FinConfig):
        """Initialize registry.

        Args:
            config: Loaded configuration
        """
        self.config = config
        self._accounts: dict[str, AccountConfig] = {a.id: a for a in config.accounts}
        self._folders: dict[str, AccountId] = {
            folder: AccountId(account_id)
            for folder, account_id in config.get_inbox_folder_to_chart_id().items()
        }

    def __contains__(self, account_id: str) -> bool:
        return account_id in self._accounts

    def parse(self, raw: str) -> AccountId:
        """Validate a raw account id against configuration.

        Raises:
            NotFoundError: If the account is not configured
        """
        if raw not in self._accounts:
            raise NotFoundError(account_not_found(raw))
        return AccountId(raw)

    def get(self, account_id: AccountId) -> AccountConfig:
        return self._accounts[account_id]

    def account_for_folder(self, folder_name: str) -> Optional[AccountId]:
        """Map an inbox folder name to its account, if any."""
        return self._folders.get(folder_name)

    def provider_for(self, account_id: str) -> Optional[str]:
        account = self._accounts.get(account_id)
        return account.provider if account else None

    def require_provider(self, account_id: str, provider: str) -> AccountId:
        """Check that an account is configured for the given provider.

        Raises:
            WrongProviderForAccount: If the account is unknown or belongs to
                another provider
        """
        configured = self.provider_for(account_id)
        if configured != provider:
            raise WrongProviderForAccount(provider, account_id, configured)
        return AccountId(account_id)

    def bank_preset(self, provider: str) -> Optional[BankPreset]:
        return self.config.get_bank_preset(provider)

    def asset_accounts(self) -> list[AccountConfig]:
        return [a for a in self.config.accounts if a.type == "asset"]
