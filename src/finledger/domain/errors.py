"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity or path does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ConfigurationError(DomainError):
    """Configuration is missing or inconsistent for the requested operation."""


class InvalidAmount(ValidationError):
    """Amount string could not be converted to minor units."""


class InvalidDate(ValidationError):
    """Date string is not in a supported layout."""


class InvalidTime(ValidationError):
    """Time string is not in a supported layout."""


class ParseError(ValidationError):
    """Statement file could not be parsed."""


class MissingColumns(ParseError):
    """CSV header lacks one or more required columns."""

    def __init__(self, provider: str, missing: list[str], found: list[str]):
        self.provider = provider
        self.missing = missing
        self.found = found
        super().__init__(
            f"{provider} CSV missing columns: {', '.join(missing)}. "
            f"Found: {', '.join(found)}"
        )


class UnsupportedFile(ParseError):
    """File type is not handled by the selected parser."""


class WrongProviderForAccount(ConfigurationError):
    """Account is configured for a different provider than the parser."""

    def __init__(self, provider: str, account_id: str, configured: str | None):
        self.provider = provider
        self.account_id = account_id
        self.configured = configured
        super().__init__(wrong_provider(provider, account_id, configured))


class MissingBankPreset(ConfigurationError):
    """No bank column preset is configured for a provider that requires one."""


def account_not_found(account_id: str) -> str:
    """Return message for missing chart account."""
    return f"Account '{account_id}' not found"


def wrong_provider(provider: str, account_id: str, configured: str | None) -> str:
    """Return message when a parser is used for a foreign account."""
    if configured is None:
        return f"Account '{account_id}' is not configured; cannot import {provider} files"
    return (
        f"Account '{account_id}' is configured for provider '{configured}', "
        f"not '{provider}'"
    )


def missing_bank_preset(provider: str) -> str:
    """Return message for a provider without a [[banks]] entry."""
    return f"No bank preset configured for provider '{provider}'"


def journal_entry_not_found(entry_id: str) -> str:
    """Return message for missing journal entry."""
    return f"Journal entry {entry_id} not found"


def posting_not_found(posting_id: str) -> str:
    """Return message for missing posting."""
    return f"Posting {posting_id} not found"
