"""Provider statement parsers."""

from finledger.domain.account import AccountRegistry
from finledger.domain.errors import ConfigurationError
from finledger.domain.parsers.base import CsvStatementParser, StatementParser
from finledger.domain.parsers.monzo import MonzoParser
from finledger.domain.parsers.vanguard import VanguardParser
from finledger.domain.parsers.wise import WiseParser

PARSERS: dict[str, type[StatementParser]] = {
    MonzoParser.provider: MonzoParser,
    WiseParser.provider: WiseParser,
    VanguardParser.provider: VanguardParser,
}

SUPPORTED_PROVIDERS = tuple(PARSERS)


def get_parser(provider: str, registry: AccountRegistry) -> StatementParser:
    """Instantiate the parser for a provider.

    Raises:
        ConfigurationError: If no parser exists for the provider
    """
    parser_class = PARSERS.get(provider)
    if parser_class is None:
        raise ConfigurationError(
            f"No parser for provider '{provider}'. Supported: {', '.join(SUPPORTED_PROVIDERS)}"
        )
    return parser_class(registry)


__all__ = [
    "CsvStatementParser",
    "MonzoParser",
    "PARSERS",
    "StatementParser",
    "SUPPORTED_PROVIDERS",
    "VanguardParser",
    "WiseParser",
    "get_parser",
]
