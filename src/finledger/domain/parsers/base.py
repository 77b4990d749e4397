"""Shared statement parser machinery."""

import csv
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from finledger.domain.account import AccountId, AccountRegistry
from finledger.domain.entities import ParseResult, ParsedTransaction, RowOutcome, RowParsed, RowSkipped
from finledger.domain.errors import ParseError
from finledger.domain.parsers.columns import ColumnMapping, get_column_mapping, validate_csv_headers

logger = logging.getLogger(__name__)


def cell(row: dict, column: Optional[str]) -> str:
    """Return a stripped cell value; missing columns and short rows give ''."""
    if column is None:
        return ""
    return (row.get(column) or "").strip()


class StatementParser(ABC):
    """Parses one provider's export files for a configured account."""

    provider: str = ""

    def __init__(self, registry: AccountRegistry):
        """Initialize parser.

        Args:
            registry: Configured accounts and bank presets
        """
        self.registry = registry

    def columns(self) -> ColumnMapping:
        return get_column_mapping(self.provider, self.registry.bank_preset(self.provider))

    @abstractmethod
    def parse(self, path: Path, chart_account_id: str) -> ParseResult:
        """Parse a statement file.

        Raises:
            WrongProviderForAccount: If the account belongs to another provider
            ParseError: If the file is malformed
        """
        pass


class CsvStatementParser(StatementParser):
    """CSV export with a header row, mapped row by row."""

    def parse(self, path: Path, chart_account_id: str) -> ParseResult:
        account_id = self.registry.require_provider(chart_account_id, self.provider)
        columns = self.columns()
        source_file = str(path)

        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            headers = reader.fieldnames
            if headers is None:
                raise ParseError(f"{self.provider} CSV has no header row: {path}")
            validate_csv_headers(self.provider, list(headers), columns)

            transactions: list[ParsedTransaction] = []
            skipped: list[RowSkipped] = []
            # Row 1 is the header
            for row_number, row in enumerate(reader, start=2):
                outcome = self.parse_row(row, row_number, columns, account_id, source_file)
                if isinstance(outcome, RowParsed):
                    transactions.append(outcome.transaction)
                else:
                    skipped.append(outcome)
                    logger.debug("%s row %d skipped: %s", path.name, row_number, outcome.reason)

        return ParseResult(
            chart_account_id=account_id,
            transactions=transactions,
            has_balances=any(t.balance_minor is not None for t in transactions),
            skipped_rows=skipped,
        )

    @abstractmethod
    def parse_row(
        self,
        row: dict,
        row_number: int,
        columns: ColumnMapping,
        account_id: AccountId,
        source_file: str,
    ) -> RowOutcome:
        """Map one CSV row to a transaction or a skip reason."""
        pass
