"""Wise CSV statement parser."""

from finledger.domain.account import AccountId
from finledger.domain.entities import ParsedTransaction, RowOutcome, RowParsed, RowSkipped
from finledger.domain.parsers.base import CsvStatementParser, cell
from finledger.domain.parsers.columns import ColumnMapping
from finledger.utils.amount_parser import parse_amount_minor
from finledger.utils.date_parser import parse_wise_datetime


class WiseParser(CsvStatementParser):
    """Parser for Wise balance statements.

    Timestamps come from the combined ``Date Time`` column when present,
    otherwise the plain date at midnight. The payment reference, when set,
    is prefixed to the description.
    """

    provider = "wise"

    def parse_row(
        self,
        row: dict,
        row_number: int,
        columns: ColumnMapping,
        account_id: AccountId,
        source_file: str,
    ) -> RowOutcome:
        date_time = cell(row, "Date Time")
        date_only = cell(row, columns.date)
        if not date_time and not date_only:
            return RowSkipped(row_number, "Missing date")

        amount_raw = cell(row, columns.amount)
        if not amount_raw:
            return RowSkipped(row_number, "Missing amount")

        description = cell(row, columns.description)
        reference = cell(row, "Payment Reference")
        raw_description = f"{reference} - {description}".strip() if reference else description
        balance_raw = cell(row, columns.balance)

        return RowParsed(
            ParsedTransaction(
                chart_account_id=account_id,
                posted_at=parse_wise_datetime(date_time, date_only),
                amount_minor=parse_amount_minor(amount_raw),
                currency=cell(row, "Currency") or "GBP",
                raw_description=raw_description,
                counterparty=cell(row, "Payee Name") or cell(row, "Payer Name") or None,
                provider_category=cell(row, "Transaction Type") or None,
                provider_txn_id=cell(row, columns.transaction_id) or None,
                balance_minor=parse_amount_minor(balance_raw) if balance_raw else None,
                source_file=source_file,
            )
        )
