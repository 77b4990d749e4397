"""Monzo CSV export parser."""

from finledger.domain.account import AccountId
from finledger.domain.entities import ParsedTransaction, RowOutcome, RowParsed, RowSkipped
from finledger.domain.parsers.base import CsvStatementParser, cell
from finledger.domain.parsers.columns import ColumnMapping
from finledger.utils.amount_parser import parse_amount_minor
from finledger.utils.date_parser import to_iso_local_datetime


class MonzoParser(CsvStatementParser):
    """Parser for Monzo current account and pot exports.

    Monzo rows carry a transaction id, separate date and time columns, the
    merchant name and Monzo's own category. Older exports split the amount
    into ``Money In``/``Money Out`` columns.
    """

    provider = "monzo"

    def parse_row(
        self,
        row: dict,
        row_number: int,
        columns: ColumnMapping,
        account_id: AccountId,
        source_file: str,
    ) -> RowOutcome:
        date_part = cell(row, columns.date)
        time_part = cell(row, columns.time)

        if not date_part:
            return RowSkipped(row_number, "Missing date")
        if columns.time and not time_part:
            return RowSkipped(row_number, "Missing time")

        amount_raw = cell(row, columns.amount) or cell(row, "Money In") or cell(row, "Money Out")
        if not amount_raw:
            return RowSkipped(row_number, "Missing amount")

        name = cell(row, columns.name)
        description = cell(row, columns.description)
        balance_raw = cell(row, columns.balance)

        return RowParsed(
            ParsedTransaction(
                chart_account_id=account_id,
                posted_at=to_iso_local_datetime(date_part, time_part or "00:00:00"),
                amount_minor=parse_amount_minor(amount_raw),
                currency=cell(row, "Currency") or "GBP",
                raw_description=description or name,
                counterparty=name or None,
                provider_category=cell(row, columns.category) or None,
                provider_txn_id=cell(row, columns.transaction_id) or None,
                balance_minor=parse_amount_minor(balance_raw) if balance_raw else None,
                source_file=source_file,
            )
        )
