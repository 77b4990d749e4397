"""Vanguard CSV transaction and PDF valuation parser."""

import re
from pathlib import Path

import pdfplumber
from pdfplumber.utils.exceptions import MalformedPDFException, PdfminerException

from finledger.domain.account import AccountId
from finledger.domain.entities import ParseResult, ParsedTransaction, RowOutcome, RowParsed, RowSkipped
from finledger.domain.errors import InvalidDate, ParseError, UnsupportedFile
from finledger.domain.parsers.base import CsvStatementParser, cell
from finledger.domain.parsers.columns import ColumnMapping
from finledger.utils.amount_parser import parse_amount_minor
from finledger.utils.date_parser import parse_english_date, parse_iso_date

VALUATION_DATE_PATTERN = re.compile(r"Portfolio Value by Product Wrapper as at (\d{1,2} [A-Za-z]+ \d{4})")
VALUATION_DATE_FALLBACK = re.compile(r"\n(\d{1,2} [A-Za-z]+ \d{4})\n")
TOTAL_VALUE_ANCHOR = "Total Portfolio Value"
TOTAL_VALUE_WINDOW = 1000
GBP_VALUE_PATTERN = re.compile(r"£\s*([0-9,]+\.[0-9]{2})")
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_external_cash_movement(details: str) -> bool:
    """True for deposits, withdrawals and transfers out; False for trades and interest."""
    details = details.strip().lower()
    if not details:
        return False
    if details.startswith("bought ") or details.startswith("sold "):
        return False
    # Interest is growth, not cash in/out
    if "interest" in details:
        return False
    if "deposit" in details or "withdraw" in details:
        return True
    return details.startswith("funds transferred")


def extract_portfolio_valuation(text: str) -> tuple[str, int]:
    """Find the valuation date and total portfolio value in statement text.

    Returns:
        (ISO date, total value in minor units)

    Raises:
        ParseError: If the date or the total cannot be located
    """
    match = VALUATION_DATE_PATTERN.search(text) or VALUATION_DATE_FALLBACK.search(text)
    if match is None:
        raise ParseError("Could not find Vanguard valuation date in PDF text.")
    try:
        valuation_date = parse_english_date(match.group(1)).isoformat()
    except InvalidDate as e:
        raise ParseError(f"Invalid Vanguard valuation date: {match.group(1)}") from e

    anchor = text.find(TOTAL_VALUE_ANCHOR)
    if anchor == -1:
        raise ParseError(f'Could not find "{TOTAL_VALUE_ANCHOR}" section in Vanguard PDF text.')

    value_match = GBP_VALUE_PATTERN.search(text[anchor : anchor + TOTAL_VALUE_WINDOW])
    if value_match is None:
        raise ParseError(f'Could not find a GBP value near "{TOTAL_VALUE_ANCHOR}" in PDF text.')

    return valuation_date, parse_amount_minor(value_match.group(1))


def extract_pdf_text(path: Path) -> str:
    """Concatenate the text of every page in a PDF.

    Raises:
        ParseError: If the PDF cannot be read
    """
    pages_text = []
    try:
        with pdfplumber.open(path) as pdf:
            for page in pdf.pages:
                text = page.extract_text()
                if text:
                    pages_text.append(text)
    except (PdfminerException, MalformedPDFException) as e:
        raise ParseError(f"Could not read PDF {path.name}: {e}") from e
    return "\n".join(pages_text)


class VanguardParser(CsvStatementParser):
    """Parser for Vanguard investor exports.

    CSV exports list every cash event in the account; only external cash
    movements are kept since trades and interest stay inside the wrapper.
    PDF statements yield a single zero-amount valuation carrying the total
    portfolio value as its balance.
    """

    provider = "vanguard"

    def parse(self, path: Path, chart_account_id: str) -> ParseResult:
        suffix = path.suffix.lower()
        if suffix == ".pdf":
            return self.parse_pdf(path, chart_account_id)
        if suffix != ".csv":
            raise UnsupportedFile(f"Unsupported Vanguard file type: {path.name}")
        result = super().parse(path, chart_account_id)
        return ParseResult(
            chart_account_id=result.chart_account_id,
            transactions=result.transactions,
            has_balances=False,
            skipped_rows=result.skipped_rows,
        )

    def parse_row(
        self,
        row: dict,
        row_number: int,
        columns: ColumnMapping,
        account_id: AccountId,
        source_file: str,
    ) -> RowOutcome:
        date_part = cell(row, columns.date)
        details = cell(row, columns.description)
        amount_raw = cell(row, columns.amount)

        if not date_part:
            return RowSkipped(row_number, "Missing date")
        if not amount_raw:
            return RowSkipped(row_number, "Missing amount")
        if not is_external_cash_movement(details):
            return RowSkipped(row_number, "Not an external cash movement")
        if not ISO_DATE_PATTERN.match(date_part):
            raise InvalidDate(f"Invalid Vanguard date: {date_part}")
        parse_iso_date(date_part)

        # Vanguard has no transaction ids; date, narrative and amount identify a row
        slug = re.sub(r"\s+", "-", details.lower())[:50]
        provider_txn_id = f"vanguard-csv-{date_part}-{slug}-{amount_raw}"

        return RowParsed(
            ParsedTransaction(
                chart_account_id=account_id,
                posted_at=f"{date_part}T00:00:00",
                amount_minor=parse_amount_minor(amount_raw),
                currency="GBP",
                raw_description=details,
                provider_txn_id=provider_txn_id,
                source_file=source_file,
            )
        )

    def parse_pdf(self, path: Path, chart_account_id: str) -> ParseResult:
        """Parse a Vanguard valuation statement into one balance snapshot."""
        account_id = self.registry.require_provider(chart_account_id, self.provider)
        valuation_date, value_minor = extract_portfolio_valuation(extract_pdf_text(path))

        snapshot = ParsedTransaction(
            chart_account_id=account_id,
            posted_at=f"{valuation_date}T00:00:00",
            amount_minor=0,
            currency="GBP",
            raw_description=f"Vanguard portfolio valuation ({valuation_date})",
            provider_category="portfolio_valuation",
            provider_txn_id=f"vanguard-valuation-{valuation_date}",
            balance_minor=value_minor,
            source_file=str(path),
        )
        return ParseResult(chart_account_id=account_id, transactions=[snapshot], has_balances=True)
