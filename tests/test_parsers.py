"""Tests for provider statement parsers."""

import pytest

from finledger.config import parse_config
from finledger.domain.account import AccountRegistry
from finledger.domain.entities import RowSkipped
from finledger.domain.errors import (
    ConfigurationError,
    InvalidAmount,
    InvalidDate,
    MissingColumns,
    ParseError,
    UnsupportedFile,
    WrongProviderForAccount,
)
from finledger.domain.parsers import MonzoParser, VanguardParser, WiseParser, get_parser
from finledger.domain.parsers.vanguard import extract_portfolio_valuation, is_external_cash_movement

MONZO = "Assets:Personal:Monzo"
WISE = "Assets:Personal:Wise"
VANGUARD = "Assets:Personal:Vanguard"


class TestMonzoParser:
    def test_scenario_row(self, registry, fixtures_dir):
        """A single Monzo row maps every field."""
        result = MonzoParser(registry).parse(fixtures_dir / "monzo_scenario.csv", MONZO)

        assert len(result.transactions) == 1
        txn = result.transactions[0]
        assert txn.provider_txn_id == "txn_1"
        assert txn.posted_at == "2024-01-15T10:30:45"
        assert txn.amount_minor == -2550
        assert txn.currency == "GBP"
        assert txn.raw_description == "Card payment"
        assert txn.counterparty == "Tesco"
        assert txn.provider_category == "groceries"
        assert txn.balance_minor == 15000
        assert txn.chart_account_id == MONZO
        assert result.has_balances is True

    def test_rows_missing_date_are_skipped(self, registry, fixtures_dir):
        result = MonzoParser(registry).parse(fixtures_dir / "monzo_statement.csv", MONZO)

        assert len(result.transactions) == 4
        assert result.skipped_rows == [RowSkipped(5, "Missing date")]

    def test_missing_columns(self, registry, fixtures_dir):
        with pytest.raises(MissingColumns) as exc_info:
            MonzoParser(registry).parse(fixtures_dir / "monzo_missing_cols.csv", MONZO)

        assert exc_info.value.missing == ["Description", "Amount"]
        assert "monzo CSV missing columns: Description, Amount" in str(exc_info.value)

    def test_wrong_provider_for_account(self, registry, fixtures_dir):
        with pytest.raises(WrongProviderForAccount):
            MonzoParser(registry).parse(fixtures_dir / "monzo_scenario.csv", WISE)

    def test_unknown_account(self, registry, fixtures_dir):
        with pytest.raises(WrongProviderForAccount, match="not configured"):
            MonzoParser(registry).parse(fixtures_dir / "monzo_scenario.csv", "Assets:Nope")

    def test_money_in_money_out_columns(self, registry, tmp_path):
        path = tmp_path / "old.csv"
        path.write_text(
            "Transaction ID,Date,Time,Name,Description,Amount,Money Out,Money In\n"
            "tx_1,01/02/2024,08:00:00,Cafe,COFFEE,,-3.40,\n"
            "tx_2,02/02/2024,09:00:00,Employer,PAY,,,100.00\n"
        )

        result = MonzoParser(registry).parse(path, MONZO)

        assert [t.amount_minor for t in result.transactions] == [-340, 10000]
        assert result.has_balances is False

    def test_malformed_amount_fails_file(self, registry, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text(
            "Transaction ID,Date,Time,Name,Description,Amount\n"
            "tx_1,01/02/2024,08:00:00,Cafe,COFFEE,abc\n"
        )

        with pytest.raises(InvalidAmount):
            MonzoParser(registry).parse(path, MONZO)

    def test_bank_preset_overrides_columns(self, tmp_path):
        config = parse_config(
            {
                "accounts": [
                    {"id": MONZO, "group": "personal", "type": "asset", "provider": "monzo"}
                ],
                "banks": [
                    {
                        "name": "Monzo",
                        "columns": {"date": "Day", "description": "Memo", "amount": "Value"},
                    }
                ],
            }
        )
        path = tmp_path / "custom.csv"
        path.write_text("Day,Memo,Value\n03/03/2024,Lunch,-8.00\n")

        result = MonzoParser(AccountRegistry(config)).parse(path, MONZO)

        txn = result.transactions[0]
        assert txn.posted_at == "2024-03-03T00:00:00"
        assert txn.raw_description == "Lunch"
        assert txn.provider_txn_id is None


class TestWiseParser:
    def test_parse_statement(self, registry, fixtures_dir):
        result = WiseParser(registry).parse(fixtures_dir / "wise_statement.csv", WISE)

        assert len(result.transactions) == 3
        received, card, sent = result.transactions

        assert received.provider_txn_id == "TRANSFER-1001"
        assert received.posted_at == "2024-01-16T09:05:12"
        assert received.amount_minor == 50000
        assert received.counterparty == "Jane Doe"
        assert received.provider_category == "CREDIT"
        assert received.balance_minor == 50000

        assert card.counterparty == "Spotify"
        assert card.amount_minor == -1299

        assert sent.posted_at == "2024-01-19T00:00:00"
        assert sent.raw_description == "Dinner - Sent money to John Smith"

    def test_missing_amount_row_skipped(self, registry, tmp_path):
        path = tmp_path / "wise.csv"
        path.write_text(
            "TransferWise ID,Date,Amount,Description\n"
            "T-1,01-02-2024,,Pending\n"
            "T-2,02-02-2024,5.00,Top up\n"
        )

        result = WiseParser(registry).parse(path, WISE)

        assert [t.provider_txn_id for t in result.transactions] == ["T-2"]
        assert result.skipped_rows == [RowSkipped(2, "Missing amount")]


class TestVanguardParser:
    def test_csv_keeps_external_cash_movements(self, registry, fixtures_dir):
        result = VanguardParser(registry).parse(fixtures_dir / "vanguard_transactions.csv", VANGUARD)

        assert len(result.transactions) == 1
        deposit = result.transactions[0]
        assert deposit.amount_minor == 100000
        assert deposit.posted_at == "2024-01-10T00:00:00"
        assert deposit.provider_txn_id == (
            "vanguard-csv-2024-01-10-deposit-for-stocks-&-shares-isa-1000.00"
        )
        assert result.has_balances is False
        assert {s.reason for s in result.skipped_rows} == {"Not an external cash movement"}

    def test_synthetic_id_is_deterministic(self, registry, fixtures_dir):
        parser = VanguardParser(registry)
        path = fixtures_dir / "vanguard_transactions.csv"

        first = parser.parse(path, VANGUARD).transactions[0]
        second = parser.parse(path, VANGUARD).transactions[0]

        assert first.provider_txn_id == second.provider_txn_id

    def test_non_iso_date_fails(self, registry, tmp_path):
        path = tmp_path / "vanguard.csv"
        path.write_text(
            "Trade Date,Transaction Description,Net Amount\n10/01/2024,Deposit,100.00\n"
        )

        with pytest.raises(InvalidDate):
            VanguardParser(registry).parse(path, VANGUARD)

    def test_unsupported_file_type(self, registry, tmp_path):
        path = tmp_path / "statement.xlsx"
        path.write_text("")

        with pytest.raises(UnsupportedFile):
            VanguardParser(registry).parse(path, VANGUARD)

    @pytest.mark.parametrize(
        "details, expected",
        [
            ("Deposit for Stocks & Shares ISA", True),
            ("Withdrawal to bank", True),
            ("Funds transferred to GIA", True),
            ("Bought 10 Global All Cap", False),
            ("Sold 5 LifeStrategy 80%", False),
            ("Cash Account Interest", False),
            ("Interest deposit", False),
            ("", False),
        ],
    )
    def test_external_cash_movement(self, details, expected):
        assert is_external_cash_movement(details) is expected

    def test_extract_portfolio_valuation(self):
        text = (
            "Quarterly statement\n"
            "Portfolio Value by Product Wrapper as at 31 March 2024\n"
            "Stocks & Shares ISA £10,000.00\n"
            "Total Portfolio Value\n"
            "£ 12,345.67\n"
        )

        assert extract_portfolio_valuation(text) == ("2024-03-31", 1234567)

    def test_extract_portfolio_valuation_missing_total(self):
        with pytest.raises(ParseError, match="Total Portfolio Value"):
            extract_portfolio_valuation("Portfolio Value by Product Wrapper as at 31 March 2024\n")

    def test_parse_pdf(self, registry, tmp_path, monkeypatch):
        monkeypatch.setattr(
            "finledger.domain.parsers.vanguard.extract_pdf_text",
            lambda path: "\n5 April 2024\nTotal Portfolio Value £2,000.50",
        )
        path = tmp_path / "valuation.pdf"
        path.write_bytes(b"%PDF-1.4")

        result = VanguardParser(registry).parse(path, VANGUARD)

        assert result.has_balances is True
        snapshot = result.transactions[0]
        assert snapshot.amount_minor == 0
        assert snapshot.balance_minor == 200050
        assert snapshot.posted_at == "2024-04-05T00:00:00"
        assert snapshot.provider_txn_id == "vanguard-valuation-2024-04-05"


def test_get_parser(registry):
    assert isinstance(get_parser("wise", registry), WiseParser)
    with pytest.raises(ConfigurationError, match="No parser"):
        get_parser("barclays", registry)
