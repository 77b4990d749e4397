"""Tests for canonicalization of parsed transactions."""

from finledger.domain.canonicalize import canonicalize
from finledger.domain.entities import ParsedTransaction
from finledger.sanitize.matcher import compile_rules
from finledger.sanitize.rules import NameMappingConfig, NameMappingRule

MONZO = "Assets:Personal:Monzo"

RULES = compile_rules(
    NameMappingConfig(
        rules=(
            NameMappingRule(patterns=("TESCO",), target="Tesco", category="groceries"),
            NameMappingRule(patterns=("BRITISH GAS",), target="British Gas", category="energy"),
        )
    )
)


def parsed(raw, counterparty=None, provider_category=None, amount=-1000):
    return ParsedTransaction(
        chart_account_id=MONZO,
        posted_at="2024-01-15T10:00:00",
        amount_minor=amount,
        currency="GBP",
        raw_description=raw,
        counterparty=counterparty,
        provider_category=provider_category,
        provider_txn_id="tx_1",
        balance_minor=5000,
        source_file="/inbox/monzo/a.csv",
    )


def test_sanitizes_description_and_category():
    result = canonicalize([parsed("TESCO STORES 1234", provider_category="eating_out")], RULES)

    txn = result.transactions[0]
    assert txn.clean_description == "Tesco"
    assert txn.category == "groceries"
    assert txn.provider_category == "eating_out"
    assert txn.raw_description == "TESCO STORES 1234"
    assert txn.balance_minor == 5000
    assert txn.source_file == "/inbox/monzo/a.csv"
    assert result.unmapped_descriptions == []


def test_falls_back_to_counterparty():
    result = canonicalize([parsed("DD REF 99812371", counterparty="British Gas")], RULES)

    txn = result.transactions[0]
    assert txn.clean_description == "British Gas"
    assert txn.category == "energy"
    assert result.unmapped_descriptions == []


def test_unmatched_counterparty_keeps_description():
    result = canonicalize([parsed("DD REF 1", counterparty="Someone")], RULES)

    assert result.transactions[0].clean_description == "DD REF 1"
    assert result.transactions[0].category is None
    assert result.unmapped_descriptions == ["DD REF 1"]


def test_unmapped_descriptions_deduplicated_in_order():
    result = canonicalize([parsed("B"), parsed("A"), parsed("B"), parsed("TESCO")], RULES)

    assert result.unmapped_descriptions == ["B", "A"]


def test_unmapped_not_collected_when_disabled():
    quiet = compile_rules(NameMappingConfig(warn_on_unmapped=False))

    assert canonicalize([parsed("B")], quiet).unmapped_descriptions == []


def test_each_transaction_gets_unique_id():
    result = canonicalize([parsed("A"), parsed("A")], RULES)

    ids = {t.id for t in result.transactions}
    assert len(ids) == 2
