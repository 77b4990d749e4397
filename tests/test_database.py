"""Tests for schema migrations, seeding and the SQLAlchemy database."""

import pytest

from finledger.config import parse_config
from finledger.database.factories import create_sqlite_database
from finledger.database.migrations import SCHEMA_VERSION
from finledger.database.seed import BILL_ACCOUNT_IDS, asset_account_seeds, get_chart_of_accounts_seeds
from finledger.domain import entities
from finledger.domain.category_mapping import DESCRIPTION_PATTERNS, EXACT_CATEGORY_TO_ACCOUNT
from finledger.domain.errors import ConflictError, NotFoundError, ValidationError


def make_entry(entry_id, account_id, provider_txn_id=None, amount=-100):
    return entities.JournalEntry(
        id=entry_id,
        posted_at="2024-01-01T00:00:00",
        posted_date="2024-01-01",
        is_transfer=False,
        description="Test",
        raw_description="TEST RAW",
        clean_description="TEST RAW",
        source_file="/inbox/a.csv",
        postings=(
            entities.Posting(
                id=f"{entry_id}_a",
                journal_entry_id=entry_id,
                account_id=account_id,
                amount_minor=amount,
                provider_txn_id=provider_txn_id,
            ),
            entities.Posting(
                id=f"{entry_id}_b",
                journal_entry_id=entry_id,
                account_id="Expenses:Uncategorized",
                amount_minor=-amount,
            ),
        ),
    )


def test_schema_version(temp_db):
    assert temp_db.get_schema_version() == SCHEMA_VERSION
    assert temp_db.ledger_tables_exist()


def test_empty_database_has_version_zero(tmp_path):
    db = create_sqlite_database(str(tmp_path / "new.db"))
    try:
        assert db.get_schema_version() == 0
        assert not db.ledger_tables_exist()
    finally:
        db.disconnect()


def test_migration_is_idempotent(temp_db, config):
    before = len(temp_db.list_chart_accounts())

    temp_db.initialize_schema(get_chart_of_accounts_seeds(config.accounts))

    assert len(temp_db.list_chart_accounts()) == before


def test_new_asset_accounts_are_synced(temp_db):
    config = parse_config(
        {"accounts": [{"id": "Assets:Business:Wise", "group": "b", "type": "asset", "provider": "wise"}]}
    )

    temp_db.initialize_schema(get_chart_of_accounts_seeds(config.accounts))

    business = temp_db.get_chart_account("Assets:Business")
    assert business.is_placeholder is True
    assert temp_db.get_chart_account("Assets:Business:Wise").parent_id == "Assets:Business"


def test_chart_account_returns_domain_model(temp_db):
    account = temp_db.get_chart_account("Assets:Personal:Monzo")

    assert isinstance(account, entities.ChartAccount)
    assert account.name == "Monzo Current"
    assert account.account_type == "asset"
    assert account.parent_id == "Assets:Personal"
    assert account.is_placeholder is False
    assert temp_db.get_chart_account("Nope") is None


def test_list_chart_accounts_by_type(temp_db):
    income = temp_db.list_chart_accounts("income")

    assert income
    assert all(a.account_type == "income" for a in income)


def test_every_seeded_parent_exists(temp_db):
    ids = {a.id for a in temp_db.list_chart_accounts()}

    for account in temp_db.list_chart_accounts():
        if account.parent_id is not None:
            assert account.parent_id in ids


def test_mapped_accounts_are_seeded(temp_db):
    ids = {a.id for a in temp_db.list_chart_accounts()}

    targets = set(EXACT_CATEGORY_TO_ACCOUNT.values()) | {account for _, account in DESCRIPTION_PATTERNS}
    assert targets <= ids
    assert set(BILL_ACCOUNT_IDS) <= ids


def test_asset_account_seeds_create_placeholders():
    config = parse_config(
        {"accounts": [{"id": "Assets:Joint:Savings:Pot", "group": "j", "type": "asset", "provider": "monzo"}]}
    )

    seeds = {s.id: s for s in asset_account_seeds(config.accounts)}

    assert seeds["Assets:Joint"].is_placeholder
    assert seeds["Assets:Joint:Savings"].parent_id == "Assets:Joint"
    assert not seeds["Assets:Joint:Savings:Pot"].is_placeholder


def test_add_and_get_journal_entry(temp_db):
    temp_db.add_journal_entry(make_entry("je_1", "Assets:Personal:Monzo", "tx_1"))
    temp_db.commit()

    entry = temp_db.get_journal_entry("je_1")
    assert isinstance(entry, entities.JournalEntry)
    assert len(entry.postings) == 2
    assert temp_db.list_imported_source_files() == {"/inbox/a.csv"}
    assert temp_db.find_existing_provider_keys(["tx_1", "tx_2"], ["Assets:Personal:Monzo"]) == {
        ("tx_1", "Assets:Personal:Monzo")
    }


def test_duplicate_provider_key_conflicts(temp_db):
    temp_db.add_journal_entry(make_entry("je_1", "Assets:Personal:Monzo", "tx_1"))

    with pytest.raises(ConflictError):
        temp_db.add_journal_entry(make_entry("je_2", "Assets:Personal:Monzo", "tx_1"))

    temp_db.commit()
    assert temp_db.count_journal_entries() == 1


def test_unknown_account_conflicts(temp_db):
    with pytest.raises(ConflictError):
        temp_db.add_journal_entry(make_entry("je_1", "Assets:Missing"))


def test_find_existing_provider_keys_in_chunks(temp_db):
    for i in range(3):
        temp_db.add_journal_entry(make_entry(f"je_{i}", "Assets:Personal:Monzo", f"tx_{i}"))
    temp_db.commit()

    ids = [f"tx_{i}" for i in range(2000)]

    found = temp_db.find_existing_provider_keys(ids, ["Assets:Personal:Monzo"])

    assert found == {(f"tx_{i}", "Assets:Personal:Monzo") for i in range(3)}


def test_summarize_descriptions_rejects_unknown_sort(temp_db):
    with pytest.raises(ValidationError):
        temp_db.summarize_descriptions(sort_by="alphabetical")


def test_update_missing_rows(temp_db):
    with pytest.raises(NotFoundError):
        temp_db.update_entry_description("je_missing", "x")
    with pytest.raises(NotFoundError):
        temp_db.update_posting_account("p_missing", "Expenses:Other")
