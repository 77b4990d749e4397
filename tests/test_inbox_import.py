"""End-to-end tests for the inbox import pipeline."""

import shutil

import pytest

from finledger.domain.inbox_import import (
    ALREADY_IMPORTED,
    InboxImportService,
    import_inbox,
)
from finledger.sanitize.matcher import sanitize_description
from finledger.sanitize.rules import NameMappingConfig, NameMappingRule
from finledger.sanitize.rules_loader import RulesService

MONZO = "Assets:Personal:Monzo"
WISE = "Assets:Personal:Wise"
VANGUARD = "Assets:Personal:Vanguard"


@pytest.fixture
def service(temp_db, config):
    return InboxImportService(temp_db, config)


def test_import_inbox(service, temp_db, inbox, tmp_path):
    archive_dir = tmp_path / "imports" / "archive"

    result = service.import_inbox(inbox, archive_dir)

    assert len(result.processed_files) == 3
    assert result.skipped_files == []
    # Monzo 4 rows (1 skipped), Wise 3, Vanguard 1 deposit
    assert result.total_transactions == 8
    assert result.unique_transactions == 8
    assert result.duplicate_transactions == 0
    assert result.transfer_pairs_created == 1
    assert result.journal_entries_attempted == 7
    assert result.journal_entries_created == 7
    assert result.entry_errors == []
    assert sorted(result.accounts_touched) == sorted([MONZO, WISE, VANGUARD])

    assert len(result.archived_files) == 3
    assert not any(inbox.rglob("*.csv"))

    for entry in temp_db.list_journal_entries():
        assert sum(p.amount_minor for p in entry.postings) == 0


def test_transfer_between_monzo_and_wise(service, temp_db, inbox, tmp_path):
    service.import_inbox(inbox, tmp_path / "archive")

    transfers = [e for e in temp_db.list_journal_entries() if e.is_transfer]
    assert len(transfers) == 1
    postings = {p.account_id: p.amount_minor for p in transfers[0].postings}
    assert postings == {MONZO: -50000, WISE: 50000}
    assert transfers[0].posted_at == "2024-01-16T09:00:00"


def test_reimport_is_skipped_and_deduplicated(service, temp_db, inbox, tmp_path, fixtures_dir):
    archive_dir = tmp_path / "archive"
    service.import_inbox(inbox, archive_dir)
    count = temp_db.count_journal_entries()

    # Same file at the same path is recognized by its source path
    shutil.copy(fixtures_dir / "monzo_statement.csv", inbox / "monzo" / "monzo_statement.csv")
    # Same rows under another name are caught by provider ids
    shutil.copy(fixtures_dir / "wise_statement.csv", inbox / "wise" / "wise_again.csv")

    result = service.import_inbox(inbox, archive_dir)

    assert [s.reason for s in result.skipped_files] == [ALREADY_IMPORTED]
    assert result.total_transactions == 3
    assert result.duplicate_transactions == 3
    assert result.journal_entries_created == 0
    assert temp_db.count_journal_entries() == count


def test_unparseable_file_is_skipped(service, inbox, tmp_path, fixtures_dir):
    shutil.copy(fixtures_dir / "monzo_missing_cols.csv", inbox / "monzo" / "broken.csv")

    result = service.import_inbox(inbox, tmp_path / "archive")

    assert len(result.skipped_files) == 1
    assert result.skipped_files[0].path.endswith("broken.csv")
    assert "missing columns" in result.skipped_files[0].reason
    assert len(result.processed_files) == 3
    # Skipped files stay in the inbox
    assert (inbox / "monzo" / "broken.csv").exists()


def test_entry_errors_prevent_archiving(service, inbox, tmp_path, monkeypatch):
    monkeypatch.setattr(
        "finledger.domain.journal.map_category_to_account",
        lambda category, description, is_inflow: "Expenses:DoesNotExist",
    )

    result = service.import_inbox(inbox, tmp_path / "archive")

    assert result.entry_errors
    assert result.archived_files == []
    assert (inbox / "monzo" / "monzo_statement.csv").exists()


def test_archive_failure_rolls_back_moves(service, temp_db, inbox, tmp_path, monkeypatch):
    real_move = shutil.move
    calls = []

    def flaky_move(src, dst):
        calls.append(src)
        if len(calls) == 2:
            raise OSError("archive unavailable")
        return real_move(src, dst)

    monkeypatch.setattr("finledger.domain.archive.shutil.move", flaky_move)

    with pytest.raises(OSError, match="archive unavailable"):
        service.import_inbox(inbox, tmp_path / "archive")

    assert len(list(inbox.rglob("*.csv"))) == 3
    # Ledger writes are already committed
    assert temp_db.count_journal_entries() == 7


def test_unmapped_descriptions_reported(service, inbox, tmp_path):
    result = service.import_inbox(inbox, tmp_path / "archive")

    assert "PRET A MANGER LONDON" in result.unmapped_descriptions
    assert len(result.unmapped_descriptions) == len(set(result.unmapped_descriptions))


def test_custom_rules_apply(temp_db, config, inbox, tmp_path):
    rules_path = tmp_path / "rules.toml"
    rules_path.write_text('[[rules]]\npatterns = ["PRET"]\ntarget = "Pret"\ncategory = "cafe"\n')
    service = InboxImportService(temp_db, config, RulesService(config, rules_path=rules_path))

    result = service.import_inbox(inbox, tmp_path / "archive")

    assert "PRET A MANGER LONDON" not in result.unmapped_descriptions
    pret = [e for e in temp_db.list_journal_entries() if e.clean_description == "Pret"]
    assert len(pret) == 1
    assert "Expenses:Food:Restaurants" in {p.account_id for p in pret[0].postings}


def test_import_inbox_function(config, inbox, tmp_path):
    db_path = tmp_path / "data" / "fin.db"

    result = import_inbox(
        inbox_dir=inbox,
        archive_dir=tmp_path / "archive",
        db_path=db_path,
        config=config,
    )

    assert db_path.exists()
    assert result.journal_entries_created == 7


def test_empty_inbox(service, tmp_path):
    result = service.import_inbox(tmp_path / "nothing", tmp_path / "archive")

    assert result.processed_files == []
    assert result.total_transactions == 0
    assert result.archived_files == []


def test_impossible_date_skips_only_that_file(service, temp_db, inbox, tmp_path):
    statement = inbox / "monzo" / "monzo_statement.csv"
    statement.write_text(statement.read_text().replace("tx_0002,16/01/2024", "tx_0002,31/02/2024"))

    result = service.import_inbox(inbox, tmp_path / "archive")

    assert len(result.skipped_files) == 1
    assert result.skipped_files[0].path.endswith("monzo_statement.csv")
    assert "Invalid date: 31/02/2024" in result.skipped_files[0].reason
    assert len(result.processed_files) == 2
    # Wise 3 rows and the Vanguard deposit; the Wise top-up has no partner
    assert result.journal_entries_created == 4
    assert result.transfer_pairs_created == 0
    assert statement.exists()


def test_journal_failure_leaves_inbox_untouched(service, temp_db, inbox, tmp_path, monkeypatch):
    def fail(self, transactions, options=None):
        raise RuntimeError("ledger unavailable")

    monkeypatch.setattr("finledger.domain.journal.JournalEntryService.create_journal_entries", fail)
    archive_dir = tmp_path / "archive"

    with pytest.raises(RuntimeError, match="ledger unavailable"):
        service.import_inbox(inbox, archive_dir)

    assert len(list(inbox.rglob("*.csv"))) == 3
    assert not any(p.is_file() for p in archive_dir.rglob("*"))
    assert temp_db.count_journal_entries() == 0
