"""Inbox import pipeline: scan, parse, sanitize, journal, archive."""

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from finledger.config import FinConfig, load_config
from finledger.database.base import Database
from finledger.database.factories import DEFAULT_DB_PATH, create_sqlite_database
from finledger.database.seed import get_chart_of_accounts_seeds
from finledger.domain.account import AccountRegistry
from finledger.domain.archive import ArchiveManager
from finledger.domain.canonicalize import CanonicalizationResult, canonicalize
from finledger.domain.entities import (
    DetectedFile,
    FileOutcome,
    FileParsed,
    FileSkipped,
    ImportResult,
    JournalEntryResult,
    ParsedTransaction,
    SkippedFile,
)
from finledger.domain.errors import DomainError
from finledger.domain.journal import JournalEntryService
from finledger.domain.parsers import get_parser
from finledger.domain.scanner import scan_inbox
from finledger.sanitize.rules_loader import RulesService

logger = logging.getLogger(__name__)

DEFAULT_INBOX_DIR = Path("imports") / "inbox"
DEFAULT_ARCHIVE_DIR = Path("imports") / "archive"

ACCOUNT_NOT_RECOGNIZED = "Account folder not recognized for this file."
ALREADY_IMPORTED = "File already imported."


@dataclass
class ParsedFiles:
    processed: list[DetectedFile] = field(default_factory=list)
    skipped: list[SkippedFile] = field(default_factory=list)
    transactions: list[ParsedTransaction] = field(default_factory=list)
    accounts_touched: list[str] = field(default_factory=list)


class InboxImportService:
    """Service for importing an inbox of bank statements into the ledger."""

    def __init__(self, db: Database, config: FinConfig, rules_service: Optional[RulesService] = None):
        """Initialize inbox import service.

        Args:
            db: Database instance
            config: Loaded configuration
            rules_service: Sanitization rules; built from config if omitted
        """
        self.db = db
        self.config = config
        self.registry = AccountRegistry(config)
        self.rules_service = rules_service or RulesService(config)
        self.journal_service = JournalEntryService(db)

    def parse_file(self, file: DetectedFile, imported_sources: set[str]) -> FileOutcome:
        """Parse one detected file, turning failures into a skip reason."""
        if file.chart_account_id not in self.registry:
            return FileSkipped(file.path, ACCOUNT_NOT_RECOGNIZED)
        if str(file.path) in imported_sources:
            return FileSkipped(file.path, ALREADY_IMPORTED)

        try:
            parser = get_parser(file.provider, self.registry)
            return FileParsed(file, parser.parse(file.path, file.chart_account_id))
        except (DomainError, OSError, UnicodeDecodeError, csv.Error) as e:
            return FileSkipped(file.path, str(e))

    def parse_files(self, detected: list[DetectedFile]) -> ParsedFiles:
        imported_sources = self.db.list_imported_source_files() if self.db.ledger_tables_exist() else set()
        parsed = ParsedFiles()
        touched: dict[str, None] = {}

        for file in detected:
            outcome = self.parse_file(file, imported_sources)
            if isinstance(outcome, FileSkipped):
                logger.warning("Skipping %s: %s", outcome.path, outcome.reason)
                parsed.skipped.append(SkippedFile(str(outcome.path), outcome.reason))
                continue

            result = outcome.result
            logger.info(
                "Parsed %d transaction(s) from %s (%d row(s) skipped)",
                len(result.transactions),
                file.path.name,
                len(result.skipped_rows),
            )
            parsed.processed.append(file)
            parsed.transactions.extend(result.transactions)
            touched.setdefault(result.chart_account_id, None)

        parsed.accounts_touched = list(touched)
        return parsed

    def commit_with_archive(
        self,
        canonical: CanonicalizationResult,
        processed: list[DetectedFile],
        archive_dir: Path,
    ) -> tuple[JournalEntryResult, list[str]]:
        """Write journal entries, then archive the processed files.

        Files are only archived when every entry was written. If anything
        fails once files have started moving, they are moved back before the
        error propagates.
        """
        archive = ArchiveManager()
        try:
            archive.prepare_archive(processed, archive_dir)
            journal_result = self.journal_service.create_journal_entries(canonical.transactions)
            if journal_result.errors:
                logger.warning(
                    "%d journal entry error(s); leaving files in the inbox", len(journal_result.errors)
                )
                return journal_result, []
            return journal_result, archive.commit_archive()
        except Exception:
            if archive.has_archived_files():
                archive.rollback_archive()
            raise

    def import_inbox(self, inbox_dir: Path, archive_dir: Path, migrate: bool = True) -> ImportResult:
        """Import every recognized statement in the inbox.

        Args:
            inbox_dir: Inbox root with one folder per account
            archive_dir: Archive root
            migrate: Migrate the schema and sync seed accounts first

        Returns:
            ImportResult
        """
        if migrate:
            self.db.initialize_schema(get_chart_of_accounts_seeds(self.config.accounts))

        detected = scan_inbox(Path(inbox_dir).resolve(), self.registry)
        parsed = self.parse_files(detected)

        self.rules_service.reset()
        canonical = canonicalize(parsed.transactions, self.rules_service.load())

        journal_result, archived = self.commit_with_archive(canonical, parsed.processed, Path(archive_dir))

        return ImportResult(
            processed_files=[str(f.path) for f in parsed.processed],
            archived_files=archived,
            skipped_files=parsed.skipped,
            total_transactions=journal_result.total_transactions,
            unique_transactions=journal_result.unique_transactions,
            duplicate_transactions=journal_result.duplicate_transactions,
            journal_entries_attempted=journal_result.entries_attempted,
            journal_entries_created=journal_result.journal_entries_created,
            transfer_pairs_created=journal_result.transfer_pairs_created,
            entry_errors=journal_result.errors,
            accounts_touched=parsed.accounts_touched,
            unmapped_descriptions=canonical.unmapped_descriptions,
        )


def import_inbox(
    inbox_dir: Optional[str | Path] = None,
    archive_dir: Optional[str | Path] = None,
    db_path: Optional[str | Path] = None,
    migrate: bool = True,
    config: Optional[FinConfig] = None,
    rules: Optional[RulesService] = None,
) -> ImportResult:
    """Import the inbox into a SQLite ledger.

    Relative defaults resolve against the working directory:
    ``imports/inbox``, ``imports/archive`` and ``data/fin.db``. The config is
    located with ``load_config()`` when not given.
    """
    cwd = Path.cwd()
    inbox = Path(inbox_dir) if inbox_dir is not None else cwd / DEFAULT_INBOX_DIR
    archive = Path(archive_dir) if archive_dir is not None else cwd / DEFAULT_ARCHIVE_DIR
    database_path = Path(db_path) if db_path is not None else cwd / DEFAULT_DB_PATH

    config = config or load_config()
    db = create_sqlite_database(str(database_path))
    try:
        service = InboxImportService(db, config, rules)
        return service.import_inbox(inbox, archive, migrate=migrate)
    finally:
        db.disconnect()
