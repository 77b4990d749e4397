"""SQLAlchemy implementation of the ledger database."""

from typing import Optional

from sqlalchemy import case, distinct, func, inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from finledger.database.base import Database
from finledger.database.migrations import get_user_version, insert_missing_accounts, migrate_to_latest
from finledger.database.models import (
    ChartOfAccount,
    JournalEntry,
    Posting,
    create_db_engine,
    create_session_factory,
)
from finledger.database.mappers import (
    chart_account_to_domain,
    journal_entry_to_domain,
    journal_entry_to_orm,
    posting_to_domain,
)
from finledger.database.seed import ChartAccountSeed
from finledger.domain.entities import (
    ChartAccount as DomainChartAccount,
    DescriptionSummary,
    JournalEntry as DomainJournalEntry,
    Posting as DomainPosting,
)
from finledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    journal_entry_not_found,
    posting_not_found,
)

# Keeps IN (...) lists well under SQLite's bound parameter limit
PROVIDER_ID_CHUNK_SIZE = 800

SORT_OPTIONS = ("occurrences", "amount", "recent")


class SQLAlchemyDatabase(Database):
    """SQLAlchemy-based implementation of Database interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy database.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self.engine = create_db_engine(database_url)
        self.session_factory = create_session_factory(self.engine)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        if self._session is not None:
            self._session.close()
            self._session = None
        self.engine.dispose()

    def initialize_schema(self, seeds: Optional[list[ChartAccountSeed]] = None) -> None:
        """Migrate to the latest schema and insert missing seed accounts."""
        migrate_to_latest(self.engine, seeds)
        if seeds:
            with self.engine.begin() as conn:
                insert_missing_accounts(conn, seeds)

    def get_schema_version(self) -> int:
        with self.engine.connect() as conn:
            return get_user_version(conn)

    def commit(self) -> None:
        self._get_session().commit()

    def rollback(self) -> None:
        self._get_session().rollback()

    # Chart of accounts
    def list_chart_accounts(self, account_type: Optional[str] = None) -> list[DomainChartAccount]:
        """List chart accounts ordered by id."""
        session = self._get_session()
        query = session.query(ChartOfAccount)
        if account_type is not None:
            query = query.filter(ChartOfAccount.account_type == account_type)
        return [chart_account_to_domain(a) for a in query.order_by(ChartOfAccount.id).all()]

    def get_chart_account(self, account_id: str) -> Optional[DomainChartAccount]:
        """Get chart account by id."""
        session = self._get_session()
        account = session.get(ChartOfAccount, account_id)
        if account is None:
            return None
        return chart_account_to_domain(account)

    # Journal entries
    def ledger_tables_exist(self) -> bool:
        inspector = inspect(self.engine)
        return inspector.has_table("journal_entries") and inspector.has_table("postings")

    def find_existing_provider_keys(
        self, provider_txn_ids: list[str], account_ids: list[str]
    ) -> set[tuple[str, str]]:
        """Return persisted (provider_txn_id, account_id) pairs, querying in chunks."""
        if not provider_txn_ids or not account_ids:
            return set()

        session = self._get_session()
        unique_ids = sorted(set(provider_txn_ids))
        accounts = sorted(set(account_ids))
        existing: set[tuple[str, str]] = set()

        for start in range(0, len(unique_ids), PROVIDER_ID_CHUNK_SIZE):
            chunk = unique_ids[start : start + PROVIDER_ID_CHUNK_SIZE]
            rows = (
                session.query(Posting.provider_txn_id, Posting.account_id)
                .filter(Posting.provider_txn_id.in_(chunk), Posting.account_id.in_(accounts))
                .all()
            )
            existing.update((row.provider_txn_id, row.account_id) for row in rows)

        return existing

    def add_journal_entry(self, entry: DomainJournalEntry) -> None:
        """Insert an entry and its postings inside a savepoint."""
        session = self._get_session()
        try:
            with session.begin_nested():
                session.add(journal_entry_to_orm(entry))
                session.flush()
        except IntegrityError as e:
            raise ConflictError(str(e.orig)) from e

    def list_imported_source_files(self) -> set[str]:
        session = self._get_session()
        rows = (
            session.query(JournalEntry.source_file)
            .filter(JournalEntry.source_file.isnot(None))
            .distinct()
            .all()
        )
        return {row.source_file for row in rows}

    def get_journal_entry(self, entry_id: str) -> Optional[DomainJournalEntry]:
        """Get journal entry by id, with postings."""
        session = self._get_session()
        entry = session.get(JournalEntry, entry_id)
        if entry is None:
            return None
        return journal_entry_to_domain(entry)

    def list_journal_entries(self, account_id: Optional[str] = None) -> list[DomainJournalEntry]:
        """List journal entries ordered by posted_at."""
        session = self._get_session()
        query = session.query(JournalEntry).options(selectinload(JournalEntry.postings))
        if account_id is not None:
            query = query.filter(JournalEntry.postings.any(Posting.account_id == account_id))
        entries = query.order_by(JournalEntry.posted_at, JournalEntry.id).all()
        return [journal_entry_to_domain(e) for e in entries]

    def count_journal_entries(self) -> int:
        return self._get_session().query(JournalEntry).count()

    # Sanitization support
    def summarize_descriptions(
        self,
        min_occurrences: int = 1,
        account_id: Optional[str] = None,
        limit: int = 500,
        sort_by: str = "occurrences",
    ) -> list[DescriptionSummary]:
        """Group journal entries by raw description.

        Totals and account lists cover asset postings only (or the filtered
        account); summing every leg of a balanced entry would always be zero.
        """
        if sort_by not in SORT_OPTIONS:
            raise ValidationError(
                f"Invalid sort '{sort_by}'. Valid options: {', '.join(SORT_OPTIONS)}"
            )

        session = self._get_session()
        if account_id is not None:
            counted_leg = Posting.account_id == account_id
        else:
            counted_leg = Posting.account_id.like("Assets%")

        occurrences = func.count(distinct(JournalEntry.id)).label("occurrences")
        total = func.coalesce(
            func.sum(case((counted_leg, Posting.amount_minor), else_=0)), 0
        ).label("total_amount")
        account_ids = func.group_concat(
            distinct(case((counted_leg, Posting.account_id), else_=None))
        ).label("account_ids")
        first_seen = func.min(JournalEntry.posted_at).label("first_seen")
        last_seen = func.max(JournalEntry.posted_at).label("last_seen")

        query = (
            session.query(JournalEntry.raw_description, occurrences, total, account_ids, first_seen, last_seen)
            .join(Posting, Posting.journal_entry_id == JournalEntry.id)
            .filter(JournalEntry.raw_description.isnot(None))
        )
        if account_id is not None:
            query = query.filter(Posting.account_id == account_id)

        order = {
            "occurrences": occurrences.desc(),
            "amount": func.abs(total).desc(),
            "recent": last_seen.desc(),
        }[sort_by]

        rows = (
            query.group_by(JournalEntry.raw_description)
            .having(func.count(distinct(JournalEntry.id)) >= min_occurrences)
            .order_by(order, JournalEntry.raw_description)
            .limit(limit)
            .all()
        )

        return [
            DescriptionSummary(
                raw_description=row.raw_description,
                occurrences=row.occurrences,
                total_amount_minor=row.total_amount or 0,
                chart_account_ids=sorted(row.account_ids.split(",")) if row.account_ids else [],
                first_seen=row.first_seen,
                last_seen=row.last_seen,
            )
            for row in rows
        ]

    def list_description_rows(self) -> list[tuple[str, str, Optional[str]]]:
        session = self._get_session()
        rows = (
            session.query(JournalEntry.id, JournalEntry.raw_description, JournalEntry.clean_description)
            .filter(JournalEntry.raw_description.isnot(None))
            .order_by(JournalEntry.posted_at, JournalEntry.id)
            .all()
        )
        return [(row.id, row.raw_description, row.clean_description) for row in rows]

    def update_entry_description(self, entry_id: str, clean_description: str) -> None:
        """Set description and clean_description of an entry."""
        session = self._get_session()
        entry = session.get(JournalEntry, entry_id)
        if entry is None:
            raise NotFoundError(journal_entry_not_found(entry_id))
        entry.description = clean_description
        entry.clean_description = clean_description
        session.flush()

    def list_postings_with_entries(self, account_id: str) -> list[tuple[DomainPosting, DomainJournalEntry]]:
        session = self._get_session()
        postings = (
            session.query(Posting)
            .join(JournalEntry, Posting.journal_entry_id == JournalEntry.id)
            .filter(Posting.account_id == account_id)
            .order_by(JournalEntry.posted_at, Posting.id)
            .all()
        )
        return [(posting_to_domain(p), journal_entry_to_domain(p.journal_entry)) for p in postings]

    def update_posting_account(self, posting_id: str, account_id: str) -> None:
        """Move a posting to another chart account."""
        session = self._get_session()
        posting = session.get(Posting, posting_id)
        if posting is None:
            raise NotFoundError(posting_not_found(posting_id))
        if session.get(ChartOfAccount, account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        posting.account_id = account_id
        session.flush()
