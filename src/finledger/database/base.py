"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from finledger.domain.entities import (
    ChartAccount,
    DescriptionSummary,
    JournalEntry,
    Posting,
)
from finledger.database.seed import ChartAccountSeed


class Database(ABC):
    """Abstract database interface for the ledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self, seeds: Optional[list[ChartAccountSeed]] = None) -> None:
        """Migrate the schema to the latest version.

        Args:
            seeds: Chart of accounts seeds. Accounts missing from an existing
                database are inserted; existing ones are left untouched.
        """
        pass

    @abstractmethod
    def get_schema_version(self) -> int:
        """Return the current schema version (0 for an empty database)."""
        pass

    @abstractmethod
    def commit(self) -> None:
        """Commit the pending unit of work."""
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Discard the pending unit of work."""
        pass

    # Chart of accounts
    @abstractmethod
    def list_chart_accounts(self, account_type: Optional[str] = None) -> list[ChartAccount]:
        """List chart accounts ordered by id, optionally filtered by type."""
        pass

    @abstractmethod
    def get_chart_account(self, account_id: str) -> Optional[ChartAccount]:
        """Get chart account by id."""
        pass

    # Journal entries
    @abstractmethod
    def ledger_tables_exist(self) -> bool:
        """Return True if journal_entries and postings exist."""
        pass

    @abstractmethod
    def find_existing_provider_keys(
        self, provider_txn_ids: list[str], account_ids: list[str]
    ) -> set[tuple[str, str]]:
        """Return persisted (provider_txn_id, account_id) pairs among the given ids."""
        pass

    @abstractmethod
    def add_journal_entry(self, entry: JournalEntry) -> None:
        """Stage a journal entry and its postings inside a savepoint.

        The entry becomes durable on the next commit(). A failure rolls back
        only this entry.

        Raises:
            ConflictError: If a constraint (uniqueness, foreign key) fails
        """
        pass

    @abstractmethod
    def list_imported_source_files(self) -> set[str]:
        """Return distinct source_file values of persisted journal entries."""
        pass

    @abstractmethod
    def get_journal_entry(self, entry_id: str) -> Optional[JournalEntry]:
        """Get a journal entry with its postings."""
        pass

    @abstractmethod
    def list_journal_entries(self, account_id: Optional[str] = None) -> list[JournalEntry]:
        """List journal entries by posted_at, optionally touching one account."""
        pass

    @abstractmethod
    def count_journal_entries(self) -> int:
        """Count journal entries."""
        pass

    # Sanitization support
    @abstractmethod
    def summarize_descriptions(
        self,
        min_occurrences: int = 1,
        account_id: Optional[str] = None,
        limit: int = 500,
        sort_by: str = "occurrences",
    ) -> list[DescriptionSummary]:
        """Group journal entries by raw description."""
        pass

    @abstractmethod
    def list_description_rows(self) -> list[tuple[str, str, Optional[str]]]:
        """Return (id, raw_description, clean_description) for entries with a raw description."""
        pass

    @abstractmethod
    def update_entry_description(self, entry_id: str, clean_description: str) -> None:
        """Set description and clean_description of an entry.

        Raises:
            NotFoundError: If the entry does not exist
        """
        pass

    @abstractmethod
    def list_postings_with_entries(self, account_id: str) -> list[tuple[Posting, JournalEntry]]:
        """List postings on an account together with their journal entries."""
        pass

    @abstractmethod
    def update_posting_account(self, posting_id: str, account_id: str) -> None:
        """Move a posting to another chart account.

        Raises:
            NotFoundError: If the posting or the target account does not exist
        """
        pass
