"""Domain model entities for finledger.

These are pure data classes representing ledger and import concepts,
independent of the database schema. Amounts are always integer minor units
(pence/cents); timestamps are ISO local strings (``YYYY-MM-DDTHH:MM:SS``).
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from finledger.domain.account import AccountId


@dataclass(frozen=True)
class ChartAccount:
    """Node in the chart of accounts."""

    id: str
    name: str
    account_type: str
    parent_id: Optional[str]
    is_placeholder: bool
    active: bool
    currency: str
    created_at: datetime


@dataclass(frozen=True)
class ParsedTransaction:
    """One statement line as read from a provider export."""

    chart_account_id: AccountId
    posted_at: str
    amount_minor: int
    currency: str
    raw_description: str
    counterparty: Optional[str] = None
    provider_category: Optional[str] = None
    provider_txn_id: Optional[str] = None
    balance_minor: Optional[int] = None
    source_file: Optional[str] = None


@dataclass(frozen=True)
class CanonicalTransaction:
    """Parsed transaction after description sanitization."""

    id: str
    chart_account_id: AccountId
    posted_at: str
    amount_minor: int
    currency: str
    raw_description: str
    clean_description: str
    category: Optional[str] = None
    counterparty: Optional[str] = None
    provider_category: Optional[str] = None
    provider_txn_id: Optional[str] = None
    balance_minor: Optional[int] = None
    source_file: Optional[str] = None


@dataclass(frozen=True)
class Posting:
    """One debit/credit leg of a journal entry."""

    id: str
    journal_entry_id: str
    account_id: str
    amount_minor: int
    currency: str = "GBP"
    memo: Optional[str] = None
    provider_txn_id: Optional[str] = None
    provider_balance_minor: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class JournalEntry:
    """Header of one economic event; its postings sum to zero."""

    id: str
    posted_at: str
    posted_date: str
    is_transfer: bool
    description: str
    raw_description: Optional[str] = None
    clean_description: Optional[str] = None
    counterparty: Optional[str] = None
    source_file: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    postings: tuple[Posting, ...] = ()


@dataclass(frozen=True)
class TransferPair:
    """Two opposite legs of one movement between owned accounts.

    ``from_leg`` is always the outflow (negative amount).
    """

    from_leg: CanonicalTransaction
    to_leg: CanonicalTransaction


@dataclass(frozen=True)
class DetectedFile:
    """Inbox file matched to an account and provider."""

    path: Path
    provider: str
    chart_account_id: AccountId


# Row and file outcomes
@dataclass(frozen=True)
class RowParsed:
    transaction: ParsedTransaction


@dataclass(frozen=True)
class RowSkipped:
    row_number: int
    reason: str


RowOutcome = Union[RowParsed, RowSkipped]


@dataclass(frozen=True)
class ParseResult:
    """Everything read from one statement file."""

    chart_account_id: AccountId
    transactions: list[ParsedTransaction]
    has_balances: bool
    skipped_rows: list[RowSkipped] = field(default_factory=list)


@dataclass(frozen=True)
class FileParsed:
    file: DetectedFile
    result: ParseResult


@dataclass(frozen=True)
class FileSkipped:
    path: Path
    reason: str


FileOutcome = Union[FileParsed, FileSkipped]


@dataclass(frozen=True)
class ArchiveFile:
    """Planned move of one inbox file into the archive."""

    original_path: Path
    archive_path: Path
    provider: str
    chart_account_id: str


@dataclass
class JournalEntryResult:
    """Counters and errors from one journal-entry batch."""

    total_transactions: int = 0
    unique_transactions: int = 0
    duplicate_transactions: int = 0
    entries_attempted: int = 0
    journal_entries_created: int = 0
    transfer_pairs_created: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SkippedFile:
    path: str
    reason: str


@dataclass
class ImportResult:
    """Summary of one inbox import run."""

    processed_files: list[str] = field(default_factory=list)
    archived_files: list[str] = field(default_factory=list)
    skipped_files: list[SkippedFile] = field(default_factory=list)
    total_transactions: int = 0
    unique_transactions: int = 0
    duplicate_transactions: int = 0
    journal_entries_attempted: int = 0
    journal_entries_created: int = 0
    transfer_pairs_created: int = 0
    entry_errors: list[str] = field(default_factory=list)
    accounts_touched: list[str] = field(default_factory=list)
    unmapped_descriptions: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DescriptionSummary:
    """Aggregate of journal entries sharing one raw description."""

    raw_description: str
    occurrences: int
    total_amount_minor: int
    chart_account_ids: list[str]
    first_seen: str
    last_seen: str
