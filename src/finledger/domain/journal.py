"""Journal entry creation from canonical transactions."""

import logging
import uuid
from typing import Optional

from finledger.database.base import Database
from finledger.domain.category_mapping import map_category_to_account
from finledger.domain.entities import (
    CanonicalTransaction,
    JournalEntry,
    JournalEntryResult,
    Posting,
    TransferPair,
)
from finledger.domain.errors import DomainError
from finledger.domain.transfers import TransferDetectionOptions, TransferDetector

logger = logging.getLogger(__name__)


def generate_id(prefix: str) -> str:
    """Return ``<prefix>_`` followed by 16 random hex characters."""
    return f"{prefix}_{uuid.uuid4().hex[:16]}"


def posted_date(posted_at: str) -> str:
    return posted_at[:10]


def build_transfer_entry(pair: TransferPair) -> JournalEntry:
    """One entry with a posting per leg, dated at the earlier leg."""
    from_leg, to_leg = pair.from_leg, pair.to_leg
    entry_id = generate_id("je")
    posted_at = min(from_leg.posted_at, to_leg.posted_at)

    postings = tuple(
        Posting(
            id=generate_id("p"),
            journal_entry_id=entry_id,
            account_id=leg.chart_account_id,
            amount_minor=leg.amount_minor,
            currency=leg.currency,
            provider_txn_id=leg.provider_txn_id,
            provider_balance_minor=leg.balance_minor,
        )
        for leg in (from_leg, to_leg)
    )

    return JournalEntry(
        id=entry_id,
        posted_at=posted_at,
        posted_date=posted_date(posted_at),
        is_transfer=True,
        description=from_leg.clean_description or from_leg.raw_description or "Transfer",
        raw_description=from_leg.raw_description,
        clean_description=from_leg.clean_description,
        counterparty=from_leg.counterparty,
        source_file=from_leg.source_file,
        postings=postings,
    )


def build_entry(txn: CanonicalTransaction) -> JournalEntry:
    """One entry with the asset posting and a balancing category posting."""
    entry_id = generate_id("je")
    description = txn.clean_description or txn.raw_description
    counter_account = map_category_to_account(txn.category, description, txn.amount_minor > 0)

    postings = (
        Posting(
            id=generate_id("p"),
            journal_entry_id=entry_id,
            account_id=txn.chart_account_id,
            amount_minor=txn.amount_minor,
            currency=txn.currency,
            provider_txn_id=txn.provider_txn_id,
            provider_balance_minor=txn.balance_minor,
        ),
        Posting(
            id=generate_id("p"),
            journal_entry_id=entry_id,
            account_id=counter_account,
            amount_minor=-txn.amount_minor,
            currency=txn.currency,
        ),
    )

    return JournalEntry(
        id=entry_id,
        posted_at=txn.posted_at,
        posted_date=posted_date(txn.posted_at),
        is_transfer=False,
        description=description,
        raw_description=txn.raw_description,
        clean_description=txn.clean_description,
        counterparty=txn.counterparty,
        source_file=txn.source_file,
        postings=postings,
    )


class JournalEntryService:
    """Service for turning imported transactions into balanced journal entries."""

    def __init__(self, db: Database):
        """Initialize journal entry service.

        Args:
            db: Database instance
        """
        self.db = db

    def filter_new_transactions(
        self, transactions: list[CanonicalTransaction]
    ) -> tuple[list[CanonicalTransaction], int]:
        """Drop transactions already in this batch or already persisted.

        Identity is ``(provider_txn_id, chart_account_id)``. Transactions
        without a provider id cannot be recognized and are always new.

        Returns:
            (new transactions, duplicate count)
        """
        seen: set[tuple[str, str]] = set()
        new_transactions: list[CanonicalTransaction] = []
        candidates: list[CanonicalTransaction] = []
        duplicates = 0

        for txn in transactions:
            if not txn.provider_txn_id:
                new_transactions.append(txn)
                continue
            key = (txn.provider_txn_id, txn.chart_account_id)
            if key in seen:
                duplicates += 1
                continue
            seen.add(key)
            candidates.append(txn)

        existing = self.db.find_existing_provider_keys(
            [t.provider_txn_id for t in candidates],
            [t.chart_account_id for t in candidates],
        )

        for txn in candidates:
            if (txn.provider_txn_id, txn.chart_account_id) in existing:
                duplicates += 1
                continue
            new_transactions.append(txn)

        return new_transactions, duplicates

    def create_journal_entries(
        self,
        transactions: list[CanonicalTransaction],
        options: Optional[TransferDetectionOptions] = None,
    ) -> JournalEntryResult:
        """Persist new transactions as journal entries.

        Each entry is written in its own savepoint, so a failing entry is
        reported in ``errors`` without affecting the others. All entries are
        committed together at the end.

        Args:
            transactions: Canonical transactions from one import run
            options: Transfer detection options

        Returns:
            JournalEntryResult
        """
        result = JournalEntryResult(total_transactions=len(transactions))

        if not self.db.ledger_tables_exist():
            logger.warning("Ledger tables are missing; no journal entries created")
            return result

        new_transactions, duplicates = self.filter_new_transactions(transactions)
        result.unique_transactions = len(new_transactions)
        result.duplicate_transactions = duplicates

        if not new_transactions:
            return result

        detection = TransferDetector(options).detect(new_transactions)
        result.entries_attempted = len(detection.transfers) + len(detection.non_transfers)

        try:
            for pair in detection.transfers:
                try:
                    self.db.add_journal_entry(build_transfer_entry(pair))
                except DomainError as e:
                    result.errors.append(f"Transfer {pair.from_leg.id} <-> {pair.to_leg.id}: {e}")
                    continue
                result.journal_entries_created += 1
                result.transfer_pairs_created += 1

            for txn in detection.non_transfers:
                try:
                    self.db.add_journal_entry(build_entry(txn))
                except DomainError as e:
                    result.errors.append(f"Transaction {txn.id}: {e}")
                    continue
                result.journal_entries_created += 1

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            "Created %d journal entries (%d transfers, %d duplicates skipped, %d errors)",
            result.journal_entries_created,
            result.transfer_pairs_created,
            result.duplicate_transactions,
            len(result.errors),
        )
        return result
