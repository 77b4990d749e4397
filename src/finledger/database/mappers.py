"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic so services never see ORM rows.
"""

from finledger.domain import entities as domain
from finledger.database.models import (
    ChartOfAccount as ORMChartOfAccount,
    JournalEntry as ORMJournalEntry,
    Posting as ORMPosting,
)


def chart_account_to_domain(orm_account: ORMChartOfAccount) -> domain.ChartAccount:
    """Convert SQLAlchemy ChartOfAccount model to domain ChartAccount entity."""
    return domain.ChartAccount(
        id=orm_account.id,
        name=orm_account.name,
        account_type=orm_account.account_type,
        parent_id=orm_account.parent_id,
        is_placeholder=bool(orm_account.is_placeholder),
        active=bool(orm_account.active),
        currency=orm_account.currency or "GBP",
        created_at=orm_account.created_at,
    )


def posting_to_domain(orm_posting: ORMPosting) -> domain.Posting:
    """Convert SQLAlchemy Posting model to domain Posting entity."""
    return domain.Posting(
        id=orm_posting.id,
        journal_entry_id=orm_posting.journal_entry_id,
        account_id=orm_posting.account_id,
        amount_minor=orm_posting.amount_minor,
        currency=orm_posting.currency,
        memo=orm_posting.memo,
        provider_txn_id=orm_posting.provider_txn_id,
        provider_balance_minor=orm_posting.provider_balance_minor,
        created_at=orm_posting.created_at,
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model (with postings) to a domain entity."""
    return domain.JournalEntry(
        id=orm_entry.id,
        posted_at=orm_entry.posted_at,
        posted_date=orm_entry.posted_date,
        is_transfer=bool(orm_entry.is_transfer),
        description=orm_entry.description,
        raw_description=orm_entry.raw_description,
        clean_description=orm_entry.clean_description,
        counterparty=orm_entry.counterparty,
        source_file=orm_entry.source_file,
        created_at=orm_entry.created_at,
        updated_at=orm_entry.updated_at,
        postings=tuple(posting_to_domain(p) for p in orm_entry.postings),
    )


def journal_entry_to_orm(entry: domain.JournalEntry) -> ORMJournalEntry:
    """Build an unsaved ORM JournalEntry (and its postings) from a domain entity."""
    return ORMJournalEntry(
        id=entry.id,
        posted_at=entry.posted_at,
        posted_date=entry.posted_date,
        is_transfer=entry.is_transfer,
        description=entry.description,
        raw_description=entry.raw_description,
        clean_description=entry.clean_description,
        counterparty=entry.counterparty,
        source_file=entry.source_file,
        postings=[
            ORMPosting(
                id=p.id,
                account_id=p.account_id,
                amount_minor=p.amount_minor,
                currency=p.currency,
                memo=p.memo,
                provider_txn_id=p.provider_txn_id,
                provider_balance_minor=p.provider_balance_minor,
            )
            for p in entry.postings
        ],
    )
