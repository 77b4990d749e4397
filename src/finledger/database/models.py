"""SQLAlchemy models for the finledger database."""

from datetime import datetime, UTC

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    create_engine,
    event,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

ACCOUNT_TYPES = ("asset", "liability", "equity", "income", "expense")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ChartOfAccount(Base):
    """Chart of accounts node, keyed by its colon path."""

    __tablename__ = "chart_of_accounts"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False)
    parent_id = Column(String, ForeignKey("chart_of_accounts.id"), nullable=True)
    currency = Column(String, default="GBP")
    is_placeholder = Column(Boolean, default=False, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "account_type IN ('asset', 'liability', 'equity', 'income', 'expense')",
            name="ck_chart_of_accounts_type",
        ),
        Index("idx_chart_of_accounts_type", "account_type"),
        Index("idx_chart_of_accounts_parent", "parent_id"),
    )

    # Relationships
    parent = relationship("ChartOfAccount", remote_side=[id], backref="children")
    postings = relationship("Posting", back_populates="account")


class JournalEntry(Base):
    """Journal entry header."""

    __tablename__ = "journal_entries"

    id = Column(String, primary_key=True)
    posted_at = Column(String, nullable=False)
    posted_date = Column(String, nullable=False)
    is_transfer = Column(Boolean, default=False, nullable=False)
    description = Column(String, nullable=False)
    raw_description = Column(String, nullable=True)
    clean_description = Column(String, nullable=True)
    counterparty = Column(String, nullable=True)
    source_file = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        Index("idx_journal_entries_posted", "posted_at"),
        Index("idx_journal_entries_posted_date", "posted_date"),
    )

    # Relationships
    postings = relationship(
        "Posting",
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Posting.amount_minor",
    )


class Posting(Base):
    """Debit/credit line belonging to a journal entry."""

    __tablename__ = "postings"

    id = Column(String, primary_key=True)
    journal_entry_id = Column(
        String, ForeignKey("journal_entries.id", ondelete="CASCADE"), nullable=False
    )
    account_id = Column(String, ForeignKey("chart_of_accounts.id"), nullable=False)
    amount_minor = Column(Integer, nullable=False)
    currency = Column(String, default="GBP", nullable=False)
    memo = Column(String, nullable=True)
    provider_txn_id = Column(String, nullable=True)
    provider_balance_minor = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Deduplication contract: one posting per provider id per account
    __table_args__ = (
        Index("idx_postings_journal_entry", "journal_entry_id"),
        Index("idx_postings_account", "account_id"),
        Index(
            "idx_postings_provider_txn",
            "provider_txn_id",
            "account_id",
            unique=True,
            sqlite_where=text("provider_txn_id IS NOT NULL"),
        ),
    )

    # Relationships
    journal_entry = relationship("JournalEntry", back_populates="postings")
    account = relationship("ChartOfAccount", back_populates="postings")


def _configure_sqlite(engine: Engine) -> None:
    """Enable foreign keys, WAL and explicit BEGIN for savepoint support."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself so SAVEPOINT works with pysqlite
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_db_engine(database_url: str) -> Engine:
    """Create an engine; SQLite URLs get the pragmas the ledger relies on."""
    engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        _configure_sqlite(engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory.

    Tables are not created here; ``finledger.database.migrations`` owns the
    schema.
    """
    return sessionmaker(bind=engine)
