"""Discover raw descriptions in the ledger to help write mapping rules."""

from typing import Optional

from finledger.database.base import Database
from finledger.domain.entities import DescriptionSummary
from finledger.sanitize.matcher import CompiledRuleSet, sanitize_description


def discover_descriptions(
    db: Database,
    min_occurrences: int = 1,
    chart_account_id: Optional[str] = None,
    limit: int = 500,
    sort_by: str = "occurrences",
) -> list[DescriptionSummary]:
    """Summarize journal entries by raw description.

    Args:
        db: Database instance
        min_occurrences: Drop descriptions seen fewer times than this
        chart_account_id: Only consider entries posting to this account
        limit: Maximum number of summaries
        sort_by: 'occurrences', 'amount' (absolute total) or 'recent'

    Returns:
        List of DescriptionSummary

    Raises:
        ValidationError: If sort_by is not a known option
    """
    return db.summarize_descriptions(
        min_occurrences=min_occurrences,
        account_id=chart_account_id,
        limit=limit,
        sort_by=sort_by,
    )


def discover_unmapped_descriptions(
    db: Database,
    rules: CompiledRuleSet,
    min_occurrences: int = 1,
    chart_account_id: Optional[str] = None,
    limit: int = 500,
    sort_by: str = "occurrences",
) -> list[DescriptionSummary]:
    """Like discover_descriptions, keeping only descriptions no rule matches."""
    summaries = discover_descriptions(db, min_occurrences, chart_account_id, limit, sort_by)
    return [s for s in summaries if sanitize_description(s.raw_description, rules).matched_rule is None]
