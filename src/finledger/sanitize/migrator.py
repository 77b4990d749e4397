"""Apply sanitization rules to entries that are already in the ledger.

Both operations are plan/execute pairs so callers can show a dry run first.
Only untouched data is rewritten: a clean description that differs from the
raw one is treated as a manual edit and preserved.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from finledger.database.base import Database
from finledger.domain.category_mapping import UNCATEGORIZED_ACCOUNT, map_to_expense_account
from finledger.domain.errors import DomainError
from finledger.sanitize.matcher import CompiledRuleSet, sanitize_description

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationCandidate:
    id: str
    raw_description: str
    current_clean: Optional[str]
    proposed_clean: str


@dataclass
class MigrationPlan:
    to_update: list[MigrationCandidate] = field(default_factory=list)
    already_clean: int = 0
    no_match: int = 0


@dataclass(frozen=True)
class RecategorizeCandidate:
    posting_id: str
    journal_entry_id: str
    description: str
    current_account_id: str
    proposed_account_id: str
    category: Optional[str]


@dataclass
class RecategorizePlan:
    to_update: list[RecategorizeCandidate] = field(default_factory=list)
    already_categorized: int = 0
    no_match: int = 0


@dataclass
class MigrationResult:
    """Outcome of executing a migration or recategorize plan."""

    updated: int = 0
    skipped: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)


def plan_migration(db: Database, rules: CompiledRuleSet) -> MigrationPlan:
    """Find journal entries whose clean description should change.

    An entry is updated only when a rule matches its raw description, its
    clean description still equals the raw one, and the rule's target
    differs from it.
    """
    plan = MigrationPlan()

    for entry_id, raw, clean in db.list_description_rows():
        result = sanitize_description(raw, rules)
        if result.matched_rule is None:
            plan.no_match += 1
            continue

        needs_update = clean != result.clean_description and clean == raw
        if not needs_update:
            plan.already_clean += 1
            continue

        plan.to_update.append(
            MigrationCandidate(
                id=entry_id,
                raw_description=raw,
                current_clean=clean,
                proposed_clean=result.clean_description,
            )
        )

    return plan


def execute_migration(db: Database, plan: MigrationPlan, dry_run: bool = False) -> MigrationResult:
    """Write planned description updates in one transaction."""
    skipped = plan.already_clean + plan.no_match
    if dry_run:
        return MigrationResult(updated=len(plan.to_update), skipped=skipped)

    result = MigrationResult(skipped=skipped)
    try:
        for candidate in plan.to_update:
            try:
                db.update_entry_description(candidate.id, candidate.proposed_clean)
                result.updated += 1
            except DomainError as e:
                result.errors.append((candidate.id, str(e)))
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Updated descriptions of %d journal entries", result.updated)
    return result


def plan_recategorize(db: Database, rules: CompiledRuleSet) -> RecategorizePlan:
    """Find Expenses:Uncategorized postings that rules can now place.

    The raw description (or the entry description) is sanitized to obtain a
    category, then mapped to an expense account.
    """
    plan = RecategorizePlan()

    for posting, entry in db.list_postings_with_entries(UNCATEGORIZED_ACCOUNT):
        description = entry.raw_description or entry.description
        category = sanitize_description(description, rules).category
        proposed = map_to_expense_account(category, description)

        if proposed == UNCATEGORIZED_ACCOUNT:
            plan.no_match += 1
            continue
        if proposed == posting.account_id:
            plan.already_categorized += 1
            continue

        plan.to_update.append(
            RecategorizeCandidate(
                posting_id=posting.id,
                journal_entry_id=entry.id,
                description=entry.description,
                current_account_id=posting.account_id,
                proposed_account_id=proposed,
                category=category,
            )
        )

    return plan


def execute_recategorize(db: Database, plan: RecategorizePlan, dry_run: bool = False) -> MigrationResult:
    """Move planned postings to their new accounts in one transaction."""
    skipped = plan.already_categorized + plan.no_match
    if dry_run:
        return MigrationResult(updated=len(plan.to_update), skipped=skipped)

    result = MigrationResult(skipped=skipped)
    try:
        for candidate in plan.to_update:
            try:
                db.update_posting_account(candidate.posting_id, candidate.proposed_account_id)
                result.updated += 1
            except DomainError as e:
                result.errors.append((candidate.posting_id, str(e)))
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Recategorized %d postings", result.updated)
    return result
