"""Turn parsed transactions into canonical, sanitized transactions."""

import uuid
from dataclasses import dataclass, field

from finledger.domain.entities import CanonicalTransaction, ParsedTransaction
from finledger.sanitize.matcher import CompiledRuleSet, sanitize_description


@dataclass
class CanonicalizationResult:
    transactions: list[CanonicalTransaction] = field(default_factory=list)
    unmapped_descriptions: list[str] = field(default_factory=list)


def canonicalize(parsed: list[ParsedTransaction], rules: CompiledRuleSet) -> CanonicalizationResult:
    """Sanitize descriptions and assign each transaction a fresh id.

    Opaque descriptions (direct debit references, for example) that match no
    rule are retried against the counterparty name. Raw descriptions still
    unmatched are collected, first-seen order, when ``warn_on_unmapped`` is
    set.

    Args:
        parsed: Transactions from the provider parsers
        rules: Compiled sanitization rules

    Returns:
        CanonicalizationResult
    """
    result = CanonicalizationResult()
    unmapped: dict[str, None] = {}

    for txn in parsed:
        sanitized = sanitize_description(txn.raw_description, rules)

        if sanitized.matched_rule is None and txn.counterparty:
            from_counterparty = sanitize_description(txn.counterparty, rules)
            if from_counterparty.matched_rule is not None:
                sanitized = from_counterparty

        if sanitized.matched_rule is None and rules.warn_on_unmapped:
            unmapped.setdefault(txn.raw_description, None)

        result.transactions.append(
            CanonicalTransaction(
                id=str(uuid.uuid4()),
                chart_account_id=txn.chart_account_id,
                posted_at=txn.posted_at,
                amount_minor=txn.amount_minor,
                currency=txn.currency,
                raw_description=txn.raw_description,
                clean_description=sanitized.clean_description,
                category=sanitized.category,
                counterparty=txn.counterparty,
                provider_category=txn.provider_category,
                provider_txn_id=txn.provider_txn_id,
                balance_minor=txn.balance_minor,
                source_file=txn.source_file,
            )
        )

    result.unmapped_descriptions = list(unmapped)
    return result
