"""Detect transfers between owned accounts."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from finledger.domain.entities import CanonicalTransaction, TransferPair


@dataclass(frozen=True)
class TransferDetectionOptions:
    max_transfer_days_difference: int = 5
    enable_category_fallback: bool = True
    min_transfer_amount_minor: int = 100


@dataclass
class TransferDetectionResult:
    transfers: list[TransferPair] = field(default_factory=list)
    non_transfers: list[CanonicalTransaction] = field(default_factory=list)


def days_between(a: str, b: str) -> float:
    """Absolute difference between two ISO timestamps in (fractional) days."""
    delta = datetime.fromisoformat(a) - datetime.fromisoformat(b)
    return abs(delta.total_seconds()) / 86400


class TransferDetector:
    """Pairs equal and opposite amounts in different accounts.

    Matching is first-fit in posting order: each unmatched transaction takes
    the earliest unmatched candidate that qualifies. A second pass pairs
    transactions categorised as ``transfer`` without the date window.
    """

    def __init__(self, options: Optional[TransferDetectionOptions] = None):
        self.options = options or TransferDetectionOptions()

    def detect(self, transactions: list[CanonicalTransaction]) -> TransferDetectionResult:
        """Split transactions into transfer pairs and the rest.

        Args:
            transactions: Transactions from one import batch

        Returns:
            TransferDetectionResult with ``non_transfers`` in posting order
        """
        ordered = sorted(transactions, key=lambda t: t.posted_at)

        by_amount: dict[int, list[CanonicalTransaction]] = {}
        for txn in ordered:
            if abs(txn.amount_minor) < self.options.min_transfer_amount_minor:
                continue
            by_amount.setdefault(txn.amount_minor, []).append(txn)

        matched: set[str] = set()
        transfers: list[TransferPair] = []

        for txn in ordered:
            if txn.id in matched:
                continue
            candidate = self._find_candidate(txn, by_amount, matched, use_window=True)
            if candidate is not None:
                transfers.append(self._pair(txn, candidate, matched))

        if self.options.enable_category_fallback:
            for txn in ordered:
                if txn.id in matched:
                    continue
                if (txn.category or "").lower() != "transfer":
                    continue
                candidate = self._find_candidate(txn, by_amount, matched, use_window=False)
                if candidate is not None:
                    transfers.append(self._pair(txn, candidate, matched))

        non_transfers = [t for t in ordered if t.id not in matched]
        return TransferDetectionResult(transfers=transfers, non_transfers=non_transfers)

    def _find_candidate(
        self,
        txn: CanonicalTransaction,
        by_amount: dict[int, list[CanonicalTransaction]],
        matched: set[str],
        use_window: bool,
    ) -> Optional[CanonicalTransaction]:
        if abs(txn.amount_minor) < self.options.min_transfer_amount_minor:
            return None

        for candidate in by_amount.get(-txn.amount_minor, []):
            if candidate.id in matched or candidate.id == txn.id:
                continue
            if candidate.chart_account_id == txn.chart_account_id:
                continue
            if use_window and (
                days_between(txn.posted_at, candidate.posted_at) > self.options.max_transfer_days_difference
            ):
                continue
            return candidate
        return None

    @staticmethod
    def _pair(a: CanonicalTransaction, b: CanonicalTransaction, matched: set[str]) -> TransferPair:
        matched.update((a.id, b.id))
        if a.amount_minor < 0:
            return TransferPair(from_leg=a, to_leg=b)
        return TransferPair(from_leg=b, to_leg=a)
