"""Utility functions for finledger."""

from finledger.utils.date_parser import (
    parse_english_date,
    parse_iso_date,
    parse_wise_datetime,
    to_iso_local_datetime,
)
from finledger.utils.amount_parser import parse_amount_minor

__all__ = [
    "parse_amount_minor",
    "parse_english_date",
    "parse_iso_date",
    "parse_wise_datetime",
    "to_iso_local_datetime",
]
