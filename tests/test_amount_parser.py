"""Tests for amount parsing."""

import pytest

from finledger.domain.errors import InvalidAmount
from finledger.utils.amount_parser import parse_amount_minor


def test_parse_whole_pounds():
    assert parse_amount_minor("10.00") == 1000


def test_parse_negative():
    assert parse_amount_minor("-1.50") == -150


def test_parse_thousands_separator():
    assert parse_amount_minor("1,234.56") == 123456


def test_parse_strips_whitespace():
    assert parse_amount_minor("  42.1 ") == 4210


def test_parse_rounds_half_up():
    """Sub-penny values round away from zero at .5."""
    assert parse_amount_minor("0.005") == 1
    assert parse_amount_minor("-0.005") == -1
    assert parse_amount_minor("2.344") == 234


def test_parse_integer_string():
    assert parse_amount_minor("7") == 700


@pytest.mark.parametrize("value", ["", "   "])
def test_parse_empty_raises(value):
    with pytest.raises(InvalidAmount, match="Empty amount"):
        parse_amount_minor(value)


@pytest.mark.parametrize("value", ["abc", "12.3.4", "NaN", "Infinity", "1e30"])
def test_parse_invalid_raises(value):
    with pytest.raises(InvalidAmount, match="Invalid amount"):
        parse_amount_minor(value)


@pytest.mark.parametrize("value", ["100000000000000000", "-100000000000000000"])
def test_parse_out_of_range_raises(value):
    with pytest.raises(InvalidAmount, match="out of range"):
        parse_amount_minor(value)


def test_parse_largest_storable_amount():
    assert parse_amount_minor("92233720368547758.07") == 2**63 - 1
