"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from finledger.domain.errors import InvalidAmount

# SQLite INTEGER range
MAX_MINOR = 2**63 - 1
MIN_MINOR = -(2**63)


def parse_amount_minor(amount_str: str | None) -> int:
    """Parse a decimal amount string into integer minor units.

    Handles the layouts found in bank exports:
    - "10.00" -> 1000
    - "-1.50" -> -150
    - "1,234.56" -> 123456
    - " 3.005 " -> 301 (half away from zero)

    Args:
        amount_str: Amount string in major units

    Returns:
        Signed amount in minor units (pence/cents)

    Raises:
        InvalidAmount: If the string is empty, not a finite number, or too
            large to store
    """
    if amount_str is None or not amount_str.strip():
        raise InvalidAmount("Empty amount")

    cleaned = amount_str.strip().replace(",", "")

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise InvalidAmount(f"Invalid amount: {amount_str}")

    if not amount.is_finite():
        raise InvalidAmount(f"Invalid amount: {amount_str}")

    try:
        minor = (amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmount(f"Invalid amount: {amount_str}")

    if not MIN_MINOR <= minor <= MAX_MINOR:
        raise InvalidAmount(f"Amount out of range: {amount_str}")
    return int(minor)
