from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from math import isfinite


CENT = Decimal('0.01')


def round_money(value):
    """Round a monetary amount to 2 decimals, half-up (0.005 -> 0.01)."""
    return float(Decimal(repr(float(value))).quantize(CENT, rounding=ROUND_HALF_UP))


def parse_date(date_str):
    """Parse an ISO date string (YYYY-MM-DD). Raises ValueError otherwise."""
    if not date_str:
        raise ValueError('date is required')
    return datetime.strptime(str(date_str).strip(), '%Y-%m-%d').date()


def parse_amount(amount_str):
    """
    Parse a monetary amount from JSON or form input.

    Accepts numbers and strings with either comma or dot decimals.
    Returns None for missing values; raises ValueError for anything
    that is not a finite number.
    """
    if amount_str is None or amount_str == '':
        return None
    if isinstance(amount_str, bool):
        raise ValueError(f'not a number: {amount_str!r}')
    if isinstance(amount_str, (int, float)):
        value = float(amount_str)
    else:
        # Replace comma with dot for parsing
        value = float(str(amount_str).strip().replace(',', '.'))
    if not isfinite(value):
        raise ValueError(f'not a finite number: {amount_str!r}')
    return value


def parse_count(count_str):
    """Parse a whole number of periods. Returns None for missing values."""
    value = parse_amount(count_str)
    if value is None:
        return None
    if not value.is_integer():
        raise ValueError(f'not a whole number: {count_str!r}')
    return int(value)
