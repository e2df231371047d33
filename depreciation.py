"""
Depreciation schedule engine (straight-line, monthly periods).

All tunable constants are kept in the RULES dict. Calculation functions are
pure and stateless: they never touch the database and never log, errors are
raised to the caller as DepreciationError subclasses.

Fiscal years run April to March and are labelled "2024-2025".
"""

from datetime import date, datetime
from math import isinf

from dateutil.relativedelta import relativedelta

from helpers import parse_date, round_money


# =============================================================================
# RULES CONFIGURATION
# =============================================================================

RULES = {
    'fiscal_year_start_month': 4,     # April
    'max_periods': 100_000,           # Hard cap on schedule length
    'rounding_tolerance': 0.005,      # Half a cent
}


# =============================================================================
# ERRORS
# =============================================================================

class DepreciationError(ValueError):
    """Base class for invalid depreciation input."""
    kind = 'DepreciationError'


class InvalidDateError(DepreciationError):
    kind = 'InvalidDate'


class AmbiguousOrMissingMethodError(DepreciationError):
    kind = 'AmbiguousOrMissingMethod'


class NegativeValueError(DepreciationError):
    kind = 'NegativeValue'


class NonTerminatingScheduleError(DepreciationError):
    kind = 'NonTerminatingSchedule'


class InvalidPeriodCountError(DepreciationError):
    kind = 'InvalidPeriodCount'


# =============================================================================
# CALCULATION FUNCTIONS
# =============================================================================

def fiscal_year_for(d, start_month=None):
    """Return the fiscal year label ("Y-Y+1") that contains date d."""
    if start_month is None:
        start_month = RULES['fiscal_year_start_month']
    start_year = d.year if d.month >= start_month else d.year - 1
    return f'{start_year}-{start_year + 1}'


def add_months(d, months):
    """Add calendar months to d, clamping to the last day of the target month."""
    return d + relativedelta(months=months)


def monthly_amount(cost, depreciation_rate=None, period_count=None):
    """Fixed per-period depreciation, from an annual rate or a period count."""
    if depreciation_rate is not None:
        return cost * depreciation_rate / 12
    if not period_count:
        raise NonTerminatingScheduleError('periodCount must be greater than zero.')
    return cost / period_count


def compute_schedule(cost, depreciation_rate=None, period_count=None,
                     purchase_date=None, company_id=None, asset_id=None,
                     max_periods=None):
    """
    Generate the monthly straight-line depreciation schedule for an asset.

    Returns (entries, total_periods) where entries is a list of dicts:
        [{'period': int, 'date': str, 'fiscal_year': str,
          'depreciation_amount': float, 'cumulative': float,
          'book_value': float, 'company_id': ..., 'asset_id': ...}, ...]

    The remaining cost is tracked unrounded; only the emitted amounts are
    rounded (half-up, 2 decimals), so their sum matches cost within a cent
    per period. Float residue left after the last full period is folded into
    it; a positive cost always yields at least one period.
    """
    start = _coerce_date(purchase_date)

    if (depreciation_rate is None) == (period_count is None):
        raise AmbiguousOrMissingMethodError(
            'Provide either depreciationRate or periodCount, not both.')

    for name, value in (('cost', cost), ('depreciationRate', depreciation_rate),
                        ('periodCount', period_count)):
        if value is not None and value < 0:
            raise NegativeValueError(f'{name} must not be negative.')

    if period_count is not None and not float(period_count).is_integer():
        raise InvalidPeriodCountError('periodCount must be a whole number.')

    if max_periods is None:
        max_periods = RULES['max_periods']

    if cost == 0:
        return [], 0

    monthly = monthly_amount(cost, depreciation_rate, period_count)
    if not monthly > 0 or isinf(monthly):
        raise NonTerminatingScheduleError(
            'Monthly depreciation must be a positive finite amount.')

    # Leftovers under half a cent and under half a period are float residue
    tolerance = min(RULES['rounding_tolerance'], monthly / 2)

    entries = []
    remaining = cost
    cumulative = 0.0
    period = 0

    while remaining > tolerance or period == 0:
        period += 1
        if period > max_periods:
            raise NonTerminatingScheduleError(
                f'Schedule exceeds the maximum of {max_periods} periods.')

        current = add_months(start, period - 1)
        amount = min(remaining, monthly)
        if remaining - amount <= tolerance:
            amount = remaining

        rounded = round_money(amount)
        cumulative = round_money(cumulative + rounded)

        entries.append({
            'period': period,
            'date': current.isoformat(),
            'fiscal_year': fiscal_year_for(current),
            'depreciation_amount': rounded,
            'cumulative': cumulative,
            'book_value': max(round_money(cost - cumulative), 0.0),
            'company_id': company_id,
            'asset_id': asset_id,
        })

        remaining -= amount

    return entries, period


def summarize_by_fiscal_year(entries):
    """
    Bucket a schedule into fiscal years.

    Returns a list ordered by first appearance:
        [{'fiscal_year': str, 'amount': float, 'periods': int}, ...]
    """
    totals = {}
    for entry in entries:
        bucket = totals.setdefault(entry['fiscal_year'], {
            'fiscal_year': entry['fiscal_year'],
            'amount': 0.0,
            'periods': 0,
        })
        bucket['amount'] = round_money(bucket['amount'] + entry['depreciation_amount'])
        bucket['periods'] += 1
    return list(totals.values())


def get_book_value(entries, cost, as_of_date=None):
    """
    Book value after every period dated on or before as_of_date.

    If as_of_date is omitted, uses today.
    """
    if as_of_date is None:
        as_of_date = date.today()

    cumulative = 0.0
    for entry in entries:
        if parse_date(entry['date']) <= as_of_date:
            cumulative = entry['cumulative']
        else:
            break

    return max(round_money(cost - cumulative), 0.0)


def _coerce_date(value):
    """Accept a date, datetime or 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise InvalidDateError('Invalid purchaseDate.')
    try:
        return parse_date(value)
    except ValueError:
        raise InvalidDateError(f'Invalid purchaseDate: {value!r}.') from None
