"""
Display formatting helpers.
Money and quantities cross the boundary with two fraction digits.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from datetime import date, datetime
from typing import Union, Optional

TWO_PLACES = Decimal('0.01')
# Scale of the Numeric(14, 4) money and quantity columns
STORAGE_PLACES = Decimal('0.0001')


def to_decimal(value: Union[int, float, Decimal, str, None]) -> Decimal:
    """
    Convert a numeric value (including aggregates that came back as None) to Decimal.
    
    Floats go through str() so 0.1 stays 0.1 instead of its binary expansion.
    
    Raises:
        ValueError: if the value is not numeric, or is NaN or infinite.
    """
    if value is None or value == '':
        return Decimal('0')
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError):
            raise ValueError(f'Invalid number: {value!r}')
    if not result.is_finite():
        raise ValueError(f'Invalid number: {value!r}')
    return result


def to_storage(value: Decimal) -> Decimal:
    """
    Round to the four fraction digits the database keeps, so reads match writes.
    
    Raises:
        ValueError: if the value is too large to hold at that scale.
    """
    try:
        return value.quantize(STORAGE_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Number out of range: {value!r}")


def money(value: Union[int, float, Decimal, str, None]) -> str:
    """
    Format a monetary value with exactly two fraction digits.
    
    Examples:
        money(20) -> "20.00"
        money(Decimal('15.005')) -> "15.01"
        money(None) -> "0.00"
    """
    return str(to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def quantity(value: Union[int, float, Decimal, str, None]) -> str:
    """Format a quantity with two fraction digits (quantities may be fractional)."""
    return money(value)


def date_str(value: Union[date, datetime, str, None]) -> str:
    """Format a date/datetime as YYYY-MM-DD HH:MM:SS (date only for plain dates)."""
    if value is None or value == '':
        return '-'
    if isinstance(value, datetime):
        return value.strftime('%Y-%m-%d %H:%M:%S')
    if isinstance(value, date):
        return value.strftime('%Y-%m-%d')
    return str(value)


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD string; blank returns None."""
    if value is None or not str(value).strip():
        return None
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError:
        raise ValueError(f'Invalid date: {value}. Use YYYY-MM-DD')
