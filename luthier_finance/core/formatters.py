"""
Display formatting (Brazilian conventions)
"""
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENTS = Decimal('0.01')


def format_currency(value: Union[Decimal, float, int, str]) -> str:
    """Format a value as Brazilian reais, e.g. ``R$ 1.234,56``"""
    amount = Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)
    sign = '-' if amount < 0 else ''
    # 1,234.56 -> 1.234,56
    digits = f"{abs(amount):,.2f}".replace(',', '_').replace('.', ',').replace('_', '.')
    return f"{sign}R$ {digits}"


def format_date_only(value: Union[date, datetime, str]) -> str:
    """Format a date (or ISO date string) as ``DD/MM/YYYY``"""
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return value.strftime('%d/%m/%Y')
