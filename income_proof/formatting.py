"""Display helpers for command line output."""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from income_proof.wallet import shorten_address

__all__ = ["format_currency", "format_date", "format_month", "shorten_address"]


def format_currency(amount: Decimal | int | float) -> str:
    """Whole-dollar USD amount, e.g. ``$12,345``."""
    rounded = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,}"


def format_date(moment: datetime) -> str:
    """Short date and time, e.g. ``Mar 5, 2026, 09:30``."""
    return f"{moment:%b} {moment.day}, {moment:%Y, %H:%M}"


def format_month(month_key: tuple[int, int]) -> str:
    """Render a (year, month) key as ``2026-03``."""
    year, month = month_key
    return f"{year:04d}-{month:02d}"
