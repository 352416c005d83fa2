from __future__ import annotations

import logging
import math
from datetime import date, datetime
from numbers import Number

from ..config import CURRENCY_FALLBACK, DATE_SENTINEL
from ..models import DateLike

logger = logging.getLogger(__name__)

MONTHS_ES = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)


def parse_date(value: DateLike) -> date | None:
    """Calendar date from an ISO string (time part ignored) or a date; None when unusable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    raw = value.strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return None


def format_date(value: DateLike) -> str:
    """Long Spanish (es-MX) date, e.g. "15 de marzo de 2025"."""
    parsed = parse_date(value)
    if parsed is None:
        if value:
            logger.debug("Unparseable date %r, using sentinel", value)
        return DATE_SENTINEL
    return f"{parsed.day} de {MONTHS_ES[parsed.month - 1]} de {parsed.year}"


def amount_value(amount) -> float | None:
    """Finite float for any numeric amount (int, float, Decimal); None otherwise."""
    if isinstance(amount, bool) or not isinstance(amount, Number):
        return None
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def format_currency(amount) -> str:
    """Mexican peso amount with grouping and two decimals, no trailing currency code."""
    value = amount_value(amount)
    if value is None:
        return CURRENCY_FALLBACK
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"
