from __future__ import annotations

from ..config import TAX_RATE
from ..models import AmountMode, MoneyBreakdown
from .formatting import amount_value


def breakdown(amount, mode: AmountMode | str | None) -> MoneyBreakdown:
    """
    Split an amount into subtotal, tax and total.

    Any numeric type is accepted and computed as float; a non-numeric or
    non-finite amount counts as zero. Values are not rounded here; rounding
    happens only when formatted. Anything other than TAX_INCLUDED is treated
    as PLUS_TAX.
    """
    value = amount_value(amount)
    if value is None:
        value = 0.0
    if mode == AmountMode.TAX_INCLUDED:
        total = value
        subtotal = value / (1 + TAX_RATE)
        tax = total - subtotal
    else:
        subtotal = value
        tax = value * TAX_RATE
        total = subtotal + tax
    return MoneyBreakdown(subtotal=subtotal, tax=tax, total=total)
