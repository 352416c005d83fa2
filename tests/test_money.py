from __future__ import annotations

from decimal import Decimal

import pytest

from ordenpdf.models import AmountMode
from ordenpdf.pipeline.formatting import format_currency
from ordenpdf.pipeline.money import breakdown


def test_plus_tax_adds_sixteen_percent() -> None:
    money = breakdown(150000, AmountMode.PLUS_TAX)
    assert money.subtotal == 150000
    assert money.tax == pytest.approx(24000)
    assert money.total == pytest.approx(174000)
    assert format_currency(money.total) == "$174,000.00"
    assert format_currency(money.subtotal + money.tax) == format_currency(money.total)


def test_tax_included_keeps_total() -> None:
    money = breakdown(116000, AmountMode.TAX_INCLUDED)
    assert money.total == 116000
    assert money.subtotal == pytest.approx(100000)
    assert money.tax == pytest.approx(16000)
    assert money.subtotal + money.tax == pytest.approx(money.total)
    assert format_currency(money.subtotal) == "$100,000.00"


@pytest.mark.parametrize("amount", [0.01, 1.0, 99.99, 1234.56, 999999999.0])
def test_breakdown_parts_add_up_at_display_precision(amount) -> None:
    for mode in AmountMode:
        money = breakdown(amount, mode)
        assert format_currency(money.subtotal + money.tax) == format_currency(money.total)
    assert breakdown(amount, AmountMode.TAX_INCLUDED).total == amount


def test_plain_string_mode_and_unknown_mode() -> None:
    assert breakdown(100, "integrado").total == 100
    assert breakdown(100, None).total == pytest.approx(116)


def test_decimal_amount_is_computed_as_float() -> None:
    money = breakdown(Decimal("150000"), AmountMode.PLUS_TAX)
    assert money.tax == pytest.approx(24000)
    assert format_currency(money.total) == "$174,000.00"
    included = breakdown(Decimal("116000.00"), AmountMode.TAX_INCLUDED)
    assert format_currency(included.subtotal) == "$100,000.00"


def test_non_numeric_amount_counts_as_zero() -> None:
    assert breakdown("abc", AmountMode.PLUS_TAX) == (0.0, 0.0, 0.0)
    assert breakdown(float("nan"), AmountMode.TAX_INCLUDED) == (0.0, 0.0, 0.0)
