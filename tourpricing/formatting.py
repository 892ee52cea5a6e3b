"""Localized currency display for quotes and vouchers."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from babel import Locale
from babel.numbers import format_currency as babel_format_currency

from tourpricing.config import settings

Amount = Union[int, float, Decimal]


def _whole_unit_pattern(locale: str) -> str:
    pattern = Locale.parse(locale).currency_formats["standard"].pattern
    # "¤#,##,##0.00" -> "¤#,##,##0"
    return pattern.split(";")[0].replace(".00", "")


def _quantize(amount: Amount, exponent: str) -> Decimal:
    return Decimal(str(amount)).quantize(Decimal(exponent), rounding=ROUND_HALF_UP)


def format_currency(
    amount: Amount,
    currency: Optional[str] = None,
    locale: Optional[str] = None,
) -> str:
    """Format an amount in whole currency units, e.g. ₹1,25,000 for en_IN/INR.

    Halves round up, matching the rounding applied to quote totals.
    """
    currency = currency or settings.pricing.base_currency
    locale = locale or settings.pricing.currency_locale
    return babel_format_currency(
        _quantize(amount, "1"),
        currency,
        format=_whole_unit_pattern(locale),
        locale=locale,
        currency_digits=False,
    )


def format_currency_detailed(
    amount: Amount,
    currency: Optional[str] = None,
    locale: Optional[str] = None,
) -> str:
    """Format an amount with two decimals, e.g. ₹1,25,000.50 for en_IN/INR."""
    currency = currency or settings.pricing.base_currency
    locale = locale or settings.pricing.currency_locale
    return babel_format_currency(
        _quantize(amount, "0.01"),
        currency,
        locale=locale,
        currency_digits=False,
    )
