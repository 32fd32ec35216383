# aplyease/services/currency.py
from decimal import Decimal, ROUND_HALF_UP
from babel.numbers import format_currency

_CENT = Decimal("0.01")


def cents_to_decimal(cents) -> Decimal:
    return (Decimal(int(cents or 0)) / 100).quantize(_CENT)


def decimal_to_cents(amount) -> int:
    """Parse a major-unit amount ("50", "50.005", Decimal) into integer cents."""
    value = Decimal(str(amount).replace(",", "").replace("$", "").strip() or "0")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_usd(cents, locale: str = "en_US") -> str:
    return format_currency(cents_to_decimal(cents), "USD", locale=locale)


def usd_cents_to_inr_cents(cents, rate: int) -> int:
    # Fixed display rate, integer maths keeps repeated conversions exact.
    return int(cents or 0) * int(rate)


def format_inr(usd_cents, rate: int, locale: str = "en_IN") -> str:
    return format_currency(cents_to_decimal(usd_cents_to_inr_cents(usd_cents, rate)), "INR", locale=locale)


def money_dict(cents, rate: int) -> dict:
    """Raw cents plus both display strings, for JSON payloads."""
    return {
        "cents": int(cents or 0),
        "usd": format_usd(cents),
        "inr": format_inr(cents, rate),
    }
