"""
Money helpers shared by the payment services.

Amounts are Decimal with two places everywhere in the database; providers
take integer minor units (Stripe) or two-decimal strings (PayPal).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

from payments.state_machines import TransactionType

CENTS = Decimal("0.01")


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    """Decimal amount to integer cents, e.g. 200.00 -> 20000."""
    return int((to_cents(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def split_platform_fee(amount: Decimal, transaction_type: str) -> tuple[Decimal, Decimal]:
    """
    Split an amount into (platform_fee, artist_payout).

    Tips carry no fee. The fee is rounded to cents and the payout takes
    the remainder, so the two always add up to the amount exactly.
    """
    amount = to_cents(amount)
    if transaction_type == TransactionType.TIP:
        return Decimal("0.00"), amount

    fee = to_cents(amount * Decimal(settings.PLATFORM_FEE_PERCENT) / Decimal(100))
    return fee, amount - fee


__all__ = ["to_cents", "to_minor_units", "split_platform_fee"]
