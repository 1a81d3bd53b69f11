"""
Fee Calculator

Splits an agreed amount into the platform fee and the influencer payout.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from .models import FeeBreakdown
from .protocols import InvalidAmountError

DEFAULT_COMMISSION_RATE = Decimal("0.10")
DEFAULT_QUANTUM = Decimal("0.01")


def calculate_fees(
    agreed_amount: Union[Decimal, int, str],
    commission_rate: Decimal = DEFAULT_COMMISSION_RATE,
    quantum: Decimal = DEFAULT_QUANTUM,
) -> FeeBreakdown:
    """
    Compute platform fee and payout.

    The fee is rounded once, half up, to the currency minor unit and the
    payout is the remainder, so both parts always sum to the agreed amount.

    Raises:
        InvalidAmountError: amount is a float, non-finite, not positive,
            or more precise than the minor unit
    """
    if isinstance(agreed_amount, (float, bool)):
        raise InvalidAmountError(
            f"Amount must be a Decimal, not {type(agreed_amount).__name__}", agreed_amount
        )

    try:
        amount = Decimal(agreed_amount)
    except (ArithmeticError, TypeError, ValueError):
        raise InvalidAmountError(f"Amount is not a number: {agreed_amount!r}", agreed_amount)

    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite: {amount}", agreed_amount)
    if amount <= 0:
        raise InvalidAmountError(f"Amount must be positive: {amount}", agreed_amount)
    try:
        exact = amount.quantize(quantum, rounding=ROUND_HALF_UP)
    except ArithmeticError:
        raise InvalidAmountError(f"Amount is out of range: {amount}", agreed_amount)
    if amount != exact:
        raise InvalidAmountError(
            f"Amount {amount} has more precision than the currency unit {quantum}", agreed_amount
        )

    platform_fee = (amount * commission_rate).quantize(quantum, rounding=ROUND_HALF_UP)
    return FeeBreakdown(
        agreed_amount=amount,
        platform_fee=platform_fee,
        influencer_payout=amount - platform_fee,
    )


__all__ = ["calculate_fees", "DEFAULT_COMMISSION_RATE", "DEFAULT_QUANTUM"]
