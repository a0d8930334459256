# commerce_discounts/utils/money.py
#
# All amounts are integer minor units (pence, cents). Rounding is ROUND_HALF_UP
# everywhere so stacked discounts round the same way on every line.
from decimal import Decimal, ROUND_HALF_UP

from commerce_discounts.core.config import CURRENCY_DECIMAL_PLACES

WHOLE = Decimal("1")


def round_half_up(value) -> int:
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return int(value.quantize(WHOLE, rounding=ROUND_HALF_UP))


def to_minor_units(amount, decimal_places: int = CURRENCY_DECIMAL_PLACES) -> int:
    """Convert a major-unit amount (e.g. 10 or "9.99" GBP) to minor units."""
    if amount is None:
        return 0
    return round_half_up(Decimal(str(amount)) * (Decimal(10) ** decimal_places))


def percentage_of(amount: int, percentage) -> int:
    return round_half_up(Decimal(amount) * Decimal(str(percentage)) / Decimal(100))


def split_proportionally(total: int, weights: list[int]) -> list[int]:
    """
    Split `total` across `weights` pro rata (largest remainder).
    Each share is floored, then the leftover units go one at a time to the
    largest remainders, later weights winning ties. Shares are never negative
    and always sum to `total`.
    """
    if not weights:
        return []

    weight_sum = sum(weights)
    if weight_sum <= 0:
        return [0] * (len(weights) - 1) + [total]

    shares = []
    remainders = []
    for index, weight in enumerate(weights):
        share, remainder = divmod(total * weight, weight_sum)
        shares.append(share)
        remainders.append((remainder, index))

    leftover = total - sum(shares)
    for _, index in sorted(remainders, reverse=True)[:leftover]:
        shares[index] += 1

    return shares
