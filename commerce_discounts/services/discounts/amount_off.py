# commerce_discounts/services/discounts/amount_off.py

from decimal import Decimal, InvalidOperation
from typing import List

from commerce_discounts.schemas.billing.cart_schemas import CartData, CartDiscount
from commerce_discounts.schemas.masters.discount_schemas import DiscountData
from commerce_discounts.services.discounts.discount_types import DiscountType
from commerce_discounts.utils.money import percentage_of, split_proportionally, to_minor_units

HUNDRED = Decimal("100")


def _as_decimal(value) -> Decimal | None:
    if value is None:
        return None
    try:
        value = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    # NaN / Infinity parse but cannot be compared or quantized
    return value if value.is_finite() else None


class AmountOff(DiscountType):
    """
    Percentage or fixed amount off the lines a discount is limited to.

    data:
        fixed_value   bool, fixed amount when true, percentage otherwise
        percentage    0 < p <= 100
        fixed_values  {currency: major-unit amount}
        min_prices    {currency: major-unit amount}, optional cart threshold
    """

    identifier = "amount_off"
    name = "Amount off"

    def validate(self, data: dict) -> None:
        if data.get("fixed_value"):
            values = data.get("fixed_values") or {}
            if not values:
                raise ValueError("fixed_values is required for a fixed amount discount")
            for currency, amount in values.items():
                amount = _as_decimal(amount)
                if amount is None or amount <= 0:
                    raise ValueError(f"Invalid fixed value for {currency}")
            return

        percentage = _as_decimal(data.get("percentage"))
        if percentage is None or percentage <= 0 or percentage > HUNDRED:
            raise ValueError("Invalid percentage discount")

    def apply(self, discount: DiscountData, cart: CartData) -> List[CartDiscount]:
        data = discount.data

        # an unparseable threshold is ignored rather than failing the whole pass
        min_price = _as_decimal((data.get("min_prices") or {}).get(cart.currency_code))
        if min_price is not None and cart.sub_total < to_minor_units(min_price):
            return []

        conditions = discount.purchasable_conditions
        if conditions and not self.matching_lines(cart, conditions):
            return []

        limitations = discount.purchasable_limitations
        lines = self.matching_lines(cart, limitations) if limitations else list(cart.lines)
        lines = [line for line in lines if line.remaining > 0]
        if not lines:
            return []

        if data.get("fixed_value"):
            return self._apply_fixed(discount, cart, lines)
        return self._apply_percentage(discount, lines)

    def _apply_percentage(self, discount, lines) -> List[CartDiscount]:
        percentage = _as_decimal(discount.data.get("percentage"))
        if percentage is None or percentage <= 0:
            return []
        percentage = min(percentage, HUNDRED)

        applied = []
        for line in lines:
            # on what is left of the line, so stacked percentages compound
            amount = min(percentage_of(line.remaining, percentage), line.remaining)
            if amount > 0:
                applied.append(self.record(line, discount, amount))
        return applied

    def _apply_fixed(self, discount, cart, lines) -> List[CartDiscount]:
        value = _as_decimal((discount.data.get("fixed_values") or {}).get(cart.currency_code))
        if value is None:
            return []
        total = to_minor_units(value)
        if total <= 0:
            return []

        weights = [line.remaining for line in lines]
        total = min(total, sum(weights))

        applied = []
        for line, share in zip(lines, split_proportionally(total, weights)):
            amount = min(share, line.remaining)
            if amount > 0:
                applied.append(self.record(line, discount, amount))
        return applied
