# commerce_discounts/services/discounts/buy_x_get_y.py

from typing import List

from commerce_discounts.schemas.billing.cart_schemas import CartData, CartDiscount
from commerce_discounts.schemas.masters.discount_schemas import DiscountData
from commerce_discounts.services.discounts.discount_types import DiscountType


def _positive_int(value, default=None):
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


class BuyXGetY(DiscountType):
    """
    Every `min_qty` units bought from the condition lines earns `reward_qty`
    free units on the reward lines, cheapest first, up to `max_reward_qty`.
    """

    identifier = "buy_x_get_y"
    name = "Buy X get Y"

    def validate(self, data: dict) -> None:
        if _positive_int(data.get("min_qty")) is None:
            raise ValueError("min_qty must be a positive integer")
        if "reward_qty" in data and _positive_int(data.get("reward_qty")) is None:
            raise ValueError("reward_qty must be a positive integer")
        if data.get("max_reward_qty") is not None and _positive_int(data["max_reward_qty"]) is None:
            raise ValueError("max_reward_qty must be a positive integer")

    def apply(self, discount: DiscountData, cart: CartData) -> List[CartDiscount]:
        data = discount.data
        min_qty = _positive_int(data.get("min_qty"))
        if min_qty is None:
            return []

        conditions = discount.purchasable_conditions
        condition_lines = self.matching_lines(cart, conditions) if conditions else list(cart.lines)
        bought = sum(line.quantity for line in condition_lines)
        if bought < min_qty:
            return []

        free_units = (bought // min_qty) * _positive_int(data.get("reward_qty"), 1)
        max_reward = _positive_int(data.get("max_reward_qty"))
        if max_reward is not None:
            free_units = min(free_units, max_reward)

        reward_lines = sorted(
            self.matching_lines(cart, discount.purchasable_rewards),
            key=lambda line: (line.unit_price, line.id),
        )

        applied = []
        for line in reward_lines:
            if free_units <= 0:
                break
            units = min(line.quantity, free_units)
            amount = min(units * line.unit_price, line.remaining)
            if amount > 0:
                applied.append(self.record(line, discount, amount))
            free_units -= units
        return applied
