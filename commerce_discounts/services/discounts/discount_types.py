# commerce_discounts/services/discounts/discount_types.py

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List

from commerce_discounts.core.exceptions import InvalidArgumentType, StrategyNotFound
from commerce_discounts.schemas.billing.cart_schemas import CartData, CartDiscount, CartLineData
from commerce_discounts.schemas.masters.discount_schemas import DiscountData, DiscountPurchasableData

logger = logging.getLogger(__name__)


class DiscountType(ABC):
    """
    Strategy computing the effect of one discount on a cart.

    Implementations read `discount.data` and the current cart state, write the
    amounts they take onto `CartLineData.discount_total` and return one
    `CartDiscount` per line they touched. The discount itself is never
    modified. Amounts are integer minor units.
    """

    identifier: str = ""
    name: str = ""

    @abstractmethod
    def apply(self, discount: DiscountData, cart: CartData) -> List[CartDiscount]:
        ...

    def validate(self, data: dict) -> None:
        """Raise ValueError when `data` cannot drive this type."""

    # -----------------------------------------------------
    # helpers shared by implementations
    # -----------------------------------------------------
    @staticmethod
    def matching_lines(
        cart: CartData,
        rows: Iterable[DiscountPurchasableData],
    ) -> List[CartLineData]:
        refs = {(row.purchasable_type, row.purchasable_id) for row in rows}
        return [
            line for line in cart.lines
            if (line.purchasable_type, line.purchasable_id) in refs
        ]

    @staticmethod
    def record(line: CartLineData, discount: DiscountData, amount: int) -> CartDiscount:
        line.discount_total += amount
        return CartDiscount(target=line, discount=discount, amount=amount)

    def __repr__(self):
        return f"<{type(self).__name__} identifier={self.identifier}>"


class DiscountTypeRegistry:
    """Discount types keyed by identifier. Re-adding an identifier replaces it."""

    def __init__(self, types: Iterable = ()):
        self._types: dict[str, DiscountType] = {}
        for discount_type in types:
            self.add(discount_type)

    def add(self, discount_type) -> DiscountType:
        instance = discount_type() if isinstance(discount_type, type) else discount_type
        if not isinstance(instance, DiscountType):
            raise InvalidArgumentType("DiscountType", type(instance).__name__)
        if not instance.identifier:
            raise ValueError(f"{type(instance).__name__} has no identifier")

        if instance.identifier in self._types:
            logger.debug(
                "Replacing discount type",
                extra={"type": instance.identifier},
            )
        self._types[instance.identifier] = instance
        return instance

    def resolve(self, identifier: str) -> DiscountType:
        try:
            return self._types[identifier]
        except KeyError:
            raise StrategyNotFound(identifier) from None

    def all(self) -> List[DiscountType]:
        return list(self._types.values())

    def __contains__(self, identifier) -> bool:
        return identifier in self._types

    def __len__(self) -> int:
        return len(self._types)
