# commerce_discounts/services/discounts/discount_manager.py

import logging
from collections.abc import Iterable as IterableABC
from datetime import datetime
from typing import Iterable, List, Optional

from pydantic import BaseModel

from commerce_discounts.core.exceptions import InvalidArgumentType
from commerce_discounts.models.enums.purchasable_scope import PurchasableScope
from commerce_discounts.schemas.billing.cart_schemas import CartData, CartDiscount
from commerce_discounts.schemas.masters.discount_schemas import (
    ChannelOut,
    CustomerGroupOut,
    DiscountData,
)
from commerce_discounts.services.discounts.amount_off import AmountOff
from commerce_discounts.services.discounts.buy_x_get_y import BuyXGetY
from commerce_discounts.services.discounts.discount_eligibility_core import (
    PurchasableRef,
    is_active,
    is_usable,
    matches_brands,
    matches_channels,
    matches_collections,
    matches_coupon,
    matches_customer_groups,
    matches_purchasables,
    matches_user,
    sort_by_priority,
)
from commerce_discounts.services.discounts.discount_types import DiscountType, DiscountTypeRegistry
from commerce_discounts.utils.datetime_utils import as_utc, utc_now

logger = logging.getLogger(__name__)

DEFAULT_TYPES = (AmountOff, BuyXGetY)


def default_registry() -> DiscountTypeRegistry:
    return DiscountTypeRegistry(DEFAULT_TYPES)


def cart_purchasables(cart: CartData) -> List[PurchasableRef]:
    return [(line.purchasable_type, line.purchasable_id) for line in cart.lines]


def _coerce(value, expected: type) -> list:
    """A single `expected` or a homogeneous collection of them, else raise."""
    if isinstance(value, expected):
        return [value]

    if isinstance(value, IterableABC) and not isinstance(value, (str, bytes, dict, BaseModel)):
        items = list(value)
        wrong = sorted({type(item).__name__ for item in items if not isinstance(item, expected)})
        if not wrong:
            return items
        raise InvalidArgumentType(expected.__name__, ", ".join(wrong))

    raise InvalidArgumentType(expected.__name__, type(value).__name__)


class DiscountManager:
    """
    Request-scoped discount evaluation context.

    Holds the channels and customer groups discounts are restricted to, the
    discount types available for this evaluation and the discounts applied so
    far. Build a new manager per cart evaluation; nothing is shared between
    instances except the type registry, if the caller passes one in.
    """

    def __init__(
        self,
        types: Optional[DiscountTypeRegistry] = None,
        *,
        now: Optional[datetime] = None,
    ):
        self._types = types if types is not None else default_registry()
        self._channels: List[ChannelOut] = []
        self._customer_groups: List[CustomerGroupOut] = []
        self._applied: List[CartDiscount] = []
        self._now = as_utc(now)

    @property
    def now(self) -> datetime:
        return self._now or utc_now()

    # -----------------------------------------------------
    # RESTRICTIONS
    # -----------------------------------------------------
    def channel(self, channels) -> "DiscountManager":
        self._channels.extend(_coerce(channels, ChannelOut))
        return self

    def customer_group(self, customer_groups) -> "DiscountManager":
        self._customer_groups.extend(_coerce(customer_groups, CustomerGroupOut))
        return self

    def get_channels(self) -> List[ChannelOut]:
        return list(self._channels)

    def get_customer_groups(self) -> List[CustomerGroupOut]:
        return list(self._customer_groups)

    # -----------------------------------------------------
    # TYPES
    # -----------------------------------------------------
    def add_type(self, discount_type) -> "DiscountManager":
        self._types.add(discount_type)
        return self

    def get_types(self) -> List[DiscountType]:
        return self._types.all()

    # -----------------------------------------------------
    # APPLIED
    # -----------------------------------------------------
    def add_applied(self, cart_discount: CartDiscount) -> "DiscountManager":
        self._applied.append(cart_discount)
        return self

    def get_applied(self) -> List[CartDiscount]:
        return list(self._applied)

    # -----------------------------------------------------
    # ELIGIBILITY
    # -----------------------------------------------------
    def get_discounts(
        self,
        cart: CartData,
        discounts: Iterable[DiscountData],
        *,
        purchasables: Optional[Iterable[PurchasableRef]] = None,
        scope: Optional[PurchasableScope] = None,
        now: Optional[datetime] = None,
    ) -> List[DiscountData]:
        now = as_utc(now) or self.now
        channel_ids = {channel.id for channel in self._channels}
        group_ids = {group.id for group in self._customer_groups}
        refs = list(purchasables) if purchasables is not None else None
        brand_ids = cart.brand_ids
        collection_ids = cart.collection_ids

        eligible = []
        for discount in discounts:
            if not (is_active(discount, now) and is_usable(discount)):
                continue
            if channel_ids and not matches_channels(discount, channel_ids, now):
                continue
            if group_ids and not matches_customer_groups(discount, group_ids, now):
                continue
            if not matches_coupon(discount, cart.coupon_code):
                continue
            if not matches_user(discount, cart.user_id):
                continue
            if not matches_collections(discount, collection_ids):
                continue
            if not matches_brands(discount, brand_ids):
                continue
            if refs is not None and not matches_purchasables(discount, refs, scope):
                continue
            eligible.append(discount)

        ordered = sort_by_priority(eligible)
        logger.debug(
            "Eligible discounts",
            extra={
                "cart_id": cart.id,
                "coupon_code": cart.coupon_code,
                "discount_ids": [discount.id for discount in ordered],
            },
        )
        return ordered

    def validate_coupon(
        self,
        code,
        discounts: Iterable[DiscountData],
        *,
        now: Optional[datetime] = None,
    ) -> bool:
        # channel / customer group restrictions deliberately not applied
        if not isinstance(code, str) or not code:
            return False

        now = as_utc(now) or self.now
        return any(
            discount.coupon == code and is_active(discount, now) and is_usable(discount)
            for discount in discounts
        )

    # -----------------------------------------------------
    # APPLICATION
    # -----------------------------------------------------
    def apply(
        self,
        cart: CartData,
        discounts: Iterable[DiscountData],
        *,
        now: Optional[datetime] = None,
    ) -> List[CartDiscount]:
        for discount in self.get_discounts(cart, discounts, now=now):
            discount_type = self._types.resolve(discount.type)
            applied = discount_type.apply(discount, cart)

            for cart_discount in applied:
                self.add_applied(cart_discount)

            if applied and discount.stop:
                logger.info(
                    "Discount stopped further evaluation",
                    extra={"cart_id": cart.id, "discount_id": discount.id},
                )
                break

        return self.get_applied()
