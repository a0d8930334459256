# commerce_discounts/services/discounts/discount_eligibility_core.py
#
# Pure predicates over DiscountData. Null timestamps are open bounds, except a
# discount's own starts_at, which must be set for it to be active.
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from commerce_discounts.models.enums.purchasable_scope import PurchasableScope
from commerce_discounts.schemas.masters.discount_schemas import DiscountData

PurchasableRef = Tuple[str, int]


def within_window(now: datetime, starts_at: Optional[datetime], ends_at: Optional[datetime]) -> bool:
    """now in [starts_at, ends_at)"""
    if starts_at is not None and starts_at > now:
        return False
    if ends_at is not None and ends_at <= now:
        return False
    return True


def is_active(discount: DiscountData, now: datetime) -> bool:
    if discount.starts_at is None:
        return False
    return within_window(now, discount.starts_at, discount.ends_at)


def is_usable(discount: DiscountData) -> bool:
    return discount.max_uses is None or discount.uses < discount.max_uses


def matches_channels(discount: DiscountData, channel_ids: Iterable[int], now: datetime) -> bool:
    if not discount.channels:
        return True

    channel_ids = set(channel_ids)
    return any(
        pivot.channel_id in channel_ids
        and pivot.enabled
        and within_window(now, pivot.starts_at, pivot.ends_at)
        for pivot in discount.channels
    )


def matches_customer_groups(discount: DiscountData, group_ids: Iterable[int], now: datetime) -> bool:
    # `visible` only drives listings, never applicability
    if not discount.customer_groups:
        return True

    group_ids = set(group_ids)
    return any(
        pivot.customer_group_id in group_ids
        and pivot.enabled
        and within_window(now, pivot.starts_at, pivot.ends_at)
        for pivot in discount.customer_groups
    )


def matches_coupon(discount: DiscountData, coupon_code: Optional[str]) -> bool:
    if discount.coupon is None:
        return True
    if not coupon_code:
        return False
    return discount.coupon == coupon_code


def matches_purchasables(
    discount: DiscountData,
    purchasables: Iterable[PurchasableRef],
    scope: Optional[PurchasableScope] = None,
) -> bool:
    rows = discount.purchasables_of(scope) if scope else discount.purchasables
    if not rows:
        return True

    refs = set(purchasables)
    return any((row.purchasable_type, row.purchasable_id) in refs for row in rows)


def matches_user(discount: DiscountData, user_id: Optional[int]) -> bool:
    if not discount.user_ids:
        return True
    return user_id is not None and user_id in discount.user_ids


def matches_collections(discount: DiscountData, collection_ids: Iterable[int]) -> bool:
    if not discount.collection_ids:
        return True
    return not set(discount.collection_ids).isdisjoint(collection_ids)


def matches_brands(discount: DiscountData, brand_ids: Iterable[int]) -> bool:
    if not discount.brand_ids:
        return True
    return not set(discount.brand_ids).isdisjoint(brand_ids)


def sort_by_priority(discounts: Iterable[DiscountData]) -> List[DiscountData]:
    # sorted() is stable: equal priorities keep their incoming order
    return sorted(discounts, key=lambda discount: discount.priority)
