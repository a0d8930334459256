from datetime import datetime, timezone, timedelta

from commerce_discounts.schemas.billing.cart_schemas import CartData, CartLineData
from commerce_discounts.schemas.masters.discount_schemas import (
    ChannelOut,
    ChannelPivot,
    CustomerGroupOut,
    CustomerGroupPivot,
    DiscountData,
    DiscountPurchasableData,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)
DAY = timedelta(days=1)


def make_discount(id=1, **overrides):
    values = {
        "id": id,
        "name": f"Discount {id}",
        "handle": f"discount-{id}",
        "type": "amount_off",
        "data": {"percentage": 10},
        "starts_at": NOW - DAY,
    }
    values.update(overrides)
    return DiscountData(**values)


def make_channel(id=1, handle=None):
    return ChannelOut(id=id, name=f"Channel {id}", handle=handle or f"channel-{id}")


def make_customer_group(id=1, handle=None):
    return CustomerGroupOut(id=id, name=f"Group {id}", handle=handle or f"group-{id}")


def channel_pivot(channel_id, enabled=True, starts_at=None, ends_at=None):
    return ChannelPivot(channel_id=channel_id, enabled=enabled, starts_at=starts_at, ends_at=ends_at)


def group_pivot(group_id, enabled=True, visible=True, starts_at=None, ends_at=None):
    return CustomerGroupPivot(
        customer_group_id=group_id,
        enabled=enabled,
        visible=visible,
        starts_at=starts_at,
        ends_at=ends_at,
    )


def purchasable(scope, purchasable_id, purchasable_type="product"):
    return DiscountPurchasableData(
        type=scope,
        purchasable_type=purchasable_type,
        purchasable_id=purchasable_id,
    )


def make_line(id=1, purchasable_id=None, quantity=1, unit_price=1000, purchasable_type="product", **extra):
    return CartLineData(
        id=id,
        purchasable_type=purchasable_type,
        purchasable_id=purchasable_id if purchasable_id is not None else id,
        quantity=quantity,
        unit_price=unit_price,
        **extra,
    )


def make_cart(lines=None, coupon_code=None, **overrides):
    return CartData(
        id=overrides.pop("id", 1),
        lines=lines if lines is not None else [make_line()],
        coupon_code=coupon_code,
        **overrides,
    )
