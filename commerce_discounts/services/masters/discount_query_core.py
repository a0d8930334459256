from datetime import datetime

from sqlalchemy import select, update, or_
from sqlalchemy.orm import selectinload

from commerce_discounts.models.masters.discount_models import (
    Discount,
    DiscountCustomerGroup,
)


def _active_usable_where(*, now: datetime):
    """
    active: starts_at set and not in the future, ends_at null or in the future
    usable: max_uses null or uses < max_uses
    """
    return [
        Discount.starts_at.is_not(None),
        Discount.starts_at <= now,
        or_(Discount.ends_at.is_(None), Discount.ends_at > now),
        or_(Discount.max_uses.is_(None), Discount.uses < Discount.max_uses),
    ]


def _eligible_discounts_stmt(*, now: datetime):
    return (
        select(Discount)
        .options(
            selectinload(Discount.channels),
            selectinload(Discount.customer_groups),
            selectinload(Discount.purchasables),
            selectinload(Discount.users),
            selectinload(Discount.collections),
            selectinload(Discount.brands),
        )
        .where(*_active_usable_where(now=now))
        .order_by(Discount.priority.asc(), Discount.id.asc())
        .execution_options(populate_existing=True)
    )


def _coupon_lookup_stmt(*, code: str, now: datetime):
    return (
        select(Discount.id)
        .where(
            Discount.coupon == code,
            *_active_usable_where(now=now),
        )
        .limit(1)
    )


def _visible_discounts_stmt(*, customer_group_ids: list[int], now: datetime):
    visible_to_groups = (
        select(DiscountCustomerGroup.discount_id)
        .where(
            DiscountCustomerGroup.customer_group_id.in_(customer_group_ids),
            DiscountCustomerGroup.visible.is_(True),
            or_(
                DiscountCustomerGroup.starts_at.is_(None),
                DiscountCustomerGroup.starts_at <= now,
            ),
            or_(
                DiscountCustomerGroup.ends_at.is_(None),
                DiscountCustomerGroup.ends_at > now,
            ),
        )
    )

    return (
        select(Discount)
        .options(
            selectinload(Discount.channels),
            selectinload(Discount.customer_groups),
            selectinload(Discount.purchasables),
            selectinload(Discount.users),
            selectinload(Discount.collections),
            selectinload(Discount.brands),
        )
        .where(
            Discount.id.in_(visible_to_groups),
            Discount.starts_at.is_not(None),
            Discount.starts_at <= now,
            or_(Discount.ends_at.is_(None), Discount.ends_at > now),
        )
        .order_by(Discount.priority.asc(), Discount.id.asc())
        .execution_options(populate_existing=True)
    )


def _redeem_discount_stmt(*, discount_id: int):
    """
    Guarded increment: matches nothing once the discount is used up, so
    concurrent checkouts can never push uses past max_uses.
    """
    return (
        update(Discount)
        .where(
            Discount.id == discount_id,
            or_(Discount.max_uses.is_(None), Discount.uses < Discount.max_uses),
        )
        .values(uses=Discount.uses + 1)
        .returning(
            Discount.id,
            Discount.name,
            Discount.handle,
            Discount.uses,
            Discount.max_uses,
        )
        .execution_options(synchronize_session=False)
    )
