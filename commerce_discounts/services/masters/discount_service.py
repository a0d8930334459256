# commerce_discounts/services/masters/discount_service.py

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from commerce_discounts.models.masters.channel_models import Channel
from commerce_discounts.models.masters.customer_group_models import CustomerGroup
from commerce_discounts.models.masters.discount_models import (
    Discount,
    DiscountChannel,
    DiscountCustomerGroup,
    DiscountPurchasable,
    DiscountUser,
    DiscountCollection,
    DiscountBrand,
)
from commerce_discounts.models.enums.purchasable_scope import PurchasableScope
from commerce_discounts.schemas.billing.cart_schemas import CartData, CartDiscount
from commerce_discounts.schemas.masters.discount_schemas import (
    ChannelOut,
    CustomerGroupOut,
    DiscountCreate,
    DiscountData,
    DiscountListData,
    RedemptionOut,
)
from commerce_discounts.services.discounts.discount_eligibility_core import PurchasableRef
from commerce_discounts.services.discounts.discount_manager import DiscountManager, default_registry
from commerce_discounts.services.discounts.discount_types import DiscountTypeRegistry
from commerce_discounts.services.masters.discount_query_core import (
    _coupon_lookup_stmt,
    _eligible_discounts_stmt,
    _redeem_discount_stmt,
    _visible_discounts_stmt,
)
from commerce_discounts.core.exceptions import AppException
from commerce_discounts.constants.error_codes import ErrorCode
from commerce_discounts.constants.activity_codes import ActivityCode
from commerce_discounts.utils.activity_helpers import emit_activity
from commerce_discounts.utils.datetime_utils import as_utc, utc_now

logger = logging.getLogger(__name__)

_ASSOCIATION_FIELDS = {
    "channels",
    "customer_groups",
    "purchasables",
    "user_ids",
    "collection_ids",
    "brand_ids",
}


# =====================================================
# MAPPER
# =====================================================
def _map_discount(discount: Discount) -> DiscountData:
    return DiscountData.model_validate(discount)


# =====================================================
# VALIDATION
# =====================================================
def _validate_window(starts_at: datetime | None, ends_at: datetime | None, label: str):
    if starts_at is not None and ends_at is not None and ends_at <= starts_at:
        raise AppException(
            400,
            f"Invalid date range for {label}",
            ErrorCode.DISCOUNT_INVALID_RANGE,
        )


def _validate_discount(payload: DiscountCreate, types: DiscountTypeRegistry):
    _validate_window(payload.starts_at, payload.ends_at, "discount")
    for pivot in payload.channels:
        _validate_window(pivot.starts_at, pivot.ends_at, f"channel {pivot.channel_id}")
    for pivot in payload.customer_groups:
        _validate_window(pivot.starts_at, pivot.ends_at, f"customer group {pivot.customer_group_id}")

    if payload.type not in types:
        raise AppException(
            400,
            f"Unknown discount type '{payload.type}'",
            ErrorCode.DISCOUNT_INVALID_VALUE,
        )

    try:
        types.resolve(payload.type).validate(payload.data)
    except ValueError as e:
        raise AppException(400, str(e), ErrorCode.DISCOUNT_INVALID_VALUE)

    if payload.coupon is not None and not payload.coupon.strip():
        raise AppException(400, "Coupon cannot be blank", ErrorCode.DISCOUNT_INVALID_VALUE)


# =====================================================
# CREATE
# =====================================================
async def create_discount(
    db: AsyncSession,
    payload: DiscountCreate,
    *,
    actor: str = "system",
    types: Optional[DiscountTypeRegistry] = None,
) -> DiscountData:
    _validate_discount(payload, types if types is not None else default_registry())

    try:
        discount = Discount(
            **payload.model_dump(exclude=_ASSOCIATION_FIELDS),
            channels=[DiscountChannel(**c.model_dump()) for c in payload.channels],
            customer_groups=[DiscountCustomerGroup(**g.model_dump()) for g in payload.customer_groups],
            purchasables=[
                DiscountPurchasable(
                    type=p.type.value,
                    purchasable_type=p.purchasable_type,
                    purchasable_id=p.purchasable_id,
                )
                for p in payload.purchasables
            ],
            users=[DiscountUser(user_id=i) for i in dict.fromkeys(payload.user_ids)],
            collections=[DiscountCollection(collection_id=i) for i in dict.fromkeys(payload.collection_ids)],
            brands=[DiscountBrand(brand_id=i) for i in dict.fromkeys(payload.brand_ids)],
        )
        db.add(discount)
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise AppException(
            409,
            "Discount handle already exists",
            ErrorCode.DISCOUNT_CODE_EXISTS,
        )

    await emit_activity(
        db,
        discount_id=discount.id,
        actor=actor,
        code=ActivityCode.CREATE_DISCOUNT,
        target_name=discount.name,
        target_code=discount.coupon or discount.handle,
    )

    await db.commit()
    logger.info("Discount created", extra={"discount_id": discount.id, "handle": discount.handle})
    return _map_discount(discount)


# =====================================================
# LOAD
# =====================================================
async def load_discounts(
    db: AsyncSession,
    *,
    now: Optional[datetime] = None,
) -> List[DiscountData]:
    """Active, usable discounts with their pivots, by priority then id."""
    now = as_utc(now) or utc_now()
    result = await db.execute(_eligible_discounts_stmt(now=now))
    return [_map_discount(d) for d in result.scalars().all()]


async def list_visible_discounts(
    db: AsyncSession,
    customer_group_ids: Iterable[int],
    *,
    now: Optional[datetime] = None,
) -> DiscountListData:
    customer_group_ids = list(customer_group_ids)
    if not customer_group_ids:
        return DiscountListData(total=0, items=[])

    now = as_utc(now) or utc_now()
    result = await db.execute(
        _visible_discounts_stmt(customer_group_ids=customer_group_ids, now=now)
    )
    items = [_map_discount(d) for d in result.scalars().all()]
    return DiscountListData(total=len(items), items=items)


# =====================================================
# EVALUATION
# =====================================================
async def build_manager(
    db: AsyncSession,
    cart: CartData,
    *,
    types: Optional[DiscountTypeRegistry] = None,
    now: Optional[datetime] = None,
) -> DiscountManager:
    """A fresh manager restricted to the cart's channel and customer groups."""
    manager = DiscountManager(types, now=now)

    if cart.channel_id is not None:
        channel = await db.get(Channel, cart.channel_id)
        if channel:
            manager.channel(ChannelOut.model_validate(channel))
        else:
            logger.warning("Cart channel not found", extra={"channel_id": cart.channel_id})

    if cart.customer_group_ids:
        result = await db.execute(
            select(CustomerGroup)
            .where(CustomerGroup.id.in_(cart.customer_group_ids))
            .order_by(CustomerGroup.id)
        )
        groups = result.scalars().all()
        if groups:
            manager.customer_group([CustomerGroupOut.model_validate(g) for g in groups])

    return manager


async def get_discounts(
    db: AsyncSession,
    cart: CartData,
    manager: DiscountManager,
    *,
    purchasables: Optional[Iterable[PurchasableRef]] = None,
    scope: Optional[PurchasableScope] = None,
) -> List[DiscountData]:
    now = manager.now
    discounts = await load_discounts(db, now=now)
    return manager.get_discounts(
        cart,
        discounts,
        purchasables=purchasables,
        scope=scope,
        now=now,
    )


async def apply_discounts(
    db: AsyncSession,
    cart: CartData,
    manager: DiscountManager,
) -> List[CartDiscount]:
    now = manager.now
    discounts = await load_discounts(db, now=now)
    applied = manager.apply(cart, discounts, now=now)
    logger.info(
        "Discounts applied",
        extra={
            "cart_id": cart.id,
            "applied": len(applied),
            "discount_total": cart.discount_total,
        },
    )
    return applied


async def validate_coupon(
    db: AsyncSession,
    code,
    *,
    now: Optional[datetime] = None,
) -> bool:
    if not isinstance(code, str) or not code:
        return False

    now = as_utc(now) or utc_now()
    found = await db.scalar(_coupon_lookup_stmt(code=code, now=now))
    return found is not None


# =====================================================
# REDEMPTION
# =====================================================
async def redeem_discounts(
    db: AsyncSession,
    applied: Iterable[CartDiscount],
    *,
    actor: str = "system",
) -> List[RedemptionOut]:
    """
    Count one use per distinct applied discount. All or nothing: if any
    discount is used up the transaction is rolled back and a 409 raised.
    """
    discount_ids = list(dict.fromkeys(cd.discount.id for cd in applied))

    redeemed = []
    for discount_id in discount_ids:
        result = await db.execute(_redeem_discount_stmt(discount_id=discount_id))
        row = result.one_or_none()

        if row is None:
            await db.rollback()
            logger.warning("Discount usage limit reached", extra={"discount_id": discount_id})
            raise AppException(
                409,
                "Discount usage limit reached",
                ErrorCode.DISCOUNT_USAGE_LIMIT_REACHED,
                {"discount_id": discount_id},
            )

        await emit_activity(
            db,
            discount_id=row.id,
            actor=actor,
            code=ActivityCode.REDEEM_DISCOUNT,
            target_name=row.name,
            target_code=row.handle,
            uses=row.uses,
            max_uses=row.max_uses if row.max_uses is not None else "unlimited",
        )
        redeemed.append(
            RedemptionOut(
                discount_id=row.id,
                handle=row.handle,
                uses=row.uses,
                max_uses=row.max_uses,
            )
        )

    await db.commit()
    logger.info("Discounts redeemed", extra={"discount_ids": discount_ids})
    return redeemed
