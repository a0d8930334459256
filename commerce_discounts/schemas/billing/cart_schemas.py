# commerce_discounts/schemas/billing/cart_schemas.py

from pydantic import BaseModel, Field
from typing import List, Optional, Set, Union

from commerce_discounts.core.config import DEFAULT_CURRENCY
from commerce_discounts.schemas.masters.discount_schemas import DiscountData


# =========================
# CART VIEW
# =========================
class CartLineData(BaseModel):
    id: int
    purchasable_type: str = "product"
    purchasable_id: int
    quantity: int = Field(gt=0)
    unit_price: int = Field(ge=0)  # minor units
    brand_id: Optional[int] = None
    collection_ids: List[int] = Field(default_factory=list)

    # written by discount types during a single application pass
    discount_total: int = 0

    @property
    def sub_total(self) -> int:
        return self.unit_price * self.quantity

    @property
    def remaining(self) -> int:
        return max(self.sub_total - self.discount_total, 0)


class CartData(BaseModel):
    id: Optional[int] = None
    user_id: Optional[int] = None
    channel_id: Optional[int] = None
    customer_group_ids: List[int] = Field(default_factory=list)
    coupon_code: Optional[str] = None
    currency_code: str = DEFAULT_CURRENCY
    lines: List[CartLineData] = Field(default_factory=list)

    @property
    def sub_total(self) -> int:
        return sum(line.sub_total for line in self.lines)

    @property
    def discount_total(self) -> int:
        return sum(line.discount_total for line in self.lines)

    @property
    def total(self) -> int:
        return max(self.sub_total - self.discount_total, 0)

    @property
    def brand_ids(self) -> Set[int]:
        return {line.brand_id for line in self.lines if line.brand_id is not None}

    @property
    def collection_ids(self) -> Set[int]:
        return {cid for line in self.lines for cid in line.collection_ids}


# =========================
# APPLIED DISCOUNT
# =========================
class CartDiscount(BaseModel):
    """A discount matched to a cart line (or the whole cart) in one pass."""

    target: Union[CartLineData, CartData]
    discount: DiscountData
    amount: int = 0
