# commerce_discounts/schemas/masters/discount_schemas.py

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Any, Dict, List, Optional

from commerce_discounts.models.enums.purchasable_scope import PurchasableScope
from commerce_discounts.utils.datetime_utils import as_utc


# =====================================================
# BASE
# =====================================================
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class WindowFields(BaseModel):
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None

    @field_validator("starts_at", "ends_at")
    @classmethod
    def _normalise_utc(cls, value):
        return as_utc(value)


# =====================================================
# CHANNELS / CUSTOMER GROUPS
# =====================================================
class ChannelOut(ORMBase):
    id: int
    name: str
    handle: str


class CustomerGroupOut(ORMBase):
    id: int
    name: str
    handle: str


# =====================================================
# PIVOTS
# =====================================================
class ChannelPivot(ORMBase, WindowFields):
    channel_id: int
    enabled: bool = False


class CustomerGroupPivot(ORMBase, WindowFields):
    customer_group_id: int
    enabled: bool = False
    visible: bool = False


class DiscountPurchasableData(ORMBase):
    type: PurchasableScope
    purchasable_type: str
    purchasable_id: int


# =====================================================
# DISCOUNT (read-only view handed to the engine)
# =====================================================
class DiscountData(WindowFields):
    id: int
    name: str
    handle: str
    coupon: Optional[str] = None
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: int = 1
    stop: bool = False
    uses: int = 0
    max_uses: Optional[int] = None

    channels: List[ChannelPivot] = Field(default_factory=list)
    customer_groups: List[CustomerGroupPivot] = Field(default_factory=list)
    purchasables: List[DiscountPurchasableData] = Field(default_factory=list)
    user_ids: List[int] = Field(default_factory=list)
    collection_ids: List[int] = Field(default_factory=list)
    brand_ids: List[int] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @field_validator("data", mode="before")
    @classmethod
    def _empty_data(cls, value):
        return value or {}

    def purchasables_of(self, scope: PurchasableScope) -> List[DiscountPurchasableData]:
        return [p for p in self.purchasables if p.type == scope]

    @property
    def purchasable_conditions(self) -> List[DiscountPurchasableData]:
        return self.purchasables_of(PurchasableScope.condition)

    @property
    def purchasable_limitations(self) -> List[DiscountPurchasableData]:
        return self.purchasables_of(PurchasableScope.limitation)

    @property
    def purchasable_rewards(self) -> List[DiscountPurchasableData]:
        return self.purchasables_of(PurchasableScope.reward)


# =====================================================
# CREATE
# =====================================================
class DiscountChannelCreate(WindowFields):
    channel_id: int
    enabled: bool = True


class DiscountCustomerGroupCreate(WindowFields):
    customer_group_id: int
    enabled: bool = True
    visible: bool = True


class DiscountPurchasableCreate(BaseModel):
    type: PurchasableScope
    purchasable_type: str = "product"
    purchasable_id: int


class DiscountCreate(WindowFields):
    name: str
    handle: str
    coupon: Optional[str] = None
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: int = Field(1, ge=0)
    stop: bool = False
    max_uses: Optional[int] = Field(None, ge=1)

    channels: List[DiscountChannelCreate] = Field(default_factory=list)
    customer_groups: List[DiscountCustomerGroupCreate] = Field(default_factory=list)
    purchasables: List[DiscountPurchasableCreate] = Field(default_factory=list)
    user_ids: List[int] = Field(default_factory=list)
    collection_ids: List[int] = Field(default_factory=list)
    brand_ids: List[int] = Field(default_factory=list)


class DiscountListData(BaseModel):
    total: int
    items: List[DiscountData]


# =====================================================
# REDEMPTION
# =====================================================
class RedemptionOut(BaseModel):
    discount_id: int
    handle: str
    uses: int
    max_uses: Optional[int] = None
