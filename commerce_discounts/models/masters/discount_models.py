from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    JSON,
    ForeignKey,
    Index,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from commerce_discounts.core.db import Base
from commerce_discounts.models.base.mixins import TimestampMixin, WindowMixin


class Discount(Base, TimestampMixin, WindowMixin):
    __tablename__ = "discounts"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    handle = Column(String(100), nullable=False, unique=True, index=True)
    # not unique: a later campaign may reuse the code of an expired one
    coupon = Column(String(100), nullable=True, index=True)
    type = Column(String(100), nullable=False)  # registry identifier, e.g. amount_off
    data = Column(JSON, nullable=True)
    priority = Column(Integer, nullable=False, default=1)
    stop = Column(Boolean, nullable=False, default=False)
    uses = Column(Integer, nullable=False, default=0)
    max_uses = Column(Integer, nullable=True)

    channels = relationship(
        "DiscountChannel",
        back_populates="discount",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    customer_groups = relationship(
        "DiscountCustomerGroup",
        back_populates="discount",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    purchasables = relationship(
        "DiscountPurchasable",
        back_populates="discount",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="DiscountPurchasable.id",
    )
    users = relationship(
        "DiscountUser",
        back_populates="discount",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    collections = relationship(
        "DiscountCollection",
        back_populates="discount",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    brands = relationship(
        "DiscountBrand",
        back_populates="discount",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("uses >= 0", name="ck_discount_uses_non_negative"),
        CheckConstraint("max_uses IS NULL OR uses <= max_uses", name="ck_discount_max_uses"),
        CheckConstraint(
            "ends_at IS NULL OR starts_at IS NULL OR ends_at > starts_at",
            name="ck_discount_window",
        ),
        Index("ix_discount_window", "starts_at", "ends_at"),
        Index("ix_discount_priority", "priority"),
    )

    def __repr__(self):
        return f"<Discount id={self.id} handle={self.handle} type={self.type}>"

    @property
    def user_ids(self):
        return [row.user_id for row in self.users]

    @property
    def collection_ids(self):
        return [row.collection_id for row in self.collections]

    @property
    def brand_ids(self):
        return [row.brand_id for row in self.brands]


class DiscountChannel(Base, TimestampMixin, WindowMixin):
    __tablename__ = "discount_channels"

    id = Column(Integer, primary_key=True)
    discount_id = Column(Integer, ForeignKey("discounts.id", ondelete="CASCADE"), nullable=False, index=True)
    channel_id = Column(Integer, ForeignKey("channels.id", ondelete="CASCADE"), nullable=False, index=True)
    enabled = Column(Boolean, nullable=False, default=False)

    discount = relationship("Discount", back_populates="channels")
    channel = relationship("Channel", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("discount_id", "channel_id", name="uq_discount_channel"),
    )


class DiscountCustomerGroup(Base, TimestampMixin, WindowMixin):
    __tablename__ = "discount_customer_groups"

    id = Column(Integer, primary_key=True)
    discount_id = Column(Integer, ForeignKey("discounts.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_group_id = Column(
        Integer, ForeignKey("customer_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    enabled = Column(Boolean, nullable=False, default=False)
    visible = Column(Boolean, nullable=False, default=False)

    discount = relationship("Discount", back_populates="customer_groups")
    customer_group = relationship("CustomerGroup", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("discount_id", "customer_group_id", name="uq_discount_customer_group"),
    )


class DiscountPurchasable(Base, TimestampMixin):
    __tablename__ = "discount_purchasables"

    id = Column(Integer, primary_key=True)
    discount_id = Column(Integer, ForeignKey("discounts.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # condition | limitation | reward
    purchasable_type = Column(String(100), nullable=False)
    purchasable_id = Column(Integer, nullable=False)

    discount = relationship("Discount", back_populates="purchasables")

    __table_args__ = (
        CheckConstraint(
            "type IN ('condition', 'limitation', 'reward')",
            name="ck_discount_purchasable_type",
        ),
        Index("ix_discount_purchasable_ref", "purchasable_type", "purchasable_id"),
    )

    def __repr__(self):
        return (
            f"<DiscountPurchasable discount_id={self.discount_id} type={self.type} "
            f"{self.purchasable_type}:{self.purchasable_id}>"
        )


# Users, collections and brands live outside this package, so these rows hold
# bare ids. A discount with no rows of a kind is not restricted by it.
class DiscountUser(Base, TimestampMixin):
    __tablename__ = "discount_users"

    id = Column(Integer, primary_key=True)
    discount_id = Column(Integer, ForeignKey("discounts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)

    discount = relationship("Discount", back_populates="users")

    __table_args__ = (
        UniqueConstraint("discount_id", "user_id", name="uq_discount_user"),
    )


class DiscountCollection(Base, TimestampMixin):
    __tablename__ = "discount_collections"

    id = Column(Integer, primary_key=True)
    discount_id = Column(Integer, ForeignKey("discounts.id", ondelete="CASCADE"), nullable=False, index=True)
    collection_id = Column(Integer, nullable=False, index=True)

    discount = relationship("Discount", back_populates="collections")

    __table_args__ = (
        UniqueConstraint("discount_id", "collection_id", name="uq_discount_collection"),
    )


class DiscountBrand(Base, TimestampMixin):
    __tablename__ = "discount_brands"

    id = Column(Integer, primary_key=True)
    discount_id = Column(Integer, ForeignKey("discounts.id", ondelete="CASCADE"), nullable=False, index=True)
    brand_id = Column(Integer, nullable=False, index=True)

    discount = relationship("Discount", back_populates="brands")

    __table_args__ = (
        UniqueConstraint("discount_id", "brand_id", name="uq_discount_brand"),
    )
