from sqlalchemy import Column, Integer, String, ForeignKey, Index
from commerce_discounts.core.db import Base
from commerce_discounts.models.base.mixins import TimestampMixin


class DiscountActivity(Base, TimestampMixin):
    """Immutable audit log. APPEND-ONLY. Never updated, never deleted."""

    __tablename__ = "discount_activity"

    id = Column(Integer, primary_key=True)
    discount_id = Column(Integer, ForeignKey("discounts.id", ondelete="SET NULL"), nullable=True, index=True)
    actor_snapshot = Column(String(150), nullable=False, index=True)
    code = Column(String(50), nullable=False)
    message = Column(String, nullable=False)

    __table_args__ = (Index("ix_discount_activity_discount_created", "discount_id", "created_at"),)

    def __repr__(self):
        return f"<DiscountActivity id={self.id} code={self.code}>"
