from sqlalchemy import Column, Integer, String, Boolean
from commerce_discounts.core.db import Base
from commerce_discounts.models.base.mixins import TimestampMixin


class CustomerGroup(Base, TimestampMixin):
    __tablename__ = "customer_groups"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    handle = Column(String(100), nullable=False, unique=True, index=True)
    default = Column(Boolean, default=False, nullable=False)

    def __repr__(self):
        return f"<CustomerGroup id={self.id} handle={self.handle}>"
