from sqlalchemy import (
    Column, Integer, String, Text, Numeric, DateTime, ForeignKey, CheckConstraint, func
)
from sqlalchemy.orm import relationship
from marketplace.core.db import Base
import enum


class SellerStatus(str, enum.Enum):
    active = "active"
    suspended = "suspended"
    banned = "banned"


class Seller(Base):
    __tablename__ = "sellers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    store_name = Column(String(255), nullable=False)
    store_description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=SellerStatus.active.value)
    commission_owed = Column(Numeric(12, 2), nullable=False, default=0)
    last_payment_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="seller", lazy="selectin")
    products = relationship("Product", back_populates="seller", passive_deletes=True)

    __table_args__ = (
        CheckConstraint(status.in_([s.value for s in SellerStatus]), name="check_seller_status"),
        CheckConstraint(commission_owed >= 0, name="check_commission_owed_non_negative"),
    )

    @property
    def email(self):
        return self.user.email if self.user else None

    def __repr__(self):
        return f"<Seller(id={self.id}, store_name='{self.store_name}', status='{self.status}')>"
