from sqlalchemy import (
    Column, Integer, String, Numeric, ForeignKey, DateTime, CheckConstraint, func
)
from sqlalchemy.orm import relationship
from marketplace.core.db import Base
import enum


class OfferStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    countered = "countered"


class BargainOffer(Base):
    __tablename__ = "bargain_offers"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    seller_id = Column(Integer, ForeignKey("sellers.id", ondelete="CASCADE"), nullable=False, index=True)
    offer_price = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default=OfferStatus.pending.value)
    counter_price = Column(Numeric(12, 2), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    product = relationship("Product", lazy="selectin")

    __table_args__ = (
        CheckConstraint(offer_price > 0, name="check_offer_price_positive"),
        CheckConstraint(status.in_([s.value for s in OfferStatus]), name="check_offer_status"),
    )

    @property
    def agreed_price(self):
        """Unit price an accepted offer is honoured at."""
        return self.counter_price if self.counter_price is not None else self.offer_price

    @property
    def product_name(self):
        return self.product.name if self.product else None

    @property
    def product_price(self):
        return self.product.price if self.product else None

    def __repr__(self):
        return f"<BargainOffer(id={self.id}, product_id={self.product_id}, status='{self.status}')>"
