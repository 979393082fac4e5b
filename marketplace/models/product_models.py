from sqlalchemy import (
    Column, Integer, String, Text, Numeric, Boolean, JSON, CheckConstraint, Index,
    ForeignKey, DateTime, func
)
from sqlalchemy.orm import relationship
from marketplace.core.db import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    seller_id = Column(Integer, ForeignKey("sellers.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), index=True, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    discount_price = Column(Numeric(12, 2), nullable=True)
    images = Column(JSON, default=list)
    category = Column(String(100), nullable=False, index=True)
    stock = Column(Integer, default=0, nullable=False)
    allow_bargain = Column(Boolean, default=False, nullable=False)
    min_bargain_price = Column(Numeric(12, 2), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    customization = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    seller = relationship("Seller", back_populates="products", lazy="selectin")

    __table_args__ = (
        CheckConstraint(price > 0, name="check_product_price_positive"),
        CheckConstraint(stock >= 0, name="check_product_stock_non_negative"),
        CheckConstraint(
            "min_bargain_price IS NULL OR min_bargain_price < price",
            name="check_min_bargain_below_price",
        ),
        Index("ix_product_seller_active", "seller_id", "is_active"),
    )

    @property
    def store_name(self):
        return self.seller.store_name if self.seller else None

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}')>"
