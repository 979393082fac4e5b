from sqlalchemy import (
    Column, Integer, String, Numeric, ForeignKey, JSON, DateTime, CheckConstraint,
    UniqueConstraint, func
)
from marketplace.core.db import Base
import enum


class OrderStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


class PaymentMethod(str, enum.Enum):
    cod = "cod"
    online = "online"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    seller_id = Column(Integer, ForeignKey("sellers.id", ondelete="CASCADE"), nullable=False, index=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default=OrderStatus.pending.value)
    payment_method = Column(String(20), nullable=False)
    items = Column(JSON, nullable=False)  # [{"product_id":..., "quantity":..., "price":..., "bargain_offer_id":...}]
    idempotency_key = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(total_amount > 0, name="check_order_total_positive"),
        CheckConstraint(status.in_([s.value for s in OrderStatus]), name="check_order_status"),
        CheckConstraint(payment_method.in_([m.value for m in PaymentMethod]), name="check_payment_method"),
        UniqueConstraint("customer_id", "idempotency_key", name="uq_order_customer_idempotency_key"),
    )

    def __repr__(self):
        return f"<Order(id={self.id}, seller_id={self.seller_id}, status='{self.status}')>"
