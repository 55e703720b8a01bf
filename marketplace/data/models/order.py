from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, Boolean, JSON
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from marketplace.data.database import Base

class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(String, nullable=False, default="Pending")  # Pending, Processing, Shipped, Delivered, Cancelled, Payment Failed
    total_amount = Column(Numeric(10, 2), nullable=False)
    order_date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    shipping_address = Column(JSON, nullable=False)
    payment_method = Column(String, nullable=False)
    transaction_id = Column(String, nullable=True)

    # flaga dla operatora / sweepera (tasks/reconcile.py)
    needs_reconciliation = Column(Boolean, nullable=False, default=False)
    reconciliation_note = Column(String, nullable=True)
    reconciliation_attempts = Column(Integer, nullable=False, default=0)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )
