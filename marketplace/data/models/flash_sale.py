from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, Boolean, CheckConstraint
from datetime import datetime, timezone

from marketplace.data.database import Base


class FlashSaleModel(Base):
    __tablename__ = "flash_sales"
    __table_args__ = (CheckConstraint("sales_count >= 0", name="ck_flash_sales_count_non_negative"),)

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)

    discount_type = Column(String, nullable=False)  # percentage, fixed_amount
    discount_value = Column(Numeric(10, 2), nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    stock_cap = Column(Integer, nullable=True)
    sales_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
