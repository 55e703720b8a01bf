from sqlalchemy import Column, Integer, ForeignKey, String, Numeric, Boolean
from sqlalchemy.orm import relationship

from marketplace.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # bez FK - produkt moze zostac pozniej usuniety
    product_id = Column(Integer, nullable=False)

    quantity = Column(Integer, nullable=False)
    price_at_purchase = Column(Numeric(10, 2), nullable=False)
    product_name = Column(String, nullable=False)
    product_image = Column(String, nullable=True)
    flash_sale_id = Column(Integer, nullable=True)

    stock_reconciled = Column(Boolean, nullable=False, default=False)
    sale_reconciled = Column(Boolean, nullable=False, default=False)

    order = relationship("OrderModel", back_populates="items")
