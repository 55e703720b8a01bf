# marketplace/repos/inventory_repo.py
from sqlalchemy import select, update, or_
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel
from marketplace.data.models.flash_sale import FlashSaleModel


class InventoryRepo:
    """
    Liczniki (stock, sales_count) zmieniane jednym UPDATE po stronie bazy,
    bez read-modify-write po stronie klienta.
    Nie commituje - commit robi InventoryReconciler razem ze znacznikiem pozycji.
    """

    def __init__(self, db: Session):
        self.db = db

    def decrement_stock_if_available(self, product_id: int, quantity: int) -> int:
        #update products set stock = stock - 2 where id = 1 and stock >= 2
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(stock=ProductModel.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def floor_stock(self, product_id: int) -> int:
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock=0)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def get_stock(self, product_id: int) -> int | None:
        return self.db.execute(
            select(ProductModel.stock).where(ProductModel.id == product_id)
        ).scalar_one_or_none()

    def increment_sales_count(self, sale_id: int, quantity: int, enforce_cap: bool = False) -> int:
        stmt = update(FlashSaleModel).where(FlashSaleModel.id == sale_id)
        if enforce_cap:
            stmt = stmt.where(
                or_(
                    FlashSaleModel.stock_cap.is_(None),
                    FlashSaleModel.sales_count + quantity <= FlashSaleModel.stock_cap,
                )
            )
        result = self.db.execute(
            stmt.values(sales_count=FlashSaleModel.sales_count + quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def get_sale_counters(self, sale_id: int):
        return self.db.execute(
            select(FlashSaleModel.sales_count, FlashSaleModel.stock_cap)
            .where(FlashSaleModel.id == sale_id)
        ).one_or_none()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
