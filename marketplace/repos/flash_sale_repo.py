# marketplace/repos/flash_sale_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.data.models.flash_sale import FlashSaleModel
from marketplace.utils.retry import db_retry


class FlashSaleRepo:
    def __init__(self, db: Session):
        self.db = db

    @db_retry()
    def get_active_sales_for_products(self, product_ids: List[int]) -> List[FlashSaleModel]:
        """
        Tylko is_active - okno czasowe i wyczerpanie sprawdza PricingResolver,
        zeby jedna logika decydowala co jest "aktywne".
        """
        if not product_ids:
            return []
        return list(
            self.db.execute(
                select(FlashSaleModel)
                .where(
                    FlashSaleModel.product_id.in_(product_ids),
                    FlashSaleModel.is_active.is_(True),
                )
                .order_by(FlashSaleModel.id)
            ).scalars().all()
        )

    def create_sale(self, sale: FlashSaleModel) -> FlashSaleModel:
        self.db.add(sale)
        self.db.commit()
        self.db.refresh(sale)
        return sale
