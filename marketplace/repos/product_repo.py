# marketplace/repos/product_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel
from marketplace.utils.retry import db_retry


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    @db_retry()
    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    @db_retry()
    def get_products(self, product_ids: List[int]) -> dict[int, ProductModel]:
        if not product_ids:
            return {}
        rows = self.db.execute(
            select(ProductModel).where(ProductModel.id.in_(product_ids))
        ).scalars().all()
        return {p.id: p for p in rows}

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product
