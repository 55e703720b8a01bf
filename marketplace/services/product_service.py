# marketplace/services/product_service.py
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel
from marketplace.domain.schemas import ProductCreate
from marketplace.repos.product_repo import ProductRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def create_product(self, payload: ProductCreate) -> ProductModel:
        created = self.repo.create_product(ProductModel(**payload.model_dump()))
        logger.info(f"Product {created.id} created, stock={created.stock}")
        return created

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise ValueError("Produkt nie istnieje")
        return product
