# marketplace/services/flash_sale_service.py
from datetime import datetime, timezone
from typing import List

from sqlalchemy.orm import Session

from marketplace.data.models.flash_sale import FlashSaleModel
from marketplace.domain.schemas import FlashSaleCreate
from marketplace.repos.flash_sale_repo import FlashSaleRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.services.pricing import PricingResolver
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class FlashSaleService:
    """
    Tworzenie flash sale (walidacja w FlashSaleCreate) i odczyt aktywnych.
    """

    def __init__(self, db: Session, pricing: PricingResolver | None = None):
        self.repo = FlashSaleRepo(db)
        self.products = ProductRepo(db)
        self.pricing = pricing or PricingResolver()

    def create_sale(self, payload: FlashSaleCreate) -> FlashSaleModel:
        if not self.products.get_product(payload.product_id):
            raise ValueError("Produkt nie istnieje")

        sale = FlashSaleModel(
            product_id=payload.product_id,
            discount_type=payload.discount_type.value,
            discount_value=payload.discount_value,
            start_date=payload.start_date,
            end_date=payload.end_date,
            is_active=payload.is_active,
            stock_cap=payload.stock_cap,
            sales_count=0,
        )
        created = self.repo.create_sale(sale)
        logger.info(
            f"Flash sale {created.id} created for product {created.product_id}: "
            f"{created.discount_type} {created.discount_value}, cap={created.stock_cap}"
        )
        return created

    def get_active_sales(self, product_ids: List[int], at: datetime | None = None) -> List[FlashSaleModel]:
        """Jeden obowiazujacy sale na produkt - ten sam wybor co przy checkoucie."""
        at = at or datetime.now(timezone.utc)

        by_product: dict[int, list] = {}
        for sale in self.repo.get_active_sales_for_products(product_ids):
            by_product.setdefault(sale.product_id, []).append(sale)

        chosen = []
        for product_id in dict.fromkeys(product_ids):
            sale = self.pricing.select_sale(by_product.get(product_id, []), at)
            if sale is not None:
                chosen.append(sale)
        return chosen
