# marketplace/services/pricing.py
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from marketplace.data.models.flash_sale import FlashSaleModel
from marketplace.domain.enums import DiscountType
from marketplace.domain.errors import PricingError
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def _as_utc(value: datetime) -> datetime:
    # sqlite zwraca naive datetime - traktujemy jako UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PricingResolver:
    """
    Liczy efektywna cene jednostkowa produktu przy aktywnych flash sale.

    Regula wyboru gdy kilka sale pasuje do produktu: wygrywa najpozniej
    utworzony (created_at), przy remisie wyzsze id.

    enforce_cap - sale bez miejsca na cala ilosc pozycji nie obniza ceny
    (zgodnie z warunkowym UPDATE w InventoryReconciler).
    """

    def __init__(self, enforce_cap: bool = False):
        self.enforce_cap = enforce_cap

    def is_effective(self, sale: FlashSaleModel, at: datetime, quantity: int = 1) -> bool:
        if not sale.is_active:
            return False

        at = _as_utc(at)
        if not (_as_utc(sale.start_date) <= at <= _as_utc(sale.end_date)):
            return False

        # wyczerpany sale nie obniza juz ceny
        if sale.stock_cap is not None and (sale.sales_count or 0) >= sale.stock_cap:
            return False

        # przy twardym limicie cala pozycja musi sie zmiescic pod stock_cap
        if self.enforce_cap and sale.stock_cap is not None:
            if (sale.sales_count or 0) + quantity > sale.stock_cap:
                return False

        return True

    def select_sale(
        self, sales: Iterable[FlashSaleModel], at: datetime, quantity: int = 1
    ) -> FlashSaleModel | None:
        effective = [s for s in sales if self.is_effective(s, at, quantity)]
        if not effective:
            return None

        chosen = max(effective, key=lambda s: (_as_utc(s.created_at), s.id))
        if len(effective) > 1:
            logger.info(
                f"Product {chosen.product_id}: {len(effective)} effective flash sales, "
                f"using sale {chosen.id} (latest created)"
            )
        return chosen

    def validate_sale(self, sale: FlashSaleModel) -> DiscountType:
        try:
            discount_type = DiscountType(sale.discount_type)
        except ValueError:
            raise PricingError(
                f"Flash sale {sale.id}: nieznany typ rabatu {sale.discount_type!r}", sale_id=sale.id
            )

        value = Decimal(str(sale.discount_value))
        if value <= 0:
            raise PricingError(f"Flash sale {sale.id}: wartosc rabatu musi byc > 0", sale_id=sale.id)

        if discount_type == DiscountType.PERCENTAGE and value >= HUNDRED:
            raise PricingError(
                f"Flash sale {sale.id}: procent rabatu poza przedzialem (0, 100)", sale_id=sale.id
            )

        return discount_type

    def resolve_price(self, base_price: Decimal, sale: FlashSaleModel | None) -> Decimal:
        base_price = Decimal(str(base_price))
        if sale is None:
            return base_price.quantize(CENT, rounding=ROUND_HALF_UP)

        discount_type = self.validate_sale(sale)
        value = Decimal(str(sale.discount_value))

        if discount_type == DiscountType.PERCENTAGE:
            price = base_price * (HUNDRED - value) / HUNDRED
        else:
            price = max(Decimal("0"), base_price - value)

        return price.quantize(CENT, rounding=ROUND_HALF_UP)

    def resolve(self, base_price: Decimal, sales: Iterable[FlashSaleModel], at: datetime, quantity: int = 1):
        """Zwraca (cena, sale albo None)."""
        sale = self.select_sale(sales, at, quantity)
        return self.resolve_price(base_price, sale), sale
