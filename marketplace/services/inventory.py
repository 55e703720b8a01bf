# marketplace/services/inventory.py
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.domain.errors import (
    InventoryError,
    ProductNotFoundError,
    FlashSaleNotFoundError,
    SaleCapExceededError,
)
from marketplace.repos.inventory_repo import InventoryRepo
from marketplace.utils.settings import FLASH_SALE_ENFORCE_CAP
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryReconciler:
    """
    Zdejmuje stan magazynowy i nabija licznik flash sale dla zapisanego zamowienia.

    - stock nigdy ponizej 0 (oversell nie blokuje oplaconego zamowienia)
    - sales_count domyslnie bez twardego limitu, patrz FLASH_SALE_ENFORCE_CAP
    - kazda pozycja zamowienia rozliczana co najwyzej raz (stock_reconciled / sale_reconciled)
    """

    def __init__(self, db: Session, enforce_cap: bool | None = None):
        self.repo = InventoryRepo(db)
        self.enforce_cap = FLASH_SALE_ENFORCE_CAP if enforce_cap is None else enforce_cap

    def _decrement(self, product_id: int, quantity: int) -> int:
        if quantity <= 0:
            raise ValueError("Ilosc musi byc wieksza niz 0")

        if self.repo.decrement_stock_if_available(product_id, quantity) == 0:
            # albo brak produktu, albo za maly stan - wtedy zerujemy
            if self.repo.floor_stock(product_id) == 0:
                raise ProductNotFoundError(product_id)
            logger.warning(
                f"Oversell on product {product_id}: requested {quantity}, stock floored at 0"
            )

        return self.repo.get_stock(product_id)

    def _increment_sale_count(self, sale_id: int, quantity: int) -> int:
        if quantity <= 0:
            raise ValueError("Ilosc musi byc wieksza niz 0")

        rowcount = self.repo.increment_sales_count(sale_id, quantity, enforce_cap=self.enforce_cap)
        if rowcount == 0:
            if self.repo.get_sale_counters(sale_id) is None:
                raise FlashSaleNotFoundError(sale_id)
            raise SaleCapExceededError(sale_id, quantity)

        sales_count, stock_cap = self.repo.get_sale_counters(sale_id)
        if stock_cap is not None and sales_count > stock_cap:
            logger.warning(
                f"Flash sale {sale_id} over cap: sales_count={sales_count}, stock_cap={stock_cap}"
            )
        return sales_count

    def decrement(self, product_id: int, quantity: int) -> int:
        try:
            new_stock = self._decrement(product_id, quantity)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Product {product_id} stock -{quantity} -> {new_stock}")
        return new_stock

    def increment_sale_count(self, sale_id: int, quantity: int) -> int:
        try:
            sales_count = self._increment_sale_count(sale_id, quantity)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Flash sale {sale_id} sales_count +{quantity} -> {sales_count}")
        return sales_count

    def reconcile_stock(self, item: OrderItemModel) -> int | None:
        """Zdejmuje stan dla pozycji; None gdy pozycja byla juz rozliczona."""
        if item.stock_reconciled:
            logger.info(f"Order item {item.id}: stock already reconciled, skipping")
            return None

        try:
            new_stock = self._decrement(item.product_id, item.quantity)
            # znacznik w tym samym commicie co update licznika
            item.stock_reconciled = True
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Order {item.order_id} item {item.id}: product {item.product_id} "
            f"stock -{item.quantity} -> {new_stock}"
        )
        return new_stock

    def reconcile_sale(self, item: OrderItemModel) -> int | None:
        if item.flash_sale_id is None or item.sale_reconciled:
            return None

        try:
            sales_count = self._increment_sale_count(item.flash_sale_id, item.quantity)
            item.sale_reconciled = True
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Order {item.order_id} item {item.id}: flash sale {item.flash_sale_id} "
            f"sales_count +{item.quantity} -> {sales_count}"
        )
        return sales_count

    def reconcile_order(self, order: OrderModel) -> list[int]:
        """
        Rozlicza wszystkie nierozliczone pozycje zamowienia.
        Zwraca product_id pozycji ktorych nie udalo sie rozliczyc.
        Blad jednej pozycji nie przerywa pozostalych.
        """
        failed: list[int] = []

        for item in list(order.items):
            product_id = item.product_id
            order_id = order.id
            item_failed = False
            try:
                self.reconcile_stock(item)
            except (InventoryError, ValueError) as e:
                item_failed = True
                logger.error(f"Order {order_id}: stock reconciliation failed for product {product_id}: {e}")
            except Exception as e:
                item_failed = True
                logger.exception(f"Order {order_id}: stock update error for product {product_id}: {e}")

            try:
                self.reconcile_sale(item)
            except (InventoryError, ValueError) as e:
                item_failed = True
                logger.error(f"Order {order_id}: flash sale update failed for product {product_id}: {e}")
            except Exception as e:
                item_failed = True
                logger.exception(f"Order {order_id}: flash sale update error for product {product_id}: {e}")

            if item_failed:
                failed.append(product_id)

        return failed
