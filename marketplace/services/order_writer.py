# marketplace/services/order_writer.py
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.domain.enums import OrderStatus, PaymentMethod
from marketplace.domain.errors import OrderWriteError, OrderItemsWriteError
from marketplace.domain.snapshot import CartSnapshot
from marketplace.repos.order_repo import OrderRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

ITEMS_MISSING_NOTE = "order items insert failed - header without items"


class OrderWriter:
    """
    Zapis naglowka zamowienia i jego pozycji.

    Najpierw naglowek (potrzebne wygenerowane id), potem wszystkie pozycje.
    Jesli pozycje sie nie zapisza, naglowek zostaje w bazie z flaga
    needs_reconciliation i rzucamy OrderItemsWriteError z order_id.
    """

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)

    def write(
        self,
        snapshot: CartSnapshot,
        status: OrderStatus,
        shipping_address: dict,
        payment_method: PaymentMethod,
        transaction_id: str | None = None,
    ) -> OrderModel:
        total = snapshot.total

        header = OrderModel(
            user_id=snapshot.user_id,
            total_amount=total,
            status=status.value,
            order_date=datetime.now(timezone.utc),
            shipping_address=shipping_address,
            payment_method=payment_method.value,
            transaction_id=transaction_id,
        )

        try:
            order = self.repo.create_order(header)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Order header insert failed for user {snapshot.user_id}: {e}")
            raise OrderWriteError(f"Nie udalo sie zapisac zamowienia: {e}") from e

        order_id = order.id
        logger.info(f"Order {order_id} header recorded, status={status.value}, total={total}")

        items = [
            OrderItemModel(
                order_id=order_id,
                product_id=line.product_id,
                quantity=line.quantity,
                price_at_purchase=line.unit_price,
                product_name=line.product_name,
                product_image=line.product_image,
                flash_sale_id=line.flash_sale_id,
            )
            for line in snapshot.lines
        ]

        try:
            self.repo.add_order_items(items)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Order {order_id}: items insert failed, header left without items: {e}")
            self._flag_header(order_id)
            raise OrderItemsWriteError(
                f"Zamowienie {order_id} zapisane bez pozycji: {e}", order_id=order_id
            ) from e

        logger.info(f"Order {order_id}: {len(items)} items recorded")
        return order

    def _flag_header(self, order_id: int):
        try:
            self.repo.flag_for_reconciliation(order_id, ITEMS_MISSING_NOTE)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.critical(f"Order {order_id}: could not flag header-only order for manual reconciliation: {e}")

