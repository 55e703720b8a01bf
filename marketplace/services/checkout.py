# marketplace/services/checkout.py
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, Any, List

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.domain.enums import CheckoutState, NON_FULFILLING_STATUSES
from marketplace.domain.errors import (
    CheckoutError,
    CartSnapshotError,
    CheckoutInProgressError,
    CheckoutStorageError,
    MissingContactError,
    UserNotFoundError,
)
from marketplace.domain.schemas import CheckoutIn, CartItemIn
from marketplace.domain.snapshot import CartLine, CartSnapshot
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.flash_sale_repo import FlashSaleRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.services.inventory import InventoryReconciler
from marketplace.services.lock_service import LockService
from marketplace.services.notification_service import NotificationService, OrderNotification
from marketplace.services.order_writer import OrderWriter
from marketplace.services.pricing import PricingResolver
from marketplace.utils.settings import CHECKOUT_LOCK_TTL_SECONDS
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CUSTOMER_NAME = "Valued Customer"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CheckoutOrchestrator:
    """
    Use Case: zamiana koszyka + wyniku platnosci w zamowienie.

    Initiated -> PricesResolved -> OrderRecorded -> InventoryReconciled
    -> CartCleared -> Completed, Failed z dowolnego stanu.

    Po OrderRecorded nic juz nie cofa zamowienia: stany magazynowe, czyszczenie
    koszyka i powiadomienie sa best-effort (log + flaga needs_reconciliation).
    Platnosc nieudana/anulowana: zamowienie zapisane do audytu, reszta pominieta.
    """

    def __init__(
        self,
        db: Session,
        notifier: NotificationService | None = None,
        lock_service: LockService | None = None,
        pricing: PricingResolver | None = None,
        reconciler: InventoryReconciler | None = None,
        clock: Callable[[], datetime] = _utcnow,
        lock_ttl: int = CHECKOUT_LOCK_TTL_SECONDS,
    ):
        self.users = UserRepo(db)
        self.products = ProductRepo(db)
        self.flash_sales = FlashSaleRepo(db)
        self.carts = CartRepo(db)
        self.orders = OrderRepo(db)
        self.writer = OrderWriter(db)
        self.reconciler = reconciler or InventoryReconciler(db)
        self.pricing = pricing or PricingResolver(enforce_cap=self.reconciler.enforce_cap)
        self.notifier = notifier
        self.lock_service = lock_service
        self.clock = clock
        self.lock_ttl = lock_ttl

        self.state = CheckoutState.INITIATED
        self.history: List[CheckoutState] = [CheckoutState.INITIATED]
        self.failure: CheckoutError | None = None

    def _transition(self, state: CheckoutState):
        logger.info(f"Checkout {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def _fail(self, error: CheckoutError):
        logger.error(f"Checkout failed in {error.stage.value}: {error.message}")
        self.failure = error
        self._transition(CheckoutState.FAILED)

    # =====================================================
    # SNAPSHOT + CENY
    # =====================================================
    def build_snapshot(self, user_id: int, cart_items: List[CartItemIn] | None, at: datetime) -> CartSnapshot:
        if cart_items is None:
            stored = self.carts.get_cart_items(user_id)
            requested = [(i.product_id, i.quantity) for i in stored]
        else:
            requested = [(i.product_id, i.quantity) for i in cart_items]

        # ten sam produkt dwa razy = jedna pozycja
        quantities: Dict[int, int] = {}
        for product_id, quantity in requested:
            if quantity <= 0:
                raise CartSnapshotError(f"Nieprawidlowa ilosc {quantity} dla produktu {product_id}")
            quantities[product_id] = quantities.get(product_id, 0) + quantity

        if not quantities:
            raise CartSnapshotError("Koszyk jest pusty")

        product_ids = list(quantities)
        products = self.products.get_products(product_ids)
        missing = [pid for pid in product_ids if pid not in products]
        if missing:
            raise CartSnapshotError(f"Produkty nie istnieja: {missing}")

        sales_by_product: Dict[int, list] = {}
        for sale in self.flash_sales.get_active_sales_for_products(product_ids):
            sales_by_product.setdefault(sale.product_id, []).append(sale)

        lines = []
        for product_id, quantity in quantities.items():
            product = products[product_id]
            unit_price, sale = self.pricing.resolve(
                product.price, sales_by_product.get(product_id, []), at, quantity
            )
            lines.append(
                CartLine(
                    product_id=product_id,
                    quantity=quantity,
                    product_name=product.name,
                    product_image=product.image_url,
                    vendor_id=product.vendor_id,
                    base_price=product.price,
                    unit_price=unit_price,
                    flash_sale_id=sale.id if sale else None,
                )
            )

        return CartSnapshot(user_id=user_id, taken_at=at, lines=tuple(lines))

    # =====================================================
    # COMMAND
    # =====================================================
    def checkout(self, payload: CheckoutIn) -> Dict[str, Any]:
        token = uuid.uuid4().hex
        locked = False

        if self.lock_service is not None:
            try:
                locked = self.lock_service.acquire_checkout_lock(payload.user_id, token, self.lock_ttl)
            except RedisError as e:
                # platnosc juz pobrana - brak redisa nie blokuje zamowienia
                logger.error(f"Checkout lock unavailable for user {payload.user_id}, continuing without it: {e}")
            else:
                if not locked:
                    error = CheckoutInProgressError(payload.user_id)
                    self._fail(error)
                    raise error

        try:
            return self._run(payload)
        finally:
            if locked:
                try:
                    self.lock_service.release_checkout_lock(payload.user_id, token)
                except RedisError as e:
                    # wygasnie samo po TTL
                    logger.warning(f"Failed to release checkout lock for user {payload.user_id}: {e}")

    def _run(self, payload: CheckoutIn) -> Dict[str, Any]:
        payment = payload.payment_result

        try:
            user = self.users.get_user(payload.user_id)
            if not user:
                raise UserNotFoundError(payload.user_id)
            # bez telefonu nie ma jak potwierdzic zamowienia
            if not user.phone:
                raise MissingContactError(payload.user_id)

            # ceny wg flash sale aktywnych TERAZ, nie w chwili dodania do koszyka
            snapshot = self.build_snapshot(user.id, payload.cart_items, self.clock())
            self._transition(CheckoutState.PRICES_RESOLVED)

            order = self.writer.write(
                snapshot,
                status=payment.status,
                shipping_address=payload.shipping_address.model_dump(),
                payment_method=payment.method,
                transaction_id=payment.transaction_id,
            )
        except CheckoutError as e:
            self._fail(e)
            raise
        except SQLAlchemyError as e:
            error = CheckoutStorageError(self.state, f"Blad bazy danych: {e}")
            self._fail(error)
            raise error from e

        self._transition(CheckoutState.ORDER_RECORDED)

        result = {
            "order_id": order.id,
            "final_status": payment.status,
            "state": self.state,
            "total_amount": snapshot.total,
            "reconciliation_failures": [],
            "cart_cleared": False,
            "notified": False,
        }

        if payment.status in NON_FULFILLING_STATUSES:
            logger.info(
                f"Order {order.id} recorded with status {payment.status.value}, "
                f"skipping inventory, cart and notification"
            )
            self._transition(CheckoutState.COMPLETED)
            result["state"] = self.state
            return result

        failures = self.reconciler.reconcile_order(order)
        if failures:
            result["reconciliation_failures"] = failures
            self._flag_order(order.id, f"inventory reconciliation failed for products {failures}")
        self._transition(CheckoutState.INVENTORY_RECONCILED)

        result["cart_cleared"] = self._clear_cart(user.id)
        self._transition(CheckoutState.CART_CLEARED)

        result["notified"] = self._notify(order.id, user, snapshot)
        self._transition(CheckoutState.COMPLETED)
        result["state"] = self.state

        logger.info(f"Checkout completed: order {order.id}, user {user.id}, total {snapshot.total}")
        return result

    # =====================================================
    # KROKI BEST-EFFORT
    # =====================================================
    def _flag_order(self, order_id: int, note: str):
        try:
            self.orders.flag_for_reconciliation(order_id, note)
        except SQLAlchemyError as e:
            self.orders.rollback()
            logger.critical(f"Order {order_id}: could not flag for reconciliation ({note}): {e}")

    def _clear_cart(self, user_id: int) -> bool:
        try:
            removed = self.carts.clear_cart(user_id)
        except SQLAlchemyError as e:
            self.carts.rollback()
            logger.error(f"Failed to clear cart for user {user_id}: {e}")
            return False

        logger.info(f"Cart of user {user_id} cleared ({removed} items)")
        return True

    def _notify(self, order_id: int, user, snapshot: CartSnapshot) -> bool:
        if self.notifier is None:
            return False

        notification = OrderNotification(
            order_id=order_id,
            customer_name=user.name or DEFAULT_CUSTOMER_NAME,
            customer_phone=user.phone,
            total_amount=snapshot.total,
        )
        try:
            return bool(self.notifier.send_order_confirmation(notification))
        except Exception as e:
            logger.error(f"Failed to send order confirmation for order {order_id}: {e}")
            return False
