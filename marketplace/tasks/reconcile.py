# marketplace/tasks/reconcile.py
from sqlalchemy.orm import Session

from marketplace.celery_worker import celery_app
from marketplace.data.database import SessionLocal
from marketplace.repos.order_repo import OrderRepo
from marketplace.services.inventory import InventoryReconciler
from marketplace.utils.settings import RECONCILIATION_MAX_ATTEMPTS
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def reconcile_pending_orders(db: Session, max_attempts: int = RECONCILIATION_MAX_ATTEMPTS) -> dict:
    """
    Ponawia rozliczenie stanow dla zamowien z flaga needs_reconciliation.
    Pozycje juz rozliczone sa pomijane (znaczniki na order_items).
    Zamowienie bez pozycji zostaje oflagowane - wymaga recznej interwencji.
    """
    repo = OrderRepo(db)
    reconciler = InventoryReconciler(db)
    summary = {"checked": 0, "resolved": 0, "still_pending": 0, "manual": 0}

    orders = repo.get_orders_needing_reconciliation(max_attempts)
    logger.info(f"Found {len(orders)} orders needing reconciliation")

    for order in orders:
        summary["checked"] += 1
        order_id = order.id

        if not order.items:
            summary["manual"] += 1
            logger.warning(f"Order {order_id} has no items, manual reconciliation required")
            continue

        failures = reconciler.reconcile_order(order)

        order.reconciliation_attempts += 1
        if failures:
            summary["still_pending"] += 1
            order.reconciliation_note = f"inventory reconciliation failed for products {failures}"
            if order.reconciliation_attempts >= max_attempts:
                logger.critical(
                    f"Order {order_id}: giving up after {order.reconciliation_attempts} attempts, "
                    f"products {failures}"
                )
        else:
            summary["resolved"] += 1
            order.needs_reconciliation = False
            order.reconciliation_note = None
            logger.info(f"Order {order_id} reconciled")
        repo.commit()

    return summary


@celery_app.task(name="marketplace.tasks.reconcile.reconcile_pending_orders_task")
def reconcile_pending_orders_task():
    logger.info("Reconcile pending orders task started")

    db = SessionLocal()
    try:
        return reconcile_pending_orders(db)
    finally:
        db.close()
