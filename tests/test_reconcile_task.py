from sqlalchemy import update

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.data.models.product import ProductModel
from marketplace.tasks.reconcile import reconcile_pending_orders


def _order(db, items, status="Processing", attempts=0, flagged=True):
    order = OrderModel(
        user_id=1,
        total_amount=0,
        status=status,
        shipping_address={"city": "Tamale"},
        payment_method="Cash on Delivery",
        needs_reconciliation=flagged,
        reconciliation_attempts=attempts,
        items=items,
    )
    db.add(order)
    db.commit()
    return order


def _item(product_id, quantity, stock_reconciled=False):
    return OrderItemModel(
        product_id=product_id,
        quantity=quantity,
        price_at_purchase=1,
        product_name="p",
        stock_reconciled=stock_reconciled,
    )


def test_sweep_reconciles_pending_items_only(db, make_user, make_product):
    make_user()
    done = make_product(name="done", stock=5)
    pending = make_product(name="pending", stock=5)
    order = _order(db, [_item(done.id, 1, stock_reconciled=True), _item(pending.id, 2)])

    summary = reconcile_pending_orders(db, max_attempts=3)

    assert summary == {"checked": 1, "resolved": 1, "still_pending": 0, "manual": 0}
    db.expire_all()
    assert db.get(ProductModel, done.id).stock == 5
    assert db.get(ProductModel, pending.id).stock == 3
    refreshed = db.get(OrderModel, order.id)
    assert refreshed.needs_reconciliation is False
    assert refreshed.reconciliation_attempts == 1


def test_sweep_keeps_failing_orders_flagged(db, make_user):
    make_user()
    order = _order(db, [_item(999, 1)])

    summary = reconcile_pending_orders(db, max_attempts=2)

    assert summary["still_pending"] == 1
    db.expire_all()
    refreshed = db.get(OrderModel, order.id)
    assert refreshed.needs_reconciliation is True
    assert refreshed.reconciliation_attempts == 1
    assert "999" in refreshed.reconciliation_note


def test_sweep_stops_after_max_attempts(db, make_user):
    make_user()
    _order(db, [_item(999, 1)], attempts=2)

    assert reconcile_pending_orders(db, max_attempts=2)["checked"] == 0


def test_sweep_leaves_header_only_orders_for_manual_handling(db, make_user):
    make_user()
    order = _order(db, [])

    summary = reconcile_pending_orders(db, max_attempts=3)

    assert summary["manual"] == 1
    db.expire_all()
    assert db.get(OrderModel, order.id).needs_reconciliation is True


def test_sweep_ignores_failed_payments_and_unflagged_orders(db, make_user, make_product):
    make_user()
    product = make_product(stock=5)
    _order(db, [_item(product.id, 1)], status="Payment Failed")
    _order(db, [_item(product.id, 1)], flagged=False)

    assert reconcile_pending_orders(db, max_attempts=3)["checked"] == 0
    db.expire_all()
    assert db.get(ProductModel, product.id).stock == 5
