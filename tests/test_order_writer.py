from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select, func
from sqlalchemy.exc import OperationalError

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.domain.enums import OrderStatus, PaymentMethod
from marketplace.domain.errors import OrderWriteError, OrderItemsWriteError
from marketplace.domain.snapshot import CartLine, CartSnapshot
from marketplace.repos.order_repo import OrderRepo
from marketplace.services.order_writer import OrderWriter, ITEMS_MISSING_NOTE


def _boom(*args, **kwargs):
    raise OperationalError("INSERT", {}, Exception("connection reset"))


@pytest.fixture
def snapshot(make_user):
    make_user()
    return CartSnapshot(
        user_id=1,
        taken_at=datetime(2026, 10, 17, tzinfo=timezone.utc),
        lines=(
            CartLine(product_id=1, quantity=2, product_name="Scarf", base_price=Decimal("100.00"),
                     unit_price=Decimal("80.00"), flash_sale_id=3),
            CartLine(product_id=2, quantity=1, product_name="Beads", base_price=Decimal("15.50"),
                     unit_price=Decimal("15.50")),
        ),
    )


def _write(db, snapshot):
    return OrderWriter(db).write(
        snapshot,
        status=OrderStatus.PROCESSING,
        shipping_address={"city": "Kumasi"},
        payment_method=PaymentMethod.PAYSTACK,
        transaction_id="ps_123",
    )


def _count(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def test_write_records_header_and_items(db, snapshot):
    order = _write(db, snapshot)

    assert order.total_amount == Decimal("175.50")
    assert order.status == "Processing"
    assert order.payment_method == "Paystack"
    assert order.needs_reconciliation is False
    assert [(i.product_id, i.quantity, i.price_at_purchase, i.flash_sale_id) for i in order.items] == [
        (1, 2, Decimal("80.00"), 3),
        (2, 1, Decimal("15.50"), None),
    ]


def test_header_failure_leaves_nothing(db, snapshot, monkeypatch):
    monkeypatch.setattr(OrderRepo, "create_order", _boom)

    with pytest.raises(OrderWriteError) as exc:
        _write(db, snapshot)

    assert exc.value.order_id is None
    assert _count(db, OrderModel) == 0
    assert _count(db, OrderItemModel) == 0


def test_items_failure_flags_header_only_order(db, snapshot, monkeypatch):
    monkeypatch.setattr(OrderRepo, "add_order_items", _boom)

    with pytest.raises(OrderItemsWriteError) as exc:
        _write(db, snapshot)

    order_id = exc.value.order_id
    assert order_id is not None

    db.expire_all()
    order = db.get(OrderModel, order_id)
    assert order.items == []
    assert order.needs_reconciliation is True
    assert order.reconciliation_note == ITEMS_MISSING_NOTE
