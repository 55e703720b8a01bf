import pytest

from marketplace.data.models.flash_sale import FlashSaleModel
from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.data.models.product import ProductModel
from marketplace.domain.errors import ProductNotFoundError, FlashSaleNotFoundError, SaleCapExceededError
from marketplace.services.inventory import InventoryReconciler


def _stock(db, product_id):
    db.expire_all()
    return db.get(ProductModel, product_id).stock


def _sales_count(db, sale_id):
    db.expire_all()
    return db.get(FlashSaleModel, sale_id).sales_count


@pytest.fixture
def make_order(db, make_user):
    def _make(lines):
        make_user()
        order = OrderModel(
            user_id=1,
            total_amount=0,
            status="Processing",
            shipping_address={"city": "Accra"},
            payment_method="MTN MoMo",
            items=[
                OrderItemModel(
                    product_id=product_id,
                    quantity=quantity,
                    price_at_purchase=10,
                    product_name="x",
                    flash_sale_id=sale_id,
                )
                for product_id, quantity, sale_id in lines
            ],
        )
        db.add(order)
        db.commit()
        return order
    return _make


@pytest.mark.parametrize("quantity,expected", [(1, 4), (2, 3), (5, 0)])
def test_decrement_within_stock(db, make_product, quantity, expected):
    product = make_product(stock=5)
    assert InventoryReconciler(db).decrement(product.id, quantity) == expected
    assert _stock(db, product.id) == expected


@pytest.mark.parametrize("quantity", [6, 50])
def test_decrement_beyond_stock_floors_at_zero(db, make_product, quantity):
    product = make_product(stock=5)
    assert InventoryReconciler(db).decrement(product.id, quantity) == 0
    assert _stock(db, product.id) == 0


def test_decrement_missing_product(db):
    with pytest.raises(ProductNotFoundError):
        InventoryReconciler(db).decrement(999, 1)


def test_decrement_rejects_non_positive_quantity(db, make_product):
    product = make_product(stock=5)
    with pytest.raises(ValueError):
        InventoryReconciler(db).decrement(product.id, 0)
    assert _stock(db, product.id) == 5


def test_increment_sale_count_overruns_cap_by_default(db, make_product, make_sale):
    sale = make_sale(make_product(), stock_cap=10, sales_count=9)
    assert InventoryReconciler(db, enforce_cap=False).increment_sale_count(sale.id, 2) == 11
    assert _sales_count(db, sale.id) == 11


def test_increment_sale_count_with_cap_enforcement(db, make_product, make_sale):
    sale = make_sale(make_product(), stock_cap=10, sales_count=9)
    reconciler = InventoryReconciler(db, enforce_cap=True)

    with pytest.raises(SaleCapExceededError):
        reconciler.increment_sale_count(sale.id, 2)
    assert _sales_count(db, sale.id) == 9

    assert reconciler.increment_sale_count(sale.id, 1) == 10


def test_increment_sale_count_without_cap(db, make_product, make_sale):
    sale = make_sale(make_product(), stock_cap=None, sales_count=3)
    assert InventoryReconciler(db, enforce_cap=True).increment_sale_count(sale.id, 4) == 7


def test_increment_missing_sale(db):
    with pytest.raises(FlashSaleNotFoundError):
        InventoryReconciler(db).increment_sale_count(12345, 1)


def test_reconcile_stock_is_applied_once_per_item(db, make_product, make_order):
    product = make_product(stock=5)
    order = make_order([(product.id, 2, None)])
    item = order.items[0]
    reconciler = InventoryReconciler(db)

    assert reconciler.reconcile_stock(item) == 3
    assert reconciler.reconcile_stock(item) is None
    assert _stock(db, product.id) == 3
    assert item.stock_reconciled is True


def test_reconcile_sale_is_applied_once_per_item(db, make_product, make_sale, make_order):
    product = make_product(stock=5)
    sale = make_sale(product, sales_count=1)
    order = make_order([(product.id, 2, sale.id)])
    reconciler = InventoryReconciler(db)

    reconciler.reconcile_order(order)
    reconciler.reconcile_order(order)

    assert _sales_count(db, sale.id) == 3
    assert _stock(db, product.id) == 3


def test_reconcile_order_skips_failing_items(db, make_product, make_order):
    kept = make_product(name="kept", stock=5)
    order = make_order([(kept.id, 1, None), (4242, 1, None)])

    failures = InventoryReconciler(db).reconcile_order(order)

    assert failures == [4242]
    assert _stock(db, kept.id) == 4
    flags = {i.product_id: i.stock_reconciled for i in order.items}
    assert flags == {kept.id: True, 4242: False}
