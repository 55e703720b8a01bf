import os

# przed importem marketplace - bez postgresa i redisa
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.data.database import Base, get_db
from marketplace.data.models import (
    UserModel,
    ProductModel,
    FlashSaleModel,
    CartItemModel,
)
from marketplace.domain.schemas import CheckoutIn

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


class FakeNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send_order_confirmation(self, notification):
        if self.fail:
            raise RuntimeError("broker down")
        self.sent.append(notification)
        return True


class FakeLockService:
    def __init__(self):
        self.held = {}
        self.acquired = []
        self.released = []

    def acquire_checkout_lock(self, user_id, token, ttl):
        if user_id in self.held:
            return False
        self.held[user_id] = token
        self.acquired.append(user_id)
        return True

    def release_checkout_lock(self, user_id, token):
        if self.held.get(user_id) == token:
            del self.held[user_id]
            self.released.append(user_id)
            return True
        return False


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def make_user(db):
    def _make(id=1, name="Ama Mensah", phone="0241234567"):
        user = UserModel(id=id, name=name, phone=phone)
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture
def make_product(db):
    def _make(name="Kente scarf", price="100.00", stock=5, vendor_id=7, image_url=None):
        product = ProductModel(
            name=name,
            price=Decimal(price),
            stock=stock,
            vendor_id=vendor_id,
            image_url=image_url,
        )
        db.add(product)
        db.commit()
        return product
    return _make


@pytest.fixture
def make_sale(db):
    def _make(
        product,
        discount_type="percentage",
        discount_value="20",
        start_date=NOW - timedelta(days=1),
        end_date=NOW + timedelta(days=1),
        is_active=True,
        stock_cap=None,
        sales_count=0,
        created_at=NOW - timedelta(days=2),
    ):
        sale = FlashSaleModel(
            product_id=product.id,
            discount_type=discount_type,
            discount_value=Decimal(discount_value),
            start_date=start_date,
            end_date=end_date,
            is_active=is_active,
            stock_cap=stock_cap,
            sales_count=sales_count,
            created_at=created_at,
        )
        db.add(sale)
        db.commit()
        return sale
    return _make


@pytest.fixture
def add_to_cart(db):
    def _add(user_id, product_id, quantity):
        db.add(CartItemModel(user_id=user_id, product_id=product_id, quantity=quantity))
        db.commit()
    return _add


@pytest.fixture
def checkout_payload():
    def _make(user_id=1, status="Processing", method="MTN MoMo", transaction_id="tx-1", cart_items=None):
        data = {
            "user_id": user_id,
            "shipping_address": {"street": "12 Oxford St", "city": "Accra", "region": "Greater Accra"},
            "payment_result": {"method": method, "transaction_id": transaction_id, "status": status},
        }
        if cart_items is not None:
            data["cart_items"] = cart_items
        return CheckoutIn(**data)
    return _make


@pytest.fixture
def client(db, notifier, lock_service):
    from marketplace.main import app
    from marketplace.api.routers.orders import get_orchestrator
    from marketplace.services.checkout import CheckoutOrchestrator

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_orchestrator] = lambda: CheckoutOrchestrator(
        db=db, notifier=notifier, lock_service=lock_service, clock=lambda: NOW
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
