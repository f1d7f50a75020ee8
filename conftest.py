# conftest.py
import os

os.environ.setdefault("APP_SECRET", "test-secret")
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("NOTIFY_BACKEND", "link")
os.environ.setdefault("QRMENU_LOG_LEVEL", "WARNING")

from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from qrmenu.db import Base, get_db
from qrmenu.deps import require_notifier
from qrmenu.errors import NotificationError, StoreError
from qrmenu.main import app
from qrmenu.models import Business, Category, Owner, PaymentMethod, Product
from qrmenu.services.checkout import checkout_attempts
from qrmenu.services.notify import NotifyReceipt
from qrmenu.services.repository import SqlMenuRepository
from qrmenu.services.reservations import reservation_attempts
from qrmenu.util.security import hash_pw


class SpyNotifier:
    """Records every send; answers like the click-to-chat backend."""

    def __init__(self):
        self.calls = []

    def send_text(self, number, text):
        self.calls.append((number, text))
        return NotifyReceipt(number=number, url=f"https://wa.me/{number}")


class FailingNotifier(SpyNotifier):
    def send_text(self, number, text):
        self.calls.append((number, text))
        raise NotificationError("We couldn't reach the restaurant's WhatsApp.")


class BrokenStore:
    """Repository whose every call fails like a dropped database connection."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise StoreError(f"{name}: connection refused")
        return _fail


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    yield s
    s.close()


@pytest.fixture
def repo(db):
    return SqlMenuRepository(db)


@pytest.fixture
def seed(db):
    """
    "Pizza Place": two active categories (plus one switched off), five active
    products, three of them in "Platos Principales", one inactive product, and
    a mix of usable and unusable payment methods.
    """
    biz = Business(
        name="Pizza Place",
        phone="300 123 4567",
        whatsapp_url="https://wa.me/573001234567",
        nequi_number="3001112222",
    )
    db.add(biz)
    db.flush()

    mains = Category(business_id=biz.id, name="Platos Principales", sort_order=5)
    drinks = Category(business_id=biz.id, name="Bebidas", sort_order=1)
    old = Category(business_id=biz.id, name="Temporada", sort_order=0, is_active=False)
    db.add_all([mains, drinks, old])
    db.flush()

    products = [
        Product(business_id=biz.id, category_id=mains.id, name="Margherita", price=Decimal("10.00")),
        Product(business_id=biz.id, category_id=mains.id, name="Diavola", price=Decimal("12.50")),
        Product(business_id=biz.id, category_id=mains.id, name="Calzone", price=Decimal("11.00"),
                is_vegetarian=True),
        Product(business_id=biz.id, category_id=drinks.id, name="Lemonade", price=Decimal("5.00"),
                is_vegan=True),
        Product(business_id=biz.id, category_id=drinks.id, name="Espresso", price=Decimal("3.00")),
        Product(business_id=biz.id, category_id=drinks.id, name="Old Cola", price=Decimal("2.00"),
                is_active=False),
    ]
    db.add_all(products)

    methods = [
        PaymentMethod(business_id=biz.id, name="Cash", type="cash_on_delivery"),
        PaymentMethod(business_id=biz.id, name="Nequi", type="nequi", configuration={}),
        PaymentMethod(business_id=biz.id, name="Card", type="stripe", configuration={}),
        PaymentMethod(business_id=biz.id, name="PayPal", type="paypal",
                      configuration={"email": "pay@pizza.test"}, is_active=False),
    ]
    db.add_all(methods)

    owner = Owner(business_id=biz.id, name="Owner", email="owner@pizza.test", pass_hash=hash_pw("secret"))
    db.add(owner)
    db.commit()

    by_name = {p.name: p for p in products}
    return SimpleNamespace(
        business=biz,
        mains=mains,
        drinks=drinks,
        inactive_category=old,
        products=by_name,
        owner=owner,
    )


@pytest.fixture
def burger_barn(db, seed):
    """A second restaurant sharing the same database."""
    biz = Business(name="Burger Barn", whatsapp_url="https://wa.me/573009998888")
    db.add(biz)
    db.flush()
    burger = Product(business_id=biz.id, name="Burger", price=Decimal("20.00"))
    db.add(burger)
    db.add(PaymentMethod(business_id=biz.id, name="Cash", type="cash_on_delivery"))
    db.commit()
    return SimpleNamespace(business=biz, burger=burger)


@pytest.fixture
def notifier():
    return SpyNotifier()


@pytest.fixture
def client(session_factory, seed, notifier):
    def _get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[require_notifier] = lambda: notifier
    checkout_attempts._items.clear()
    reservation_attempts._items.clear()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

