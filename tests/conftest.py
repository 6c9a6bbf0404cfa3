# tests/conftest.py
"""
Fixtures: swieza baza SQLite w pamieci na kazdy test, fakeredis dla locka
checkoutu, TestClient z nadpisanymi zaleznosciami.
"""
import os

# musi byc ustawione przed importem storefront.*
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("CELERY_ALWAYS_EAGER", "true")
os.environ.setdefault("IDENTITY_SERVICE_URL", "http://identity.test")

from decimal import Decimal

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api import create_app
from storefront.api.dependencies import get_identity_client, get_lock_service
from storefront.data.database import Base, get_db
from storefront.data.models import (
    CartItemModel,
    InventoryModel,
    ProductModel,
    VariantModel,
)
from storefront.domain.identity import UserContext
from storefront.services.lock_service import LockService

ALICE = UserContext(user_id=1)
BOB = UserContext(user_id=2)
ADMIN = UserContext(user_id=99, is_admin=True)

ADDRESS = {
    "full_name": "Alice Doe",
    "email": "alice@example.com",
    "phone": "+1 555 0100",
    "address": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62701",
    "country": "United States",
}


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
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def lock_service(redis_client):
    return LockService(client=redis_client)


class RecordingNotifications:
    def __init__(self):
        self.sent = []

    def send_order_confirmation(self, user_id, order_id):
        self.sent.append((user_id, order_id))


@pytest.fixture
def notifications():
    return RecordingNotifications()


def make_product(
    db,
    name="Linen Shirt",
    base_price="50.00",
    variants=(("M", "White", "0.00", 5, True),),
    is_active=True,
    brand="Northwind",
):
    """variants: (size, color, price_adjustment, quantity, is_available)"""
    product = ProductModel(
        name=name,
        brand=brand,
        base_price=Decimal(base_price),
        is_active=is_active,
        tags=[],
    )
    for size, color, adjustment, quantity, available in variants:
        product.variants.append(
            VariantModel(
                size=size,
                color=color,
                color_hex=None,
                price_adjustment=Decimal(adjustment),
                is_available=available,
                sku=f"{name}-{size}-{color}".upper().replace(" ", ""),
                inventory=InventoryModel(quantity=quantity, reserved_quantity=0),
            )
        )
    db.add(product)
    db.commit()

    by_axes = {(v.size, v.color): v.id for v in product.variants}
    return product.id, by_axes


@pytest.fixture
def shirt(db):
    """Linen Shirt, baza 50.00: S/White, M/White, M/Navy (+10.00), L/Navy niedostepny."""
    return make_product(
        db,
        variants=(
            ("S", "White", "0.00", 10, True),
            ("M", "White", "0.00", 5, True),
            ("M", "Navy", "10.00", 2, True),
            ("L", "Navy", "0.00", 7, False),
        ),
    )


def inventory(db, variant_id):
    db.expire_all()
    return db.query(InventoryModel).filter(InventoryModel.variant_id == variant_id).one()


def cart_lines(db, user_id):
    db.expire_all()
    return db.query(CartItemModel).filter(CartItemModel.user_id == user_id).all()


class FakeIdentity:
    TOKENS = {"alice": ALICE, "bob": BOB, "admin": ADMIN}

    def resolve(self, token):
        return self.TOKENS.get(token, UserContext.anonymous())


@pytest.fixture
def client(session_factory, lock_service):
    app = create_app()

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_identity_client] = lambda: FakeIdentity()

    with TestClient(app) as c:
        yield c


def auth(token):
    return {"Authorization": f"Bearer {token}"}
