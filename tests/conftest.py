"""Shared fixtures: in-memory database, fake media service and users per role."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.auth import create_access_token, get_password_hash
from app.database import Base, get_db
from app.main import app
from app.models import Box, Customer, Product, User, UserRole
from app.services.media import get_media_service

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "secret123"


class FakeMediaService:
    """Stands in for Cloudinary; remembers what was uploaded."""

    def __init__(self):
        self.uploads = []

    async def upload_image(self, content: bytes, filename: str = "image") -> str:
        self.uploads.append((filename, content))
        return f"https://media.example.test/products/{filename}"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def media():
    return FakeMediaService()


@pytest.fixture
def client(db, media):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_service] = lambda: media
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _make_user(db, name, email, role):
    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(PASSWORD),
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin(db):
    return _make_user(db, "Ana Admin", "admin@example.com", UserRole.ADMIN)


@pytest.fixture
def seller(db):
    return _make_user(db, "Sam Seller", "seller@example.com", UserRole.SELLER)


@pytest.fixture
def courier(db):
    return _make_user(db, "Dee Delivery", "delivery@example.com", UserRole.DELIVERY)


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def seller_headers(seller):
    return auth_headers(seller)


@pytest.fixture
def delivery_headers(courier):
    return auth_headers(courier)


@pytest.fixture
def customer(db):
    customer = Customer(name="Carla Customer", contact_handle="@carla", phone="555-0100", address="1 Main St")
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


@pytest.fixture
def box(db):
    box = Box(code="BX1", description="First shipment", supplier="ACME")
    db.add(box)
    db.commit()
    db.refresh(box)
    return box


@pytest.fixture
def make_product(db):
    def _make(name="Lamp", price=10.0, quantity=1, box_id=None, category_id=None):
        product = Product(name=name, price=price, quantity=quantity, box_id=box_id, category_id=category_id)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
    return _make


@pytest.fixture
def create_order(client, seller_headers):
    """Create an order through the API and return the response."""
    def _create(customer_id, product_ids, price=10.0, **extra):
        payload = {
            "customer_id": customer_id,
            "lines": [{"product_id": pid, "unit_price": price} for pid in product_ids],
            **extra,
        }
        return client.post("/api/orders/", json=payload, headers=seller_headers)
    return _create
