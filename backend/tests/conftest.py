"""
Pytest configuration and fixtures for backend tests.
"""

import asyncio
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from rest_api.models import Area, Base, Category, Product, User, utcnow
from shared.config.constants import AdminAccess, Roles
from shared.infrastructure.db import get_db
from shared.security.auth import sign_session_token
from shared.security.password import hash_password
from shared.security.rate_limit import limiter
from shared.utils.validators import slugify


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

FAKE_IMAGE_URL = "https://res.cloudinary.com/demo/image/upload/v1/bocatto/test/image.jpg"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.

    The lifespan is not run: tables come from db_session and nothing is seeded.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False

    test_client = TestClient(app)
    yield test_client

    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def uploads(monkeypatch):
    """
    Replace Cloudinary uploads; returns the list of uploaded folders.

    Uploads are blocking HTTP calls, so the fake refuses to run on the event loop.
    """
    folders: list[str] = []

    def fake_upload(file, folder):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            folders.append(folder)
            return FAKE_IMAGE_URL
        raise AssertionError(f"Upload to {folder} ran on the event loop")

    monkeypatch.setattr("rest_api.routers._common.forms.upload_image", fake_upload)
    return folders


# =============================================================================
# Users
# =============================================================================


def make_user(db_session, email: str, role: str = Roles.CLIENT, **fields) -> User:
    user = User(
        first_name=fields.pop("first_name", "Ana"),
        last_name=fields.pop("last_name", "Pérez"),
        email=email,
        password_hash=hash_password(fields.pop("password", "secreto123")),
        role=role,
        **fields,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def headers_for(user: User) -> dict[str, str]:
    token = sign_session_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(db_session):
    return make_user(
        db_session,
        "admin@bocatto.com",
        role=Roles.ADMIN,
        first_name="Admin",
        last_name="Bocatto",
        password="admin12345",
        admin_access=AdminAccess.SUPER_ADMIN,
    )


@pytest.fixture
def client_user(db_session):
    return make_user(db_session, "ana@correo.com", password="secreto123")


@pytest.fixture
def other_user(db_session):
    return make_user(db_session, "luis@correo.com", first_name="Luis", last_name="Gómez")


@pytest.fixture
def admin_headers(admin_user):
    return headers_for(admin_user)


@pytest.fixture
def client_headers(client_user):
    return headers_for(client_user)


@pytest.fixture
def other_headers(other_user):
    return headers_for(other_user)


# =============================================================================
# Catalog and booking data
# =============================================================================


@pytest.fixture
def seed_category(db_session):
    category = Category(name="Hamburguesas", slug=slugify("Hamburguesas"), icon="🍔", display_order=1)
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def seed_product(db_session, seed_category):
    product = Product(
        name="Hamburguesa Clásica",
        description="Carne, queso y pan brioche",
        price=10.00,
        category=seed_category.name,
        ingredients=["pan brioche", "carne de res", "queso cheddar", "tomate"],
        available=True,
        current_stock=10,
    )
    db_session.add(product)
    db_session.commit()
    db_session.refresh(product)
    return product


@pytest.fixture
def seed_area(db_session):
    area = Area(
        name="Terraza",
        description="Espacio al aire libre con vista a la ciudad",
        min_capacity=2,
        max_capacity=10,
        features=["Vista panorámica", "Calefactores"],
    )
    db_session.add(area)
    db_session.commit()
    db_session.refresh(area)
    return area


def future_slot(days: int = 2, hour: int = 19, hours: float = 2) -> tuple[str, str]:
    """ISO start/end strings for a reservation some days ahead."""
    start = (utcnow() + timedelta(days=days)).replace(hour=hour, minute=0, second=0, microsecond=0)
    end = start + timedelta(hours=hours)
    return start.isoformat(), end.isoformat()
