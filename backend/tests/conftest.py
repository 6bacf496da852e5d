"""
Rent The Moment Backend — Test Configuration (conftest.py)
=========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own in-memory SQLite database (aiosqlite +
       StaticPool) through a real `Database` handle, so services, the
       listing engine and the HTTP layer run against actual SQL.

Fixture Hierarchy (all function-scoped):
    database ── db_session            services and ListingService directly
             └─ client                HTTPX AsyncClient over ASGITransport
                ├─ admin_headers      Bearer token of a seeded admin
                └─ user_headers       Bearer token of a seeded customer
    temp_storage, sample_image_bytes, sample_png_bytes
"""

import os
import tempfile

# Settings are read at import time: point them at throwaway resources first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET_KEY"] = "test-secret-not-real"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="rentmoment_test_")
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Any, Dict  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from rentmoment.database import Database  # noqa: E402
from rentmoment.models.category import Category  # noqa: E402
from rentmoment.models.product import Product  # noqa: E402
from rentmoment.models.user import User  # noqa: E402
from rentmoment.security import create_access_token, hash_password  # noqa: E402

TEST_PASSWORD = "secret123"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    """A fresh in-memory database with every table created."""
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Seeding Helpers
# ══════════════════════════════════════════════════════════════════════════

async def create_user(
    database: Database,
    email: str = "customer@example.com",
    role: str = "user",
    name: str = "Test Customer",
    is_active: bool = True,
) -> User:
    async with database.session() as session:
        user = User(
            name=name,
            email=email,
            password_hash=hash_password(TEST_PASSWORD),
            role=role,
            is_active=is_active,
        )
        session.add(user)
        await session.commit()
        return user


async def create_category(database: Database, name: str = "Sarees") -> Category:
    async with database.session() as session:
        category = Category(name=name, slug=name.lower())
        session.add(category)
        await session.commit()
        return category


async def create_product(database: Database, category: Category, **overrides: Any) -> Product:
    fields: Dict[str, Any] = {
        "name": "Red Silk Saree",
        "description": "Handwoven silk saree",
        "images": ["/api/files/2024/01/15/red.jpg"],
        "price": 1500.0,
        "original_price": 12000.0,
        "size": "Free Size",
        "color": "Red",
        "rental_duration": 3,
        "slug": "red-silk-saree",
    }
    fields.update(overrides)
    async with database.session() as session:
        product = Product(category_id=category.id, **fields)
        session.add(product)
        await session.commit()
        return product


def bearer(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def client(database):
    """
    HTTPX AsyncClient wired straight into the ASGI app.

    ASGITransport does not run the lifespan, so the per-test Database is
    attached to app.state here instead of being built from settings.
    """
    from rentmoment.main import app

    app.state.database = database
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    del app.state.database


@pytest_asyncio.fixture
async def admin(database) -> User:
    return await create_user(database, email="admin@example.com", role="admin", name="Admin")


@pytest_asyncio.fixture
async def customer(database) -> User:
    return await create_user(database)


@pytest.fixture
def admin_headers(admin) -> Dict[str, str]:
    return bearer(admin)


@pytest.fixture
def user_headers(customer) -> Dict[str, str]:
    return bearer(customer)


# ══════════════════════════════════════════════════════════════════════════
# Files
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF APP0 header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_png_bytes():
    """A 1x1 transparent PNG."""
    return (
        b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
        b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f"
        b"\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
    )
