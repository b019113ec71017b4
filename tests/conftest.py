"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import sys
import os
from decimal import Decimal

import pytest_asyncio

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Environment defaults must be in place before config is imported
import test_config  # noqa: F401

from db import build_engine, build_session_maker, create_db_and_tables, get_db_session
from enums.product_category import ProductCategory
from enums.product_condition import ProductCondition
from models.product import ProductDTO
from models.user import UserDTO
from services.catalog import CatalogService
from services.user import UserService


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine (in-memory SQLite, foreign keys on)."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await create_db_and_tables(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine):
    """Create test database session."""
    async with get_db_session(build_session_maker(test_engine)) as session:
        yield session


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    """File-backed engine for tests that need several independent connections."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'marketplace.db'}")
    await create_db_and_tables(engine)

    yield engine

    await engine.dispose()


# ============================================================================
# Domain Fixtures
# ============================================================================

def make_user_dto(username: str) -> UserDTO:
    return UserDTO(username=username, email=f"{username}@example.com", password_hash="not-a-real-hash")


def make_product_dto(seller_id: int, title: str = "Vintage film camera", price: str = "20.00", **overrides) -> ProductDTO:
    fields = dict(
        title=title,
        description="Fully working 35mm camera with original strap",
        category=ProductCategory.ELECTRONICS,
        price=Decimal(price),
        condition=ProductCondition.GOOD,
        brand="Canon",
        seller_id=seller_id,
        image_url="/uploads/products/camera.jpg",
    )
    fields.update(overrides)
    return ProductDTO(**fields)


@pytest_asyncio.fixture
async def seller(test_session):
    return await UserService.register(make_user_dto("seller"), test_session)


@pytest_asyncio.fixture
async def buyer(test_session):
    return await UserService.register(make_user_dto("buyer"), test_session)


@pytest_asyncio.fixture
async def product(test_session, seller):
    return await CatalogService.create_product(make_product_dto(seller.id), test_session)


@pytest_asyncio.fixture
async def second_product(test_session, seller):
    return await CatalogService.create_product(
        make_product_dto(seller.id, title="Hardcover atlas", price="7.50",
                         category=ProductCategory.BOOKS, condition=ProductCondition.LIKE_NEW, brand=None),
        test_session
    )


@pytest_asyncio.fixture
async def user_factory(test_session):
    """Register extra users: await user_factory("carol")."""
    async def create(username: str):
        return await UserService.register(make_user_dto(username), test_session)
    return create


@pytest_asyncio.fixture
async def product_factory(test_session):
    """List extra products: await product_factory(seller_id, title="Desk lamp", price="12.00")."""
    async def create(seller_id: int, **kwargs):
        return await CatalogService.create_product(make_product_dto(seller_id, **kwargs), test_session)
    return create
