"""Pytest fixtures for testing"""

import itertools
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from smartshop.api.main import create_app
from smartshop.domain.models import Client, Product, Tier
from smartshop.infrastructure.database.models import Base
from smartshop.infrastructure.database.repositories import ClientRepository, ProductRepository
from smartshop.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def other_db(db: Session) -> Generator[Session, None, None]:
    """Second session on the same database, standing in for a concurrent request"""
    other = TestingSessionLocal()
    try:
        yield other
    finally:
        other.close()


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def make_client(db: Session):
    """Factory persisting a shop client with the given tier and stats"""
    repo = ClientRepository(db)
    counter = itertools.count(1)

    def _make(tier: Tier = Tier.BASIC, total_orders: int = 0, total_spent: str = "0") -> Client:
        n = next(counter)
        shop_client = repo.create_client(name=f"Client {n}", email=f"client{n}@example.com")
        shop_client.tier = tier
        shop_client.total_orders = total_orders
        shop_client.total_spent = Decimal(total_spent)
        shop_client = repo.save_client(shop_client)
        db.commit()
        return shop_client

    return _make


@pytest.fixture
def make_product(db: Session):
    """Factory persisting a catalogue product"""
    repo = ProductRepository(db)
    counter = itertools.count(1)

    def _make(price: str = "100.00", stock: int = 10) -> Product:
        product = repo.create_product(name=f"Product {next(counter)}", price=Decimal(price), stock=stock)
        db.commit()
        return product

    return _make
