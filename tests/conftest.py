"""Test fixtures for API and service tests."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

os.environ.setdefault("ENCRYPTION_SECRET_KEY", "test-secret-key")
os.environ.pop("GEMINI_API_KEY", None)

from src.api.app import register_exception_handlers
from src.api.routers import api_keys, catalog, preferences
from src.models import Base, Catalog, Category, ProductLine, Variant, get_db
from src.config import settings


@pytest.fixture(scope="function")
def db_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    connection = db_engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def db(db_session):
    return db_session


@pytest.fixture(autouse=True)
def no_env_api_key(monkeypatch):
    monkeypatch.setattr(settings, "gemini_api_key", None)


@pytest.fixture(scope="function")
def test_app():
    @asynccontextmanager
    async def test_lifespan(app: FastAPI) -> AsyncGenerator:
        yield

    app = FastAPI(
        title="Supplier Catalog Extractor Test",
        version="0.1.0",
        lifespan=test_lifespan,
    )

    register_exception_handlers(app)
    app.include_router(catalog.router, prefix="/api/v1/catalog", tags=["catalog"])
    app.include_router(preferences.router, prefix="/api/v1/preferences", tags=["preferences"])
    app.include_router(api_keys.router, prefix="/api/v1", tags=["api-keys"])

    @app.get("/")
    async def root():
        return {
            "name": "Supplier Catalog Extractor",
            "version": "0.1.0",
            "status": "running",
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


@pytest.fixture(scope="function")
def client(db_session: Session, test_app: FastAPI):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    test_app.dependency_overrides[get_db] = override_get_db
    with TestClient(test_app) as test_client:
        yield test_client
    test_app.dependency_overrides.clear()


def make_variant(name: str, price: str = "N/A", **kwargs) -> Variant:
    return Variant(name=name, price=price, **kwargs)


@pytest.fixture
def sample_catalog() -> Catalog:
    return Catalog(
        supplier_name="Acme Tools",
        categories=[
            Category(
                name="Drills",
                products=[
                    ProductLine(
                        name="Cordless Drill",
                        description="18V brushless drill",
                        variants=[
                            make_variant("Compact", "$129.00", sku="CD-100", source="https://acme.example/drills"),
                            make_variant("Pro", "$199.99", sku="CD-200", source="https://acme.example/drills"),
                            make_variant("Kit", "N/A", sku="CD-KIT", source="catalog.pdf"),
                        ],
                    )
                ],
            ),
            Category(
                name="Saws",
                products=[
                    ProductLine(
                        name="Circular Saw",
                        description="Corded saw for framing",
                        variants=[
                            make_variant("Éclair 7", "€89", sku="CS-7", description="7 inch blade", source="catalog.pdf"),
                        ],
                    )
                ],
            ),
        ],
    )
