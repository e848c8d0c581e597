from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import cibercontrol.models  # noqa: F401
from cibercontrol.core.database import get_db
from cibercontrol.core.store import RowStore
from cibercontrol.main import app
from cibercontrol.models.base import Base


@pytest.fixture
def engine():
    # Una sola conexion compartida: la base en memoria vive mientras dure el test
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
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return RowStore(db, read_retries=0, retry_backoff=0)


@pytest.fixture
def client(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_pc(store):
    def _make(number="PC01", status="available", group=None):
        return store.insert("pcs", {"number": number, "status": status, "group": group})
    return _make


@pytest.fixture
def make_client(store):
    def _make(name="Juan Perez", nickname=None):
        return store.insert("clients", {"name": name, "nickname": nickname})
    return _make


@pytest.fixture
def make_product(store):
    def _make(name="Gaseosa", price="2.50", group=None):
        return store.insert("products", {"name": name, "price": Decimal(price), "group": group})
    return _make
