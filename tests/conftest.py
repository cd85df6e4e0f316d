"""Shared fixtures: both store backends, services and an app client"""

import itertools

import pytest
from fastapi.testclient import TestClient

from storefront.core.database import build_engine, build_sessionmaker, init_db
from storefront.core.websocket import ConnectionManager
from storefront.main import create_app
from storefront.repositories import FileStore, build_repositories
from storefront.services import CartService, ProductService

_codes = itertools.count(1)

def product_data(**overrides):
    """Valid creation payload with a fresh code"""
    data = {
        "title": "Mechanical keyboard",
        "description": "Tenkeyless, brown switches",
        "code": f"KB-{next(_codes):04d}",
        "price": 59.9,
        "stock": 12,
        "category": "peripherals",
    }
    data.update(overrides)
    return data

class ChangeRecorder:
    """Product change hook that remembers every call"""

    def __init__(self):
        self.calls = []

    async def __call__(self, event, snapshot, change):
        self.calls.append((event, snapshot, change))

@pytest.fixture
def file_store(tmp_path):
    return FileStore(tmp_path / "data")

@pytest.fixture
async def sql_engine():
    engine = build_engine("sqlite+aiosqlite://")
    await init_db(engine)
    yield engine
    await engine.dispose()

@pytest.fixture(params=["file", "sql"])
async def repositories(request, tmp_path):
    """(products, carts) for each backend"""
    if request.param == "file":
        yield FileStore(tmp_path / "data").repositories()
        return

    engine = build_engine("sqlite+aiosqlite://")
    await init_db(engine)
    async with build_sessionmaker(engine)() as session:
        yield build_repositories(db=session)
    await engine.dispose()

@pytest.fixture
def recorder():
    return ChangeRecorder()

@pytest.fixture
def product_service(repositories, recorder):
    return ProductService(repositories[0], on_change=recorder, snapshot_size=10)

@pytest.fixture
def cart_service(repositories):
    products, carts = repositories
    return CartService(carts, products)

@pytest.fixture
def connections():
    return ConnectionManager()

@pytest.fixture
def client(file_store, connections):
    app = create_app(file_store=file_store, connections=connections)
    with TestClient(app) as test_client:
        yield test_client

@pytest.fixture
def sql_client(connections):
    engine = build_engine("sqlite+aiosqlite://")
    app = create_app(engine=engine, connections=connections)
    with TestClient(app) as test_client:
        yield test_client
