import mongomock
import pytest
from fastapi.testclient import TestClient

import main
from config import Settings, get_settings


@pytest.fixture
def db():
    return mongomock.MongoClient().canteen


@pytest.fixture
def settings():
    return Settings(admin_password="s3cret")


@pytest.fixture
def client(db, settings):
    main.app.dependency_overrides[main.get_db] = lambda: db
    main.app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def make_item(db):
    def _make(name="Samosa", price=20, stock=50, category="Snacks", **extra):
        doc = {"name": name, "price": price, "category": category, "isAvailable": True, "stock": stock}
        doc.update(extra)
        return str(db["item"].insert_one(doc).inserted_id)
    return _make
