from bson import ObjectId
from fastapi.testclient import TestClient

import main
from catalog import clean_up_items
from schemas import DEFAULT_ITEM_IMAGE


def test_menu_lists_every_item(client, make_item):
    make_item("Samosa")
    make_item("Chai", isAvailable=False)

    items = client.get("/api/menu").json()

    assert sorted(i["name"] for i in items) == ["Chai", "Samosa"]
    assert all("id" in i and "_id" not in i for i in items)


def test_add_item_applies_defaults(client, db):
    res = client.post("/api/admin/add-item", json={"name": "Maggi", "price": 40, "category": "Snacks"})

    assert res.status_code == 200
    assert res.json() == {"success": True}
    item = db["item"].find_one({"name": "Maggi"})
    assert item["stock"] == 50
    assert item["isAvailable"] is True
    assert item["image"] == DEFAULT_ITEM_IMAGE


def test_add_item_without_price_fails(client, db):
    res = client.post("/api/admin/add-item", json={"name": "Maggi", "category": "Snacks"})

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is False
    assert "price" in body["message"]
    assert db["item"].count_documents({}) == 0


def test_add_item_with_blank_name_fails(client, db):
    res = client.post("/api/admin/add-item", json={"name": "", "price": 10, "category": "Snacks"})

    assert res.json()["success"] is False
    assert db["item"].count_documents({}) == 0


def test_delete_item(client, db, make_item):
    item_id = make_item()

    assert client.post("/api/admin/delete-item", json={"id": item_id}).json() == {"success": True}
    assert db["item"].count_documents({}) == 0


def test_delete_item_with_bad_id(client):
    body = client.post("/api/admin/delete-item", json={"id": "not-an-id"}).json()

    assert body == {"success": False, "message": "Invalid id"}


def test_update_stock_toggles_availability_only(client, db, make_item):
    item_id = make_item(stock=7)

    res = client.post("/api/admin/update-stock", json={"id": item_id, "isAvailable": False})

    assert res.json() == {"success": True}
    item = db["item"].find_one({"_id": ObjectId(item_id)})
    assert item["isAvailable"] is False
    assert item["stock"] == 7


def test_clean_up_items(db, make_item):
    db["item"].insert_one({"price": 10})
    db["item"].insert_one({"name": "undefined", "price": 10})
    db["item"].insert_one({"name": "Vada Pav", "price": 15, "category": "Snacks"})
    make_item("Samosa", stock=3)

    assert clean_up_items(db) == 2
    assert db["item"].count_documents({}) == 2
    assert db["item"].find_one({"name": "Vada Pav"})["stock"] == 50
    assert db["item"].find_one({"name": "Samosa"})["stock"] == 3


def test_without_database_routes_report_failure():
    body = TestClient(main.app).get("/api/status").json()

    assert body == {"success": False, "message": "Database not configured"}


def test_service_worker_is_served(client):
    res = client.get("/sw.js")

    assert res.status_code == 200
    assert "caches" in res.text
