import pytest

from catalog import find_coupon, seed_coupons


@pytest.fixture(autouse=True)
def coupons(db):
    seed_coupons(db)


def test_seed_coupons_only_once(db):
    assert seed_coupons(db) is False
    assert db["coupon"].count_documents({}) == 2


def test_find_coupon_is_case_insensitive(db):
    assert find_coupon(db, "welcome50")["code"] == "WELCOME50"
    assert find_coupon(db, "") is None


def test_flat_coupon(client):
    body = client.post("/api/verify-coupon", json={"code": "welcome50", "total": 200}).json()

    assert body["success"] is True
    assert body["discount"] == 50
    assert body["newTotal"] == 150
    assert body["code"] == "WELCOME50"


def test_percent_coupon_floors_discount(client):
    body = client.post("/api/verify-coupon", json={"code": "FOODIE10", "total": 255}).json()

    assert body["success"] is True
    assert body["discount"] == 25
    assert body["newTotal"] == 230


def test_min_order_not_met(client):
    res = client.post("/api/verify-coupon", json={"code": "WELCOME50", "total": 149})

    assert res.status_code == 200
    assert res.json() == {"success": False, "message": "Min order ₹150 required!"}


def test_unknown_coupon(client):
    body = client.post("/api/verify-coupon", json={"code": "NOPE", "total": 500}).json()

    assert body == {"success": False, "message": "Invalid Coupon Code"}


def test_missing_code(client):
    body = client.post("/api/verify-coupon", json={"total": 500}).json()

    assert body["success"] is False
