from accounts import hash_password, seed_admin, verify_password
from config import Settings, get_settings
from ledger import post_revenue

import main


def login(client, user, password):
    return client.post("/api/admin/login", json={"user": user, "pass": password}).json()


def test_password_hash_round_trip():
    encoded = hash_password("hunter2")

    assert encoded.startswith("pbkdf2_sha256$")
    assert "hunter2" not in encoded
    assert verify_password("hunter2", encoded)
    assert not verify_password("hunter3", encoded)
    assert not verify_password("hunter2", "garbage")


def test_seed_admin_once(db, settings):
    assert seed_admin(db, settings) is True
    assert seed_admin(db, settings) is False
    admin = db["admin"].find_one()
    assert admin["username"] == "admin"
    assert "pass" not in admin
    assert verify_password("s3cret", admin["password_hash"])


def test_login_with_stored_password(client, db, settings):
    seed_admin(db, settings)

    assert login(client, "admin", "s3cret") == {"success": True}


def test_login_rejects_wrong_password(client, db, settings):
    seed_admin(db, settings)

    assert login(client, "admin", "nope") == {"success": False, "message": "Invalid credentials"}
    assert login(client, "someone", "s3cret") == {"success": False, "message": "Invalid credentials"}


def test_legacy_plaintext_password_is_upgraded(client, db):
    db["admin"].insert_one({"username": "admin", "pass": "old-pass"})

    assert login(client, "admin", "old-pass") == {"success": True}

    admin = db["admin"].find_one({"username": "admin"})
    assert "pass" not in admin
    assert verify_password("old-pass", admin["password_hash"])
    assert login(client, "admin", "old-pass") == {"success": True}


def test_fallback_password_disabled_by_default(client, db):
    db["admin"].insert_one({"username": "admin", "password_hash": hash_password("different")})

    assert login(client, "admin", "s3cret")["success"] is False


def test_fallback_password_when_enabled(client, db):
    db["admin"].insert_one({"username": "admin", "password_hash": hash_password("different")})
    main.app.dependency_overrides[get_settings] = lambda: Settings(admin_password="s3cret", allow_fallback_login=True)

    assert login(client, "admin", "s3cret") == {"success": True}
    assert login(client, "anyone", "s3cret") == {"success": True}
    assert login(client, "admin", "")["success"] is False


def test_revenue_newest_day_first(client, db):
    post_revenue(db, 100, day="2026-10-17")
    post_revenue(db, 50, day="2026-10-18")
    post_revenue(db, 25, day="2026-10-17")

    records = client.get("/api/admin/revenue").json()

    assert [(r["date"], r["amount"]) for r in records] == [("2026-10-18", 50), ("2026-10-17", 125)]
