"""
Admin principal: seeding and login.

Passwords are stored as salted PBKDF2-SHA256 hashes. Records that still carry
a plaintext `pass` field are accepted once and rewritten with a hash.
"""
import hashlib
import hmac
import logging
import secrets
from typing import Any, Dict

from pydantic import ValidationError
from pymongo.database import Database

from config import Settings
from errors import AuthFailure
from schemas import Admin, LoginRequest

logger = logging.getLogger("canteen.accounts")

ITERATIONS = 260000


def hash_password(password: str, salt: str = None, iterations: int = ITERATIONS) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"pbkdf2_sha256${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, _ = encoded.split("$", 3)
    except (AttributeError, ValueError):
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    candidate = hash_password(password, salt, int(iterations))
    return hmac.compare_digest(candidate.encode("utf-8"), encoded.encode("utf-8"))


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest((a or "").encode("utf-8"), (b or "").encode("utf-8"))


def seed_admin(db: Database, settings: Settings) -> bool:
    if db["admin"].count_documents({}) > 0:
        return False
    admin = Admin(username=settings.admin_user, password_hash=hash_password(settings.admin_password))
    result = db["admin"].update_one(
        {"username": admin.username},
        {"$setOnInsert": admin.model_dump(exclude={"username"})},
        upsert=True,
    )
    if result.upserted_id is not None:
        logger.info("Admin account '%s' created", settings.admin_user)
    return result.upserted_id is not None


def authenticate(db: Database, settings: Settings, payload: Dict[str, Any]) -> None:
    """Raise AuthFailure unless the posted user/pass is accepted."""
    try:
        login = LoginRequest.model_validate(payload)
    except ValidationError as e:
        raise AuthFailure() from e

    if settings.allow_fallback_login and login.password and _same(login.password, settings.admin_password):
        logger.warning("Admin login for '%s' accepted via fallback password", login.user)
        return

    admin = db["admin"].find_one({"username": login.user})
    if admin is None or not login.password:
        logger.info("Rejected admin login for '%s'", login.user)
        raise AuthFailure()

    if admin.get("password_hash"):
        if verify_password(login.password, admin["password_hash"]):
            return
    elif admin.get("pass") is not None and _same(login.password, str(admin["pass"])):
        db["admin"].update_one(
            {"_id": admin["_id"]},
            {"$set": {"password_hash": hash_password(login.password)}, "$unset": {"pass": ""}},
        )
        logger.info("Upgraded plaintext password of admin '%s'", login.user)
        return

    logger.info("Rejected admin login for '%s'", login.user)
    raise AuthFailure()
