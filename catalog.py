"""
Menu items and coupons.
"""
import logging
import math
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from pymongo.database import Database

from database import create_document, get_documents, serialize, to_object_id
from errors import InvalidCoupon, MinOrderNotMet, ValidationFailed
from schemas import Coupon, CouponCheck, Item

logger = logging.getLogger("canteen.catalog")

DEFAULT_STOCK = 50

DEFAULT_COUPONS = [
    Coupon(code="WELCOME50", type="flat", value=50, minOrder=150),
    Coupon(code="FOODIE10", type="percent", value=10, minOrder=100),
]


# --------- Menu ---------
def list_items(db: Database) -> List[Dict[str, Any]]:
    # no filtering here, the client hides unavailable items itself
    return [serialize(i) for i in get_documents(db, "item")]


def add_item(db: Database, payload: Dict[str, Any]) -> str:
    try:
        item = Item.model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise ValidationFailed(f"Invalid item fields: {fields}") from e
    return create_document(db, "item", item)


def delete_item(db: Database, item_id: Any) -> None:
    oid = to_object_id(item_id)
    if oid is None:
        raise ValidationFailed("Invalid id")
    db["item"].delete_one({"_id": oid})


def set_availability(db: Database, item_id: Any, is_available: bool) -> None:
    oid = to_object_id(item_id)
    if oid is None:
        raise ValidationFailed("Invalid id")
    db["item"].update_one({"_id": oid}, {"$set": {"isAvailable": bool(is_available)}})


def clean_up_items(db: Database) -> int:
    """Drop nameless leftovers and give stock-less items the default stock."""
    removed = db["item"].delete_many({"$or": [{"name": {"$exists": False}}, {"name": "undefined"}]}).deleted_count
    db["item"].update_many({"stock": {"$exists": False}}, {"$set": {"stock": DEFAULT_STOCK}})
    if removed:
        logger.info("Removed %d broken menu items", removed)
    return removed


# --------- Coupons ---------
def find_coupon(db: Database, code: Optional[str]) -> Optional[Dict[str, Any]]:
    if not code:
        return None
    return db["coupon"].find_one({"code": code.strip().upper()})


def verify_coupon(db: Database, payload: Dict[str, Any]) -> Dict[str, Any]:
    try:
        check = CouponCheck.model_validate(payload)
    except ValidationError as e:
        raise InvalidCoupon() from e
    c = find_coupon(db, check.code)
    if not c:
        raise InvalidCoupon()
    min_order = c.get("minOrder") or 0
    if check.total < min_order:
        raise MinOrderNotMet(min_order)
    if c.get("type") == "flat":
        discount = c["value"]
    elif c.get("type") == "percent":
        discount = math.floor(check.total * c["value"] / 100)
    else:
        discount = 0
    return {"success": True, "discount": discount, "newTotal": check.total - discount, "code": c["code"]}


def seed_coupons(db: Database) -> bool:
    if db["coupon"].count_documents({}) > 0:
        return False
    for coupon in DEFAULT_COUPONS:
        create_document(db, "coupon", coupon)
    logger.info("Default coupons created: %s", ", ".join(c.code for c in DEFAULT_COUPONS))
    return True
