"""
The shop-status singleton: open/closed flag and announcement banner.
"""
from typing import Any, Dict

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from schemas import SHOP_STATUS_ID, Setting

DEFAULTS = Setting().model_dump(exclude={"id"})


def _upsert(db: Database, update: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return db["setting"].find_one_and_update(
            {"id": SHOP_STATUS_ID}, update, upsert=True, return_document=ReturnDocument.AFTER
        )
    except DuplicateKeyError:
        # a concurrent first access inserted it; apply to the existing record
        return db["setting"].find_one_and_update(
            {"id": SHOP_STATUS_ID}, update, return_document=ReturnDocument.AFTER
        )


def get_status(db: Database) -> Dict[str, Any]:
    doc = _upsert(db, {"$setOnInsert": DEFAULTS})
    return {"isOpen": doc.get("isOpen", True), "announcement": doc.get("announcement", "")}


def set_open(db: Database, is_open: bool) -> None:
    _upsert(db, {"$set": {"isOpen": bool(is_open)}, "$setOnInsert": {"announcement": DEFAULTS["announcement"]}})


def announce(db: Database, text: str) -> None:
    _upsert(db, {"$set": {"announcement": text or ""}, "$setOnInsert": {"isOpen": DEFAULTS["isOpen"]}})
