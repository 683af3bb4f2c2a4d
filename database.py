"""
MongoDB access helpers.

The connection is opened once at start-up (connect) and handed to routes via
the get_db dependency, so tests can swap in an in-memory database.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from config import Settings

logger = logging.getLogger("canteen.database")

client: Optional[MongoClient] = None
db: Optional[Database] = None


def utcnow() -> datetime:
    # naive UTC, the form pymongo hands back by default
    return datetime.now(timezone.utc).replace(tzinfo=None)


def connect(settings: Settings) -> Optional[Database]:
    global client, db
    if not settings.database_url:
        logger.warning("DATABASE_URL is not set; running without a database")
        return None
    client = MongoClient(settings.database_url)
    db = client[settings.database_name]
    logger.info("Connected to database %s", settings.database_name)
    return db


def disconnect() -> None:
    global client, db
    if client is not None:
        client.close()
    client = None
    db = None


def get_db() -> Database:
    if db is None:
        raise RuntimeError("Database not configured")
    return db


def ensure_indexes(database: Database) -> None:
    # one shop-status document and one record per revenue day
    database["setting"].create_index([("id", ASCENDING)], unique=True)
    database["revenue"].create_index([("date", ASCENDING)], unique=True)
    database["admin"].create_index([("username", ASCENDING)], unique=True)
    database["order"].create_index([("timestamp", ASCENDING)])
    database["order"].create_index([("orderId", ASCENDING)])


def create_document(database: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document and return its id as a string."""
    if isinstance(data, BaseModel):
        data = data.model_dump()
    doc = dict(data)
    doc.setdefault("created_at", utcnow())
    result = database[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(
    database: Database,
    collection_name: str,
    filter_dict: Optional[Dict[str, Any]] = None,
    sort: Optional[List[tuple]] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    cursor = database[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def to_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    if not doc:
        return doc
    doc = dict(doc)
    _id = doc.get("_id")
    if isinstance(_id, ObjectId):
        doc["id"] = str(_id)
        del doc["_id"]
    # convert datetimes to isoformat, naive ones are UTC
    for k, v in list(doc.items()):
        if isinstance(v, datetime):
            if v.tzinfo is None:
                v = v.replace(tzinfo=timezone.utc)
            doc[k] = v.isoformat()
    return doc
