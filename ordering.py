"""
Order placement and the admin order actions.

place_order runs: stock check -> stock reservation -> id generation -> persist.
Notifications and revenue posting are left to the caller as background work.

Stock reservation uses a conditional decrement per line (only when
stock >= qty). If a line loses that race to another order, the lines already
decremented in this request are put back and the order is rejected.
"""
import logging
import random
from datetime import datetime, timedelta
from typing import Any, Dict, List, Tuple

from bson import ObjectId
from pydantic import ValidationError
from pymongo.database import Database

from catalog import DEFAULT_STOCK
from database import create_document, serialize, to_object_id, utcnow
from errors import InsufficientStock, ValidationFailed
from schemas import Order, OrderLine, OrderRequest

logger = logging.getLogger("canteen.ordering")

ORDER_WINDOW = timedelta(hours=24)

Reservation = Tuple[ObjectId, int]


def generate_order_id(rng: random.Random = None) -> str:
    # 6 digits, not checked against existing orders
    rng = rng or random
    return str(rng.randint(100000, 999999))


def check_stock(db: Database, lines: List[OrderLine]) -> List[Reservation]:
    """Validate every line before anything is touched.

    Lines pointing at unknown items are skipped silently.
    """
    wanted: List[Reservation] = []
    for line in lines:
        oid = to_object_id(line.id)
        item = db["item"].find_one({"_id": oid}) if oid else None
        if not item:
            continue
        stock = item.get("stock", DEFAULT_STOCK)
        if stock < line.qty:
            raise InsufficientStock(item.get("name"), stock)
        wanted.append((oid, line.qty))
    return wanted


def release_stock(db: Database, reserved: List[Reservation]) -> None:
    for oid, qty in reserved:
        db["item"].update_one({"_id": oid}, {"$inc": {"stock": qty}})


def reserve_stock(db: Database, wanted: List[Reservation]) -> List[Reservation]:
    reserved: List[Reservation] = []
    for oid, qty in wanted:
        # same default as check_stock for items saved without a stock count
        db["item"].update_one({"_id": oid, "stock": {"$exists": False}}, {"$set": {"stock": DEFAULT_STOCK}})
        res = db["item"].update_one({"_id": oid, "stock": {"$gte": qty}}, {"$inc": {"stock": -qty}})
        if res.modified_count:
            reserved.append((oid, qty))
            continue
        current = db["item"].find_one({"_id": oid})
        if current is None:
            # deleted since the check
            continue
        release_stock(db, reserved)
        logger.warning("Stock for %s ran out during reservation, rolled back %d lines", current.get("name"), len(reserved))
        raise InsufficientStock(current.get("name"), current.get("stock", 0))
    return reserved


def place_order(db: Database, payload: Dict[str, Any], rng: random.Random = None) -> Order:
    try:
        request = OrderRequest.model_validate(payload)
    except ValidationError as e:
        raise ValidationFailed("Invalid order") from e

    wanted = check_stock(db, request.items)
    reserved = reserve_stock(db, wanted)

    # total/discount/finalTotal are stored as the client declared them
    order = Order(orderId=generate_order_id(rng), **request.model_dump())
    try:
        create_document(db, "order", order)
    except Exception:
        release_stock(db, reserved)
        raise
    logger.info("Order %s placed by %s for %s", order.orderId, order.name, order.finalTotal)
    return order


def recent_orders(db: Database, now: datetime = None) -> List[Dict[str, Any]]:
    since = (now or utcnow()) - ORDER_WINDOW
    return [serialize(o) for o in db["order"].find({"timestamp": {"$gte": since}}).sort("timestamp", -1)]


def update_status(db: Database, order_id: str, status: str) -> None:
    if not order_id or not status:
        raise ValidationFailed("orderId and status are required")
    db["order"].update_one({"orderId": str(order_id)}, {"$set": {"status": status}})


def delete_order(db: Database, order_id: str) -> None:
    if not order_id:
        raise ValidationFailed("orderId is required")
    db["order"].delete_one({"orderId": str(order_id)})


def clear_orders(db: Database) -> int:
    count = db["order"].delete_many({}).deleted_count
    logger.info("Cleared %d orders", count)
    return count
