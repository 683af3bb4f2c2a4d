"""
Per-day revenue totals.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from database import serialize

logger = logging.getLogger("canteen.ledger")


def today() -> str:
    # local calendar day, YYYY-MM-DD
    return date.today().isoformat()


def post_revenue(db: Database, amount: float, day: Optional[str] = None) -> None:
    day = day or today()
    db["revenue"].update_one({"date": day}, {"$inc": {"amount": amount}}, upsert=True)


def record_revenue(db: Database, amount: float) -> None:
    """Background-task wrapper: failures are logged, never raised."""
    try:
        post_revenue(db, amount or 0)
    except Exception:
        logger.exception("Failed to post revenue of %s", amount)


def list_revenue(db: Database) -> List[Dict[str, Any]]:
    return [serialize(r) for r in db["revenue"].find().sort("date", -1)]
