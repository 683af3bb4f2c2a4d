import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import BackgroundTasks, Body, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pymongo.database import Database
from pymongo.errors import PyMongoError

import database
from accounts import authenticate, seed_admin
from catalog import add_item, clean_up_items, delete_item, list_items, seed_coupons, set_availability, verify_coupon
from config import Settings, get_settings
from errors import CanteenError, ServerError
from ledger import list_revenue, record_revenue
from notifications import send_order_alerts
from ordering import clear_orders, delete_order, place_order, recent_orders, update_status
from shop import announce, get_status, set_open

logger = logging.getLogger("canteen")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    db = database.connect(settings)
    if db is not None:
        database.ensure_indexes(db)
        seed_admin(db, settings)
        clean_up_items(db)
        seed_coupons(db)
    yield
    database.disconnect()


app = FastAPI(title="Canteen API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --------- Errors ---------
@app.exception_handler(CanteenError)
async def canteen_error_handler(request: Request, exc: CanteenError):
    # business failures are reported in the body, never via the status code
    return JSONResponse({"success": False, "message": exc.message})


@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse({"success": False, "message": ServerError.default_message})


def get_db() -> Database:
    try:
        return database.get_db()
    except RuntimeError as e:
        raise ServerError("Database not configured") from e


# --------- Health/Test ---------
@app.get("/test")
def test_database(settings: Settings = Depends(get_settings)):
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if settings.database_url else "❌ Not Set",
        "database_name": settings.database_name,
        "telegram": "✅ Set" if settings.telegram_bot_token and settings.telegram_chat_id else "❌ Not Set",
        "collections": []
    }
    try:
        if database.db is not None:
            response["collections"] = database.db.list_collection_names()[:10]
            response["database"] = "✅ Connected & Working"
    except Exception as e:
        response["database"] = f"⚠️ Error: {str(e)[:80]}"
    return response


# --------- Menu / Coupons ---------
@app.get("/api/menu")
def get_menu(db: Database = Depends(get_db)):
    return list_items(db)


@app.post("/api/verify-coupon")
def check_coupon(payload: Dict[str, Any] = Body(default={}), db: Database = Depends(get_db)):
    return verify_coupon(db, payload)


# --------- Orders ---------
@app.post("/api/order")
def create_order(
    background_tasks: BackgroundTasks,
    payload: Dict[str, Any] = Body(default={}),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        order = place_order(db, payload)
    except CanteenError:
        raise
    except Exception as e:
        logger.exception("Order Error")
        raise ServerError() from e
    # runs after the response is sent; failures are logged inside each task
    background_tasks.add_task(record_revenue, db, order.finalTotal)
    background_tasks.add_task(send_order_alerts, settings, order)
    return {"success": True, "orderId": order.orderId}


@app.get("/api/orders")
def list_orders(db: Database = Depends(get_db)):
    return recent_orders(db)


@app.post("/api/update-status")
def change_order_status(payload: Dict[str, Any] = Body(default={}), db: Database = Depends(get_db)):
    update_status(db, payload.get("orderId"), payload.get("status"))
    return {"success": True}


@app.post("/api/delete-order")
def remove_order(payload: Dict[str, Any] = Body(default={}), db: Database = Depends(get_db)):
    delete_order(db, payload.get("orderId"))
    return {"success": True}


@app.post("/api/clear-all")
def clear_all_orders(db: Database = Depends(get_db)):
    clear_orders(db)
    return {"success": True}


# --------- Admin ---------
@app.post("/api/admin/login")
def admin_login(
    payload: Dict[str, Any] = Body(default={}),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    authenticate(db, settings, payload)
    return {"success": True}


@app.post("/api/admin/add-item")
def admin_add_item(payload: Dict[str, Any] = Body(default={}), db: Database = Depends(get_db)):
    add_item(db, payload)
    return {"success": True}


@app.post("/api/admin/delete-item")
def admin_delete_item(payload: Dict[str, Any] = Body(default={}), db: Database = Depends(get_db)):
    delete_item(db, payload.get("id"))
    return {"success": True}


@app.post("/api/admin/update-stock")
def admin_update_stock(payload: Dict[str, Any] = Body(default={}), db: Database = Depends(get_db)):
    set_availability(db, payload.get("id"), payload.get("isAvailable"))
    return {"success": True}


@app.get("/api/admin/revenue")
def admin_revenue(db: Database = Depends(get_db)):
    return list_revenue(db)


# --------- Shop status ---------
@app.get("/api/status")
def shop_status(db: Database = Depends(get_db)):
    return get_status(db)


@app.post("/api/toggle-shop")
def toggle_shop(payload: Dict[str, Any] = Body(default={}), db: Database = Depends(get_db)):
    set_open(db, payload.get("isOpen"))
    return {"success": True}


@app.post("/api/admin/announce")
def admin_announce(payload: Dict[str, Any] = Body(default={}), db: Database = Depends(get_db)):
    announce(db, payload.get("text"))
    return {"success": True}


# browser client and its service worker; registered last so /api wins
_static_dir = get_settings().static_dir
if os.path.isdir(_static_dir):
    app.mount("/", StaticFiles(directory=_static_dir, html=True), name="static")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
