"""
Telegram alerts for new orders.

Two messages go out per order: a silent receipt for the record and a short
summary with sound for the kitchen. Each call is independent; failures are
logged and dropped so they never reach the customer.
"""
import html
import logging
from typing import Any, Dict, Iterable

import requests

from config import Settings
from schemas import Order

logger = logging.getLogger("canteen.notifications")

PACKED_MARKER = "(📦 PACKED)"


def _money(value: Any) -> str:
    try:
        return f"{float(value):g}"
    except (TypeError, ValueError):
        return str(value)


def _lines(order: Order) -> Iterable[Dict[str, Any]]:
    return [line.model_dump() for line in order.items]


def build_receipt(order: Order) -> str:
    items_list = "\n".join(f"- {line['qty']} x {html.escape(line.get('name') or '')}" for line in _lines(order))
    if order.location:
        loc_line = f'\n📍 <a href="{html.escape(order.location, quote=True)}"><b>View on Map</b></a>'
    else:
        loc_line = "\n📍 No Location"
    pay_status = "🟢 PAID ONLINE" if order.paymentMode == "Online" else "🔴 CASH ON DELIVERY"
    discount_line = ""
    if order.discount and order.discount > 0:
        discount_line = f"\n🏷️ Coupon: {html.escape(order.coupon or '')} (-₹{_money(order.discount)})"
    return (
        f"🧾 <b>ORDER #{order.orderId}</b>\n"
        f"👤 {html.escape(order.name)} ({html.escape(order.phone)}){loc_line}\n\n"
        f"<b>{pay_status}</b>\n"
        f"💰 Total: ₹{_money(order.finalTotal)} {discount_line}\n\n"
        f"🛒 <b>ITEMS:</b>\n{items_list}"
    )


def build_summary(order: Order) -> str:
    spoken = ", ".join(
        f"{line['qty']} {html.escape((line.get('name') or '').replace(PACKED_MARKER, '', 1))}" for line in _lines(order)
    )
    return f"🔔 <b>NEW ORDER</b>\n{html.escape(order.name)}\n{spoken}"


def send_message(settings: Settings, text: str, silent: bool = False, session=requests) -> None:
    url = f"{settings.telegram_api_url.rstrip('/')}/bot{settings.telegram_bot_token}/sendMessage"
    body = {
        "chat_id": settings.telegram_chat_id,
        "text": text,
        "parse_mode": "HTML",
        "disable_notification": silent,
    }
    resp = session.post(url, json=body, timeout=settings.notify_timeout)
    resp.raise_for_status()


def send_order_alerts(settings: Settings, order: Order, session=requests) -> int:
    """Send receipt and summary; returns how many were delivered."""
    if not settings.telegram_bot_token or not settings.telegram_chat_id:
        logger.info("Telegram not configured; skipping alerts for order %s", order.orderId)
        return 0
    sent = 0
    for kind, text, silent in (
        ("receipt", build_receipt(order), True),
        ("summary", build_summary(order), False),
    ):
        try:
            send_message(settings, text, silent=silent, session=session)
            sent += 1
        except Exception:
            logger.exception("Telegram %s for order %s failed", kind, order.orderId)
    return sent
