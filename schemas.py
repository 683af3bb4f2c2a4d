"""
Database Schemas for the canteen

Each Pydantic model corresponds to a MongoDB collection (lowercased class name).
Field names follow the JSON the browser client already sends and reads.
"""
from datetime import datetime
from typing import List, Optional, Literal

from pydantic import BaseModel, ConfigDict, Field

from database import utcnow

DEFAULT_ITEM_IMAGE = "https://cdn-icons-png.flaticon.com/512/754/754857.png"
SHOP_STATUS_ID = "shop_status"


# Menu
class Item(BaseModel):
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    category: str = Field(..., min_length=1)
    image: str = DEFAULT_ITEM_IMAGE
    isAvailable: bool = True
    stock: int = 50


class Coupon(BaseModel):
    code: str
    type: Literal["flat", "percent"] = "flat"
    value: float = Field(..., ge=0)
    minOrder: float = Field(0, ge=0)


# Orders
class OrderLine(BaseModel):
    # the client also sends price/image per line; keep whatever it sends
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str
    qty: int = Field(..., ge=1)
    name: str = ""


class OrderRequest(BaseModel):
    # mongoose String fields accepted numbers, e.g. a phone sent as 9876543210
    model_config = ConfigDict(coerce_numbers_to_str=True)

    items: List[OrderLine] = Field(..., min_length=1)
    name: str = ""
    phone: str = ""
    total: float = 0
    finalTotal: float = 0
    pickupTime: str = ""
    paymentMode: str = "COD"
    coupon: Optional[str] = None
    discount: float = 0
    location: Optional[str] = ""


class Order(OrderRequest):
    orderId: str
    status: str = "Pending"
    timestamp: datetime = Field(default_factory=utcnow)


class Admin(BaseModel):
    username: str
    password_hash: str


class Setting(BaseModel):
    id: str = SHOP_STATUS_ID
    isOpen: bool = True
    announcement: str = ""


# Request bodies
class CouponCheck(BaseModel):
    code: str = Field(..., min_length=1)
    total: float


class LoginRequest(BaseModel):
    user: str = ""
    # pass is a keyword, so the attribute is renamed
    password: str = Field("", alias="pass")
