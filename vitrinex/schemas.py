from __future__ import annotations
import math
import re
from typing import Any, Dict, List, Optional, Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

# Collections:
# - user
# - store
# - product
# - service
# - booking
# - order
# - message
# - store_appearance

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
SLOT_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

StoreMode = Literal["products", "bookings"]
BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]
OrderStatus = Literal["pending", "confirmed", "fulfilled", "cancelled"]

MAX_MESSAGE_LENGTH = 1000


# ---------- Auth ----------
class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)


# ---------- Stores ----------
class StoreIn(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    mode: StoreMode = "products"
    description: str = Field("", max_length=500)
    logo_url: str = ""
    city: Optional[str] = Field(None, max_length=50)
    business_type: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=200)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    schedule_text: str = Field("", max_length=500)
    primary_color: str = Field("#2563eb", pattern=COLOR_PATTERN)
    accent_color: str = Field("#0f172a", pattern=COLOR_PATTERN)
    bg_mode: Literal["solid", "gradient", "image"] = "gradient"
    bg_pattern: Literal["none", "dots", "grid", "noise"] = "none"
    hero_title: str = Field("", max_length=100)
    hero_subtitle: str = Field("", max_length=200)
    price_from: str = Field("", max_length=50)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if len(v) < 3:
            raise ValueError("name must have at least 3 characters")
        return v


class StoreUpdate(StoreIn):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    mode: Optional[StoreMode] = None
    description: Optional[str] = Field(None, max_length=500)
    logo_url: Optional[str] = None
    schedule_text: Optional[str] = Field(None, max_length=500)
    primary_color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    accent_color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    bg_mode: Optional[Literal["solid", "gradient", "image"]] = None
    bg_pattern: Optional[Literal["none", "dots", "grid", "noise"]] = None
    hero_title: Optional[str] = Field(None, max_length=100)
    hero_subtitle: Optional[str] = Field(None, max_length=200)
    price_from: Optional[str] = Field(None, max_length=50)


class StoreSave(StoreUpdate):
    # Present when the owner edits an existing store through /stores/my
    id: Optional[str] = None


# ---------- Products ----------
class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=1000)
    price: float = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    images: List[str] = Field(default_factory=list, max_length=10)
    category: Optional[str] = Field(None, max_length=50)
    is_active: bool = True

    @field_validator("images", mode="before")
    @classmethod
    def split_images(cls, v: Any) -> Any:
        # Accept newline or comma separated text from simple forms
        if isinstance(v, str):
            return [img.strip() for img in re.split(r"[\n,]+", v) if img.strip()]
        if isinstance(v, list):
            return [img.strip() for img in v if isinstance(img, str) and img.strip()]
        return v


class ProductUpdate(ProductCreate):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    images: Optional[List[str]] = Field(None, max_length=10)
    is_active: Optional[bool] = None


# ---------- Services ----------
class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)
    duration: int = Field(30, ge=5, le=480, description="Minutes")
    price: float = Field(..., ge=0)
    is_active: bool = True
    display_order: int = 0
    image_url: str = ""
    category: str = Field("", max_length=50)
    tags: List[str] = Field(default_factory=list)

    @field_validator("name", "description", "image_url", "category")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        return [tag.strip() for tag in v if tag and tag.strip()]


class ServiceUpdate(ServiceCreate):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    duration: Optional[int] = Field(None, ge=5, le=480)
    price: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None
    display_order: Optional[int] = None
    image_url: Optional[str] = None
    category: Optional[str] = Field(None, max_length=50)
    tags: Optional[List[str]] = None


class ServiceReorder(BaseModel):
    service_ids: List[str] = Field(..., min_length=1)


# ---------- Availability ----------
class TimeBlock(BaseModel):
    start_time: str = Field(..., pattern=r"^([01]?\d|2[0-3]):[0-5]\d$")
    end_time: str = Field(..., pattern=r"^([01]?\d|2[0-3]):[0-5]\d$")
    slot_duration: int = Field(30, ge=5, le=480)


class SpecialDayIn(BaseModel):
    date: str = Field(..., pattern=DATE_PATTERN)
    is_closed: bool = False
    reason: str = Field("", max_length=200)
    time_blocks: List[TimeBlock] = Field(default_factory=list)


class AvailabilityUpdate(BaseModel):
    # Weekly entries are normalized leniently: invalid blocks are dropped, not rejected
    availability: List[Dict[str, Any]] = Field(default_factory=list)
    special_days: Optional[List[Dict[str, Any]]] = None


# ---------- Bookings ----------
class BookingCreate(BaseModel):
    customer_name: str = Field(..., min_length=2, max_length=100)
    customer_email: EmailStr
    customer_phone: Optional[str] = Field(None, min_length=8, max_length=20)
    date: str = Field(..., pattern=DATE_PATTERN)  # YYYY-MM-DD
    slot: str = Field(..., pattern=SLOT_PATTERN)  # HH:MM
    service_id: Optional[str] = None
    notes: str = Field("", max_length=500)

    @field_validator("customer_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


# ---------- Orders ----------
class OrderItemIn(BaseModel):
    product_id: str
    quantity: int = 1

    @field_validator("quantity", mode="before")
    @classmethod
    def floor_quantity(cls, v: Any) -> int:
        try:
            return max(1, math.floor(float(v)))
        except (TypeError, ValueError):
            return 1


class OrderCreate(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=100)
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = Field(None, max_length=20)
    customer_address: Optional[str] = Field(None, max_length=200)
    notes: str = Field("", max_length=500)
    items: List[OrderItemIn] = Field(..., min_length=1)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


# ---------- Messages ----------
class MessageCreate(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def check_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("message cannot be empty")
        if len(v) > MAX_MESSAGE_LENGTH:
            raise ValueError(f"message is too long (max {MAX_MESSAGE_LENGTH} characters)")
        return v


class PublicMessageCreate(MessageCreate):
    email: EmailStr


# ---------- Appearance ----------
class AppearanceUpdate(BaseModel):
    theme: Optional[str] = None
    colors: Optional[Dict[str, Any]] = None
    typography: Optional[Dict[str, Any]] = None
    background: Optional[Dict[str, Any]] = None
    layout: Optional[Dict[str, Any]] = None
    components: Optional[Dict[str, Any]] = None
    sections: Optional[Any] = None
    content: Optional[Dict[str, Any]] = None
    effects: Optional[Dict[str, Any]] = None


class ApplyTheme(BaseModel):
    theme_name: str = Field(..., min_length=1)
