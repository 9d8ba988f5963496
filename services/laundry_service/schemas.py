"""Pydantic schemas for the laundry service.

JSON bodies use camelCase (``shopId``, ``pickupTime``) to match the web
client; snake_case names are accepted on input too.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from libs.common.datetime_utils import ensure_utc
from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from services.laundry_service.models import OrderStatus, UserRole

UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CamelResponse(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# ============================================================================
# AUTH SCHEMAS
# ============================================================================


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    role: UserRole = UserRole.CUSTOMER


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class UserResponse(CamelResponse):
    id: uuid.UUID
    email: str
    name: str
    phone: Optional[str] = None
    role: UserRole
    created_at: UtcDatetime


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# ============================================================================
# ADMIN SCHEMAS
# ============================================================================


class AvailableOwnerResponse(CamelResponse):
    id: uuid.UUID
    name: str
    email: str


class UserRoleUpdate(CamelModel):
    role: UserRole


class AdminStatsResponse(CamelModel):
    total_users: int
    total_shops: int
    pending_shops: int
    total_orders: int


# ============================================================================
# SERVICE (CATALOG) SCHEMAS
# ============================================================================


class ServiceCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class ServiceUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)


class ServiceResponse(CamelResponse):
    id: uuid.UUID
    shop_id: uuid.UUID
    name: str
    description: Optional[str] = None
    price: Decimal
    created_at: UtcDatetime


# ============================================================================
# SHOP SCHEMAS
# ============================================================================


class ShopCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=500)
    phone: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    description: Optional[str] = None
    owner_id: uuid.UUID


class ShopUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, min_length=1, max_length=500)
    phone: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    description: Optional[str] = None
    is_approved: Optional[bool] = None


class ShopOwnerSummary(CamelResponse):
    id: uuid.UUID
    name: str
    email: str


class ShopResponse(CamelResponse):
    id: uuid.UUID
    name: str
    address: str
    phone: str
    email: str
    description: Optional[str] = None
    is_approved: bool
    owner_id: uuid.UUID
    owner: Optional[ShopOwnerSummary] = None
    services: list[ServiceResponse] = []
    created_at: UtcDatetime
    updated_at: UtcDatetime


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class CartLine(CamelModel):
    service_id: uuid.UUID
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)


class OrderCreate(CamelModel):
    shop_id: uuid.UUID
    items: list[CartLine] = Field(..., min_length=1)
    pickup_time: UtcDatetime
    delivery_time: UtcDatetime


class OrderUpdate(CamelModel):
    """Partial update; fields left out are not touched."""

    status: Optional[OrderStatus] = None
    pickup_time: Optional[UtcDatetime] = None
    delivery_time: Optional[UtcDatetime] = None
    version: Optional[int] = Field(None, ge=1)


class OrderItemResponse(CamelResponse):
    id: uuid.UUID
    service_id: uuid.UUID
    service_name: str
    quantity: int
    price: Decimal


class OrderCustomerSummary(CamelResponse):
    id: uuid.UUID
    name: str
    email: str


class OrderShopSummary(CamelResponse):
    id: uuid.UUID
    name: str


class OrderResponse(CamelResponse):
    id: uuid.UUID
    customer_id: uuid.UUID
    shop_id: uuid.UUID
    total: Decimal
    status: OrderStatus
    pickup_time: UtcDatetime
    delivery_time: UtcDatetime
    version: int
    items: list[OrderItemResponse] = []
    customer: Optional[OrderCustomerSummary] = None
    shop: Optional[OrderShopSummary] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime
