"""
Pydantic schemas for the shop: menu products, categories, cart, orders and coupons.
"""

import json
from datetime import datetime
from typing import Annotated, Any, Literal, Optional

from pydantic import AfterValidator, BeforeValidator, Field, field_validator, model_validator

from shared.config.constants import CouponScope, DiscountType
from shared.utils.schemas import CamelModel, UserSummary, UTCDatetime
from shared.utils.validators import COUPON_CODE_PATTERN, normalize_coupon_code, validate_image_url

DeliveryTypeLiteral = Literal["pickup", "dine-in"]
PaymentMethodLiteral = Literal["cash", "card", "transfer"]
OrderStatusLiteral = Literal["pending", "confirmed", "preparing", "ready", "delivered", "cancelled"]


def parse_string_list(value: Any) -> Any:
    """
    Accept a list, a JSON-encoded list or a comma-separated string.

    Multipart forms can only send strings, so list fields arrive encoded.
    """
    if value is None or isinstance(value, list):
        return value
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return []
        if value.startswith("["):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                raise ValueError("Lista JSON inválida")
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


StringList = Annotated[list[str], BeforeValidator(parse_string_list)]


# =============================================================================
# Product Schemas
# =============================================================================


class ProductCreate(CamelModel):
    """Menu product input (sent as multipart form fields)."""

    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=1000)
    price: float = Field(ge=0)
    category: Optional[str] = Field(default=None, max_length=50)
    ingredients: StringList = Field(default_factory=list)
    image_url: Optional[str] = None
    available: bool = True
    current_stock: int = Field(default=0, ge=0)

    @field_validator("image_url")
    @classmethod
    def validate_image(cls, v: Optional[str]) -> Optional[str]:
        return validate_image_url(v)


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=1000)
    price: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = Field(default=None, max_length=50)
    ingredients: Optional[StringList] = None
    image_url: Optional[str] = None
    available: Optional[bool] = None
    current_stock: Optional[int] = Field(default=None, ge=0)

    @field_validator("image_url")
    @classmethod
    def validate_image(cls, v: Optional[str]) -> Optional[str]:
        return validate_image_url(v)


class ProductOutput(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    category: Optional[str] = None
    ingredients: list[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    available: bool
    current_stock: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ExtraInput(CamelModel):
    name: str
    price: float = Field(default=0, ge=0)


class CustomPriceRequest(CamelModel):
    removed_ingredients: list[str] = Field(default_factory=list)
    added_extras: list[ExtraInput] = Field(default_factory=list)


# =============================================================================
# Category Schemas
# =============================================================================


class CategoryCreate(CamelModel):
    name: str = Field(min_length=2, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    icon: str = Field(default="🍽️", max_length=20)
    image_url: Optional[str] = None
    display_order: int = 0
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("El nombre debe tener al menos 2 caracteres")
        return v


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    description: Optional[str] = Field(default=None, max_length=200)
    icon: Optional[str] = Field(default=None, max_length=20)
    image_url: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None


class CategoryOutput(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    icon: str
    image_url: Optional[str] = None
    display_order: int
    is_active: bool
    product_count: int = 0
    created_at: Optional[datetime] = None


class CategoryOrderItem(CamelModel):
    id: int
    display_order: int


class CategoryReorderRequest(CamelModel):
    categories: list[CategoryOrderItem] = Field(min_length=1)


# =============================================================================
# Cart Schemas
# =============================================================================


class CartCustomizations(CamelModel):
    removed_ingredients: list[str] = Field(default_factory=list)
    added_ingredients: list[str] = Field(default_factory=list)
    allergy_warnings: list[str] = Field(default_factory=list)
    special_instructions: str = Field(default="", max_length=500)

    @field_validator("special_instructions", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class CartSessionRequest(CamelModel):
    session_id: str = Field(min_length=1, max_length=100)


class CartAddRequest(CartSessionRequest):
    product_id: int
    quantity: int = Field(ge=1)
    customizations: Optional[CartCustomizations] = None


class CartItemTarget(CartSessionRequest):
    """Identifies a cart line by its id, or by product (first matching line)."""

    item_id: Optional[int] = None
    product_id: Optional[int] = None

    @model_validator(mode="after")
    def require_target(self):
        if self.item_id is None and self.product_id is None:
            raise ValueError("Se requiere itemId o productId")
        return self


class CartUpdateRequest(CartItemTarget):
    # Negative values are rejected by the service with a specific message
    quantity: int


class CartItemOutput(CamelModel):
    id: int
    product_id: int
    name: str
    price: float
    quantity: int
    customizations: dict[str, Any] = Field(default_factory=dict)
    subtotal: float


class CartOutput(CamelModel):
    id: int
    session_id: str
    user_id: Optional[int] = None
    status: str
    items: list[CartItemOutput] = Field(default_factory=list)
    total_items: int
    subtotal: float
    iva_rate: float
    iva_amount: float
    total_price: float
    expires_at: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# Order Schemas
# =============================================================================


class OrderCreateRequest(CamelModel):
    session_id: Optional[str] = Field(default=None, max_length=100)
    delivery_type: DeliveryTypeLiteral
    payment_method: PaymentMethodLiteral
    customer_notes: Optional[str] = Field(default=None, max_length=1000)
    coupon_code: Optional[str] = Field(default=None, max_length=20)

    @field_validator("coupon_code")
    @classmethod
    def normalize_code(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = normalize_coupon_code(v)
        return v or None


class OrderStatusUpdate(CamelModel):
    status: OrderStatusLiteral
    staff_notes: Optional[str] = Field(default=None, max_length=1000)


class OrderCancelRequest(CamelModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class OrderItemOutput(CamelModel):
    id: int
    product_id: int
    name: str
    price: float
    quantity: int
    customizations: dict[str, Any] = Field(default_factory=dict)
    subtotal: float


class OrderOutput(CamelModel):
    id: int
    order_number: str
    user_id: int
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    items: list[OrderItemOutput] = Field(default_factory=list)
    total_items: int
    subtotal_before_discount: Optional[float] = None
    coupon_code: Optional[str] = None
    coupon_discount: float = 0
    subtotal: float
    iva_rate: float
    iva_amount: float
    total_price: float
    status: OrderStatusLiteral
    delivery_type: DeliveryTypeLiteral
    payment_method: PaymentMethodLiteral
    payment_status: str
    customer_notes: Optional[str] = None
    staff_notes: Optional[str] = None
    estimated_ready_time: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# =============================================================================
# Coupon Schemas
# =============================================================================


def _validate_code(v: str) -> str:
    v = normalize_coupon_code(v)
    if not 3 <= len(v) <= 20:
        raise ValueError("El código debe tener entre 3 y 20 caracteres")
    if not COUPON_CODE_PATTERN.match(v):
        raise ValueError("El código solo puede contener letras y números")
    return v


CouponCode = Annotated[str, AfterValidator(_validate_code)]


class CouponCreate(CamelModel):
    code: CouponCode
    description: str = Field(min_length=1, max_length=200)
    discount_type: Literal["percentage", "fixed"]
    discount_value: float = Field(gt=0)
    min_purchase: float = Field(default=0, ge=0)
    max_discount: Optional[float] = Field(default=None, ge=0)
    start_date: UTCDatetime
    end_date: UTCDatetime
    is_active: bool = True
    usage_limit: Optional[int] = Field(default=None, ge=1)
    usage_per_user: int = Field(default=1, ge=1)
    applicable_to: Literal["all", "products", "categories"] = CouponScope.ALL_ITEMS
    applicable_ids: list[int] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_rules(self):
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError("El descuento porcentual no puede exceder 100%")
        if self.end_date < self.start_date:
            raise ValueError("La fecha de fin debe ser posterior o igual a la fecha de inicio")
        return self


class CouponUpdate(CamelModel):
    """Partial update; cross-field rules are checked against the stored coupon."""

    code: Optional[CouponCode] = None
    description: Optional[str] = Field(default=None, min_length=1, max_length=200)
    discount_type: Optional[Literal["percentage", "fixed"]] = None
    discount_value: Optional[float] = Field(default=None, gt=0)
    min_purchase: Optional[float] = Field(default=None, ge=0)
    max_discount: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[UTCDatetime] = None
    end_date: Optional[UTCDatetime] = None
    is_active: Optional[bool] = None
    usage_limit: Optional[int] = Field(default=None, ge=1)
    usage_per_user: Optional[int] = Field(default=None, ge=1)
    applicable_to: Optional[Literal["all", "products", "categories"]] = None
    applicable_ids: Optional[list[int]] = None


class CouponValidateRequest(CamelModel):
    code: str = Field(min_length=1, max_length=20)
    cart_total: float = Field(ge=0)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return normalize_coupon_code(v)


class CouponOutput(CamelModel):
    id: int
    code: str
    description: str
    discount_type: str
    discount_value: float
    min_purchase: float
    max_discount: Optional[float] = None
    start_date: datetime
    end_date: datetime
    is_active: bool
    usage_limit: Optional[int] = None
    usage_count: int
    usage_per_user: int
    applicable_to: str
    applicable_ids: list[int] = Field(default_factory=list)
    is_currently_valid: bool
    created_by_id: Optional[int] = None
    created_at: Optional[datetime] = None


class CouponUsageOutput(CamelModel):
    id: int
    coupon_id: int
    coupon_code: str
    user_id: int
    user: Optional[UserSummary] = None
    order_number: str
    discount_type: str
    discount_value: float
    discount_applied: float
    order_subtotal: float
    used_at: datetime
