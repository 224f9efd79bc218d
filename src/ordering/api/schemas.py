"""Pydantic request/response schemas for the Ordering API.

These are external contracts, separate from the internal commands.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field

from ordering.coupon.coupon import DiscountType
from shared.money import Money
from shared.timestamps import as_utc

UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


# --- Cart ---


class AddToCartRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"product_id": "3f2b...", "quantity": 2}]}}

    product_id: str
    quantity: int = 1


class UpdateCartItemRequest(BaseModel):
    """A quantity of zero or less removes the line."""

    quantity: int


class CartItemResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: str
    product_id: str
    product_name: str
    unit_price: Money
    quantity: int
    line_total: Money


class CartResponse(BaseModel):
    items: list[CartItemResponse]
    item_count: int
    subtotal: Money


class RemovedResponse(BaseModel):
    removed: bool


class ClearedResponse(BaseModel):
    removed_count: int


# --- Orders ---


class PlaceOrderRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"coupon_code": "SAVE10"}, {}]}}

    coupon_code: str | None = None


class OrderItemResponse(BaseModel):
    model_config = {"from_attributes": True}

    product_id: str
    product_name: str
    quantity: int
    unit_price: Money
    line_total: Money


class OrderResponse(BaseModel):
    id: str
    customer_id: str
    status: str
    order_date: UTCDateTime
    subtotal: Money
    discount_amount: Money
    total_amount: Money
    coupon_code: str | None = None
    free_shipping: bool
    currency: str
    items: list[OrderItemResponse]

    @classmethod
    def from_order(cls, order) -> OrderResponse:
        return cls(
            id=str(order.id),
            customer_id=str(order.customer_id),
            status=order.status,
            order_date=order.order_date,
            subtotal=order.subtotal_amount,
            discount_amount=order.discount,
            total_amount=order.total,
            coupon_code=order.coupon_code,
            free_shipping=bool(order.free_shipping),
            currency=order.currency,
            items=[OrderItemResponse.model_validate(item) for item in order.lines],
        )


# --- Coupons ---


class CouponTermsRequest(BaseModel):
    description: str = Field("", max_length=200)
    discount_type: DiscountType
    discount_value: Decimal = Field(..., ge=0)
    minimum_order_amount: Decimal | None = None
    maximum_discount_amount: Decimal | None = None
    start_date: datetime
    end_date: datetime
    usage_limit: int | None = None
    user_usage_limit: int = 1
    active: bool = True
    first_time_user_only: bool = False
    free_shipping: bool = False

    def as_command_fields(self) -> dict:
        """Field values in the shape the coupon commands take."""
        values = self.model_dump()
        values["discount_type"] = self.discount_type.value
        for name in ("discount_value", "minimum_order_amount", "maximum_discount_amount"):
            if values[name] is not None:
                values[name] = float(values[name])
        return values


class CreateCouponRequest(CouponTermsRequest):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "code": "SAVE10",
                    "description": "10% off every order",
                    "discount_type": "PERCENTAGE",
                    "discount_value": "10",
                    "start_date": "2026-01-01T00:00:00Z",
                    "end_date": "2026-12-31T23:59:59Z",
                    "usage_limit": 500,
                }
            ]
        }
    }

    code: str = Field(..., min_length=1, max_length=50)


class UpdateCouponRequest(CouponTermsRequest):
    pass


class CouponResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: str
    code: str
    description: str | None = ""
    discount_type: str
    discount_value: Money
    minimum_order_amount: Money | None = None
    maximum_discount_amount: Money | None = None
    start_date: UTCDateTime
    end_date: UTCDateTime
    usage_limit: int | None = None
    usage_count: int
    user_usage_limit: int
    active: bool
    first_time_user_only: bool
    free_shipping: bool


class CouponQuoteRequest(BaseModel):
    """Advisory check of a code against an order amount, before checkout."""

    code: str
    order_amount: Decimal = Field(..., ge=0)
    is_first_time_user: bool | None = None


class CouponValidityResponse(BaseModel):
    code: str
    valid: bool


class CouponDiscountResponse(BaseModel):
    code: str
    order_amount: Money
    discount: Money
