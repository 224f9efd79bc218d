"""Coupon aggregate: discount rules plus a usage counter.

The rule methods are pure: they read the coupon and the order context and
never mutate anything. The usage counter is only ever changed through the
guarded increment on ``CouponRepository``.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from ordering.domain import ordering
from shared.money import ZERO, round2, to_decimal
from shared.timestamps import as_utc


class DiscountType(Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"
    FREE_SHIPPING = "FREE_SHIPPING"


@ordering.aggregate
class Coupon:
    code = String(required=True, max_length=50, unique=True)
    description = String(max_length=200, default="")
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True)
    minimum_order_amount = Float()
    maximum_discount_amount = Float()
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    usage_limit = Integer()  # None means unlimited
    usage_count = Integer(default=0)
    user_usage_limit = Integer(default=1)
    active = Boolean(default=True)
    first_time_user_only = Boolean(default=False)
    free_shipping = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory & revision
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, code, **terms):
        if not code or not code.strip():
            raise ValidationError({"code": ["Coupon code is required"]})

        now = datetime.now(UTC)
        return cls(code=code.strip(), usage_count=0, created_at=now, updated_at=now, **_validated_terms(**terms))

    def revise(self, **terms):
        """Replace every editable attribute. The code and usage count are not editable."""
        values = _validated_terms(**terms)

        usage_limit = values["usage_limit"]
        if usage_limit is not None and usage_limit < (self.usage_count or 0):
            raise ValidationError(
                {"usage_limit": [f"Usage limit cannot be lower than the {self.usage_count} uses already recorded"]}
            )

        for name, value in values.items():
            setattr(self, name, value)
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Money & window, as read back from storage
    # -------------------------------------------------------------------
    @property
    def value(self) -> Decimal:
        return round2(self.discount_value)

    @property
    def minimum_order(self) -> Decimal | None:
        return None if self.minimum_order_amount is None else round2(self.minimum_order_amount)

    @property
    def maximum_discount(self) -> Decimal | None:
        return None if self.maximum_discount_amount is None else round2(self.maximum_discount_amount)

    @property
    def starts_at(self) -> datetime:
        return as_utc(self.start_date)

    @property
    def ends_at(self) -> datetime:
        return as_utc(self.end_date)

    # -------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------
    def is_valid(self, now: datetime | None = None) -> bool:
        return self._invalid_reason(_now(now)) is None

    def can_be_used(self, order_amount, is_first_time_user: bool, now: datetime | None = None) -> bool:
        return self.unusable_reason(order_amount, is_first_time_user, now) is None

    def unusable_reason(self, order_amount, is_first_time_user: bool, now: datetime | None = None) -> str | None:
        """The first rule the order context fails, or ``None`` when usable."""
        reason = self._invalid_reason(_now(now))
        if reason is not None:
            return reason
        if self.minimum_order is not None and to_decimal(order_amount) < self.minimum_order:
            return f"Coupon {self.code} requires a minimum order of {self.minimum_order}"
        if self.first_time_user_only and not is_first_time_user:
            return f"Coupon {self.code} is only available on a first order"
        return None

    def calculate_discount(self, order_amount, is_first_time_user: bool, now: datetime | None = None) -> Decimal:
        if not self.can_be_used(order_amount, is_first_time_user, now):
            return ZERO

        order_amount = to_decimal(order_amount)
        discount_type = DiscountType(self.discount_type)

        if discount_type == DiscountType.PERCENTAGE:
            discount = order_amount * self.value / Decimal(100)
            if self.maximum_discount is not None and discount > self.maximum_discount:
                discount = self.maximum_discount
        elif discount_type == DiscountType.FIXED_AMOUNT:
            discount = min(self.value, order_amount)
        else:
            # Shipping is priced outside the store; the flag is advisory only
            discount = ZERO

        return round2(discount)

    @property
    def grants_free_shipping(self) -> bool:
        return bool(self.free_shipping) or self.discount_type == DiscountType.FREE_SHIPPING.value

    @property
    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and (self.usage_count or 0) >= self.usage_limit

    def _invalid_reason(self, now: datetime) -> str | None:
        if not self.active:
            return f"Coupon {self.code} is not active"
        if now < self.starts_at:
            return f"Coupon {self.code} is not yet valid"
        if now >= self.ends_at:
            return f"Coupon {self.code} has expired"
        if self.is_exhausted:
            return f"Coupon {self.code} has reached its usage limit"
        return None

    def __repr__(self):
        return f"<Coupon {self.code} {self.discount_type} {self.discount_value}>"


def _validated_terms(
    discount_type,
    discount_value,
    start_date,
    end_date,
    description="",
    minimum_order_amount=None,
    maximum_discount_amount=None,
    usage_limit=None,
    user_usage_limit=1,
    active=True,
    first_time_user_only=False,
    free_shipping=False,
) -> dict:
    try:
        discount_type = DiscountType(discount_type)
    except ValueError:
        raise ValidationError({"discount_type": [f"Unknown discount type {discount_type}"]}) from None

    discount_value = round2(discount_value)
    errors = {}

    if discount_value < 0:
        errors["discount_value"] = ["Discount value cannot be negative"]
    elif discount_type == DiscountType.PERCENTAGE and not (0 < discount_value <= 100):
        errors["discount_value"] = ["Percentage discounts must be between 0 and 100"]
    elif discount_type == DiscountType.FIXED_AMOUNT and discount_value == 0:
        errors["discount_value"] = ["Fixed discounts must be greater than zero"]

    if minimum_order_amount is not None and to_decimal(minimum_order_amount) < 0:
        errors["minimum_order_amount"] = ["Minimum order amount cannot be negative"]
    if maximum_discount_amount is not None and to_decimal(maximum_discount_amount) <= 0:
        errors["maximum_discount_amount"] = ["Maximum discount must be greater than zero"]
    if start_date is None or end_date is None:
        errors["end_date"] = ["A validity window is required"]
    elif as_utc(end_date) <= as_utc(start_date):
        errors["end_date"] = ["End date must be after the start date"]
    if usage_limit is not None and usage_limit < 0:
        errors["usage_limit"] = ["Usage limit cannot be negative"]
    if user_usage_limit is None or user_usage_limit < 1:
        errors["user_usage_limit"] = ["Per-user usage limit must be at least 1"]

    if errors:
        raise ValidationError(errors)

    return {
        "description": description or "",
        "discount_type": discount_type.value,
        "discount_value": float(discount_value),
        "minimum_order_amount": None if minimum_order_amount is None else float(round2(minimum_order_amount)),
        "maximum_discount_amount": None if maximum_discount_amount is None else float(round2(maximum_discount_amount)),
        "start_date": as_utc(start_date),
        "end_date": as_utc(end_date),
        "usage_limit": usage_limit,
        "user_usage_limit": user_usage_limit,
        "active": active,
        "first_time_user_only": first_time_user_only,
        "free_shipping": free_shipping,
    }


def _now(now: datetime | None) -> datetime:
    return as_utc(now) if now is not None else datetime.now(UTC)
