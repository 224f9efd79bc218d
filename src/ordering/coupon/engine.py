"""Coupon engine: the coupon repository and the advisory quote pair.

``validate_code`` / ``calculate_discount_for_code`` are what a client calls
before checkout; they treat an unknown code as "no discount" rather than an
error. Order placement uses the strict path (``lookup`` + rules) instead.
"""

from datetime import UTC, datetime
from decimal import Decimal

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.coupon.coupon import Coupon
from ordering.domain import ordering
from shared.errors import InvalidCoupon, not_found
from shared.money import ZERO
from shared.timestamps import as_utc

logger = structlog.get_logger(__name__)


@ordering.repository(part_of=Coupon)
class CouponRepository:
    def find_by_code(self, code: str) -> Coupon | None:
        coupons = self._dao.query.filter(code=code).all().items
        return coupons[0] if coupons else None

    def listing(self, **filters) -> list[Coupon]:
        """Coupons matching ``filters``, oldest first."""
        coupons = self._dao.query.filter(**filters).limit(None).all().items
        return sorted(coupons, key=lambda coupon: (as_utc(coupon.created_at), coupon.code))

    def increment_usage(self, coupon: Coupon) -> int:
        """Bump the usage counter, guarded by the usage limit.

        The save is version-checked: if another redemption committed after
        ``coupon`` was read, the write matches no row and the commit raises
        ``ExpectedVersionError`` so the caller retries with a fresh read. A
        counter already at the limit is ``InvalidCoupon``. Returns the new
        usage count.
        """
        if coupon.is_exhausted:
            raise InvalidCoupon({"coupon_code": [f"Coupon {coupon.code} has reached its usage limit"]})

        coupon.usage_count = (coupon.usage_count or 0) + 1
        coupon.updated_at = datetime.now(UTC)
        self.add(coupon)
        return coupon.usage_count


def lookup(code: str) -> Coupon:
    coupon = current_domain.repository_for(Coupon).find_by_code(code)
    if coupon is None:
        raise not_found("coupon_code", f"Coupon {code} does not exist")
    return coupon


def validate_code(code: str, order_amount, is_first_time_user: bool, now: datetime | None = None) -> bool:
    try:
        coupon = lookup(code)
    except ObjectNotFoundError:
        return False
    return coupon.can_be_used(order_amount, is_first_time_user, now)


def calculate_discount_for_code(
    code: str, order_amount, is_first_time_user: bool, now: datetime | None = None
) -> Decimal:
    try:
        coupon = lookup(code)
    except ObjectNotFoundError:
        logger.debug("Discount requested for unknown coupon", coupon_code=code)
        return ZERO
    return coupon.calculate_discount(order_amount, is_first_time_user, now)
